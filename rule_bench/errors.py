"""
Fault taxonomy for rule generation runs.

Faults are data: a single exception type carries a ``FaultKind`` and the
runner dispatches on the kind, not on the exception class.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional


class FaultKind(str, Enum):
    """Kinds of problems an evaluation can run into."""
    CONFIGURATION = "configuration"  # missing credential, unknown model id
    TRANSPORT = "transport"          # oracle unreachable, malformed response
    STRUCTURAL = "structural"        # candidate schema is malformed
    BEHAVIORAL = "behavioral"        # candidate schema misjudges a vector

    @property
    def is_fatal(self) -> bool:
        """Fatal faults abort the evaluation; the others drive a retry."""
        return self in (FaultKind.CONFIGURATION, FaultKind.TRANSPORT)


class OracleFault(Exception):
    """Raised when the oracle cannot be used at all."""

    def __init__(
        self,
        kind: FaultKind,
        message: str,
        model: Optional[str] = None,
        status_code: Optional[int] = None,
    ):
        super().__init__(message)
        self.kind = kind
        self.message = message
        self.model = model
        self.status_code = status_code
        self.oracle_calls = 0  # calls made before the fault, including the failed one

    def describe(self, model: str, mode: str) -> str:
        """Message with the failing model/mode attached."""
        model = self.model or model
        status = f" (HTTP {self.status_code})" if self.status_code else ""
        return f"[Model: {model}, Mode: {mode}] {self.kind.value} error: {self.message}{status}"


def configuration_fault(message: str, **kwargs) -> OracleFault:
    return OracleFault(FaultKind.CONFIGURATION, message, **kwargs)


def transport_fault(message: str, **kwargs) -> OracleFault:
    return OracleFault(FaultKind.TRANSPORT, message, **kwargs)
