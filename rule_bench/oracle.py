"""
Oracle providers: the external models asked to write rule schemas.

The generation protocol only depends on ``Oracle.converse``: send a
conversation (chat-completions message dicts) plus optional function
declarations, get back either free text or a list of function calls.
"""

from __future__ import annotations

import json
import logging
import os
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Optional, Sequence, Union

from .errors import configuration_fault, transport_fault

logger = logging.getLogger(__name__)

Message = dict[str, Any]

DEFAULT_BASE_URL = "https://openrouter.ai/api/v1"
DEFAULT_MODEL = "openai/gpt-4o-mini"

_INVALID_MODEL_MARKERS = ("not a valid model", "invalid model", "model not found")


@dataclass(frozen=True)
class ToolCall:
    """A single function invocation returned by the oracle."""
    id: str
    name: str
    arguments: str  # JSON-encoded


@dataclass(frozen=True)
class OracleReply:
    """Either free text or one or more tool calls."""
    text: Optional[str] = None
    tool_calls: tuple[ToolCall, ...] = ()

    @property
    def is_tool_call(self) -> bool:
        return bool(self.tool_calls)


class Oracle(ABC):
    """Abstract base class for oracles."""

    @abstractmethod
    def converse(
        self,
        messages: Sequence[Message],
        tools: Optional[Sequence[dict]] = None,
    ) -> OracleReply:
        """
        Send a conversation to the oracle.

        Args:
            messages: Role-tagged messages, oldest first
            tools: Optional function declarations the oracle may call

        Returns:
            OracleReply holding text or tool calls

        Raises:
            OracleFault: the oracle could not be reached or configured
        """
        pass

    @property
    @abstractmethod
    def name(self) -> str:
        """Model identifier."""
        pass


class OpenRouterOracle(Oracle):
    """Any OpenAI-compatible chat completions endpoint (OpenRouter by default)."""

    def __init__(
        self,
        model: str = DEFAULT_MODEL,
        api_key: Optional[str] = None,
        base_url: str = DEFAULT_BASE_URL,
        api_key_env_var: str = "OPENROUTER_API_KEY",
        timeout: Optional[float] = None,
    ):
        """
        Initialize the oracle.

        Args:
            model: Model identifier (e.g., openai/gpt-4o-mini)
            api_key: API key (defaults to the ``api_key_env_var`` env var)
            base_url: Endpoint base URL
            api_key_env_var: Environment variable holding the key
            timeout: Per-request timeout in seconds
        """
        self.model = model
        self.api_key = api_key or os.environ.get(api_key_env_var)
        self.api_key_env_var = api_key_env_var
        self.base_url = base_url
        self.timeout = timeout
        self._client = None

    @property
    def name(self) -> str:
        return self.model

    def _get_client(self):
        """Lazy initialization of the OpenAI client."""
        if self._client is None:
            if not self.api_key:
                raise configuration_fault(
                    f"{self.api_key_env_var} environment variable is not set. "
                    f'Please set it with: export {self.api_key_env_var}="your-api-key"',
                    model=self.model,
                )
            from openai import OpenAI
            self._client = OpenAI(api_key=self.api_key, base_url=self.base_url, timeout=self.timeout)
        return self._client

    def converse(
        self,
        messages: Sequence[Message],
        tools: Optional[Sequence[dict]] = None,
    ) -> OracleReply:
        import openai

        client = self._get_client()
        kwargs: dict[str, Any] = {"model": self.model, "messages": list(messages)}
        if tools:
            kwargs["tools"] = list(tools)
            kwargs["tool_choice"] = "auto"

        try:
            response = client.chat.completions.create(**kwargs)
        except openai.AuthenticationError as e:
            raise configuration_fault(str(e), model=self.model, status_code=e.status_code) from e
        except openai.APIStatusError as e:
            text = str(e).lower()
            if e.status_code in (400, 404) and any(marker in text for marker in _INVALID_MODEL_MARKERS):
                raise configuration_fault(
                    f"Invalid model ID: {self.model}", model=self.model, status_code=e.status_code
                ) from e
            raise transport_fault(str(e), model=self.model, status_code=e.status_code) from e
        except openai.APIError as e:
            raise transport_fault(str(e), model=self.model) from e

        if not response.choices:
            raise transport_fault("No message in response", model=self.model)
        message = response.choices[0].message

        if message.tool_calls:
            calls = []
            for tc in message.tool_calls:
                if tc.type != "function":
                    raise transport_fault(f"Unsupported tool call type: {tc.type}", model=self.model)
                calls.append(ToolCall(id=tc.id, name=tc.function.name, arguments=tc.function.arguments))
            return OracleReply(tool_calls=tuple(calls))

        if not message.content:
            raise transport_fault("No content in response", model=self.model)
        return OracleReply(text=message.content)


ScriptedReply = Union[str, dict, OracleReply, Exception]


@dataclass
class ScriptedOracle(Oracle):
    """
    Deterministic oracle double that replays canned replies.

    Each reply may be:
    - a string: returned as free text
    - a dict: returned as a ``generate_schema`` tool call with that schema
    - an OracleReply: returned as-is
    - an exception: raised

    Once the script runs out the last reply is repeated. Every conversation
    sent is recorded in ``calls``.
    """
    replies: list[ScriptedReply]
    model: str = "scripted"
    calls: list[list[Message]] = field(default_factory=list)

    @property
    def name(self) -> str:
        return self.model

    def converse(
        self,
        messages: Sequence[Message],
        tools: Optional[Sequence[dict]] = None,
    ) -> OracleReply:
        if not self.replies:
            raise transport_fault("Scripted oracle has no replies", model=self.model)

        index = min(len(self.calls), len(self.replies) - 1)
        self.calls.append([dict(m) for m in messages])
        reply = self.replies[index]

        if isinstance(reply, Exception):
            raise reply
        if isinstance(reply, OracleReply):
            return reply
        if isinstance(reply, dict):
            call = ToolCall(
                id=f"call_{len(self.calls)}",
                name="generate_schema",
                arguments=json.dumps({"schema": reply}),
            )
            return OracleReply(tool_calls=(call,))
        return OracleReply(text=str(reply))
