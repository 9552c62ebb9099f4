"""
Generation Protocol: asks an oracle for a rule schema until it works.

Each attempt:
1. Sends the conversation (opening prompt, or prior conversation + feedback)
2. Reads a candidate schema from the reply
3. Meta-validates the candidate's structure
4. Runs the candidate against every test vector
5. Stops on success, otherwise feeds the failures back and retries

The loop makes at most ``max_retries + 1`` oracle calls. Running out of
attempts is a normal outcome, not an exception; only oracle faults
(``OracleFault``) escape.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Mapping, Optional, Sequence

from .errors import OracleFault
from .feedback import behavioral_feedback, structural_feedback
from .generators import get_strategy
from .meta_schema import validate_shape
from .models import Mode, TestVector, VectorResult
from .oracle import Message, Oracle
from .rules import evaluate

logger = logging.getLogger(__name__)


class AttemptState(str, Enum):
    GENERATING = "generating"
    STRUCTURALLY_INVALID = "structurally_invalid"
    BEHAVIOR_CHECKING = "behavior_checking"
    BEHAVIOR_FAILED = "behavior_failed"
    SUCCEEDED = "succeeded"
    EXHAUSTED = "exhausted"


@dataclass
class GenerationAttempt:
    """One oracle round trip."""
    number: int
    state: AttemptState = AttemptState.GENERATING
    schema: Optional[dict] = None
    structural_error: Optional[str] = None
    test_results: list[VectorResult] = field(default_factory=list)
    conversation: tuple[Message, ...] = ()
    duration_ms: float = 0.0

    @property
    def all_passed(self) -> bool:
        return self.structural_error is None and all(r.passed for r in self.test_results)


@dataclass
class GenerationOutcome:
    """Final result of the protocol: success or exhaustion."""
    state: AttemptState
    schema: Optional[dict]
    test_results: list[VectorResult]
    oracle_calls: int
    conversation: tuple[Message, ...]
    attempts: list[GenerationAttempt] = field(default_factory=list)
    total_duration_ms: float = 0.0

    @property
    def succeeded(self) -> bool:
        return self.state == AttemptState.SUCCEEDED

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "state": self.state.value,
            "schema": self.schema,
            "test_results": [r.model_dump() for r in self.test_results],
            "oracle_calls": self.oracle_calls,
            "total_duration_ms": self.total_duration_ms,
            "conversation": list(self.conversation),
        }


def check_vectors(schema: Mapping[str, Any], test_data: Sequence[TestVector]) -> list[VectorResult]:
    """Run every vector through the schema, in order."""
    results = []
    for vector in test_data:
        actual = evaluate(schema, vector.data)
        results.append(VectorResult(
            passed=actual == vector.expectedResult,
            expected=vector.expectedResult,
            actual=actual,
        ))
    return results


def unchecked_results(test_data: Sequence[TestVector]) -> list[VectorResult]:
    """Verdicts for vectors that could not be checked: every one counts as failed."""
    return [
        VectorResult(passed=False, expected=v.expectedResult, actual=not v.expectedResult)
        for v in test_data
    ]


class GenerationProtocol:
    """
    Bounded retry loop producing a behaviorally validated rule schema.
    """

    def __init__(
        self,
        oracle: Oracle,
        mode: "Mode | str" = Mode.TOOL_BASED,
        max_retries: int = 3,
        share_reference: bool = False,
    ):
        """
        Initialize the protocol.

        Args:
            oracle: Oracle asked for candidate schemas
            mode: Interaction mode (promptBased or toolBased)
            max_retries: Retries after the first attempt (>= 0)
            share_reference: Include the reference schema in behavioral feedback
        """
        if max_retries < 0:
            raise ValueError(f"max_retries must be non-negative, got {max_retries}")
        self.oracle = oracle
        self.strategy = get_strategy(mode)
        self.max_retries = max_retries
        self.share_reference = share_reference

    @property
    def mode(self) -> Mode:
        return self.strategy.mode

    def run(
        self,
        check_description: str,
        object_json_schema: dict,
        test_data: Sequence[TestVector],
        reference_config: Optional[Mapping[str, Any]] = None,
    ) -> GenerationOutcome:
        """
        Generate a schema for ``check_description`` and test it.

        Args:
            check_description: Natural-language validation requirement
            object_json_schema: Structural contract shown to the oracle
            test_data: Vectors the schema must judge correctly
            reference_config: Ground-truth schema, only used in feedback
                when ``share_reference`` is set

        Returns:
            GenerationOutcome holding only the final attempt

        Raises:
            OracleFault: the oracle could not be used
        """
        start_time = time.time()
        total_attempts = self.max_retries + 1
        conversation: tuple[Message, ...] = ()
        feedback: Optional[str] = None
        oracle_calls = 0
        attempt = GenerationAttempt(number=0)

        for number in range(1, total_attempts + 1):
            attempt_start = time.time()
            attempt = GenerationAttempt(number=number)

            if number == 1:
                outbound = self.strategy.opening_messages(check_description, object_json_schema)
                logger.debug("Generating schema (%s)", self.mode.value)
            else:
                outbound = conversation + (self.strategy.retry_message(feedback or ""),)
                logger.debug("Retry %d/%d with feedback", number - 1, self.max_retries)

            try:
                reply = self.oracle.converse(outbound, tools=self.strategy.tools())
            except OracleFault as e:
                e.oracle_calls = oracle_calls + 1
                raise
            oracle_calls += 1

            candidate = self.strategy.extract(reply)
            error = candidate.parse_error
            issues = (error,) if error else ()
            if error is None:
                shape = validate_shape(candidate.schema)
                error, issues = shape.error, shape.issues
                if isinstance(candidate.schema, dict):
                    attempt.schema = candidate.schema

            conversation = outbound + self.strategy.record_reply(reply, error)
            attempt.conversation = conversation

            if error is not None:
                attempt.state = AttemptState.STRUCTURALLY_INVALID
                attempt.structural_error = error
                attempt.test_results = unchecked_results(test_data)
                feedback = structural_feedback(issues, parse_failure=candidate.parse_error is not None)
                attempt.duration_ms = (time.time() - attempt_start) * 1000
                logger.info("Attempt %d/%d: invalid schema: %s", number, total_attempts, error)
                continue

            attempt.state = AttemptState.BEHAVIOR_CHECKING
            attempt.test_results = check_vectors(attempt.schema, test_data)
            attempt.duration_ms = (time.time() - attempt_start) * 1000

            if attempt.all_passed:
                attempt.state = AttemptState.SUCCEEDED
                logger.info("Attempt %d/%d: all %d vectors passed", number, total_attempts, len(test_data))
                break

            attempt.state = AttemptState.BEHAVIOR_FAILED
            failed = sum(1 for r in attempt.test_results if not r.passed)
            logger.info("Attempt %d/%d: schema failed %d/%d vectors", number, total_attempts, failed, len(test_data))
            feedback = behavioral_feedback(
                attempt.schema,
                test_data,
                attempt.test_results,
                reference_config if self.share_reference else None,
            )

        state = AttemptState.SUCCEEDED if attempt.state == AttemptState.SUCCEEDED else AttemptState.EXHAUSTED
        return GenerationOutcome(
            state=state,
            schema=attempt.schema,
            test_results=list(attempt.test_results),
            oracle_calls=oracle_calls,
            conversation=conversation,
            attempts=[attempt],
            total_duration_ms=(time.time() - start_time) * 1000,
        )
