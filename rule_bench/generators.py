"""
Interaction modes: how a candidate rule schema is requested and read back.

Two modes exist and they are dispatched through a static table:

- promptBased: the oracle answers with JSON text (possibly fenced)
- toolBased: the oracle calls the ``generate_schema`` function

Both produce one ``Candidate`` per oracle reply; the retry loop itself lives
in the protocol and does not depend on the mode.
"""

from __future__ import annotations

import json
import re
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Optional

from .meta_schema import GENERATE_SCHEMA_TOOL, generate_schema_tool
from .models import Mode
from .oracle import Message, OracleReply

RULE_VOCABULARY = """Valid rule types:
- {"type": "required"} - for required fields
- {"type": "string", "minLength": number, "maxLength": number} - for string fields
- {"type": "number", "min": number, "max": number} - for number fields
- {"type": "boolean"} - for boolean fields
- {"type": "array", "minItems": number, "maxItems": number} - for array fields
- {"type": "object"} - for object fields
- {"type": "oneOf", "values": [array of values]} - for enum fields
- a nested schema (a JSON object without "type") - for the fields of an object-valued field"""

PROMPT_SYSTEM_MESSAGE = f"""You are a configuration schema generator. Generate a rule schema for a validation tool based on a description of the target object.

CRITICAL: Return ONLY valid JSON. No functions, no code, no markdown code blocks, no explanations.

Rule schema format:
- For required fields: use {{"type": "required"}}
- For optional typed fields: use the appropriate type rule
- Each field gets ONE rule object
- DO NOT combine "required" with a type in one object
- DO NOT use "custom" type
- All values must be valid JSON (numbers, strings, arrays, objects - NO functions)

{RULE_VOCABULARY}

Example:
Description: "User with required name (string, 2-50 chars), age (number, 18-120), optional email (string)"
Schema:
{{
  "name": {{"type": "required"}},
  "age": {{"type": "number", "min": 18, "max": 120}},
  "email": {{"type": "string"}}
}}"""

TOOL_SYSTEM_MESSAGE = f"""You are a configuration schema generator. Generate a rule schema for a validation tool based on a description of the target object.

Use the {GENERATE_SCHEMA_TOOL} tool function to provide the complete schema in a single call.

Important rules:
- DO NOT use "custom" type
- Required fields get the {{"type": "required"}} rule
- Optional fields get their type rule with optional constraints
- Extract constraints from the description (minLength, maxLength, min, max, minItems, maxItems, enum values)
- The schema is a JSON object where each field name maps to its rule object

{RULE_VOCABULARY}"""

_FENCE_RE = re.compile(r"^```(?:json)?\s*\n?(.*?)\n?```$", re.DOTALL)


def extract_json_from_markdown(response: str) -> str:
    """Strip surrounding whitespace and Markdown code fences."""
    text = response.strip()
    match = _FENCE_RE.match(text)
    if match:
        text = match.group(1)
    return text.strip()


@dataclass(frozen=True)
class Candidate:
    """Schema read back from one oracle reply."""
    schema: Any = None
    parse_error: Optional[str] = None

    @property
    def success(self) -> bool:
        return self.parse_error is None


def _reject_constant(name: str):
    raise ValueError(f"{name} is not valid JSON")


def parse_json(text: str) -> Any:
    """Strict JSON parsing: NaN and Infinity are rejected."""
    return json.loads(text, parse_constant=_reject_constant)


def _reference_block(object_json_schema: dict) -> str:
    return (
        "Reference JSON Schema (structure, types, and required fields only - no constraints):\n"
        f"{json.dumps(object_json_schema, indent=2)}"
    )


class GenerationStrategy(ABC):
    """Mode-specific message composition and candidate extraction."""

    mode: Mode
    system_message: str

    def opening_messages(self, check_description: str, object_json_schema: dict) -> tuple[Message, ...]:
        user_content = (
            f"Generate a rule schema based on this description:\n\n{check_description}\n\n"
            f"{_reference_block(object_json_schema)}\n\n{self.closing_instruction}"
        )
        return (
            {"role": "system", "content": self.system_message},
            {"role": "user", "content": user_content},
        )

    def retry_message(self, feedback: str) -> Message:
        content = (
            "IMPORTANT: Previous attempt failed validation. Please fix the schema:\n\n"
            f"{feedback}\n\n{self.closing_instruction}"
        )
        return {"role": "user", "content": content}

    @property
    @abstractmethod
    def closing_instruction(self) -> str:
        pass

    def tools(self) -> Optional[list[dict]]:
        return None

    @abstractmethod
    def extract(self, reply: OracleReply) -> Candidate:
        """Read a candidate schema out of an oracle reply."""
        pass

    @abstractmethod
    def record_reply(self, reply: OracleReply, error: Optional[str]) -> tuple[Message, ...]:
        """Transcript messages for ``reply``; ``error`` is the structural verdict, if any."""
        pass


class PromptBasedStrategy(GenerationStrategy):
    mode = Mode.PROMPT_BASED
    system_message = PROMPT_SYSTEM_MESSAGE

    @property
    def closing_instruction(self) -> str:
        return "Generate ONLY the rule schema JSON, nothing else:"

    def extract(self, reply: OracleReply) -> Candidate:
        if reply.is_tool_call:
            return Candidate(parse_error="Expected a JSON response but got a function call")
        try:
            return Candidate(schema=parse_json(extract_json_from_markdown(reply.text or "")))
        except ValueError as e:
            return Candidate(parse_error=f"Failed to parse as JSON: {e}")

    def record_reply(self, reply: OracleReply, error: Optional[str]) -> tuple[Message, ...]:
        if reply.is_tool_call:
            return ({"role": "assistant", "content": json.dumps([c.arguments for c in reply.tool_calls])},)
        return ({"role": "assistant", "content": reply.text or ""},)


class ToolBasedStrategy(GenerationStrategy):
    mode = Mode.TOOL_BASED
    system_message = TOOL_SYSTEM_MESSAGE

    @property
    def closing_instruction(self) -> str:
        return f"Call {GENERATE_SCHEMA_TOOL} with the complete schema."

    def tools(self) -> Optional[list[dict]]:
        return [generate_schema_tool()]

    def extract(self, reply: OracleReply) -> Candidate:
        if not reply.is_tool_call:
            return Candidate(parse_error=(
                f"LLM returned content instead of calling the {GENERATE_SCHEMA_TOOL} tool. "
                "Do not return JSON directly."
            ))

        calls = [c for c in reply.tool_calls if c.name == GENERATE_SCHEMA_TOOL]
        if not calls:
            names = ", ".join(c.name for c in reply.tool_calls)
            return Candidate(parse_error=f"LLM did not call the {GENERATE_SCHEMA_TOOL} tool (called: {names})")

        try:
            args = parse_json(calls[0].arguments)
        except ValueError as e:
            return Candidate(parse_error=f"Failed to parse arguments: {e}")
        if not isinstance(args, dict) or "schema" not in args:
            return Candidate(parse_error="Arguments must be an object with a 'schema' property")
        return Candidate(schema=args["schema"])

    def record_reply(self, reply: OracleReply, error: Optional[str]) -> tuple[Message, ...]:
        if not reply.is_tool_call:
            return ({"role": "assistant", "content": reply.text or ""},)

        messages: list[Message] = [{
            "role": "assistant",
            "content": None,
            "tool_calls": [
                {
                    "id": c.id,
                    "type": "function",
                    "function": {"name": c.name, "arguments": c.arguments},
                }
                for c in reply.tool_calls
            ],
        }]
        for c in reply.tool_calls:
            if c.name != GENERATE_SCHEMA_TOOL:
                result = {"success": False, "error": f"Unknown function: {c.name}"}
            elif error:
                result = {"success": False, "error": error}
            else:
                result = {"success": True, "message": "Schema received"}
            messages.append({"role": "tool", "tool_call_id": c.id, "content": json.dumps(result)})
        return tuple(messages)


_STRATEGIES: dict[Mode, GenerationStrategy] = {
    Mode.PROMPT_BASED: PromptBasedStrategy(),
    Mode.TOOL_BASED: ToolBasedStrategy(),
}


def get_strategy(mode: "Mode | str") -> GenerationStrategy:
    """Look up the strategy for a mode; unknown modes raise ValueError."""
    return _STRATEGIES[Mode.parse(mode)]
