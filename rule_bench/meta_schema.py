"""
Meta-validation of candidate rule schemas.

The rule vocabulary is declared once as a JSON Schema (draft-07) and checked
with ``jsonschema``, so that every violation (not just the first) is reported
with its field path. The same declaration backs the ``generate_schema`` tool
offered to the oracle in tool-based mode.
"""

from __future__ import annotations

import copy
from dataclasses import dataclass
from typing import Any, Optional

from jsonschema import Draft7Validator
from jsonschema.validators import extend

_NON_NEGATIVE_INT = {"type": "integer", "minimum": 0}

# Constraint keys each tag permits
RULE_VARIANTS: dict[str, dict] = {
    "required": {},
    "string": {"minLength": _NON_NEGATIVE_INT, "maxLength": _NON_NEGATIVE_INT},
    "number": {"min": {"type": "number"}, "max": {"type": "number"}},
    "boolean": {},
    "array": {"minItems": _NON_NEGATIVE_INT, "maxItems": _NON_NEGATIVE_INT},
    "object": {},
    "oneOf": {"values": {"type": "array"}},
}

# Keys that must be present besides ``type``
_REQUIRED_KEYS = {"oneOf": ["values"]}


def _variant(tag: str, constraints: dict, required: Optional[list] = None) -> dict:
    return {
        "type": "object",
        "properties": {"type": {"const": tag}, **constraints},
        "required": ["type", *(required or [])],
        "additionalProperties": False,
    }


def build_meta_schema(allow_custom: bool = False) -> dict:
    """Build the JSON Schema describing a well-formed rule schema."""
    variants = dict(RULE_VARIANTS)
    if allow_custom:
        variants["custom"] = {"check": {"type": "function"}}

    required = dict(_REQUIRED_KEYS)
    if allow_custom:
        required["custom"] = ["check"]

    dispatch = [
        {
            "if": {"properties": {"type": {"const": tag}}},
            "then": _variant(tag, constraints, required.get(tag)),
        }
        for tag, constraints in variants.items()
    ]

    return {
        "$schema": "http://json-schema.org/draft-07/schema#",
        "$ref": "#/definitions/ruleSchema",
        "definitions": {
            "ruleSchema": {
                "type": "object",
                "additionalProperties": {"$ref": "#/definitions/entry"},
            },
            "entry": {
                "if": {"type": "object", "required": ["type"]},
                "then": {"$ref": "#/definitions/rule"},
                "else": {"$ref": "#/definitions/ruleSchema"},
            },
            "rule": {
                "type": "object",
                "required": ["type"],
                "properties": {"type": {"enum": list(variants)}},
                "allOf": dispatch,
            },
        },
    }


# draft-07 plus a "function" type so custom predicates can be described
RuleSchemaValidator = extend(
    Draft7Validator,
    type_checker=Draft7Validator.TYPE_CHECKER.redefine(
        "function", lambda checker, instance: callable(instance)
    ),
)

_VALIDATORS = {
    False: RuleSchemaValidator(build_meta_schema(allow_custom=False)),
    True: RuleSchemaValidator(build_meta_schema(allow_custom=True)),
}


@dataclass
class ShapeResult:
    """Outcome of meta-validating a candidate schema."""
    valid: bool
    error: Optional[str] = None
    issues: tuple[str, ...] = ()


def _format_path(path) -> str:
    return ".".join(str(p) for p in path) if path else "root"


def validate_shape(candidate: Any, allow_custom: bool = False) -> ShapeResult:
    """
    Check that ``candidate`` is a well-formed rule schema.

    Args:
        candidate: Parsed oracle output (any JSON value)
        allow_custom: Accept ``custom`` rules carrying a callable ``check``.
            Oracles cannot transport predicates, so this is only for
            hand-written reference schemas.

    Returns:
        ShapeResult; when invalid, ``error`` lists every violation as
        ``path: message`` in a deterministic order.
    """
    validator = _VALIDATORS[allow_custom]
    issues = sorted(
        {f"{_format_path(err.absolute_path)}: {err.message}" for err in validator.iter_errors(candidate)}
    )
    if not issues:
        return ShapeResult(valid=True)
    return ShapeResult(valid=False, error="; ".join(issues), issues=tuple(issues))


GENERATE_SCHEMA_TOOL = "generate_schema"


def generate_schema_tool() -> dict:
    """Function declaration for tool-based generation."""
    variants = [
        _variant(tag, copy.deepcopy(constraints), _REQUIRED_KEYS.get(tag))
        for tag, constraints in RULE_VARIANTS.items()
    ]
    return {
        "type": "function",
        "function": {
            "name": GENERATE_SCHEMA_TOOL,
            "description": (
                "Generate the complete configuration schema. Provide the entire schema as a "
                "JSON object where each field maps to a rule object, or to a nested schema "
                "for object-valued fields."
            ),
            "parameters": {
                "type": "object",
                "properties": {
                    "schema": {
                        "type": "object",
                        "description": "The complete rule schema. Each field name maps to a rule object.",
                        "additionalProperties": {
                            "anyOf": variants + [{"type": "object"}],
                        },
                    },
                },
                "required": ["schema"],
            },
        },
    }
