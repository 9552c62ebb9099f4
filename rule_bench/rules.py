"""
Rule Engine: evaluates objects against a declarative rule schema.

A rule schema maps field names to either a rule (a mapping with a ``type``
tag) or a nested rule schema for an object-valued field:

    {
        "name": {"type": "required"},
        "age": {"type": "number", "min": 18, "max": 120},
        "address": {"city": {"type": "string", "minLength": 2}},
    }

Supported tags: required, string, number, boolean, array, object, oneOf,
custom. Fields are optional unless their rule is ``required``; an absent
field is skipped.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Mapping, Optional

RULE_TAGS = ("required", "string", "number", "boolean", "array", "object", "oneOf", "custom")

# Marker for a field that is not present in the checked object
_MISSING = object()


@dataclass
class RuleViolation:
    """A field that failed its rule."""
    field: str
    reason: str
    value: Any
    rule: Any

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "field": self.field,
            "reason": self.reason,
            "value": None if self.value is _MISSING else self.value,
        }


def is_rule(entry: Any) -> bool:
    """A mapping is a rule iff it carries a ``type`` tag."""
    return isinstance(entry, Mapping) and "type" in entry


def is_record(value: Any) -> bool:
    return isinstance(value, Mapping)


def is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def is_array(value: Any) -> bool:
    return isinstance(value, (list, tuple))


def _type_name(value: Any) -> str:
    if value is _MISSING:
        return "missing"
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if is_number(value):
        return "number"
    if isinstance(value, str):
        return "string"
    if is_array(value):
        return "array"
    if is_record(value):
        return "object"
    return type(value).__name__


def _same_value(a: Any, b: Any) -> bool:
    """Equality that does not conflate booleans with numbers."""
    if isinstance(a, bool) or isinstance(b, bool):
        return isinstance(a, bool) and isinstance(b, bool) and a == b
    if is_number(a) and is_number(b):
        return a == b
    if is_array(a) and is_array(b):
        return len(a) == len(b) and all(_same_value(x, y) for x, y in zip(a, b))
    if is_record(a) and is_record(b):
        return a.keys() == b.keys() and all(_same_value(a[k], b[k]) for k in a)
    return type(a) is type(b) and a == b


def _check_bounds(size, low, high, what: str) -> Optional[str]:
    if low is not None and size < low:
        return f"{what} {size} is less than minimum {low}"
    if high is not None and size > high:
        return f"{what} {size} exceeds maximum {high}"
    return None


def _rule_error(value: Any, rule: Mapping) -> Optional[str]:
    """Return why ``value`` violates ``rule``, or None if it satisfies it."""
    tag = rule.get("type")

    if tag == "required":
        if value is _MISSING or value is None:
            return "Field is required but missing or null"
        return None

    if value is _MISSING:
        return None

    if tag == "string":
        if not isinstance(value, str):
            return f"Expected string, got {_type_name(value)}"
        return _check_bounds(len(value), rule.get("minLength"), rule.get("maxLength"), "String length")

    if tag == "number":
        if not is_number(value):
            return f"Expected number, got {_type_name(value)}"
        return _check_bounds(value, rule.get("min"), rule.get("max"), "Number")

    if tag == "boolean":
        if not isinstance(value, bool):
            return f"Expected boolean, got {_type_name(value)}"
        return None

    if tag == "array":
        if not is_array(value):
            return f"Expected array, got {_type_name(value)}"
        return _check_bounds(len(value), rule.get("minItems"), rule.get("maxItems"), "Array length")

    if tag == "object":
        if not is_record(value):
            return f"Expected object, got {_type_name(value)}"
        return None

    if tag == "oneOf":
        allowed = rule.get("values") or []
        if not any(_same_value(value, option) for option in allowed):
            return f"Value {value!r} is not one of the allowed values: {list(allowed)!r}"
        return None

    if tag == "custom":
        check: Callable[[Any], bool] = rule.get("check")
        if not callable(check) or not check(value):
            return "Custom validation check failed"
        return None

    return f"Unknown rule type: {tag!r}"


class RuleChecker:
    """
    Checks objects against a rule schema.

    ``check`` short-circuits on the first violation; ``explain`` walks the
    whole schema and reports every violation with its dotted field path.
    """

    def __init__(self, schema: Mapping[str, Any]):
        self.schema = schema

    def check(self, obj: Any) -> bool:
        if not is_record(obj):
            return False
        return self._check_object(obj, self.schema)

    def _check_object(self, obj: Mapping, schema: Mapping) -> bool:
        for key, entry in schema.items():
            value = obj.get(key, _MISSING)

            if is_rule(entry):
                if _rule_error(value, entry) is not None:
                    return False
                continue

            # Nested schema
            if value is _MISSING:
                continue
            if not is_record(value):
                return False
            if not self._check_object(value, entry):
                return False

        return True

    def explain(self, obj: Any) -> list[RuleViolation]:
        """Return every violation of the schema by ``obj``."""
        if not is_record(obj):
            return [RuleViolation(
                field="",
                reason=f"Expected object, got {_type_name(obj)}",
                value=obj,
                rule=self.schema,
            )]
        return self._explain_object(obj, self.schema, "")

    def _explain_object(self, obj: Mapping, schema: Mapping, path: str) -> list[RuleViolation]:
        violations = []

        for key, entry in schema.items():
            field_path = f"{path}.{key}" if path else key
            value = obj.get(key, _MISSING)

            if is_rule(entry):
                reason = _rule_error(value, entry)
                if reason is not None:
                    violations.append(RuleViolation(field_path, reason, value, entry))
                continue

            if value is _MISSING:
                continue
            if not is_record(value):
                violations.append(RuleViolation(
                    field_path,
                    f"Expected object, got {_type_name(value)}",
                    value,
                    entry,
                ))
                continue
            violations.extend(self._explain_object(value, entry, field_path))

        return violations


def evaluate(schema: Mapping[str, Any], value: Any) -> bool:
    """Return True iff ``value`` is a record satisfying every rule in ``schema``."""
    return RuleChecker(schema).check(value)
