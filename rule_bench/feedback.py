"""
Feedback Translator: turns failed attempts into messages for the oracle.

Feedback is a pure function of the failure, so identical failures always
produce identical text.
"""

from __future__ import annotations

import json
from typing import Any, Mapping, Optional, Sequence

from .models import TestVector, VectorResult
from .rules import RuleChecker


def _verdict(value: bool) -> str:
    return "PASS" if value else "FAIL"


def canonical_json(value: Any) -> str:
    """Stable JSON rendering (sorted keys) used in feedback."""
    return json.dumps(value, sort_keys=True, default=repr)


def structural_feedback(issues: Sequence[str], parse_failure: bool = False) -> str:
    """Feedback for a reply that is unparseable or not a well-formed schema."""
    if parse_failure:
        return (
            "The response could not be read as a rule schema. Please fix it:\n\n"
            f"Error: {'; '.join(issues)}\n\n"
            "Return the schema as a single valid JSON object."
        )

    lines = [
        "The generated schema has validation errors. Please fix them:",
        "",
    ]
    lines.extend(f"- {issue}" for issue in issues)
    lines.extend([
        "",
        "Each field must map to exactly one rule object using only the allowed constraint keys, "
        "or to a nested schema for an object-valued field.",
    ])
    return "\n".join(lines)


def behavioral_feedback(
    schema: Mapping[str, Any],
    test_data: Sequence[TestVector],
    test_results: Sequence[VectorResult],
    reference_config: Optional[Mapping[str, Any]] = None,
) -> str:
    """
    Itemize every vector the schema misjudged.

    Args:
        schema: The candidate schema that was checked
        test_data: Vectors in their original order
        test_results: Verdicts aligned with ``test_data``
        reference_config: If given, appended for comparison

    Returns:
        Feedback text; empty string when nothing failed
    """
    checker = RuleChecker(schema)
    failures = [
        (index, vector, result)
        for index, (vector, result) in enumerate(zip(test_data, test_results), 1)
        if not result.passed
    ]
    if not failures:
        return ""

    lines = [
        f"The generated schema failed {len(failures)} out of {len(test_results)} test cases:",
        "",
    ]
    for index, vector, result in failures:
        header = f"Test {index}: Expected {_verdict(result.expected)}, got {_verdict(result.actual)}."
        if vector.description:
            header += f" ({vector.description})"
        lines.append(header)
        lines.append(f"   Data: {canonical_json(vector.data)}")

        if result.actual:
            lines.append("   Every rule in the schema accepted this object, but it should be rejected.")
        else:
            for violation in checker.explain(vector.data):
                field = violation.field or "root"
                lines.append(f"   Rejected by `{field}` {canonical_json(_printable_rule(violation.rule))}: {violation.reason}")
        lines.append("")

    if reference_config is not None:
        lines.extend([
            "For comparison, a schema that handles all test cases:",
            canonical_json(_printable_rule(reference_config)),
            "",
        ])

    lines.append("Please fix the schema to correctly validate these test cases.")
    return "\n".join(lines)


def _printable_rule(rule: Any) -> Any:
    """Drop predicates that cannot be rendered as JSON."""
    if isinstance(rule, Mapping):
        return {k: _printable_rule(v) for k, v in rule.items() if not callable(v)}
    return rule
