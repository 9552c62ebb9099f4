"""Tests for rule schema meta-validation."""

import pytest

from rule_bench.fixtures import TEST_CASES
from rule_bench.meta_schema import (
    GENERATE_SCHEMA_TOOL,
    RULE_VARIANTS,
    generate_schema_tool,
    validate_shape,
)


class TestValidateShape:
    """Tests for validate_shape()."""

    def test_valid_flat_schema(self):
        """Test a schema using every oracle-facing tag."""
        schema = {
            "name": {"type": "required"},
            "nick": {"type": "string", "minLength": 2, "maxLength": 10},
            "age": {"type": "number", "min": 0, "max": 130.5},
            "active": {"type": "boolean"},
            "tags": {"type": "array", "minItems": 0, "maxItems": 3},
            "meta": {"type": "object"},
            "role": {"type": "oneOf", "values": ["admin", "user"]},
        }

        result = validate_shape(schema)

        assert result.valid
        assert result.error is None
        assert result.issues == ()

    def test_empty_schema_is_valid(self):
        """Test that the empty schema is well-formed."""
        assert validate_shape({}).valid

    def test_valid_nested_schema(self):
        """Test a nested schema."""
        schema = {"address": {"city": {"type": "required"}, "geo": {"lat": {"type": "number"}}}}

        assert validate_shape(schema).valid

    @pytest.mark.parametrize("candidate", [None, [], [{"name": {"type": "required"}}], "schema", 3])
    def test_rejects_non_record_roots(self, candidate):
        """Test that null, arrays and primitives are rejected at the top level."""
        result = validate_shape(candidate)

        assert not result.valid
        assert result.error.startswith("root: ")
        assert "is not of type 'object'" in result.error

    def test_unknown_tag(self):
        """Test that an unknown rule tag is rejected."""
        result = validate_shape({"email": {"type": "email"}})

        assert not result.valid
        assert len(result.issues) == 1
        assert result.issues[0].startswith("email.type: ")

    def test_extra_constraint_key(self):
        """Test that a constraint the tag does not permit is rejected."""
        result = validate_shape({"name": {"type": "string", "pattern": "^a"}})

        assert not result.valid
        assert "name: " in result.error
        assert "'pattern' was unexpected" in result.error

    def test_constraint_types(self):
        """Test that constraints must be correctly typed."""
        assert not validate_shape({"s": {"type": "string", "minLength": "2"}}).valid
        assert not validate_shape({"s": {"type": "string", "minLength": -1}}).valid
        assert not validate_shape({"s": {"type": "string", "minLength": True}}).valid
        assert not validate_shape({"n": {"type": "number", "max": "10"}}).valid
        assert not validate_shape({"a": {"type": "array", "maxItems": 1.5}}).valid
        assert not validate_shape({"o": {"type": "oneOf", "values": "a"}}).valid

    def test_one_of_requires_values(self):
        """Test that oneOf needs its values list."""
        result = validate_shape({"role": {"type": "oneOf"}})

        assert not result.valid
        assert "'values' is a required property" in result.error

    def test_collects_every_violation(self):
        """Test that every violating path is reported, in a stable order."""
        candidate = {
            "a": {"type": "email"},
            "b": {"type": "string", "minLength": -1},
            "c": 5,
            "d": {"e": {"type": "number", "min": "x"}},
        }

        result = validate_shape(candidate)

        assert not result.valid
        assert [issue.split(":")[0] for issue in result.issues] == ["a.type", "b.minLength", "c", "d.e.min"]
        assert result.error == "; ".join(result.issues)

    def test_deterministic(self):
        """Test that the same candidate yields the same diagnostic."""
        candidate = {"x": {"type": "string", "maxLength": -2, "foo": 1}, "y": None}

        assert validate_shape(candidate).error == validate_shape(candidate).error


class TestCustomRules:
    """Tests for custom predicate rules."""

    def test_custom_rejected_by_default(self):
        """Test that oracles may not use custom rules."""
        result = validate_shape({"zip": {"type": "custom", "check": str.isdigit}})

        assert not result.valid

    def test_custom_allowed_for_reference_schemas(self):
        """Test that a callable custom rule passes with allow_custom."""
        assert validate_shape({"zip": {"type": "custom", "check": str.isdigit}}, allow_custom=True).valid

    def test_custom_needs_callable(self):
        """Test that a custom rule without a callable check is malformed."""
        assert not validate_shape({"zip": {"type": "custom", "check": "isdigit"}}, allow_custom=True).valid
        assert not validate_shape({"zip": {"type": "custom"}}, allow_custom=True).valid

    def test_every_reference_config_is_well_formed(self):
        """Test that every schema the engine is given in fixtures is accepted."""
        for test_case in TEST_CASES:
            for config in test_case.configs:
                result = validate_shape(config.referenceConfig, allow_custom=True)
                assert result.valid, f"{test_case.name} - {config.name}: {result.error}"


class TestGenerateSchemaTool:
    """Tests for the generate_schema function declaration."""

    def test_declaration(self):
        """Test the tool name and required argument."""
        tool = generate_schema_tool()

        assert tool["type"] == "function"
        assert tool["function"]["name"] == GENERATE_SCHEMA_TOOL
        assert tool["function"]["parameters"]["required"] == ["schema"]

    def test_lists_every_tag(self):
        """Test that every oracle-facing tag is offered."""
        schema_arg = generate_schema_tool()["function"]["parameters"]["properties"]["schema"]
        variants = schema_arg["additionalProperties"]["anyOf"]
        tags = [v["properties"]["type"]["const"] for v in variants if "properties" in v]

        assert tags == list(RULE_VARIANTS)
        assert "custom" not in tags
