"""Tests for the rule engine."""

import pytest

from rule_bench.rules import RuleChecker, evaluate


class TestEvaluate:
    """Tests for evaluate()."""

    @pytest.fixture
    def person_schema(self):
        return {
            "name": {"type": "required"},
            "age": {"type": "number", "min": 18, "max": 120},
        }

    def test_required_and_range(self, person_schema):
        """Test an object with the required field and a valid age."""
        assert evaluate(person_schema, {"name": "Bo", "age": 30})

    def test_missing_required_field(self, person_schema):
        """Test that a missing required field fails."""
        assert not evaluate(person_schema, {"age": 30})

    def test_null_required_field(self, person_schema):
        """Test that null does not satisfy a required rule."""
        assert not evaluate(person_schema, {"name": None, "age": 30})

    def test_empty_schema_accepts_any_record(self):
        """Test that the empty schema accepts every record."""
        assert evaluate({}, {})
        assert evaluate({}, {"anything": [1, 2, 3]})

    @pytest.mark.parametrize("value", [None, [], [{"name": "Bo"}], "Bo", 42, True])
    def test_non_records_fail_closed(self, value):
        """Test that non-record values always fail."""
        assert not evaluate({}, value)

    def test_optional_field_can_be_removed(self, person_schema):
        """Test that removing a non-required field keeps a passing verdict."""
        value = {"name": "Bo", "age": 30}
        assert evaluate(person_schema, value)

        del value["age"]
        assert evaluate(person_schema, value)

    def test_range_bounds_are_inclusive(self, person_schema):
        """Test min and max boundaries."""
        assert evaluate(person_schema, {"name": "Bo", "age": 18})
        assert evaluate(person_schema, {"name": "Bo", "age": 120})
        assert not evaluate(person_schema, {"name": "Bo", "age": 17.9})
        assert not evaluate(person_schema, {"name": "Bo", "age": 121})


class TestRuleTags:
    """Tests for each rule tag."""

    def test_string_length(self):
        """Test string type and length bounds."""
        schema = {"s": {"type": "string", "minLength": 2, "maxLength": 3}}

        assert evaluate(schema, {"s": "ab"})
        assert evaluate(schema, {"s": "abc"})
        assert not evaluate(schema, {"s": "a"})
        assert not evaluate(schema, {"s": "abcd"})
        assert not evaluate(schema, {"s": 12})

    def test_boolean_is_not_a_number(self):
        """Test that booleans never satisfy number rules."""
        schema = {"n": {"type": "number"}}

        assert evaluate(schema, {"n": 0})
        assert evaluate(schema, {"n": 1.5})
        assert not evaluate(schema, {"n": True})
        assert not evaluate(schema, {"n": "1"})

    def test_boolean(self):
        """Test boolean type."""
        schema = {"b": {"type": "boolean"}}

        assert evaluate(schema, {"b": False})
        assert not evaluate(schema, {"b": 0})
        assert not evaluate(schema, {"b": "true"})

    def test_array_items(self):
        """Test array type and item count bounds."""
        schema = {"a": {"type": "array", "minItems": 1, "maxItems": 2}}

        assert evaluate(schema, {"a": [1]})
        assert evaluate(schema, {"a": [1, 2]})
        assert not evaluate(schema, {"a": []})
        assert not evaluate(schema, {"a": [1, 2, 3]})
        assert not evaluate(schema, {"a": {"0": 1}})

    def test_object(self):
        """Test object type."""
        schema = {"o": {"type": "object"}}

        assert evaluate(schema, {"o": {}})
        assert not evaluate(schema, {"o": []})
        assert not evaluate(schema, {"o": None})

    def test_one_of_is_type_strict(self):
        """Test oneOf membership does not conflate 1 and True."""
        schema = {"v": {"type": "oneOf", "values": [1, "a"]}}

        assert evaluate(schema, {"v": 1})
        assert evaluate(schema, {"v": 1.0})
        assert evaluate(schema, {"v": "a"})
        assert not evaluate(schema, {"v": True})
        assert not evaluate(schema, {"v": "b"})

    def test_one_of_is_type_strict_inside_containers(self):
        """Test that nested booleans and numbers are not conflated."""
        schema = {"v": {"type": "oneOf", "values": [[1], {"on": 1}]}}

        assert evaluate(schema, {"v": [1]})
        assert evaluate(schema, {"v": {"on": 1.0}})
        assert not evaluate(schema, {"v": [True]})
        assert not evaluate(schema, {"v": {"on": True}})
        assert not evaluate(schema, {"v": [1, 1]})

    def test_string_length_counts_characters(self):
        """Test that length bounds count code points, so an emoji is one character."""
        schema = {"s": {"type": "string", "minLength": 2, "maxLength": 2}}

        assert evaluate(schema, {"s": "a\U0001F600"})
        assert not evaluate(schema, {"s": "\U0001F600"})

    def test_custom_predicate(self):
        """Test custom rules call their predicate."""
        schema = {"even": {"type": "custom", "check": lambda v: v % 2 == 0}}

        assert evaluate(schema, {"even": 4})
        assert not evaluate(schema, {"even": 3})
        assert evaluate(schema, {})

    def test_unknown_tag_fails(self):
        """Test that unknown tags fail closed for present values."""
        assert not evaluate({"x": {"type": "email"}}, {"x": "a@b.co"})


class TestNestedSchemas:
    """Tests for nested rule schemas."""

    @pytest.fixture
    def schema(self):
        return {
            "id": {"type": "required"},
            "address": {
                "city": {"type": "required"},
                "zip": {"type": "string", "minLength": 5, "maxLength": 5},
            },
        }

    def test_valid_nested_object(self, schema):
        """Test a valid nested object."""
        assert evaluate(schema, {"id": 1, "address": {"city": "Oslo", "zip": "01500"}})

    def test_absent_nested_object_is_skipped(self, schema):
        """Test that an absent nested object is not checked."""
        assert evaluate(schema, {"id": 1})

    def test_nested_violation(self, schema):
        """Test a violation inside a nested object."""
        assert not evaluate(schema, {"id": 1, "address": {"zip": "01500"}})

    def test_nested_value_must_be_record(self, schema):
        """Test that a present nested field must be an object."""
        assert not evaluate(schema, {"id": 1, "address": "Oslo"})


class TestRuleChecker:
    """Tests for RuleChecker.explain()."""

    def test_explain_reports_every_violation(self):
        """Test that explain lists all violations with dotted paths."""
        schema = {
            "name": {"type": "required"},
            "age": {"type": "number", "min": 18},
            "address": {"city": {"type": "string", "minLength": 2}},
        }
        checker = RuleChecker(schema)

        violations = checker.explain({"age": 5, "address": {"city": "X"}})

        assert [v.field for v in violations] == ["name", "age", "address.city"]
        assert "required" in violations[0].reason
        assert "less than minimum 18" in violations[1].reason

    def test_explain_empty_iff_check_passes(self):
        """Test that explain agrees with check."""
        checker = RuleChecker({"tags": {"type": "array", "maxItems": 1}})

        for value in [{}, {"tags": []}, {"tags": [1, 2]}, [], None]:
            assert (checker.explain(value) == []) == checker.check(value)

    def test_explain_non_record(self):
        """Test the root violation for a non-record value."""
        violations = RuleChecker({}).explain([1])

        assert len(violations) == 1
        assert violations[0].field == ""
        assert violations[0].reason == "Expected object, got array"

    def test_violation_to_dict(self):
        """Test serializing a violation for a missing field."""
        violation = RuleChecker({"name": {"type": "required"}}).explain({})[0]

        assert violation.to_dict() == {
            "field": "name",
            "reason": "Field is required but missing or null",
            "value": None,
        }
