"""Tests for the fixture catalog."""

import re

from rule_bench.fixtures import TEST_CASES
from rule_bench.runner import validate_test_case


class TestFixtureCatalog:
    """Tests for TEST_CASES."""

    def test_every_case_is_consistent(self):
        """Test that every vector agrees with its reference config."""
        for test_case in TEST_CASES:
            assert validate_test_case(test_case) == [], test_case.name

    def test_naming(self):
        """Test PascalCase case names and camelCase config names."""
        for test_case in TEST_CASES:
            assert re.fullmatch(r"[A-Z][A-Za-z0-9]*", test_case.name)
            for config in test_case.configs:
                assert re.fullmatch(r"[a-z][A-Za-z0-9]*", config.name)

    def test_unique_config_names(self):
        """Test that config names are unique within a case."""
        for test_case in TEST_CASES:
            names = [c.name for c in test_case.configs]
            assert len(names) == len(set(names))

    def test_vectors_cover_both_verdicts(self):
        """Test that every config has passing and failing vectors."""
        for test_case in TEST_CASES:
            for config in test_case.configs:
                verdicts = {v.expectedResult for v in config.testData}
                assert verdicts == {True, False}, f"{test_case.name} - {config.name}"

    def test_structural_contract_lists_required_fields(self):
        """Test that required fields are declared properties."""
        for test_case in TEST_CASES:
            properties = test_case.objectJsonSchema["properties"]
            assert set(test_case.required_fields) <= set(properties)
