"""Tests for configuration loading."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from rule_bench.config_loader import AppConfig, BenchmarkConfig, load_config
from rule_bench.models import Mode, ScoringMethod
from rule_bench.oracle import DEFAULT_MODEL

CONFIG_PATH = Path(__file__).resolve().parent.parent / "config" / "config.yaml"


class TestLoadConfig:
    """Tests for load_config()."""

    def test_missing_file(self, tmp_path):
        """Test that a missing file raises FileNotFoundError."""
        with pytest.raises(FileNotFoundError):
            load_config(str(tmp_path / "nope.yaml"))

    def test_full_file(self, tmp_path):
        """Test loading every section."""
        path = tmp_path / "config.yaml"
        path.write_text(
            "oracle:\n"
            "  base_url: http://localhost:8000/v1\n"
            "  api_key_env_var: LOCAL_KEY\n"
            "  timeout: 30\n"
            "benchmark:\n"
            "  model_list: small\n"
            "  model_lists:\n"
            "    small: [a/one, b/two]\n"
            "  modes: [toolBased]\n"
            "  max_retries: 1\n"
            "  scoring: tests\n"
            "reporting:\n"
            "  output_dir: out\n"
            "  save_debug: false\n"
        )

        config = load_config(str(path))

        assert config.oracle.base_url == "http://localhost:8000/v1"
        assert config.oracle.timeout == 30
        assert config.benchmark.resolve_models() == ["a/one", "b/two"]
        assert config.benchmark.modes == [Mode.TOOL_BASED]
        assert config.benchmark.max_retries == 1
        assert config.benchmark.max_workers == 4
        assert config.benchmark.scoring == ScoringMethod.TESTS
        assert config.reporting.output_dir == "out"
        assert not config.reporting.save_debug

    def test_empty_file_uses_defaults(self, tmp_path):
        """Test that an empty file gives the defaults."""
        path = tmp_path / "config.yaml"
        path.write_text("")

        config = load_config(str(path))

        assert config == AppConfig()
        assert config.oracle.api_key_env_var == "OPENROUTER_API_KEY"
        assert config.benchmark.max_retries == 3
        assert config.benchmark.scoring == ScoringMethod.CASES

    def test_shipped_config(self):
        """Test that the repository config loads."""
        config = load_config(str(CONFIG_PATH))

        assert config.benchmark.resolve_models()


class TestBenchmarkConfig:
    """Tests for BenchmarkConfig."""

    def test_explicit_models_win(self):
        """Test that explicit models override a named list."""
        config = BenchmarkConfig(models=["x/y"], model_list="all", model_lists={"all": ["a/b"]})

        assert config.resolve_models() == ["x/y"]

    def test_default_model(self):
        """Test the fallback model."""
        assert BenchmarkConfig().resolve_models() == [DEFAULT_MODEL]

    def test_unknown_model_list(self):
        """Test that an undefined list name is rejected."""
        with pytest.raises(ValidationError):
            BenchmarkConfig(model_list="missing")

    def test_invalid_values(self):
        """Test rejecting bad modes and retry budgets."""
        with pytest.raises(ValidationError):
            BenchmarkConfig(modes=["chat"])
        with pytest.raises(ValidationError):
            BenchmarkConfig(max_retries=-1)
