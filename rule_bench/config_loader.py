import yaml
import os
from pydantic import BaseModel, Field, model_validator
from typing import Dict, List, Optional

from .models import Mode, ScoringMethod
from .oracle import DEFAULT_BASE_URL, DEFAULT_MODEL


class OracleConfig(BaseModel):
    base_url: str = DEFAULT_BASE_URL
    api_key_env_var: str = "OPENROUTER_API_KEY"
    timeout: Optional[float] = None


class BenchmarkConfig(BaseModel):
    models: List[str] = Field(default_factory=list)
    model_list: Optional[str] = None
    model_lists: Dict[str, List[str]] = Field(default_factory=dict)
    modes: List[Mode] = Field(default_factory=lambda: [Mode.PROMPT_BASED, Mode.TOOL_BASED])
    max_retries: int = Field(default=3, ge=0)
    max_workers: int = Field(default=4, ge=1)
    scoring: ScoringMethod = ScoringMethod.CASES
    share_reference: bool = False

    @model_validator(mode="after")
    def _known_model_list(self):
        if self.model_list is not None and self.model_list not in self.model_lists:
            available = ", ".join(sorted(self.model_lists)) or "none"
            raise ValueError(f"Unknown model list: {self.model_list!r}. Available lists: {available}")
        return self

    def resolve_models(self) -> List[str]:
        """Explicit models win; otherwise the named list; otherwise the default model."""
        if self.models:
            return list(self.models)
        if self.model_list is not None:
            return list(self.model_lists[self.model_list])
        return [DEFAULT_MODEL]


class ReportingConfig(BaseModel):
    output_dir: str = "results"
    save_debug: bool = True


class AppConfig(BaseModel):
    oracle: OracleConfig = Field(default_factory=OracleConfig)
    benchmark: BenchmarkConfig = Field(default_factory=BenchmarkConfig)
    reporting: ReportingConfig = Field(default_factory=ReportingConfig)


def load_config(config_path: str = "config/config.yaml") -> AppConfig:
    if not os.path.exists(config_path):
        raise FileNotFoundError(f"Config file not found at {config_path}")

    with open(config_path, "r") as f:
        config_dict = yaml.safe_load(f) or {}

    return AppConfig(**config_dict)
