"""
rule-bench: benchmarks language models at writing declarative validation rules.

Models are asked to turn a natural-language requirement into a rule schema,
which is checked against test vectors with feedback-driven retries. Results
are scored by difficulty: rules few models get right are worth more.
"""

__version__ = "0.1.0"

from .rules import RuleChecker, RuleViolation, evaluate
from .meta_schema import validate_shape, generate_schema_tool
from .errors import FaultKind, OracleFault
from .models import (
    CaseResult,
    DebugInfo,
    Mode,
    ModelScore,
    ScoringMethod,
    TestCase,
    TestCaseConfig,
    TestVector,
    VectorResult,
)
from .oracle import Oracle, OpenRouterOracle, ScriptedOracle
from .protocol import GenerationProtocol, GenerationOutcome
from .runner import evaluate_case, run_benchmark, validate_test_case, filter_test_cases
from .scoring import generate_summary, score
from .fixtures import TEST_CASES

__all__ = [
    # Rules
    "RuleChecker",
    "RuleViolation",
    "evaluate",
    "validate_shape",
    "generate_schema_tool",
    # Errors
    "FaultKind",
    "OracleFault",
    # Data model
    "CaseResult",
    "DebugInfo",
    "Mode",
    "ModelScore",
    "ScoringMethod",
    "TestCase",
    "TestCaseConfig",
    "TestVector",
    "VectorResult",
    # Oracles
    "Oracle",
    "OpenRouterOracle",
    "ScriptedOracle",
    # Generation
    "GenerationProtocol",
    "GenerationOutcome",
    # Benchmark
    "evaluate_case",
    "run_benchmark",
    "validate_test_case",
    "filter_test_cases",
    "generate_summary",
    "score",
    "TEST_CASES",
]
