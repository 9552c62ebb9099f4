from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class Mode(str, Enum):
    """How the oracle is asked for a schema."""
    PROMPT_BASED = "promptBased"
    TOOL_BASED = "toolBased"

    @classmethod
    def parse(cls, value: "str | Mode") -> "Mode":
        try:
            return cls(value)
        except ValueError:
            available = ", ".join(m.value for m in cls)
            raise ValueError(f"Unknown mode: {value!r}. Available modes: {available}") from None


class ScoringMethod(str, Enum):
    CASES = "cases"  # unit of difficulty: one test case config
    TESTS = "tests"  # unit of difficulty: one test vector


class TestVector(BaseModel):
    __test__ = False
    model_config = ConfigDict(frozen=True)

    data: Any
    expectedResult: bool
    description: Optional[str] = None


class TestCaseConfig(BaseModel):
    __test__ = False
    model_config = ConfigDict(frozen=True)

    name: str
    checkDescription: str
    referenceConfig: Dict[str, Any]  # may hold custom predicates, never sent to the oracle
    testData: List[TestVector]


class TestCase(BaseModel):
    __test__ = False
    model_config = ConfigDict(frozen=True)

    name: str
    objectJsonSchema: Dict[str, Any]  # required fields + primitive types only
    configs: List[TestCaseConfig]

    @property
    def required_fields(self) -> List[str]:
        return list(self.objectJsonSchema.get("required", []))


class VectorResult(BaseModel):
    passed: bool    # actual == expected
    expected: bool
    actual: bool


class DebugInfo(BaseModel):
    """Everything needed to diagnose a failing case without calling the oracle again."""
    model: str
    mode: Mode
    caseName: str
    checkDescription: str
    referenceConfig: Dict[str, Any]
    generatedConfig: Optional[Dict[str, Any]] = None
    testData: List[TestVector]
    testResults: List[VectorResult]
    oracleCallCount: int
    conversation: List[Dict[str, Any]] = Field(default_factory=list)


class CaseResult(BaseModel):
    caseName: str
    configName: str
    model: str
    mode: Mode
    testResults: List[VectorResult] = Field(default_factory=list)
    duration: float = 0.0  # seconds
    oracleCallCount: int = 0
    error: Optional[str] = None
    debugInfo: Optional[DebugInfo] = None

    @property
    def successful(self) -> bool:
        return self.error is None and all(r.passed for r in self.testResults)


class ModelScore(BaseModel):
    model: str
    mode: Optional[Mode] = None
    totalCases: int
    successfulCases: int
    score: float  # higher is better
    averageDuration: float
    averageOracleCalls: float
