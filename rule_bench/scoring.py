"""
Difficulty-weighted scoring of benchmark results.

A unit of difficulty (a test case config, or a single test vector) gets
weight ln(total_models / models_that_passed_it). Units everyone passes are
worth nothing; a unit only one model passes is worth ln(total_models). A
configuration's score is the sum of the weights of the units it passed.

Pass counts are shared across modes: a model passes a unit if any of its
modes passed it.
"""

from __future__ import annotations

import json
import math
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Hashable, Iterable, Optional, Sequence

from .models import CaseResult, Mode, ModelScore, ScoringMethod


class Status:
    PASSED = "PASSED"  # no errors, every case passed
    FAILED = "FAILED"  # ran, some case failed
    ERROR = "ERROR"    # at least one case could not run

_STATUS_PRIORITY = {Status.PASSED: 0, Status.FAILED: 1, Status.ERROR: 2}


def is_case_successful(result: CaseResult) -> bool:
    """No error and every vector verdict passed."""
    return result.successful


def calculate_weight(total_models: int, pass_count: int) -> float:
    """ln(total / passed); 0 when nobody (or nothing) counts."""
    if pass_count > 0 and total_models > 0:
        return math.log(total_models / pass_count)
    return 0.0


def average_duration(results: Sequence[CaseResult]) -> float:
    if not results:
        return 0.0
    return sum(r.duration for r in results) / len(results)


def average_oracle_calls(results: Sequence[CaseResult]) -> float:
    if not results:
        return 0.0
    return round(sum(r.oracleCallCount for r in results) / len(results), 2)


def count_models(results: Iterable[CaseResult]) -> int:
    return len({r.model for r in results})


def case_unit(result: CaseResult) -> tuple:
    return (result.caseName, result.configName)


def passed_units(result: CaseResult, method: ScoringMethod) -> list[Hashable]:
    """Units of difficulty this result solved."""
    if result.error is not None:
        return []
    if method == ScoringMethod.CASES:
        return [case_unit(result)] if is_case_successful(result) else []
    return [
        (*case_unit(result), index)
        for index, r in enumerate(result.testResults)
        if r.passed
    ]


def unit_weights(all_results: Sequence[CaseResult], method: ScoringMethod) -> dict[Hashable, float]:
    """Weight of every unit at least one model passed."""
    passers: dict[Hashable, set[str]] = defaultdict(set)
    for result in all_results:
        for unit in passed_units(result, method):
            passers[unit].add(result.model)

    total_models = count_models(all_results)
    return {unit: calculate_weight(total_models, len(models)) for unit, models in passers.items()}


def calculate_model_score(
    model: str,
    mode: Optional[Mode],
    model_mode_results: Sequence[CaseResult],
    all_results: Sequence[CaseResult],
    method: ScoringMethod = ScoringMethod.CASES,
    weights: Optional[dict[Hashable, float]] = None,
) -> ModelScore:
    """
    Score one model/mode combination.

    Args:
        model: Model identifier
        mode: Interaction mode of ``model_mode_results``
        model_mode_results: This configuration's results
        all_results: Every result in the run (used for the weights)
        method: Unit of difficulty
        weights: Precomputed ``unit_weights(all_results, method)``
    """
    if weights is None:
        weights = unit_weights(all_results, method)

    score = sum(
        weights.get(unit, 0.0)
        for result in model_mode_results
        for unit in passed_units(result, method)
    )

    return ModelScore(
        model=model,
        mode=mode,
        totalCases=len(model_mode_results),
        successfulCases=sum(1 for r in model_mode_results if is_case_successful(r)),
        score=score,
        averageDuration=average_duration(model_mode_results),
        averageOracleCalls=average_oracle_calls(model_mode_results),
    )


@dataclass
class ModelSummary:
    """Score and case results of one model/mode combination."""
    model: str
    mode: Mode
    score: ModelScore
    case_results: list[CaseResult] = field(default_factory=list)

    @property
    def status(self) -> str:
        if any(r.error is not None for r in self.case_results):
            return Status.ERROR
        if all(is_case_successful(r) for r in self.case_results):
            return Status.PASSED
        return Status.FAILED


def sort_models(models: Sequence[ModelSummary]) -> list[ModelSummary]:
    """Score descending, then PASSED > FAILED > ERROR, then faster first."""
    return sorted(
        models,
        key=lambda m: (-m.score.score, _STATUS_PRIORITY[m.status], m.score.averageDuration),
    )


@dataclass
class Summary:
    """Ranked leaderboard of a benchmark run."""
    models: list[ModelSummary]
    method: ScoringMethod = ScoringMethod.CASES

    @property
    def all_passed(self) -> bool:
        return all(m.status == Status.PASSED for m in self.models)

    def to_dict(self, include_debug: bool = True) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "scoring": self.method.value,
            "models": [
                {
                    "score": m.score.model_dump(mode="json"),
                    "status": m.status,
                    "debug": [
                        json.loads(json.dumps(r.debugInfo.model_dump(mode="python"), default=repr))
                        for r in m.case_results
                        if include_debug and r.debugInfo is not None
                    ],
                }
                for m in self.models
            ],
        }

    def render(self) -> str:
        """Generate human-readable summary."""
        lines = [
            "=" * 60,
            f"SUMMARY (scoring by {self.method.value})",
            "=" * 60,
        ]

        for rank, m in enumerate(self.models, 1):
            s = m.score
            lines.extend([
                "",
                f"{rank}. {m.model} [{m.mode.value}] - {m.status}",
                f"   Score: {s.successfulCases}/{s.totalCases} (weighted: {s.score:.3f})",
                f"   Avg time: {s.averageDuration:.2f}s | Avg oracle calls: {s.averageOracleCalls:.2f}",
            ])
            for r in m.case_results:
                name = f"{r.caseName} - {r.configName}"
                if r.error is not None:
                    lines.append(f"   ✗ {name}: ERROR - {r.error}")
                    continue
                passed = sum(1 for t in r.testResults if t.passed)
                icon = "✓" if is_case_successful(r) else "✗"
                lines.append(f"   {icon} {name}: {passed}/{len(r.testResults)} ({r.oracleCallCount} calls)")

        lines.extend([
            "",
            "=" * 60,
            f"Overall: {'ALL PASSED' if self.all_passed else 'SOME FAILED'}",
            "=" * 60,
        ])
        return "\n".join(lines)


def generate_summary(
    results: Sequence[CaseResult],
    method: "ScoringMethod | str" = ScoringMethod.CASES,
) -> Summary:
    """Group results by model/mode, score each group, and rank them."""
    method = ScoringMethod(method)
    weights = unit_weights(results, method)

    groups: dict[tuple[str, Mode], list[CaseResult]] = {}
    for result in results:
        groups.setdefault((result.model, result.mode), []).append(result)

    summaries = [
        ModelSummary(
            model=model,
            mode=mode,
            score=calculate_model_score(model, mode, group, results, method, weights),
            case_results=group,
        )
        for (model, mode), group in groups.items()
    ]
    return Summary(models=sort_models(summaries), method=method)


def score(
    results: Sequence[CaseResult],
    method: "ScoringMethod | str" = ScoringMethod.CASES,
) -> list[ModelScore]:
    """Ranked scores of every model/mode combination in ``results``."""
    return [m.score for m in generate_summary(results, method).models]
