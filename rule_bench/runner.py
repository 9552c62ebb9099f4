"""
Benchmark runner: evaluates (model x mode x case) combinations.

Every evaluation is independent, so a batch runs on a bounded thread pool;
results are returned only after all of them finish, in submission order.
"""

from __future__ import annotations

import logging
import time
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, Iterable, Optional, Sequence

from tqdm import tqdm

from .errors import OracleFault, transport_fault
from .models import CaseResult, DebugInfo, Mode, TestCase, TestCaseConfig
from .oracle import Oracle
from .protocol import GenerationProtocol
from .rules import RuleChecker

logger = logging.getLogger(__name__)

OracleFactory = Callable[[str], Oracle]


def evaluate_case(
    test_case: TestCase,
    config: TestCaseConfig,
    model: str,
    mode: "Mode | str",
    oracle_factory: OracleFactory,
    max_retries: int = 3,
    share_reference: bool = False,
) -> CaseResult:
    """
    Run the generation protocol for one model/mode on one test case config.

    Oracle faults are reported on ``CaseResult.error`` with no test results.
    A debug record is attached when the case ran but some vector failed.
    """
    mode = Mode.parse(mode)
    start_time = time.time()

    try:
        protocol = GenerationProtocol(
            oracle_factory(model),
            mode=mode,
            max_retries=max_retries,
            share_reference=share_reference,
        )
        outcome = protocol.run(
            config.checkDescription,
            test_case.objectJsonSchema,
            config.testData,
            config.referenceConfig,
        )
    except OracleFault as e:
        message = e.describe(model, mode.value)
        logger.error("%s - %s: %s", test_case.name, config.name, message)
        return CaseResult(
            caseName=test_case.name,
            configName=config.name,
            model=model,
            mode=mode,
            duration=time.time() - start_time,
            oracleCallCount=e.oracle_calls,
            error=message,
        )
    except Exception as e:
        message = transport_fault(f"Unexpected problem prevented tests from running: {e}").describe(model, mode.value)
        logger.exception("%s - %s: %s", test_case.name, config.name, message)
        return CaseResult(
            caseName=test_case.name,
            configName=config.name,
            model=model,
            mode=mode,
            duration=time.time() - start_time,
            error=message,
        )

    result = CaseResult(
        caseName=test_case.name,
        configName=config.name,
        model=model,
        mode=mode,
        testResults=outcome.test_results,
        duration=time.time() - start_time,
        oracleCallCount=outcome.oracle_calls,
    )

    if not outcome.succeeded:
        for index, r in enumerate(outcome.test_results, 1):
            if not r.passed:
                logger.warning(
                    "Mismatch [Case: %s - %s, Model: %s, Mode: %s] test %d: expected %s, got %s",
                    test_case.name, config.name, model, mode.value, index,
                    "PASS" if r.expected else "FAIL", "PASS" if r.actual else "FAIL",
                )
        result.debugInfo = DebugInfo(
            model=model,
            mode=mode,
            caseName=f"{test_case.name} - {config.name}",
            checkDescription=config.checkDescription,
            referenceConfig=config.referenceConfig,
            generatedConfig=outcome.schema,
            testData=config.testData,
            testResults=outcome.test_results,
            oracleCallCount=outcome.oracle_calls,
            conversation=list(outcome.conversation),
        )

    return result


def run_benchmark(
    test_cases: Sequence[TestCase],
    models: Sequence[str],
    modes: Sequence["Mode | str"],
    oracle_factory: OracleFactory,
    max_retries: int = 3,
    max_workers: int = 4,
    share_reference: bool = False,
    show_progress: bool = True,
) -> list[CaseResult]:
    """
    Evaluate every model x mode x case config combination.

    Args:
        test_cases: Fixture catalog
        models: Model identifiers
        modes: Interaction modes
        oracle_factory: Builds an oracle for a model identifier
        max_retries: Retries per evaluation
        max_workers: Evaluations allowed in flight at once
        share_reference: Include reference schemas in feedback
        show_progress: Show a progress bar

    Returns:
        One CaseResult per combination, in a deterministic order
    """
    jobs = [
        (test_case, config, model, Mode.parse(mode))
        for test_case in test_cases
        for config in test_case.configs
        for model in models
        for mode in modes
    ]
    logger.info("Running %d evaluations with %d workers", len(jobs), max_workers)

    with ThreadPoolExecutor(max_workers=max(1, max_workers)) as pool:
        futures = [
            pool.submit(evaluate_case, tc, cfg, model, mode, oracle_factory, max_retries, share_reference)
            for tc, cfg, model, mode in jobs
        ]
        results = [
            future.result()
            for future in tqdm(futures, desc="Evaluating", disable=not show_progress)
        ]

    return results


def validate_test_case(test_case: TestCase) -> list[str]:
    """
    Check a test case's vectors against its own reference configs.

    A vector should pass iff every required field of the structural contract
    is present and the reference config accepts it.

    Returns:
        Human-readable errors (empty if the suite is self-consistent)
    """
    errors = []
    required_fields = test_case.required_fields

    for config in test_case.configs:
        checker = RuleChecker(config.referenceConfig)
        case_name = f"{test_case.name} - {config.name}"

        for index, vector in enumerate(config.testData, 1):
            data = vector.data if isinstance(vector.data, dict) else {}
            missing = [f for f in required_fields if data.get(f) is None]
            passes_reference = checker.check(vector.data)
            actual = not missing and passes_reference

            if actual == vector.expectedResult:
                continue
            if missing and vector.expectedResult:
                errors.append(
                    f'Test case "{case_name}", test data item {index}: Expected PASS but required '
                    f"fields are missing: {', '.join(missing)}. Data: {vector.data!r}"
                )
            else:
                errors.append(
                    f'Test case "{case_name}", test data item {index}: Expected '
                    f"{'PASS' if vector.expectedResult else 'FAIL'}, but reference config returned "
                    f"{'PASS' if actual else 'FAIL'}. Data: {vector.data!r}"
                )

    return errors


def filter_test_cases(
    test_cases: Iterable[TestCase],
    name: Optional[str] = None,
    config_names: Optional[Sequence[str]] = None,
) -> list[TestCase]:
    """
    Select test cases by (case-insensitive) name substring and config names.

    Cases left without any config are dropped.
    """
    selected = []
    wanted = {c.lower() for c in config_names} if config_names else None

    for test_case in test_cases:
        if name and name.lower() not in test_case.name.lower():
            continue
        if wanted is None:
            selected.append(test_case)
            continue
        configs = [c for c in test_case.configs if c.name.lower() in wanted]
        if configs:
            selected.append(test_case.model_copy(update={"configs": configs}))

    return selected
