#!/usr/bin/env python3
"""
Command-line interface for rule-bench.

Usage:
    rule-bench run --model openai/gpt-4o-mini --mode toolBased
    rule-bench run --model-list small --scoring tests --case user
    rule-bench validate-cases
    rule-bench check schema.json '{"name": "Ann", "age": 30}'
"""

import argparse
import json
import logging
import sys
from datetime import datetime
from pathlib import Path


def _load_json_arg(value: str):
    """Parse a JSON literal, or read it from a file path."""
    try:
        return json.loads(value)
    except json.JSONDecodeError:
        with open(value) as f:
            return json.load(f)


def cmd_run(args):
    """Run the benchmark against one or more models."""
    from dotenv import load_dotenv

    from .config_loader import load_config
    from .fixtures import TEST_CASES
    from .oracle import OpenRouterOracle
    from .runner import filter_test_cases, run_benchmark
    from .scoring import generate_summary

    load_dotenv()
    config = load_config(args.config)
    benchmark = config.benchmark

    if args.model_list:
        benchmark = benchmark.model_copy(update={"models": [], "model_list": args.model_list})
        if args.model_list not in benchmark.model_lists:
            available = ", ".join(sorted(benchmark.model_lists)) or "none"
            print(f"❌ Unknown model list: {args.model_list} (available: {available})")
            sys.exit(1)
    models = args.model or benchmark.resolve_models()
    modes = args.mode or [m.value for m in benchmark.modes]
    scoring = args.scoring or benchmark.scoring.value
    max_retries = benchmark.max_retries if args.max_retries is None else args.max_retries
    share_reference = args.share_reference or benchmark.share_reference
    if max_retries < 0:
        print(f"❌ --max-retries must be non-negative, got {max_retries}")
        sys.exit(1)

    test_cases = filter_test_cases(TEST_CASES, args.case, args.config_name)
    if not test_cases:
        print("❌ No test cases match the given filters!")
        sys.exit(1)

    def oracle_factory(model):
        return OpenRouterOracle(
            model=model,
            base_url=config.oracle.base_url,
            api_key_env_var=config.oracle.api_key_env_var,
            timeout=config.oracle.timeout,
        )

    total_configs = sum(len(tc.configs) for tc in test_cases)
    print(f"🚀 Running {total_configs} case configs x {len(models)} models x {len(modes)} modes")
    print(f"   Models: {', '.join(models)}")
    print(f"   Modes: {', '.join(modes)}")
    print(f"   Max retries: {max_retries} | Scoring: {scoring}")

    try:
        results = run_benchmark(
            test_cases,
            models,
            modes,
            oracle_factory,
            max_retries=max_retries,
            max_workers=benchmark.max_workers,
            share_reference=share_reference,
            show_progress=not args.quiet,
        )
    except ValueError as e:
        print(f"❌ {e}")
        sys.exit(1)

    summary = generate_summary(results, scoring)
    print()
    print(summary.render())

    output_dir = Path(args.output or config.reporting.output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    report_path = output_dir / f"report_{timestamp}.json"
    with open(report_path, "w") as f:
        json.dump(summary.to_dict(include_debug=config.reporting.save_debug), f, indent=2)
    print(f"\n📄 Report saved to {report_path}")

    sys.exit(0 if summary.all_passed else 1)


def cmd_validate_cases(args):
    """Check every fixture against its own reference configs."""
    from .fixtures import TEST_CASES
    from .meta_schema import validate_shape
    from .runner import filter_test_cases, validate_test_case

    test_cases = filter_test_cases(TEST_CASES, args.case)
    failures = 0

    for test_case in test_cases:
        errors = []
        for config in test_case.configs:
            shape = validate_shape(config.referenceConfig, allow_custom=True)
            if not shape.valid:
                errors.append(f'Reference config "{test_case.name} - {config.name}" is malformed: {shape.error}')
        errors.extend(validate_test_case(test_case))

        vectors = sum(len(c.testData) for c in test_case.configs)
        if errors:
            failures += 1
            print(f"❌ {test_case.name} ({len(test_case.configs)} configs, {vectors} vectors)")
            for error in errors:
                print(f"   - {error}")
        else:
            print(f"✅ {test_case.name} ({len(test_case.configs)} configs, {vectors} vectors)")

    if failures:
        print(f"\n❌ {failures}/{len(test_cases)} test cases are inconsistent")
        sys.exit(1)
    print(f"\n✅ All {len(test_cases)} test cases are consistent")


def cmd_check(args):
    """Check an object against a rule schema."""
    from .meta_schema import validate_shape
    from .rules import RuleChecker

    with open(args.schema) as f:
        schema = json.load(f)

    shape = validate_shape(schema)
    if not shape.valid:
        print(f"❌ Malformed schema {args.schema}:")
        for issue in shape.issues:
            print(f"   - {issue}")
        sys.exit(1)

    try:
        data = _load_json_arg(args.data)
    except (json.JSONDecodeError, OSError) as e:
        print(f"❌ Could not read data: {e}")
        sys.exit(1)

    violations = RuleChecker(schema).explain(data)
    if not violations:
        print("✅ PASS")
        return

    print("❌ FAIL")
    for v in violations:
        print(f"   {v.field or 'root'}: {v.reason}")
    sys.exit(1)


def main():
    parser = argparse.ArgumentParser(
        description="rule-bench - Benchmark LLMs at writing declarative validation rules"
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Show debug logging")
    subparsers = parser.add_subparsers(dest="command", required=True)

    # Run command
    run_parser = subparsers.add_parser("run", help="Run the benchmark")
    run_parser.add_argument("--config", "-c", default="config/config.yaml", help="Path to config file")
    run_parser.add_argument("--model", "-m", action="append", help="Model to test (repeatable)")
    run_parser.add_argument("--model-list", help="Named model list from the config")
    run_parser.add_argument("--mode", action="append", choices=["promptBased", "toolBased"], help="Mode to test (repeatable)")
    run_parser.add_argument("--case", help="Only cases whose name contains this")
    run_parser.add_argument("--config-name", action="append", help="Only these case configs (repeatable)")
    run_parser.add_argument("--scoring", choices=["cases", "tests"], help="Unit of difficulty")
    run_parser.add_argument("--max-retries", type=int, help="Retries after the first attempt")
    run_parser.add_argument("--share-reference", action="store_true", help="Show the reference schema in feedback")
    run_parser.add_argument("--output", "-o", help="Output directory for the report")
    run_parser.add_argument("--quiet", "-q", action="store_true", help="Hide the progress bar")
    run_parser.set_defaults(func=cmd_run)

    # Validate-cases command
    validate_parser = subparsers.add_parser("validate-cases", help="Check fixtures against their reference configs")
    validate_parser.add_argument("--case", help="Only cases whose name contains this")
    validate_parser.set_defaults(func=cmd_validate_cases)

    # Check command
    check_parser = subparsers.add_parser("check", help="Check an object against a rule schema")
    check_parser.add_argument("schema", help="Path to rule schema (JSON)")
    check_parser.add_argument("data", help="Object as a JSON literal or a path to a JSON file")
    check_parser.set_defaults(func=cmd_check)

    args = parser.parse_args()
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    args.func(args)


if __name__ == "__main__":
    main()
