"""CLI entry point for regenerating reports from feature result artifacts."""

import argparse
import json
import logging
import sys
from collections.abc import Sequence
from pathlib import Path

from bdd_reporting.config import ReportConfig
from bdd_reporting.hooks.reporting import ReportingHook
from bdd_reporting.loading import load_feature_results
from bdd_reporting.models.result import FeatureResult, Results
from bdd_reporting.orchestrator import ReportOrchestrator

STATUS_SYMBOLS = {
    "passed": "✅",
    "failed": "❌",
}


def log_results_summary(
    log: logging.Logger, feature_results: Sequence[FeatureResult]
) -> None:
    """Log a formatted summary of feature and scenario outcomes."""
    log.info("=" * 80)
    log.info("Feature Results Summary:")
    log.info("=" * 80)

    for feature_result in feature_results:
        status = "failed" if feature_result.is_failed else "passed"
        log.info(
            "%s %s: %s (%d passed, %d failed)",
            STATUS_SYMBOLS[status],
            feature_result.qualified_name,
            status,
            feature_result.passed_count,
            feature_result.failed_count,
        )
        for scenario_result in feature_result.scenario_results:
            if scenario_result.failed and scenario_result.error is not None:
                log.info(
                    "  %s: %s",
                    scenario_result.scenario.name_for_report,
                    scenario_result.error.message,
                )


def positive_int(value: str) -> int:
    """Parse a strictly positive integer argument."""
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid int value: '{value}'") from None
    if number < 1:
        raise argparse.ArgumentTypeError(f"must be at least 1, got {number}")
    return number


def run(input_dir: Path, config_json: str = "{}", threads: int = 1) -> int:
    """Regenerate reports and return exit code."""
    log = logging.getLogger("bdd_reporting")

    config = ReportConfig(**json.loads(config_json))
    log.info("Loading feature results from %s", input_dir)
    feature_results = load_feature_results(input_dir)

    if not feature_results:
        log.info("No feature results found")
        print(json.dumps(Results().to_map(), indent=2))
        return 0

    hook = ReportingHook(config)
    orchestrator = ReportOrchestrator(
        hook=hook, output_dir=config.output_dir, threads=threads
    )
    report = orchestrator.run(feature_results)

    log_results_summary(log, feature_results)
    for qualified_name in report.failed_features:
        log.error("Reports incomplete for feature %s", qualified_name)
    print(json.dumps(report.results.to_map(), indent=2))

    return 1 if report.has_failures else 0


def main() -> None:
    """CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Generate JUnit, JSON and HTML reports from BDD feature results"
    )
    parser.add_argument(
        "--input",
        type=Path,
        required=True,
        help="Directory holding feature result JSON files",
    )
    parser.add_argument(
        "--config",
        default="{}",
        help='JSON report configuration, e.g. {"output_dir": "out", "teamcity": true}',
    )
    parser.add_argument(
        "--threads",
        type=positive_int,
        default=1,
        help="Number of worker threads used to write reports",
    )

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )

    sys.exit(run(input_dir=args.input, config_json=args.config, threads=args.threads))


if __name__ == "__main__":  # pragma: no cover
    main()
