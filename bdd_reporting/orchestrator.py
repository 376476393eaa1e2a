"""Report orchestrator that feeds finished feature results through a hook."""

import logging
from collections.abc import Sequence
from concurrent.futures import Future, ThreadPoolExecutor, wait
from dataclasses import dataclass, field
from pathlib import Path

from bdd_reporting import engine
from bdd_reporting.hooks.base import (
    FeatureContext,
    RuntimeHook,
    ScenarioContext,
    SuiteContext,
)
from bdd_reporting.models.result import FeatureResult, Results

log = logging.getLogger(__name__)


@dataclass(frozen=True, kw_only=True)
class ReportRun:
    """Outcome of one reporting run."""

    results: Results
    failed_features: list[str] = field(default_factory=list)

    @property
    def has_failures(self) -> bool:
        """True when a scenario failed or a feature could not be reported."""
        return bool(self.results.scenarios_failed or self.failed_features)


@dataclass(frozen=True, kw_only=True)
class ReportOrchestrator:
    """Replays feature results through a hook on a pool of worker threads.

    Each top-level feature is driven through the full callback sequence and
    then written out as JSON and JUnit XML, the same way a suite reports a
    feature once it is done. The final stats snapshot is written after the
    suite callbacks.
    """

    hook: RuntimeHook
    output_dir: Path
    threads: int = 1

    def run(self, feature_results: Sequence[FeatureResult]) -> ReportRun:
        """Report all features and return the run outcome.

        Args:
            feature_results: Finished feature results, in suite order

        Returns:
            Run statistics accumulated by the hook and the qualified names
            of features whose reporting raised

        """
        results = Results(threads=self.threads)
        suite = SuiteContext(results=results)
        self.hook.before_suite(suite)

        log.info(
            "Reporting %d feature(s) on %d thread(s)...",
            len(feature_results),
            self.threads,
        )
        with ThreadPoolExecutor(max_workers=self.threads) as pool:
            futures = {
                pool.submit(self._report_feature, feature, results): feature
                for feature in feature_results
            }
            wait(futures)

        failed_features = self._process_futures(futures)
        results.stop()
        self.hook.after_suite(suite)
        engine.write_run_stats(self.output_dir, results)
        log.info("Reporting completed")
        return ReportRun(results=results, failed_features=failed_features)

    def _process_futures(self, futures: dict[Future[None], FeatureResult]) -> list[str]:
        """Log features whose reporting raised and return their names."""
        failed: list[str] = []
        for future, feature_result in futures.items():
            if (error := future.exception()) is not None:
                log.error(
                    "Reporting failed for feature %s: %s",
                    feature_result.qualified_name,
                    error,
                    exc_info=error,
                )
                failed.append(feature_result.qualified_name)
        return failed

    def _report_feature(self, feature_result: FeatureResult, results: Results) -> None:
        ctx = FeatureContext.of(feature_result, results)
        if not self.hook.before_feature(ctx):
            log.info("Feature skipped by hook: %s", feature_result.qualified_name)
            return

        for scenario_result in feature_result.scenario_results:
            scenario_ctx = ScenarioContext(
                feature=feature_result.feature,
                result=scenario_result,
                depth=ctx.depth,
            )
            if not self.hook.before_scenario(scenario_ctx):
                continue
            for step_result in scenario_result.step_results:
                if not self.hook.before_step(step_result.step, scenario_ctx):
                    break
                self.hook.after_step(step_result, scenario_ctx)
            self.hook.after_scenario(scenario_ctx)

        self.hook.after_feature(ctx)

        if ctx.depth == 0 and not feature_result.is_empty:
            engine.write_feature_json(self.output_dir, feature_result)
            engine.write_feature_xml(self.output_dir, feature_result)
        log.info(
            "Feature reported: %s passed=%d failed=%d",
            feature_result.qualified_name,
            feature_result.passed_count,
            feature_result.failed_count,
        )
