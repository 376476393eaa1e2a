"""Hook that turns lifecycle callbacks into reports and TeamCity messages."""

import logging
import threading

from bdd_reporting import engine, teamcity
from bdd_reporting.config import ReportConfig
from bdd_reporting.hooks.base import (
    FeatureContext,
    RuntimeHook,
    ScenarioContext,
    SuiteContext,
)
from bdd_reporting.html_report import BasicHtmlReports, HtmlReports

log = logging.getLogger(__name__)


class ReportingHook(RuntimeHook):
    """Reports top-level features and scenarios exactly once.

    One instance is shared by every worker thread of a run. Nested
    executions (``depth > 0``) are ignored. The run stats snapshot is
    guarded by a try-lock: a worker that finds another one writing skips
    its own write instead of waiting.
    """

    def __init__(
        self, config: ReportConfig, html_reports: HtmlReports | None = None
    ) -> None:
        self.config = config
        self._stats_lock = threading.Lock()
        self.summary: HtmlReports | None = None
        if config.html_report:
            if html_reports is None:
                html_reports = BasicHtmlReports()
            self.summary = html_reports
        if config.teamcity:
            teamcity.emit(teamcity.entered_the_matrix(teamcity.current_time()))

    def after_suite(self, ctx: SuiteContext) -> None:
        if self.summary is not None:
            self.summary.save_summary(self.config.output_dir)

    def before_scenario(self, ctx: ScenarioContext) -> bool:
        if ctx.depth == 0 and self.config.teamcity:
            scenario = ctx.result.scenario
            teamcity.emit(
                teamcity.test_started(
                    teamcity.current_time(),
                    teamcity.location_hint(ctx.feature.path, scenario.line),
                    scenario.name_for_report,
                )
            )
        return True

    def after_scenario(self, ctx: ScenarioContext) -> None:
        if ctx.depth > 0 or not self.config.teamcity:
            return
        name = ctx.result.scenario.name_for_report
        if ctx.result.failed:
            error = ctx.result.error
            title, detail = engine.split_error_detail(error.message if error else None)
            teamcity.emit(
                teamcity.test_failed(teamcity.current_time(), detail, title, name)
            )
        duration = int(engine.millis_of(ctx.result.duration_nanos))
        teamcity.emit(teamcity.test_finished(teamcity.current_time(), duration, name))

    def before_feature(self, ctx: FeatureContext) -> bool:
        if ctx.depth == 0 and self.config.teamcity:
            feature = ctx.result.feature
            teamcity.emit(
                teamcity.test_suite_started(
                    teamcity.current_time(),
                    teamcity.location_hint(feature.path, feature.line),
                    feature.name_for_report,
                )
            )
        return True

    def after_feature(self, ctx: FeatureContext) -> None:
        if ctx.depth > 0:
            return
        result = ctx.result
        if self.config.teamcity:
            teamcity.emit(
                teamcity.test_suite_finished(
                    teamcity.current_time(), result.feature.name_for_report
                )
            )
        # An empty feature only counts as skipped.
        ctx.results.add_feature_result(result)
        if result.scenario_count == 0:
            return

        if self.summary is not None:
            self.summary.save_feature_result(self.config.output_dir, result)
            self.summary.add_feature_result(result)

        if not self._stats_lock.acquire(blocking=False):
            log.debug(
                "Run stats busy on another worker, skipping write for %s",
                result.qualified_name,
            )
            return
        try:
            engine.write_run_stats(self.config.output_dir, ctx.results)
        finally:
            self._stats_lock.release()
