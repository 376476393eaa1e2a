"""HTML report collaborator used by the reporting hook.

The hook only needs three operations: persist one feature's page, add a
feature to the run summary, and persist the summary. ``HtmlReports`` is that
contract; ``BasicHtmlReports`` is a minimal implementation producing plain
tables.
"""

import html
import logging
import threading
from pathlib import Path
from typing import Protocol

from bdd_reporting.engine import format_seconds
from bdd_reporting.models.result import FeatureResult

log = logging.getLogger(__name__)

SUMMARY_FILE_NAME = "summary.html"


class HtmlReports(Protocol):
    """Protocol for the HTML report collaborator."""

    def save_feature_result(self, target_dir: Path, result: FeatureResult) -> Path:
        """Persist the per-feature page and return its path."""

    def add_feature_result(self, result: FeatureResult) -> None:
        """Accumulate a finished feature into the run summary."""

    def save_summary(self, target_dir: Path) -> Path:
        """Persist the accumulated summary and return its path."""


class BasicHtmlReports:
    """Thread-safe HTML reports with one page per feature and a summary index."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._rows: list[tuple[str, str, int, int, str]] = []

    def save_feature_result(self, target_dir: Path, result: FeatureResult) -> Path:
        rows = []
        for scenario_result in result.scenario_results:
            status = "failed" if scenario_result.failed else "passed"
            steps = "".join(
                f"<li class='{sr.status}'>{html.escape(sr.step.prefix)} "
                f"{html.escape(sr.step.text)} <em>{sr.status}</em></li>"
                for sr in scenario_result.step_results
            )
            rows.append(
                f"<section class='{status}'>"
                f"<h2>{html.escape(scenario_result.scenario.name_for_report)}</h2>"
                f"<ol>{steps}</ol></section>"
            )
        title = html.escape(result.feature.name_for_report)
        body = f"<h1>{title}</h1>{''.join(rows)}"

        target_dir.mkdir(parents=True, exist_ok=True)
        path = target_dir / f"{result.qualified_name}.html"
        path.write_text(_page(title, body), encoding="utf-8")
        log.debug("Wrote feature html: %s", path)
        return path

    def add_feature_result(self, result: FeatureResult) -> None:
        row = (
            result.qualified_name,
            result.feature.name_for_report,
            result.passed_count,
            result.failed_count,
            format_seconds(result.duration_nanos),
        )
        with self._lock:
            self._rows.append(row)

    def save_summary(self, target_dir: Path) -> Path:
        with self._lock:
            rows = sorted(self._rows)
        cells = "".join(
            f"<tr><td><a href='{html.escape(name)}.html'>{html.escape(title)}</a></td>"
            f"<td>{passed}</td><td>{failed}</td><td>{seconds}</td></tr>"
            for name, title, passed, failed, seconds in rows
        )
        body = (
            "<h1>Summary</h1><table><tr><th>Feature</th><th>Passed</th>"
            f"<th>Failed</th><th>Time (s)</th></tr>{cells}</table>"
        )

        target_dir.mkdir(parents=True, exist_ok=True)
        path = target_dir / SUMMARY_FILE_NAME
        path.write_text(_page("Summary", body), encoding="utf-8")
        log.info("Wrote html summary: %s", path)
        return path


def _page(title: str, body: str) -> str:
    return (
        "<!DOCTYPE html><html><head><meta charset='utf-8'>"
        f"<title>{title}</title></head><body>{body}</body></html>\n"
    )
