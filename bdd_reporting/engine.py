"""Artifact writers for feature and run results.

Everything here is stateless: each function takes the result to render and
the directory to write into, so it is safe to call from many worker threads
at once as long as they target different file names.
"""

import json
import logging
import xml.etree.ElementTree as ET
from collections.abc import Sequence
from pathlib import Path

from bdd_reporting.models.result import FeatureResult, Results, StepError, StepResult

log = logging.getLogger(__name__)

MILLION = 1_000_000
BILLION = 1_000_000_000

STATS_FILE_NAME = "results-json.txt"
STEP_LINE_WIDTH = 75


def seconds_of(nanos: int) -> float:
    """Convert nanoseconds to seconds."""
    return nanos / BILLION


def millis_of(nanos: int) -> float:
    """Convert nanoseconds to milliseconds."""
    return nanos / MILLION


def format_seconds(nanos: int) -> str:
    """Format a duration as seconds with at most six fractional digits.

    Trailing zeros are dropped and the decimal separator is always ``.``.
    """
    text = f"{seconds_of(nanos):.6f}".rstrip("0").rstrip(".")
    return text or "0"


def split_error_detail(message: str | None) -> tuple[str, str]:
    """Split an error message into a one-line title and the remaining detail."""
    if message is None:
        return "", ""
    full_message = message.replace("\r", "").replace("\t", "  ")
    title, _, detail = full_message.partition("\n")
    return title.strip(), detail.strip()


def write_feature_json(
    target_dir: str | Path, result: FeatureResult, file_name: str | None = None
) -> Path:
    """Write the feature result as a one-element JSON array.

    Args:
        target_dir: Directory the artifact is written into
        result: Finished feature result
        file_name: Overrides the default ``<qualified name>.json``

    Returns:
        Path of the written file

    """
    if file_name is None:
        file_name = f"{result.qualified_name}.json"
    path = _prepare(target_dir) / file_name
    path.write_text(json.dumps([result.to_map()], indent=2), encoding="utf-8")
    log.debug("Wrote feature json: %s", path)
    return path


def write_feature_xml(
    target_dir: str | Path, result: FeatureResult, file_name: str | None = None
) -> Path:
    """Write the feature result as a JUnit ``testsuite`` document.

    Each scenario becomes a ``testcase`` whose body lists every step with its
    status. Failed scenarios carry a ``failure`` element holding the message
    of the first failing step, passing ones a ``system-out`` element.

    Args:
        target_dir: Directory the artifact is written into
        result: Finished feature result
        file_name: Overrides the default ``<qualified name>.xml``

    Returns:
        Path of the written file

    """
    root = ET.Element("testsuite")
    root.set("name", result.display_uri)
    root.set("skipped", "0")

    test_count = 0
    failure_count = 0
    total_duration = 0
    for scenario_result in result.scenario_results:
        test_count += 1
        total_duration += scenario_result.duration_nanos
        if scenario_result.failed:
            failure_count += 1

        name = scenario_result.scenario.name
        if not name or not name.strip():
            name = str(test_count)

        test_case = ET.SubElement(root, "testcase")
        test_case.set("classname", result.qualified_name)
        test_case.set("name", name)
        test_case.set("time", format_seconds(scenario_result.duration_nanos))

        text, error = render_steps(scenario_result.step_results)
        if error is not None:
            holder = ET.SubElement(test_case, "failure")
            holder.set("message", error.message or "")
        else:
            holder = ET.SubElement(test_case, "system-out")
        holder.text = text

    root.set("tests", str(test_count))
    root.set("failures", str(failure_count))
    root.set("time", format_seconds(total_duration))

    if file_name is None:
        file_name = f"{result.qualified_name}.xml"
    path = _prepare(target_dir) / file_name
    tree = ET.ElementTree(root)
    ET.indent(tree)
    tree.write(path, encoding="utf-8", xml_declaration=True)
    log.debug("Wrote feature xml: %s", path)
    return path


def render_steps(step_results: Sequence[StepResult]) -> tuple[str, StepError | None]:
    """Render one dotted status line per step.

    Returns:
        The rendered text and the error of the first failing step, if any

    """
    parts: list[str] = []
    first_error: StepError | None = None
    for step_result in step_results:
        line = f"{step_result.step.prefix} {step_result.step.text} "
        line += "." * max(1, STEP_LINE_WIDTH - len(line))
        parts.append(f"{line} {step_result.status}\n")
        if step_result.failed:
            error = step_result.error or StepError(message=None)
            if first_error is None:
                first_error = error
            trace = error.stack_trace or error.message or ""
            # XML parsers fold a raw \r in text content into \n.
            trace = trace.replace("\r\n", "\n").replace("\r", "\n")
            parts.append(f"\nStack Trace:\n{trace}\n")
    return "".join(parts), first_error


def write_run_stats(target_dir: str | Path, results: Results) -> Path:
    """Overwrite the run-wide statistics snapshot."""
    path = _prepare(target_dir) / STATS_FILE_NAME
    path.write_text(json.dumps(results.to_map(), indent=2), encoding="utf-8")
    log.debug("Wrote run stats: %s", path)
    return path


def _prepare(target_dir: str | Path) -> Path:
    directory = Path(target_dir)
    directory.mkdir(parents=True, exist_ok=True)
    return directory
