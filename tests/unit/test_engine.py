"""Tests for report artifact writers."""

import json
import xml.etree.ElementTree as ET
from pathlib import Path

import pytest

from bdd_reporting.engine import (
    STATS_FILE_NAME,
    format_seconds,
    millis_of,
    render_steps,
    seconds_of,
    split_error_detail,
    write_feature_json,
    write_feature_xml,
    write_run_stats,
)
from bdd_reporting.models.definition import Scenario, Step
from bdd_reporting.models.result import (
    FeatureResult,
    Results,
    ScenarioResult,
    StepError,
    StepResult,
)
from bdd_reporting.testing.factories import (
    FeatureResultFactory,
    ScenarioResultFactory,
    StepResultFactory,
    failed_step,
)


def _scenario(
    name: str | None, *steps: StepResult, duration_nanos: int = 0
) -> ScenarioResult:
    return ScenarioResult(
        scenario=Scenario(name=name, line=3),
        step_results=list(steps),
        duration_nanos=duration_nanos,
    )


@pytest.mark.parametrize("nanos", [0, 1, 999, 1_500_000_000, 123_456_789_012])
def test_unit_conversions(nanos: int) -> None:
    """Converts nanoseconds by plain division."""
    assert seconds_of(nanos) == nanos / 1e9
    assert millis_of(nanos) == nanos / 1e6


@pytest.mark.parametrize(
    ("nanos", "expected"),
    [
        (0, "0"),
        (123, "0"),
        (1_500_000_000, "1.5"),
        (2_000_000_000, "2"),
        (1_234_567, "0.001235"),
        (12_345_678_901_234, "12345.678901"),
    ],
)
def test_format_seconds(nanos: int, expected: str) -> None:
    """Formats with at most six fractional digits and a dot separator."""
    assert format_seconds(nanos) == expected


class TestSplitErrorDetail:
    """Tests for split_error_detail."""

    def test_splits_on_first_newline(self) -> None:
        """Uses the first line as title and the rest as detail."""
        assert split_error_detail("Oops\nline1\nline2") == ("Oops", "line1\nline2")

    def test_single_line(self) -> None:
        """Returns empty detail when there is no newline."""
        assert split_error_detail("  just this  ") == ("just this", "")

    def test_strips_carriage_returns_and_tabs(self) -> None:
        """Drops carriage returns and expands tabs to two spaces."""
        assert split_error_detail("title\r\n\tat foo\r\n\tat bar") == (
            "title",
            "at foo\n  at bar",
        )

    def test_none_message(self) -> None:
        """Treats a missing message as empty."""
        assert split_error_detail(None) == ("", "")


class TestRenderSteps:
    """Tests for the dotted step lines."""

    def test_pads_short_line_to_width(self) -> None:
        """Pads with dots until the line reaches 75 characters."""
        step = StepResult(step=Step(prefix="Given", text="a user"), status="passed")

        text, error = render_steps([step])

        assert text == "Given a user " + "." * 62 + " passed\n"
        assert error is None

    def test_long_line_gets_single_dot(self) -> None:
        """Always appends at least one dot."""
        long_text = "x" * 100
        step = StepResult(step=Step(prefix="When", text=long_text), status="skipped")

        text, _ = render_steps([step])

        assert text == f"When {long_text} . skipped\n"

    def test_normalizes_carriage_returns(self) -> None:
        """Turns CRLF and lone CR in a stack trace into plain newlines."""
        text, _ = render_steps([failed_step("Oops", "a\r\nb\rc")])

        assert text.endswith("\nStack Trace:\na\nb\nc\n")

    def test_appends_stack_trace_and_keeps_rendering(self) -> None:
        """Renders every step even after a failure and returns the first error."""
        steps = [
            StepResult(step=Step(prefix="Given", text="one"), status="passed"),
            StepResult(
                step=Step(prefix="When", text="two"),
                status="failed",
                error=StepError(message="first", stack_trace="Trace one"),
            ),
            StepResult(
                step=Step(prefix="Then", text="three"),
                status="failed",
                error=StepError(message="second", stack_trace="Trace two"),
            ),
        ]

        text, error = render_steps(steps)

        lines = text.split("\n")
        assert lines[0].startswith("Given one ...")
        assert lines[0].endswith(" passed")
        assert lines[1].endswith(" failed")
        assert "\nStack Trace:\nTrace one\n" in text
        assert "\nStack Trace:\nTrace two\n" in text
        assert text.index("Trace one") < text.index("Then three")
        assert error is not None
        assert error.message == "first"


class TestWriteFeatureJson:
    """Tests for write_feature_json."""

    def test_writes_single_element_array(self, tmp_path: Path) -> None:
        """Writes the feature map wrapped in a one-element array."""
        result = FeatureResultFactory.build(
            scenario_results=[ScenarioResultFactory.build()]
        )

        path = write_feature_json(tmp_path, result)

        assert path == tmp_path / f"{result.qualified_name}.json"
        data = json.loads(path.read_text())
        assert isinstance(data, list)
        assert len(data) == 1
        assert data[0]["packageQualifiedName"] == result.qualified_name
        assert data[0]["scenarioCount"] == 1

    def test_custom_file_name(self, tmp_path: Path) -> None:
        """Uses the given file name and creates the directory."""
        result = FeatureResultFactory.build()

        path = write_feature_json(tmp_path / "nested", result, "custom.json")

        assert path == tmp_path / "nested" / "custom.json"
        assert path.exists()


class TestWriteFeatureXml:
    """Tests for write_feature_xml."""

    def test_default_file_name(self, tmp_path: Path) -> None:
        """Names the file after the qualified name when none is given."""
        result = FeatureResultFactory.build(
            scenario_results=[ScenarioResultFactory.build()]
        )

        path = write_feature_xml(tmp_path, result, None)

        assert path.name == f"{result.qualified_name}.xml"
        assert path.exists()

    def test_suite_attributes(self, tmp_path: Path) -> None:
        """Counts tests and failures and sums the time of all scenarios."""
        result = FeatureResultFactory.build(
            scenario_results=[
                ScenarioResultFactory.build(duration_nanos=1_000_000_000),
                _scenario(
                    "broken", failed_step("boom"), duration_nanos=500_000_000
                ),
                ScenarioResultFactory.build(duration_nanos=250_000_000),
            ]
        )

        root = ET.parse(write_feature_xml(tmp_path, result)).getroot()

        assert root.tag == "testsuite"
        assert root.get("name") == result.display_uri
        assert root.get("skipped") == "0"
        assert root.get("tests") == "3"
        assert root.get("failures") == "1"
        assert root.get("time") == "1.75"
        assert len(root.findall("testcase")) == 3

    def test_testcases(self, tmp_path: Path) -> None:
        """Renders one testcase per scenario in order."""
        passing = _scenario(
            "first",
            StepResult(step=Step(prefix="Given", text="ok"), status="passed"),
            duration_nanos=1_234_567,
        )
        failing = _scenario(
            "second",
            failed_step("Oops\ndetail", "Error: Oops\n\tat step"),
            failed_step("later"),
        )
        result = FeatureResultFactory.build(scenario_results=[passing, failing])

        root = ET.parse(write_feature_xml(tmp_path, result)).getroot()
        first, second = root.findall("testcase")

        assert first.get("classname") == result.qualified_name
        assert first.get("name") == "first"
        assert first.get("time") == "0.001235"
        system_out = first.find("system-out")
        assert system_out is not None
        assert system_out.text is not None
        assert system_out.text.startswith("Given ok ...")
        assert first.find("failure") is None

        failure = second.find("failure")
        assert failure is not None
        assert failure.get("message") == "Oops\ndetail"
        assert failure.text is not None
        assert "Error: Oops\n\tat step" in failure.text
        assert failure.text.count(" failed\n") == 2

    def test_step_lines_are_per_scenario(self, tmp_path: Path) -> None:
        """Does not carry step lines over from earlier scenarios."""
        result = FeatureResultFactory.build(
            scenario_results=[
                _scenario(
                    "a", StepResult(step=Step(prefix="*", text="one"), status="passed")
                ),
                _scenario(
                    "b", StepResult(step=Step(prefix="*", text="two"), status="passed")
                ),
            ]
        )

        root = ET.parse(write_feature_xml(tmp_path, result)).getroot()
        second = root.findall("testcase")[1].find("system-out")

        assert second is not None
        assert second.text is not None
        assert "one" not in second.text
        assert "two" in second.text

    @pytest.mark.parametrize("name", [None, "", "   "])
    def test_blank_name_uses_ordinal(self, tmp_path: Path, name: str | None) -> None:
        """Falls back to the 1-based position for blank scenario names."""
        result = FeatureResultFactory.build(
            scenario_results=[ScenarioResultFactory.build(), _scenario(name)]
        )

        root = ET.parse(write_feature_xml(tmp_path, result)).getroot()

        assert root.findall("testcase")[1].get("name") == "2"

    def test_missing_error_message(self, tmp_path: Path) -> None:
        """Uses an empty failure message when the error has none."""
        step = StepResultFactory.build(
            status="failed", error=StepError(message=None, stack_trace="trace")
        )
        result = FeatureResultFactory.build(scenario_results=[_scenario("x", step)])

        root = ET.parse(write_feature_xml(tmp_path, result)).getroot()
        failure = root.find("testcase/failure")

        assert failure is not None
        assert failure.get("message") == ""

    def test_crlf_stack_trace(self, tmp_path: Path) -> None:
        """Keeps every line of a CRLF stack trace in the failure body."""
        step = failed_step("Oops", "Error: Oops\r\n\tat step\r\n")
        result = FeatureResultFactory.build(scenario_results=[_scenario("x", step)])

        path = write_feature_xml(tmp_path, result)
        failure = ET.parse(path).getroot().find("testcase/failure")

        assert failure is not None
        assert failure.text is not None
        assert "Stack Trace:\nError: Oops\n\tat step\n\n" in failure.text
        assert b"\r" not in path.read_bytes()

    def test_empty_feature(self, tmp_path: Path) -> None:
        """Writes an empty suite for a feature without scenarios."""
        result = FeatureResultFactory.build(scenario_results=[])

        root = ET.parse(write_feature_xml(tmp_path, result)).getroot()

        assert root.get("tests") == "0"
        assert root.get("failures") == "0"
        assert root.get("time") == "0"


def test_write_run_stats_overwrites(tmp_path: Path) -> None:
    """Replaces any previous stats snapshot."""
    (tmp_path / STATS_FILE_NAME).write_text("x" * 10_000)
    results = Results(threads=2)
    results.add_feature_result(
        FeatureResultFactory.build(scenario_results=[ScenarioResultFactory.build()])
    )

    path = write_run_stats(tmp_path, results)

    assert path == tmp_path / STATS_FILE_NAME
    data = json.loads(path.read_text())
    assert data["featuresPassed"] == 1
    assert data["scenariosPassed"] == 1
    assert data["threads"] == 2


def test_write_propagates_filesystem_errors(tmp_path: Path) -> None:
    """Lets filesystem failures reach the caller."""
    blocker = tmp_path / "file"
    blocker.write_text("")
    result: FeatureResult = FeatureResultFactory.build()

    with pytest.raises(OSError):
        write_feature_json(blocker, result)
