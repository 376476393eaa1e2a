"""Models for step, scenario, feature and run-wide execution results."""

import threading
import time
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Literal

from bdd_reporting.models.definition import Feature, Scenario, Step

StepStatus = Literal["passed", "failed", "skipped"]

RESULT_DATE_FORMAT = "%Y-%m-%d %I:%M:%S %p"


def nanos_to_millis(nanos: int) -> float:
    """Convert nanoseconds to fractional milliseconds."""
    return nanos / 1_000_000


@dataclass(frozen=True, kw_only=True)
class StepError:
    """Failure raised while executing a step."""

    message: str | None
    stack_trace: str = ""


@dataclass(frozen=True, kw_only=True)
class StepResult:
    """Outcome of a single executed step."""

    step: Step
    status: StepStatus
    duration_nanos: int = 0
    error: StepError | None = None

    @property
    def failed(self) -> bool:
        return self.status == "failed"

    def to_map(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "status": self.status,
            "nanos": self.duration_nanos,
            "millis": nanos_to_millis(self.duration_nanos),
        }
        if self.error is not None:
            result["errorMessage"] = self.error.message
            result["stackTrace"] = self.error.stack_trace
        return {
            "step": {
                "prefix": self.step.prefix,
                "text": self.step.text,
                "line": self.step.line,
            },
            "result": result,
        }

    @classmethod
    def from_map(cls, data: Mapping[str, Any]) -> "StepResult":
        result = data["result"]
        error = None
        if "errorMessage" in result or "stackTrace" in result:
            error = StepError(
                message=result.get("errorMessage"),
                stack_trace=result.get("stackTrace") or "",
            )
        return cls(
            step=Step(**data["step"]),
            status=result["status"],
            duration_nanos=result.get("nanos", 0),
            error=error,
        )


@dataclass(kw_only=True)
class ScenarioResult:
    """Outcome of a scenario, built up step by step while it runs."""

    scenario: Scenario
    step_results: list[StepResult] = field(default_factory=list)
    duration_nanos: int = 0

    def add_step_result(self, step_result: StepResult) -> None:
        """Append a finished step and account for its duration."""
        self.step_results.append(step_result)
        self.duration_nanos += step_result.duration_nanos

    @property
    def failed(self) -> bool:
        return any(sr.failed for sr in self.step_results)

    @property
    def error(self) -> StepError | None:
        """Error of the first failing step, if any."""
        for sr in self.step_results:
            if sr.failed:
                return sr.error or StepError(message=None)
        return None

    def to_map(self) -> dict[str, Any]:
        return {
            "name": self.scenario.name,
            "description": self.scenario.description,
            "line": self.scenario.line,
            "sectionIndex": self.scenario.section_index,
            "exampleIndex": self.scenario.example_index,
            "durationNanos": self.duration_nanos,
            "durationMillis": nanos_to_millis(self.duration_nanos),
            "failed": self.failed,
            "stepResults": [sr.to_map() for sr in self.step_results],
        }

    @classmethod
    def from_map(cls, data: Mapping[str, Any]) -> "ScenarioResult":
        return cls(
            scenario=Scenario(
                name=data.get("name"),
                description=data.get("description"),
                line=data.get("line", 0),
                section_index=data.get("sectionIndex", 0),
                example_index=data.get("exampleIndex", -1),
            ),
            step_results=[StepResult.from_map(s) for s in data.get("stepResults", [])],
            duration_nanos=data.get("durationNanos", 0),
        )


@dataclass(kw_only=True)
class FeatureResult:
    """Outcome of a feature run.

    ``caller_depth`` is 0 when the suite ran the feature directly and greater
    than 0 when another scenario called it. Only depth-0 results are
    reported.
    """

    feature: Feature
    caller_depth: int = 0
    scenario_results: list[ScenarioResult] = field(default_factory=list)
    result_date: datetime = field(default_factory=datetime.now)

    def add_scenario_result(self, scenario_result: ScenarioResult) -> None:
        self.scenario_results.append(scenario_result)

    @property
    def display_uri(self) -> str:
        return self.feature.display_uri

    @property
    def qualified_name(self) -> str:
        return self.feature.qualified_name

    @property
    def scenario_count(self) -> int:
        return len(self.scenario_results)

    @property
    def failed_count(self) -> int:
        return sum(1 for sr in self.scenario_results if sr.failed)

    @property
    def passed_count(self) -> int:
        return self.scenario_count - self.failed_count

    @property
    def is_failed(self) -> bool:
        return self.failed_count > 0

    @property
    def is_empty(self) -> bool:
        return not self.scenario_results

    @property
    def duration_nanos(self) -> int:
        return sum(sr.duration_nanos for sr in self.scenario_results)

    def to_map(self) -> dict[str, Any]:
        return {
            "name": self.feature.name,
            "description": self.feature.description,
            "path": str(self.feature.path),
            "relativePath": self.feature.display_uri,
            "packageQualifiedName": self.feature.qualified_name,
            "line": self.feature.line,
            "callDepth": self.caller_depth,
            "durationMillis": nanos_to_millis(self.duration_nanos),
            "passedCount": self.passed_count,
            "failedCount": self.failed_count,
            "scenarioCount": self.scenario_count,
            "resultDate": self.result_date.strftime(RESULT_DATE_FORMAT),
            "scenarioResults": [sr.to_map() for sr in self.scenario_results],
        }

    @classmethod
    def from_map(cls, data: Mapping[str, Any]) -> "FeatureResult":
        feature = Feature(
            path=Path(data["path"]),
            display_uri=data["relativePath"],
            qualified_name=data["packageQualifiedName"],
            name=data.get("name"),
            description=data.get("description"),
            line=data.get("line", 1),
        )
        result_date = datetime.now()
        if date_text := data.get("resultDate"):
            result_date = datetime.strptime(date_text, RESULT_DATE_FORMAT)
        return cls(
            feature=feature,
            caller_depth=data.get("callDepth", 0),
            scenario_results=[
                ScenarioResult.from_map(s) for s in data.get("scenarioResults", [])
            ],
            result_date=result_date,
        )


@dataclass(kw_only=True)
class Results:
    """Run-wide statistics across all top-level features.

    Worker threads add feature results concurrently, so accumulation and
    snapshotting share an internal lock.
    """

    threads: int = 1
    start_time: float = field(default_factory=time.time)
    end_time: float | None = None
    features_passed: int = 0
    features_failed: int = 0
    features_skipped: int = 0
    scenarios_passed: int = 0
    scenarios_failed: int = 0
    time_taken_nanos: int = 0
    _lock: threading.Lock = field(
        default_factory=threading.Lock, init=False, repr=False, compare=False
    )

    def add_feature_result(self, result: FeatureResult) -> None:
        """Fold a finished top-level feature into the run totals."""
        with self._lock:
            if result.is_empty:
                self.features_skipped += 1
                return
            if result.is_failed:
                self.features_failed += 1
            else:
                self.features_passed += 1
            self.scenarios_passed += result.passed_count
            self.scenarios_failed += result.failed_count
            self.time_taken_nanos += result.duration_nanos

    def stop(self) -> None:
        """Freeze the elapsed time at the end of the run."""
        self.end_time = time.time()

    @property
    def elapsed_millis(self) -> float:
        end = self.end_time if self.end_time is not None else time.time()
        return (end - self.start_time) * 1000

    @property
    def time_taken_millis(self) -> float:
        return nanos_to_millis(self.time_taken_nanos)

    @property
    def efficiency(self) -> float:
        """Summed scenario time relative to the wall-clock capacity of all threads."""
        capacity = self.elapsed_millis * self.threads
        if capacity <= 0:
            return 0.0
        return self.time_taken_millis / capacity

    def to_map(self) -> dict[str, Any]:
        with self._lock:
            return {
                "threads": self.threads,
                "featuresPassed": self.features_passed,
                "featuresFailed": self.features_failed,
                "featuresSkipped": self.features_skipped,
                "scenariosPassed": self.scenarios_passed,
                "scenariosFailed": self.scenarios_failed,
                "elapsedTime": self.elapsed_millis,
                "totalTime": self.time_taken_millis,
                "efficiency": self.efficiency,
                "resultDate": datetime.fromtimestamp(self.start_time).strftime(
                    RESULT_DATE_FORMAT
                ),
            }
