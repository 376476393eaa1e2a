"""Runtime hook interface and the contexts passed to each callback."""

from dataclasses import dataclass

from bdd_reporting.models.definition import Feature, Step
from bdd_reporting.models.result import (
    FeatureResult,
    Results,
    ScenarioResult,
    StepResult,
)


@dataclass(frozen=True, kw_only=True)
class SuiteContext:
    """Context for suite-level callbacks."""

    results: Results


@dataclass(frozen=True, kw_only=True)
class FeatureContext:
    """Context for feature-level callbacks.

    ``depth`` is 0 for features run by the suite and greater than 0 for
    features called from another scenario's steps.
    """

    result: FeatureResult
    results: Results
    depth: int

    @classmethod
    def of(cls, result: FeatureResult, results: Results) -> "FeatureContext":
        """Build a context whose depth is the result's caller depth."""
        return cls(result=result, results=results, depth=result.caller_depth)


@dataclass(frozen=True, kw_only=True)
class ScenarioContext:
    """Context for scenario and step callbacks."""

    feature: Feature
    result: ScenarioResult
    depth: int


class RuntimeHook:
    """Observer invoked by the runtime at each lifecycle point.

    Every callback is a no-op by default so implementations only override the
    points they care about. ``before_*`` callbacks return whether execution
    should continue. Callbacks may be invoked concurrently from several
    worker threads.
    """

    def before_suite(self, ctx: SuiteContext) -> None:
        pass

    def after_suite(self, ctx: SuiteContext) -> None:
        pass

    def before_feature(self, ctx: FeatureContext) -> bool:
        return True

    def after_feature(self, ctx: FeatureContext) -> None:
        pass

    def before_scenario(self, ctx: ScenarioContext) -> bool:
        return True

    def after_scenario(self, ctx: ScenarioContext) -> None:
        pass

    def before_step(self, step: Step, ctx: ScenarioContext) -> bool:
        return True

    def after_step(self, result: StepResult, ctx: ScenarioContext) -> None:
        pass
