"""Runtime hooks."""

from bdd_reporting.hooks.base import (
    FeatureContext,
    RuntimeHook,
    ScenarioContext,
    SuiteContext,
)
from bdd_reporting.hooks.reporting import ReportingHook

__all__ = [
    "FeatureContext",
    "ReportingHook",
    "RuntimeHook",
    "ScenarioContext",
    "SuiteContext",
]
