"""Loading of feature results from previously written JSON artifacts."""

import json
import logging
from collections.abc import Sequence
from pathlib import Path

from bdd_reporting.models.result import FeatureResult

log = logging.getLogger(__name__)


class ResultLoadError(Exception):
    """Raised when a feature result artifact cannot be parsed."""


def load_feature_file(path: Path) -> Sequence[FeatureResult]:
    """Load every feature result stored in one JSON artifact.

    Args:
        path: File holding a JSON array of feature result maps

    Returns:
        The parsed feature results, in file order

    Raises:
        ResultLoadError: If the file is not valid JSON or a map is malformed

    """
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise ResultLoadError(f"Invalid JSON in {path}: {e}") from e

    if not isinstance(data, list):
        raise ResultLoadError(f"Expected a JSON array in {path}")

    try:
        return [FeatureResult.from_map(item) for item in data]
    except (KeyError, TypeError, ValueError) as e:
        raise ResultLoadError(f"Malformed feature result in {path}: {e!r}") from e


def load_feature_results(results_dir: Path) -> Sequence[FeatureResult]:
    """Load the feature results of every ``*.json`` artifact in a directory."""
    results: list[FeatureResult] = []
    for path in sorted(results_dir.glob("*.json")):
        loaded = load_feature_file(path)
        log.debug("Loaded %d feature result(s) from %s", len(loaded), path)
        results.extend(loaded)
    return results
