"""TeamCity service message formatting.

CI servers and IDEs read these lines from standard output to render live test
progress. Every builder is a pure function of its arguments; the timestamp is
taken by the caller.
"""

import sys
from datetime import datetime
from pathlib import Path

TEAMCITY_PREFIX = "##teamcity"
TEMPLATE_TEST_STARTED = (
    TEAMCITY_PREFIX
    + "[testStarted timestamp='{timestamp}' locationHint='{location}'"
    + " captureStandardOutput='true' name='{name}']"
)
TEMPLATE_TEST_FAILED = (
    TEAMCITY_PREFIX
    + "[testFailed timestamp='{timestamp}' details='{details}' message='{message}'"
    + " name='{name}' {extra}]"
)
TEMPLATE_TEST_FINISHED = (
    TEAMCITY_PREFIX
    + "[testFinished timestamp='{timestamp}' duration='{duration}' name='{name}']"
)
TEMPLATE_ENTER_THE_MATRIX = (
    TEAMCITY_PREFIX + "[enteredTheMatrix timestamp='{timestamp}']"
)
TEMPLATE_TEST_SUITE_STARTED = (
    TEAMCITY_PREFIX
    + "[testSuiteStarted timestamp='{timestamp}' locationHint='file://{location}'"
    + " name='{name}']"
)
TEMPLATE_TEST_SUITE_FINISHED = (
    TEAMCITY_PREFIX + "[testSuiteFinished timestamp='{timestamp}' name='{name}']"
)

# Order matters: "|" must be escaped before the sequences that introduce it.
ESCAPES = (
    ("|", "||"),
    ("\n", "|n"),
    ("\r", "|r"),
    ("'", "|'"),
    ("[", "|["),
    ("]", "|]"),
)


def escape(source: str | None) -> str:
    """Escape free text for use inside a service message attribute."""
    if source is None:
        return ""
    for old, new in ESCAPES:
        source = source.replace(old, new)
    return source


def format_timestamp(moment: datetime) -> str:
    """Format as ``yyyy-MM-dd'T'hh:mm:ss.SSSZ`` on a 12-hour clock.

    Example: ``2024-03-05T02:07:09.042+0100``.
    """
    moment = moment.astimezone()
    millis = moment.microsecond // 1000
    return f"{moment:%Y-%m-%dT%I:%M:%S}.{millis:03d}{moment:%z}"


def current_time() -> str:
    return format_timestamp(datetime.now())


def location_hint(path: Path, line: int) -> str:
    """Absolute source path and line, as ``/abs/path.feature:12``."""
    return f"{path.absolute()}:{line}"


def test_started(timestamp: str, location: str, name: str | None) -> str:
    return TEMPLATE_TEST_STARTED.format(
        timestamp=timestamp, location=location, name=escape(name)
    )


def test_failed(
    timestamp: str, details: str, message: str, name: str | None, extra: str = ""
) -> str:
    return TEMPLATE_TEST_FAILED.format(
        timestamp=timestamp,
        details=escape(details),
        message=escape(message),
        name=escape(name),
        extra=extra,
    )


def test_finished(timestamp: str, duration_millis: int, name: str | None) -> str:
    return TEMPLATE_TEST_FINISHED.format(
        timestamp=timestamp, duration=duration_millis, name=escape(name)
    )


def entered_the_matrix(timestamp: str) -> str:
    return TEMPLATE_ENTER_THE_MATRIX.format(timestamp=timestamp)


def test_suite_started(timestamp: str, location: str, name: str | None) -> str:
    return TEMPLATE_TEST_SUITE_STARTED.format(
        timestamp=timestamp, location=location, name=escape(name)
    )


def test_suite_finished(timestamp: str, name: str | None) -> str:
    return TEMPLATE_TEST_SUITE_FINISHED.format(timestamp=timestamp, name=escape(name))


def emit(line: str) -> None:
    """Write one service message to stdout in a single call."""
    sys.stdout.write(f"{line}\n")
    sys.stdout.flush()
