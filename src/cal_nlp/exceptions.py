"""Custom exceptions for the cal-nlp event parser.

These exceptions provide structured error handling for timezone resolution,
generative extraction failures, and the orchestrator's terminal failure.
"""

from __future__ import annotations


class CalNlpError(Exception):
    """Base class for all cal-nlp parsing errors."""


class InvalidTimezone(CalNlpError):
    """Raised when a timezone name is not a recognised IANA zone.

    Fatal to the parse call: neither extractor can run without a valid
    zone, so the orchestrator surfaces this immediately.

    Attributes:
        timezone: The rejected timezone name.
    """

    def __init__(self, timezone: str) -> None:
        super().__init__(f"Unknown timezone: {timezone!r}")
        self.timezone = timezone


class ExtractionFailed(CalNlpError):
    """Raised when the generative extractor cannot produce an event.

    This covers API/network failures, empty or non-JSON responses, and
    Pydantic schema validation errors.  The orchestrator catches this and
    falls back to the rule-based extractor; it is never surfaced directly.

    Attributes:
        raw_response: The raw model output that failed to parse, or ``""``
            when the failure happened before a response was received.
    """

    def __init__(self, message: str, raw_response: str = "") -> None:
        super().__init__(message)
        self.raw_response = raw_response


class BothFailed(CalNlpError):
    """Raised when neither the generative nor the rule-based path succeeds.

    In practice the rule-based path only fails on empty input.

    Attributes:
        text: The input that could not be parsed.
    """

    def __init__(self, text: str) -> None:
        super().__init__("Could not parse event details")
        self.text = text
