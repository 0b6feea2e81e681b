"""Deterministic fallback extractor.

Composes :class:`~cal_nlp.rules.datetime_span.DateTimeSpanExtractor`,
:class:`~cal_nlp.rules.segmenter.FieldSegmenter` and
:class:`~cal_nlp.clock.TimezoneClock` into a single
:class:`~cal_nlp.models.event.ParsedEvent`.  Apart from an invalid
timezone it never raises: malformed input degrades to a default title, a
start of "now" and a 60-minute span.
"""

from __future__ import annotations

import logging
import re
from datetime import datetime, timedelta

from cal_nlp.clock import TimezoneClock
from cal_nlp.models.event import DateTimeSpan, ParsedEvent
from cal_nlp.rules.datetime_span import ALL_DAY_RE, DateTimeSpanExtractor
from cal_nlp.rules.segmenter import FieldSegmenter

logger = logging.getLogger(__name__)

DEFAULT_DURATION = timedelta(minutes=60)

# "Create an appointment for ..." style lead-ins carry no title content.
_COMMAND_PREFIX_RE = re.compile(
    r"^\s*(?:create|add|schedule|set\s+up|new|make)\s+(?:an?\s+)?"
    r"(?:appointment|event|meeting|reminder)\b(?:\s+for\b)?",
    re.IGNORECASE,
)

# Connector words stranded at the edges once the time phrase is cut out.
_DANGLING = {"for", "on", "at", "from", "by", "in", "and"}


class RuleBasedExtractor:
    """Parses an event with date/time recognition plus keyword heuristics.

    Args:
        clock: Clock shared by the recogniser and the UTC conversion.
        span_extractor: Date/time recogniser; built from *clock* if omitted.
        segmenter: Field segmenter; defaults to the standard indicators.
    """

    def __init__(
        self,
        clock: TimezoneClock | None = None,
        span_extractor: DateTimeSpanExtractor | None = None,
        segmenter: FieldSegmenter | None = None,
    ) -> None:
        self._clock = clock or TimezoneClock()
        self._spans = span_extractor or DateTimeSpanExtractor(self._clock)
        self._segmenter = segmenter or FieldSegmenter()

    def parse(self, text: str, timezone: str) -> ParsedEvent | None:
        """Parse *text* into a :class:`ParsedEvent`.

        Args:
            text: Free-text event description.
            timezone: IANA timezone the text is written in.

        Returns:
            The parsed event, or ``None`` for empty/whitespace-only text.

        Raises:
            InvalidTimezone: If *timezone* is not a known IANA zone.
        """
        if not text or not text.strip():
            # Still reject bad zones so both paths fail the same way.
            self._clock.now(timezone)
            logger.info("Rule-based extractor: empty input, no event")
            return None

        span = self._spans.extract(text, timezone)
        try:
            start_time, end_time = self._utc_bounds(span, timezone)
        except OverflowError:
            logger.warning(
                "Date/time expression %r is out of range, starting now instead",
                span.consumed_text,
            )
            span = DateTimeSpan(start_local=self._clock.now(timezone))
            start_time, end_time = self._utc_bounds(span, timezone)

        fields = self._segmenter.segment(self._residual(text, span))
        event = ParsedEvent(
            title=fields.title,
            description=fields.description,
            location=fields.location,
            start_time=start_time,
            end_time=end_time,
            is_all_day=span.is_all_day,
        )
        logger.info(
            "Rule-based extractor parsed '%s' | start=%s | duration=%d | all_day=%s",
            event.title,
            event.start_time.isoformat(),
            event.duration,
            event.is_all_day,
        )
        return event

    def _utc_bounds(self, span: DateTimeSpan, timezone: str) -> tuple[datetime, datetime]:
        end_local = span.end_local or span.start_local + DEFAULT_DURATION
        return (
            self._clock.to_utc(span.start_local, timezone),
            self._clock.to_utc(end_local, timezone),
        )

    @staticmethod
    def _residual(text: str, span: DateTimeSpan) -> str:
        """Return *text* without the date/time phrase, ready for segmentation."""
        residual = text
        if span.consumed_text:
            cut = span.consumed_start
            residual = text[:cut] + " " + text[cut + len(span.consumed_text) :]
        residual = ALL_DAY_RE.sub(" ", residual)
        residual = _COMMAND_PREFIX_RE.sub(" ", residual)

        words = residual.split()
        while words and words[-1].lower().strip(",.;:") in _DANGLING:
            words.pop()
        while words and words[0].lower().strip(",.;:") in _DANGLING:
            words.pop(0)
        return " ".join(words)
