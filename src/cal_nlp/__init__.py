"""cal-nlp: natural-language calendar event parsing.

Turns one free-text sentence plus an IANA timezone into a structured
:class:`~cal_nlp.models.event.ParsedEvent`, using Google Gemini when an
API key is configured and a deterministic rule-based parser otherwise.
"""

from __future__ import annotations

from cal_nlp.clock import TimezoneClock, resolve_zone
from cal_nlp.exceptions import BothFailed, CalNlpError, ExtractionFailed, InvalidTimezone
from cal_nlp.hybrid import HybridOrchestrator, ParseOutcome, ParseState, build_orchestrator
from cal_nlp.llm import GeminiEventExtractor
from cal_nlp.models.event import DateTimeSpan, ParsedEvent, SegmentedFields
from cal_nlp.rules import DateTimeSpanExtractor, FieldSegmenter, RuleBasedExtractor

__version__ = "0.1.0"

__all__ = [
    "BothFailed",
    "CalNlpError",
    "DateTimeSpan",
    "DateTimeSpanExtractor",
    "ExtractionFailed",
    "FieldSegmenter",
    "GeminiEventExtractor",
    "HybridOrchestrator",
    "InvalidTimezone",
    "ParseOutcome",
    "ParseState",
    "ParsedEvent",
    "RuleBasedExtractor",
    "SegmentedFields",
    "TimezoneClock",
    "build_orchestrator",
    "resolve_zone",
]
