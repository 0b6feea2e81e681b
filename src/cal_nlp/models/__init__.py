"""Data models for cal-nlp."""

from __future__ import annotations

from cal_nlp.models.event import (
    FULL_DAY_MINUTES,
    UNTITLED_EVENT,
    DateTimeSpan,
    FieldKind,
    LLMEventSchema,
    ParsedEvent,
    SegmentedFields,
)

__all__ = [
    "FULL_DAY_MINUTES",
    "UNTITLED_EVENT",
    "DateTimeSpan",
    "FieldKind",
    "LLMEventSchema",
    "ParsedEvent",
    "SegmentedFields",
]
