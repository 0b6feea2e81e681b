"""Rule-based (deterministic) event extraction."""

from __future__ import annotations

from cal_nlp.rules.datetime_span import DateTimeSpanExtractor
from cal_nlp.rules.extractor import RuleBasedExtractor
from cal_nlp.rules.segmenter import DEFAULT_INDICATORS, FieldSegmenter, stem

__all__ = [
    "DEFAULT_INDICATORS",
    "DateTimeSpanExtractor",
    "FieldSegmenter",
    "RuleBasedExtractor",
    "stem",
]
