"""Keyword heuristics for splitting residual text into event fields.

The indicator vocabulary is plain data (:data:`DEFAULT_INDICATORS`, a
mapping from indicator word to :class:`~cal_nlp.models.event.FieldKind`),
so callers can swap in their own words for testing or localisation.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping

from cal_nlp.models.event import UNTITLED_EVENT, FieldKind, SegmentedFields

logger = logging.getLogger(__name__)

DEFAULT_INDICATORS: dict[str, FieldKind] = {
    "at": FieldKind.LOCATION,
    "in": FieldKind.LOCATION,
    "on": FieldKind.LOCATION,
    "location": FieldKind.LOCATION,
    "place": FieldKind.LOCATION,
    "room": FieldKind.LOCATION,
    "address": FieldKind.LOCATION,
    "about": FieldKind.DESCRIPTION,
    "regarding": FieldKind.DESCRIPTION,
    "for": FieldKind.DESCRIPTION,
    "desc": FieldKind.DESCRIPTION,
    "details": FieldKind.DESCRIPTION,
    "re": FieldKind.DESCRIPTION,
}

_EDGE_PUNCTUATION = ".,;:!?()[]{}\"'-"
_SUFFIXES = ("ings", "ing", "ed", "es", "s")
_MIN_STEM = 3


def stem(word: str) -> str:
    """Reduce *word* to a crude stem for indicator matching.

    Strips surrounding punctuation and one common English suffix, then a
    trailing ``e`` on longer words, so ``"meeting"``/``"meet"``,
    ``"rooms"``/``"room"`` and ``"places"``/``"place"`` compare equal.
    """
    token = word.lower().strip(_EDGE_PUNCTUATION)
    for suffix in _SUFFIXES:
        if not token.endswith(suffix) or len(token) - len(suffix) < _MIN_STEM:
            continue
        if suffix == "s" and token.endswith("ss"):
            continue
        token = token[: -len(suffix)]
        break
    if token.endswith("e") and len(token) > _MIN_STEM + 1:
        token = token[:-1]
    return token


def _clean(words: list[str]) -> str:
    return " ".join(words).strip(_EDGE_PUNCTUATION + " ")


class FieldSegmenter:
    """Splits text into title, location and description by indicator words.

    The first indicator of each kind (in token order) opens that field; its
    value runs up to the other kind's indicator or the end of the text.  An
    indicator that is the last token opens nothing.

    Args:
        indicators: Mapping from indicator word to the field it opens.
            Defaults to :data:`DEFAULT_INDICATORS`.
    """

    def __init__(self, indicators: Mapping[str, FieldKind] | None = None) -> None:
        source = DEFAULT_INDICATORS if indicators is None else indicators
        self._indicators = {stem(word): kind for word, kind in source.items()}

    def segment(self, remaining_text: str) -> SegmentedFields:
        """Segment *remaining_text* into a :class:`SegmentedFields`."""
        tokens = remaining_text.split()
        if not tokens:
            return SegmentedFields()

        positions = self._first_positions(tokens)
        values: dict[FieldKind, str] = {}

        # Drop any indicator whose value would be empty and re-split.
        while positions:
            bounds = sorted(positions.values()) + [len(tokens)]
            values = {}
            for kind, pos in positions.items():
                stop = min(b for b in bounds if b > pos)
                values[kind] = _clean(tokens[pos + 1 : stop])
            empty = [kind for kind, value in values.items() if not value]
            if not empty:
                break
            for kind in empty:
                del positions[kind]
        else:
            values = {}

        cut = min(positions.values()) if positions else len(tokens)
        title = _clean(tokens[:cut]) or UNTITLED_EVENT

        fields = SegmentedFields(
            title=title,
            location=values.get(FieldKind.LOCATION),
            description=values.get(FieldKind.DESCRIPTION),
        )
        logger.debug("Segmented %r into %s", remaining_text, fields)
        return fields

    def _first_positions(self, tokens: list[str]) -> dict[FieldKind, int]:
        positions: dict[FieldKind, int] = {}
        for index, token in enumerate(tokens[:-1]):
            kind = self._indicators.get(stem(token))
            if kind is not None and kind not in positions:
                positions[kind] = index
        return positions
