"""Data models for parsed calendar events.

Defines the value types produced by the parsing engine:

- :class:`ParsedEvent` -- the sole public output, with UTC instants and a
  duration that is always derived from the span.
- :class:`DateTimeSpan` -- the date/time expression found by the
  rule-based recogniser, still in local wall-clock time.
- :class:`SegmentedFields` -- title/location/description split out of the
  text that remains once the date/time expression is removed.
- :class:`LLMEventSchema` -- schema for Gemini's ``response_schema``
  parameter, using the camelCase wire names.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any

from pydantic import BaseModel, computed_field, field_validator, model_validator

UNTITLED_EVENT = "Untitled Event"
FULL_DAY_MINUTES = 24 * 60


# ---------------------------------------------------------------------------
# ParsedEvent -- the engine's output contract
# ---------------------------------------------------------------------------


class ParsedEvent(BaseModel):
    """A calendar event extracted from free text.

    Both extractors produce this type, so callers never need to know which
    path ran.  ``duration`` is computed from ``start_time``/``end_time`` and
    cannot be supplied.

    Attributes:
        title: Non-empty event title.
        description: Free-text description, or ``None``.
        start_time: Event start as an aware UTC datetime.
        end_time: Event end as an aware UTC datetime (``>= start_time``).
        is_all_day: Whether the event spans whole calendar days.  Forced to
            ``True`` when the span is 24 hours or longer.
        location: Event location, or ``None``.
    """

    title: str
    description: str | None = None
    start_time: datetime
    end_time: datetime
    is_all_day: bool = False
    location: str | None = None

    @field_validator("title")
    @classmethod
    def _require_title(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("title must not be empty")
        return value

    @field_validator("description", "location")
    @classmethod
    def _blank_to_none(cls, value: str | None) -> str | None:
        if value is None:
            return None
        value = value.strip()
        return value or None

    @field_validator("start_time", "end_time")
    @classmethod
    def _as_utc(cls, value: datetime) -> datetime:
        """Normalise to aware UTC; naive values are taken to be UTC already."""
        if value.tzinfo is None:
            return value.replace(tzinfo=UTC)
        return value.astimezone(UTC)

    @model_validator(mode="after")
    def _check_span(self) -> ParsedEvent:
        if self.end_time < self.start_time:
            raise ValueError("end_time must not be earlier than start_time")
        if self.duration >= FULL_DAY_MINUTES:
            self.is_all_day = True
        return self

    @computed_field  # type: ignore[prop-decorator]
    @property
    def duration(self) -> int:
        """Whole minutes between ``start_time`` and ``end_time``."""
        return int((self.end_time - self.start_time).total_seconds() // 60)

    def to_payload(self) -> dict[str, Any]:
        """Return the event using the camelCase wire names.

        Instants are rendered as ISO 8601 strings with a ``Z`` suffix.
        """
        return {
            "title": self.title,
            "description": self.description,
            "startTime": _iso_utc(self.start_time),
            "endTime": _iso_utc(self.end_time),
            "duration": self.duration,
            "isAllDay": self.is_all_day,
            "location": self.location,
        }


def _iso_utc(value: datetime) -> str:
    return value.astimezone(UTC).replace(tzinfo=None).isoformat() + "Z"


# ---------------------------------------------------------------------------
# Rule-based intermediates
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class DateTimeSpan:
    """A date/time expression recognised in free text.

    Attributes:
        start_local: Naive local wall-clock start.
        end_local: Naive local wall-clock end, or ``None`` when the text
            gave neither an end time nor a duration.
        is_all_day: Whether all-day language (or a bare date) was found.
        consumed_text: The exact substring the recogniser consumed; ``""``
            when nothing was recognised.
        consumed_start: Offset of *consumed_text* in the source text.
    """

    start_local: datetime
    end_local: datetime | None = None
    is_all_day: bool = False
    consumed_text: str = ""
    consumed_start: int = 0


class FieldKind(enum.Enum):
    """Which event field an indicator word introduces."""

    LOCATION = "location"
    DESCRIPTION = "description"


@dataclass(frozen=True)
class SegmentedFields:
    """Title, location and description split out of residual text.

    Attributes:
        title: Event title, never empty (defaults to ``"Untitled Event"``).
        location: Text following a location indicator, or ``None``.
        description: Text following a description indicator, or ``None``.
    """

    title: str = UNTITLED_EVENT
    location: str | None = None
    description: str | None = None


# ---------------------------------------------------------------------------
# LLMEventSchema -- schema for Gemini response_schema
# ---------------------------------------------------------------------------


class LLMEventSchema(BaseModel):
    """Single-event schema for Gemini's ``response_schema`` parameter.

    Field names match the JSON object the model is asked to return, so the
    raw response validates against this model directly.  Only ``None``
    defaults are used; the Gemini API rejects other schema defaults.

    Attributes:
        title: Event title.
        description: Extra details, or ``None``.
        startTime: ISO 8601 UTC timestamp for the start.
        endTime: ISO 8601 UTC timestamp for the end.
        isAllDay: Whether the event is all-day.
        location: Location string, or ``None``.
    """

    title: str
    description: str | None = None
    startTime: str  # noqa: N815
    endTime: str  # noqa: N815
    isAllDay: bool  # noqa: N815
    location: str | None = None
