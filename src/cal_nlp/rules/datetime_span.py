"""Deterministic date/time expression recogniser.

Scans free text for the first date/time expression and resolves it to a
local wall-clock :class:`~cal_nlp.models.event.DateTimeSpan`.  An
expression is a run of adjacent components -- at most one each of a date,
a clock time (or time range), a duration, and a relative instant ("in 2
hours") -- separated only by whitespace or commas.  Any later date/time
phrase in the text is ignored.

Absolute dates are parsed with :mod:`dateutil.parser`; weekday arithmetic
uses :class:`dateutil.relativedelta.relativedelta`.  Components whose
arithmetic leaves the datetime range ("in 3000000 days") are dropped.
"""

from __future__ import annotations

import logging
import math
import re
from dataclasses import dataclass, replace
from datetime import date, datetime, time, timedelta

from dateutil import parser as dateutil_parser
from dateutil.relativedelta import FR, MO, SA, SU, TH, TU, WE, relativedelta

from cal_nlp.clock import TimezoneClock
from cal_nlp.models.event import FULL_DAY_MINUTES, DateTimeSpan

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Vocabulary
# ---------------------------------------------------------------------------

_WEEKDAYS = {
    "monday": MO,
    "tuesday": TU,
    "wednesday": WE,
    "thursday": TH,
    "friday": FR,
    "saturday": SA,
    "sunday": SU,
}

# Bare "may"/"march" never match on their own: month names only count
# next to a day number.
_MONTH = (
    r"(?:january|february|march|april|may|june|july|august|september|october|"
    r"november|december|jan|feb|mar|apr|jun|jul|aug|sept|sep|oct|nov|dec)\.?"
)

_NUMBER_WORDS = {
    "a": 1,
    "an": 1,
    "one": 1,
    "two": 2,
    "three": 3,
    "four": 4,
    "five": 5,
    "six": 6,
    "seven": 7,
    "eight": 8,
    "nine": 9,
    "ten": 10,
    "eleven": 11,
    "twelve": 12,
}
_AMOUNT = r"(?:\d+(?:\.\d+)?|half\s+an?|" + "|".join(_NUMBER_WORDS) + r")"

_MERIDIEM = r"(?:a\.?m\.?|p\.?m\.?)"
_CLOCK = rf"(?:\d{{1,2}}(?::\d{{2}})?\s*{_MERIDIEM}?|noon|midday|midnight)"

ALL_DAY_RE = re.compile(r"\b(?:all|whole|entire)[\s-]+day\b", re.IGNORECASE)

TONIGHT_DEFAULT = time(19, 0)

# ---------------------------------------------------------------------------
# Component patterns
# ---------------------------------------------------------------------------

_DATE_PATTERNS: list[tuple[str, re.Pattern[str]]] = [
    ("iso", re.compile(r"\b(?:on\s+)?(\d{4}-\d{2}-\d{2})\b", re.IGNORECASE)),
    (
        "month_day",
        re.compile(
            rf"\b(?:on\s+)?((?:the\s+)?{_MONTH}\s+\d{{1,2}}(?:st|nd|rd|th)?\b"
            r"(?:,?\s+(\d{4})\b)?)",
            re.IGNORECASE,
        ),
    ),
    (
        "day_month",
        re.compile(
            rf"\b(?:on\s+)?((?:the\s+)?\d{{1,2}}(?:st|nd|rd|th)?\s+(?:of\s+)?{_MONTH}(?![a-z])"
            r"(?:,?\s+(\d{4})\b)?)",
            re.IGNORECASE,
        ),
    ),
    (
        "numeric",
        re.compile(r"\b(?:on\s+)?(\d{1,2}/\d{1,2}(?:/(\d{2}|\d{4}))?)\b", re.IGNORECASE),
    ),
    (
        "relative_day",
        re.compile(
            r"\b(?:on\s+)?(?:the\s+)?(day\s+after\s+tomorrow|tomorrow|today|tonight)\b",
            re.IGNORECASE,
        ),
    ),
    (
        "weekday",
        re.compile(
            r"\b(?:on\s+)?(?:(this|next|coming)\s+)?(" + "|".join(_WEEKDAYS) + r")\b",
            re.IGNORECASE,
        ),
    ),
    (
        "offset_days",
        re.compile(rf"\bin\s+({_AMOUNT})\s+(days?|weeks?)\b", re.IGNORECASE),
    ),
]

_INSTANT_RE = re.compile(
    rf"\bin\s+({_AMOUNT})\s+(minutes?|mins?|hours?|hrs?)\b", re.IGNORECASE
)

_RANGE_RE = re.compile(
    rf"(?:\b(from|between|at)\s+)?(?<![\d:/])({_CLOCK})\s*(?:-|–|\bto\b|\buntil\b|\btill\b|\band\b)\s*({_CLOCK})(?![\d/])",
    re.IGNORECASE,
)

_TIME_RE = re.compile(
    rf"(?:(?:\bat|\bby|\baround|@)\s*)?(?<![\d:/])("
    rf"noon|midday|midnight|\d{{1,2}}:\d{{2}}\s*{_MERIDIEM}?|\d{{1,2}}\s*{_MERIDIEM}"
    r")(?![\w/])",
    re.IGNORECASE,
)

# "at 7" without am/pm only counts when nothing but a boundary follows.
_BARE_HOUR_RE = re.compile(
    r"(?:\bat|@)\s*(?<![\d:/])(\d{1,2})"
    r"(?=$|[,.;!?]|\s+(?:on|for|tomorrow|today|tonight|next|this|in)\b)",
    re.IGNORECASE,
)

_DURATION_RE = re.compile(
    rf"\bfor\s+({_AMOUNT})\s+(days?|hours?|hrs?|minutes?|mins?)\b", re.IGNORECASE
)

_GAP_RE = re.compile(r"^[\s,]*$")

_CLOCK_PARTS_RE = re.compile(
    rf"^(?:(noon|midday)|(midnight)|(\d{{1,2}})(?::(\d{{2}}))?\s*({_MERIDIEM})?)$",
    re.IGNORECASE,
)


# ---------------------------------------------------------------------------
# Internal component model
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class _Clock:
    """A parsed clock reading before meridiem inference."""

    hour: int
    minute: int
    meridiem: str | None
    is_24h: bool
    has_minutes: bool = False

    @property
    def anchored(self) -> bool:
        """Whether the reading is unmistakably a clock time."""
        return bool(self.meridiem) or self.is_24h or self.has_minutes

    def resolve(self, meridiem: str | None = None) -> time | None:
        """Return the wall-clock :class:`time`, or ``None`` if out of range."""
        hour = self.hour
        marker = self.meridiem or meridiem
        if marker is not None:
            if not 1 <= hour <= 12:
                return None
            if marker == "pm" and hour != 12:
                hour += 12
            elif marker == "am" and hour == 12:
                hour = 0
        elif not self.is_24h:
            # Bare hours: 1-7 read as afternoon/evening, 8-12 as morning/noon.
            if 1 <= hour <= 7:
                hour += 12
            elif hour > 12:
                return None
        if hour > 23 or self.minute > 59:
            return None
        return time(hour, self.minute)


@dataclass(frozen=True)
class _Component:
    """One recognised piece of a date/time expression."""

    kind: str  # "date" | "time" | "duration" | "instant"
    start: int
    end: int
    day: date | None = None
    at: time | None = None
    until: time | None = None
    minutes: int | None = None
    moment: datetime | None = None
    tonight: bool = False


def _parse_clock(raw: str) -> _Clock | None:
    match = _CLOCK_PARTS_RE.match(raw.strip())
    if match is None:
        return None
    noon, midnight, hour, minute, meridiem = match.groups()
    if noon:
        return _Clock(12, 0, None, True)
    if midnight:
        return _Clock(0, 0, None, True)
    marker = None
    if meridiem:
        marker = "pm" if meridiem.lower().startswith("p") else "am"
    has_minutes = minute is not None
    # "07:30" and "19:30" read as 24-hour; "7:30" gets the bare-hour rule.
    is_24h = has_minutes and marker is None and (hour.startswith("0") or int(hour) >= 13)
    return _Clock(int(hour), int(minute or 0), marker, is_24h, has_minutes)


def _amount(raw: str) -> float:
    raw = raw.lower().strip()
    if raw.startswith("half"):
        return 0.5
    if raw in _NUMBER_WORDS:
        return float(_NUMBER_WORDS[raw])
    return float(raw)


def _minutes_for(amount: float, unit: str) -> int:
    unit = unit.lower()
    if unit.startswith("d"):
        return round(amount * FULL_DAY_MINUTES)
    if unit.startswith("w"):
        return round(amount * 7 * FULL_DAY_MINUTES)
    if unit.startswith("h"):
        return round(amount * 60)
    return round(amount)


# ---------------------------------------------------------------------------
# Extractor
# ---------------------------------------------------------------------------


class DateTimeSpanExtractor:
    """Finds the first date/time expression in free text.

    Args:
        clock: Clock used to resolve "now".  Defaults to the system clock.
    """

    def __init__(self, clock: TimezoneClock | None = None) -> None:
        self._clock = clock or TimezoneClock()

    def extract(self, text: str, timezone: str) -> DateTimeSpan:
        """Return the :class:`DateTimeSpan` for the first expression in *text*.

        Never fails for unrecognised text: with no expression the span
        starts at the current local time, has no end, and consumes nothing.

        Raises:
            InvalidTimezone: If *timezone* is not a known IANA zone.
        """
        now = self._clock.now(timezone)
        all_day = ALL_DAY_RE.search(text) is not None

        components = self._first_expression(text, self._scan(text, now))
        if components:
            consumed = text[components[0].start : components[-1].end]
            logger.debug("Consumed date/time expression %r", consumed)
            try:
                span = self._resolve(components, now, all_day, consumed)
            except OverflowError:
                logger.debug("Date/time expression %r is out of range, ignoring it", consumed)
            else:
                return replace(span, consumed_start=components[0].start)
        else:
            logger.debug("No date/time expression found in %r", text)

        if all_day:
            return self._all_day_span(now.date(), 1, "")
        return DateTimeSpan(start_local=now, end_local=None, is_all_day=False)

    # ------------------------------------------------------------------
    # Scanning
    # ------------------------------------------------------------------

    def _scan(self, text: str, now: datetime) -> list[_Component]:
        """Collect every resolvable component, earliest and longest first."""
        found: list[_Component] = []

        for name, pattern in _DATE_PATTERNS:
            for match in pattern.finditer(text):
                component = self._date_component(name, match, now)
                if component is not None:
                    found.append(component)

        for match in _INSTANT_RE.finditer(text):
            try:
                delta = _minutes_for(_amount(match.group(1)), match.group(2))
                moment = now + timedelta(minutes=delta)
            except OverflowError:
                logger.debug("Ignoring out-of-range offset %r", match.group(0))
                continue
            found.append(_Component("instant", match.start(), match.end(), moment=moment))

        for match in _RANGE_RE.finditer(text):
            component = self._range_component(match)
            if component is not None:
                found.append(component)

        for match in _TIME_RE.finditer(text):
            clock = _parse_clock(match.group(1))
            at = clock.resolve() if clock else None
            if at is not None:
                found.append(_Component("time", match.start(), match.end(), at=at))

        for match in _BARE_HOUR_RE.finditer(text):
            at = _Clock(int(match.group(1)), 0, None, False).resolve()
            if at is not None:
                found.append(_Component("time", match.start(), match.end(), at=at))

        for match in _DURATION_RE.finditer(text):
            try:
                minutes = _minutes_for(_amount(match.group(1)), match.group(2))
            except OverflowError:
                logger.debug("Ignoring out-of-range duration %r", match.group(0))
                continue
            if minutes > 0:
                found.append(
                    _Component("duration", match.start(), match.end(), minutes=minutes)
                )

        found.sort(key=lambda c: (c.start, -(c.end - c.start)))

        # Drop components overlapping an earlier (or longer) one.
        kept: list[_Component] = []
        for component in found:
            if kept and component.start < kept[-1].end:
                continue
            kept.append(component)
        return kept

    def _date_component(
        self, name: str, match: re.Match[str], now: datetime
    ) -> _Component | None:
        today = now.date()
        day: date | None = None
        tonight = False

        if name in ("relative_day", "weekday", "offset_days"):
            try:
                day, tonight = self._relative_date(name, match, today)
            except (OverflowError, ValueError):
                logger.debug("Ignoring out-of-range date %r", match.group(0))
                return None
        else:
            day = self._absolute_date(name, match, today)

        if day is None:
            return None
        return _Component("date", match.start(), match.end(), day=day, tonight=tonight)

    @staticmethod
    def _relative_date(name: str, match: re.Match[str], today: date) -> tuple[date, bool]:
        if name == "relative_day":
            word = " ".join(match.group(1).lower().split())
            offsets = {"today": 0, "tonight": 0, "tomorrow": 1, "day after tomorrow": 2}
            return today + timedelta(days=offsets[word]), word == "tonight"
        if name == "weekday":
            qualifier = (match.group(1) or "").lower()
            weekday = _WEEKDAYS[match.group(2).lower()]
            # "next Friday" never means today; a plain "Friday" can.
            skip = 1 if qualifier == "next" else 0
            return today + relativedelta(days=skip, weekday=weekday(+1)), False
        minutes = _minutes_for(_amount(match.group(1)), match.group(2))
        return today + timedelta(minutes=minutes), False

    @staticmethod
    def _absolute_date(name: str, match: re.Match[str], today: date) -> date | None:
        raw = match.group(1).replace(".", " ")
        raw = re.sub(r"^the\s+", "", raw.strip(), flags=re.IGNORECASE)
        explicit_year = name == "iso" or bool(match.group(2))
        try:
            parsed = dateutil_parser.parse(
                raw,
                default=datetime(today.year, today.month, today.day),
                dayfirst=False,
            )
        except (ValueError, OverflowError):
            logger.debug("Ignoring unparseable date %r", raw)
            return None

        day = parsed.date()
        if not explicit_year and day < today:
            try:
                day = day.replace(year=day.year + 1)
            except ValueError:  # Feb 29 with no leap year ahead
                return None
        return day

    @staticmethod
    def _range_component(match: re.Match[str]) -> _Component | None:
        prefix = (match.group(1) or "").lower()
        first = _parse_clock(match.group(2))
        second = _parse_clock(match.group(3))
        if first is None or second is None:
            return None

        # Without a marker on either side, "9-10" is only a range after
        # "from"/"between".
        anchored = first.anchored or second.anchored
        if not anchored and prefix not in ("from", "between"):
            return None

        until = second.resolve()
        if until is None:
            return None
        at = first.resolve()
        if first.meridiem is None and not first.is_24h and second.meridiem:
            # "3-5pm" shares the meridiem; "11-1pm" starts in the morning.
            at = first.resolve(second.meridiem)
            if at is not None and at > until:
                other = "am" if second.meridiem == "pm" else "pm"
                at = first.resolve(other)
        if at is None:
            return None
        return _Component("time", match.start(), match.end(), at=at, until=until)

    @staticmethod
    def _first_expression(text: str, components: list[_Component]) -> list[_Component]:
        """Return the leading run of adjacent components, one per kind."""
        if not components:
            return []
        run = [components[0]]
        kinds = {components[0].kind}
        for component in components[1:]:
            if not _GAP_RE.match(text[run[-1].end : component.start]):
                break
            if component.kind in kinds:
                break
            # A relative instant already fixes both the day and the time.
            if "instant" in kinds | {component.kind} and (
                kinds | {component.kind}
            ) & {"date", "time"}:
                break
            run.append(component)
            kinds.add(component.kind)
        return run

    # ------------------------------------------------------------------
    # Resolution
    # ------------------------------------------------------------------

    def _resolve(
        self,
        components: list[_Component],
        now: datetime,
        all_day: bool,
        consumed: str,
    ) -> DateTimeSpan:
        by_kind = {c.kind: c for c in components}
        date_part = by_kind.get("date")
        time_part = by_kind.get("time")
        duration = by_kind.get("duration")
        instant = by_kind.get("instant")

        if instant is not None:
            start = instant.moment
        elif time_part is not None:
            day = date_part.day if date_part else now.date()
            start = datetime.combine(day, time_part.at)
            if date_part is not None and date_part.tonight and start.hour < 12:
                start += timedelta(hours=12)
            if date_part is None and start < now and not all_day:
                # A bare time that already passed today means tomorrow.
                start += timedelta(days=1)
        elif date_part is not None and date_part.tonight:
            start = datetime.combine(date_part.day, TONIGHT_DEFAULT)
        elif date_part is not None:
            # A date without a clock time is an all-day event.
            days = 1
            if duration is not None and not all_day:
                days = max(1, math.ceil(duration.minutes / FULL_DAY_MINUTES))
            try:
                return self._all_day_span(date_part.day, days, consumed)
            except OverflowError:
                logger.debug("Ignoring out-of-range duration in %r", consumed)
                return self._all_day_span(date_part.day, 1, consumed)
        else:
            start = now

        if all_day:
            return self._all_day_span(start.date(), 1, consumed)

        end: datetime | None = None
        if time_part is not None and time_part.until is not None:
            end = datetime.combine(start.date(), time_part.until)
            # Step by half days so "8 to 10" tonight and "11pm-1am" both land after start.
            while end <= start:
                end += timedelta(hours=12)
        elif duration is not None:
            try:
                end = start + timedelta(minutes=duration.minutes)
            except OverflowError:
                logger.debug("Ignoring out-of-range duration in %r", consumed)

        return DateTimeSpan(
            start_local=start, end_local=end, is_all_day=False, consumed_text=consumed
        )

    @staticmethod
    def _all_day_span(day: date, days: int, consumed: str) -> DateTimeSpan:
        last = day + timedelta(days=days - 1)
        return DateTimeSpan(
            start_local=datetime.combine(day, time.min),
            end_local=datetime.combine(last, time(23, 59, 59)),
            is_all_day=True,
            consumed_text=consumed,
        )
