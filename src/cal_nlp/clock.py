"""Timezone-aware clock for resolving "now" and converting wall-clock times.

All conversions are civil-time conversions: a naive wall-clock datetime is
attached to its IANA zone via :mod:`zoneinfo` and then normalised, so DST
transitions are handled by the tz database rather than fixed offsets.

Local wall-clock values are **naive** datetimes; instants are **aware**
datetimes in UTC.
"""

from __future__ import annotations

from datetime import UTC, date, datetime, time
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from cal_nlp.exceptions import InvalidTimezone

_DAY_END = time(23, 59, 59)


def resolve_zone(timezone: str) -> ZoneInfo:
    """Return the :class:`ZoneInfo` for *timezone*.

    Raises:
        InvalidTimezone: If *timezone* is empty or not a known IANA name.
    """
    if not isinstance(timezone, str) or not timezone.strip():
        raise InvalidTimezone(str(timezone))
    try:
        return ZoneInfo(timezone)
    except (ZoneInfoNotFoundError, ValueError, OSError) as exc:
        raise InvalidTimezone(timezone) from exc


class TimezoneClock:
    """Resolves "now" in a named timezone and converts local <-> UTC.

    Args:
        reference: Optional fixed instant used as "now".  Naive values are
            interpreted as UTC.  Defaults to the system clock on every call.
    """

    def __init__(self, reference: datetime | None = None) -> None:
        if reference is not None and reference.tzinfo is None:
            reference = reference.replace(tzinfo=UTC)
        self._reference = reference

    def utcnow(self) -> datetime:
        """Return the current instant (aware, UTC)."""
        if self._reference is not None:
            return self._reference.astimezone(UTC)
        return datetime.now(UTC)

    def now(self, timezone: str) -> datetime:
        """Return the current local wall-clock time in *timezone*.

        Microseconds are dropped so that "now" renders cleanly in prompts
        and durations stay whole minutes.
        """
        return self.to_local(self.utcnow(), timezone).replace(microsecond=0)

    def to_utc(self, local: datetime, timezone: str) -> datetime:
        """Convert a naive wall-clock datetime in *timezone* to a UTC instant.

        Wall-clock times that fall in a DST gap do not exist; they resolve
        using the offset in effect before the transition, which lands them
        after the gap.  Ambiguous times follow ``local.fold`` (``0`` is
        the first occurrence).

        Raises:
            InvalidTimezone: If *timezone* is not a known IANA zone.
            OverflowError: If the instant falls outside the datetime range,
                e.g. a wall time on 9999-12-31 west of UTC.
        """
        zone = resolve_zone(timezone)
        if local.tzinfo is not None:
            return local.astimezone(UTC)
        return local.replace(tzinfo=zone).astimezone(UTC)

    def to_local(self, instant: datetime, timezone: str) -> datetime:
        """Convert an instant to a naive wall-clock datetime in *timezone*.

        Naive *instant* values are interpreted as UTC.
        """
        zone = resolve_zone(timezone)
        if instant.tzinfo is None:
            instant = instant.replace(tzinfo=UTC)
        return instant.astimezone(zone).replace(tzinfo=None)

    def day_bounds(self, day: date, timezone: str) -> tuple[datetime, datetime]:
        """Return the UTC instants for local 00:00:00 and 23:59:59 of *day*."""
        start = self.to_utc(datetime.combine(day, time.min), timezone)
        end = self.to_utc(datetime.combine(day, _DAY_END), timezone)
        return start, end
