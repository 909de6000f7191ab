"""Target-date resolution in Japan Standard Time.

All date arithmetic uses a fixed UTC+9 offset applied to timezone-aware
UTC instants, so results never depend on the host's local timezone.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import UTC, date, datetime, timedelta, timezone

JST = timezone(timedelta(hours=9))

_YMD_RE = re.compile(r"([0-9]{4})-([0-9]{2})-([0-9]{2})")


class InvalidDateError(ValueError):
    """A date literal that is not a valid YYYY-MM-DD calendar date."""


@dataclass(frozen=True)
class UtcRange:
    """Half-open UTC interval [after, before) covering one JST day."""

    after: datetime
    before: datetime

    def as_params(self) -> tuple[str, str]:
        """Render both bounds as ISO-8601 UTC strings (millisecond precision)."""
        return _iso_utc(self.after), _iso_utc(self.before)


def _iso_utc(dt: datetime) -> str:
    stamp = dt.astimezone(UTC).isoformat(timespec="milliseconds")
    return stamp.replace("+00:00", "Z")


def _now_utc(now: datetime | None) -> datetime:
    if now is None:
        return datetime.now(UTC)
    if now.tzinfo is None:
        # Naive instants are taken as UTC, never as host-local time.
        return now.replace(tzinfo=UTC)
    return now


def jst_date_from_now(offset_days: int = 0, now: datetime | None = None) -> str:
    """Return the JST calendar date N days from now as YYYY-MM-DD.

    Args:
        offset_days: Days to add to the current JST date.
        now: Current instant override (for testing).
    """
    jst_now = _now_utc(now).astimezone(JST)
    return (jst_now.date() + timedelta(days=offset_days)).isoformat()


def today_jst(now: datetime | None = None) -> str:
    """Return today's JST date as YYYY-MM-DD."""
    return jst_date_from_now(0, now)


def resolve_target_date(
    cli_value: str | None = None,
    env_value: str | None = None,
    now: datetime | None = None,
) -> str:
    """Pick the target date: command line, then environment, then today.

    ``today`` and ``tomorrow`` are resolved against the JST clock. Any
    other literal is passed through verbatim; it is validated later when
    the UTC range is derived.

    Args:
        cli_value: Value of the ``--date`` argument, if given.
        env_value: Value of ``DATE_OVERRIDE``, if set.
        now: Current instant override (for testing).

    Returns:
        Date string used for both queries and display.
    """
    if cli_value:
        if cli_value == "today":
            return jst_date_from_now(0, now)
        if cli_value == "tomorrow":
            return jst_date_from_now(1, now)
        return cli_value
    if env_value:
        return env_value
    return today_jst(now)


def parse_ymd(value: str) -> date:
    """Parse a strict YYYY-MM-DD string (ASCII digits, no surrounding text).

    Raises:
        InvalidDateError: If the value is malformed or not a real date.
    """
    match = _YMD_RE.fullmatch(value) if isinstance(value, str) else None
    if not match:
        raise InvalidDateError(f"Invalid date {value!r}: expected YYYY-MM-DD")
    year, month, day = (int(g) for g in match.groups())
    try:
        return date(year, month, day)
    except ValueError as exc:
        raise InvalidDateError(f"Invalid date {value!r}: {exc}") from exc


def jst_day_to_utc_range(value: str) -> UtcRange:
    """Convert a JST calendar day into its UTC instant interval.

    JST midnight is UTC 15:00 of the previous day, so the range for
    2025-01-31 is [2025-01-30T15:00Z, 2025-01-31T15:00Z).

    Raises:
        InvalidDateError: If ``value`` is not a valid YYYY-MM-DD date.
    """
    day = parse_ymd(value)
    start_jst = datetime(day.year, day.month, day.day, tzinfo=JST)
    end_jst = start_jst + timedelta(days=1)
    return UtcRange(after=start_jst.astimezone(UTC), before=end_jst.astimezone(UTC))
