"""Clock and timestamp formatting.

Learn: Every envelope, reply and status snapshot carries the same set of
time presentations, so they are all produced here from a single instant:

- iso:     UTC, millisecond precision, "Z" suffix
- local:   "2024/01/31 20:15:00 GMT+8" in the display timezone
- compact: "2024-01-31 20:15:00" in the display timezone
- unix:    epoch seconds

A bad timezone label never raises. The timestamp falls back to UTC and
its TimezoneInfo carries an "Invalid timezone: ..." error instead.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

DEFAULT_TIMEZONE = "Asia/Shanghai"

COMMON_TIMEZONES = [
    "Asia/Shanghai",
    "Asia/Tokyo",
    "Asia/Seoul",
    "Asia/Hong_Kong",
    "Asia/Singapore",
    "Europe/London",
    "Europe/Paris",
    "America/New_York",
    "America/Los_Angeles",
    "UTC",
]

MS_PER_SECOND = 1000
MS_PER_MINUTE = 60 * MS_PER_SECOND
MS_PER_HOUR = 60 * MS_PER_MINUTE
MS_PER_DAY = 24 * MS_PER_HOUR


@dataclass(frozen=True)
class TimezoneInfo:
    timezone: str
    offset: int  # minutes east of UTC
    offset_string: str
    local_time: str
    utc_time: str
    error: Optional[str] = None


@dataclass(frozen=True)
class Timestamp:
    """One instant rendered every way the relay reports time."""
    iso: str
    local: str
    compact: str
    unix: int
    milliseconds: int
    timezone: TimezoneInfo


@dataclass(frozen=True)
class Uptime:
    total_milliseconds: int
    total_seconds: int
    days: int
    hours: int
    minutes: int
    seconds: int
    formatted: str
    human_readable: str


# ─── Timezone resolution ─────────────────────────────────


def resolve_timezone(label: str) -> Optional[ZoneInfo]:
    """Return the ZoneInfo for an IANA label, or None if it doesn't resolve."""
    if not label:
        return None
    try:
        return ZoneInfo(label)
    except (ZoneInfoNotFoundError, ValueError, OSError):
        # OSError: labels like "Asia" name a tz database directory
        return None


def is_valid_timezone(label: str) -> bool:
    return resolve_timezone(label) is not None


def format_offset(offset_minutes: int) -> str:
    """Format a UTC offset in minutes as ±HH:MM."""
    sign = "+" if offset_minutes >= 0 else "-"
    hours, minutes = divmod(abs(offset_minutes), 60)
    return f"{sign}{hours:02d}:{minutes:02d}"


def _gmt_label(offset_minutes: int) -> str:
    if offset_minutes == 0:
        return "UTC"
    sign = "+" if offset_minutes > 0 else "-"
    hours, minutes = divmod(abs(offset_minutes), 60)
    if minutes:
        return f"GMT{sign}{hours}:{minutes:02d}"
    return f"GMT{sign}{hours}"


def _offset_minutes(dt: datetime) -> int:
    offset = dt.utcoffset() or timedelta(0)
    return int(offset.total_seconds() // 60)


# ─── Formatting ──────────────────────────────────────────


def format_iso(instant: datetime) -> str:
    utc = instant.astimezone(timezone.utc)
    return utc.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def format_local(instant: datetime, tz: ZoneInfo | timezone) -> str:
    local = instant.astimezone(tz)
    return f"{local:%Y/%m/%d %H:%M:%S} {_gmt_label(_offset_minutes(local))}"


def format_compact(instant: datetime, tz: ZoneInfo | timezone) -> str:
    return f"{instant.astimezone(tz):%Y-%m-%d %H:%M:%S}"


def epoch_milliseconds(instant: datetime) -> int:
    delta = instant - datetime(1970, 1, 1, tzinfo=timezone.utc)
    return _delta_milliseconds(delta)


def timezone_info(label: str, instant: Optional[datetime] = None) -> TimezoneInfo:
    """Describe a timezone as seen at `instant` (defaults to now)."""
    instant = instant or now()
    tz = resolve_timezone(label)
    if tz is None:
        utc_iso = format_iso(instant)
        return TimezoneInfo(
            timezone="UTC",
            offset=0,
            offset_string="+00:00",
            local_time=utc_iso,
            utc_time=utc_iso,
            error=f"Invalid timezone: {label}",
        )

    offset = _offset_minutes(instant.astimezone(tz))
    return TimezoneInfo(
        timezone=label,
        offset=offset,
        offset_string=format_offset(offset),
        local_time=format_local(instant, tz),
        utc_time=format_iso(instant),
    )


def format_timestamp(instant: datetime, label: str = DEFAULT_TIMEZONE) -> Timestamp:
    """Render `instant` in the display timezone `label`.

    Falls back to UTC presentations when the label doesn't resolve.
    """
    tz = resolve_timezone(label) or timezone.utc
    ms = epoch_milliseconds(instant)
    return Timestamp(
        iso=format_iso(instant),
        local=format_local(instant, tz),
        compact=format_compact(instant, tz),
        unix=ms // MS_PER_SECOND,
        milliseconds=ms,
        timezone=timezone_info(label, instant),
    )


# ─── Elapsed time ────────────────────────────────────────


def _delta_milliseconds(delta: timedelta) -> int:
    # Whole milliseconds, truncated; no float rounding
    return (
        delta.days * MS_PER_DAY
        + delta.seconds * MS_PER_SECOND
        + delta.microseconds // 1000
    )


def human_readable(days: int, hours: int, minutes: int, seconds: int) -> str:
    """Drop leading zero units: "2h 1m 5s", "3d 0h 0m 12s", "7s"."""
    parts = []
    if days > 0:
        parts.append(f"{days}d")
    if hours > 0 or days > 0:
        parts.append(f"{hours}h")
    if minutes > 0 or hours > 0 or days > 0:
        parts.append(f"{minutes}m")
    parts.append(f"{seconds}s")
    return " ".join(parts)


def elapsed(start: datetime, end: datetime) -> Uptime:
    """Split end - start into days/hours/minutes/seconds.

    The delta is not clamped; callers pass a start that precedes end.
    """
    total_ms = _delta_milliseconds(end - start)

    days, rest = divmod(total_ms, MS_PER_DAY)
    hours, rest = divmod(rest, MS_PER_HOUR)
    minutes, rest = divmod(rest, MS_PER_MINUTE)
    seconds = rest // MS_PER_SECOND

    return Uptime(
        total_milliseconds=total_ms,
        total_seconds=total_ms // MS_PER_SECOND,
        days=days,
        hours=hours,
        minutes=minutes,
        seconds=seconds,
        formatted=f"{days}d {hours}h {minutes}m {seconds}s",
        human_readable=human_readable(days, hours, minutes, seconds),
    )


# ─── Clock ───────────────────────────────────────────────


def now() -> datetime:
    return datetime.now(timezone.utc)


class Clock:
    """Current time in a fixed display timezone.

    Tests swap `now` for a fixed function to pin the instant.
    """

    def __init__(self, timezone_label: str = DEFAULT_TIMEZONE, now_fn=None):
        self.timezone = timezone_label
        self._now = now_fn or now

    def now(self) -> datetime:
        return self._now()

    def timestamp(self, instant: Optional[datetime] = None) -> Timestamp:
        return format_timestamp(instant or self.now(), self.timezone)

    def timezone_info(self, instant: Optional[datetime] = None) -> TimezoneInfo:
        return timezone_info(self.timezone, instant or self.now())
