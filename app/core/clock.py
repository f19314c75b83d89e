"""Date and time normalization.

Calendar days entered without a time are anchored at local noon before being
turned into an absolute instant. Midnight sits right next to a day boundary, so
any timezone difference between the client and the clinic would roll the date
backwards or forwards; noon leaves twelve hours of slack on each side.

All functions return timezone-aware UTC datetimes.
"""

from datetime import UTC, date, datetime, time, timedelta, tzinfo

from app.config import settings
from app.core.exceptions import ValidationException

LOCAL_NOON = time(12, 0)
BARE_DATE_MAX_LENGTH = 10


def utcnow() -> datetime:
    """Current instant in UTC."""
    return datetime.now(UTC)


def _clinic_tz(tz: tzinfo | None) -> tzinfo:
    return tz if tz is not None else settings.tz


def _is_bare_date(value: str) -> bool:
    return len(value) <= BARE_DATE_MAX_LENGTH


def parse_day(value: str) -> date:
    """
    Parse a YYYY-MM-DD calendar day.

    Raises:
        ValidationException: If the value is not a valid date
    """
    try:
        return date.fromisoformat(value.strip())
    except ValueError as e:
        raise ValidationException(f"Invalid date: {value!r}") from e


def normalize(
    value: str | None,
    tz: tzinfo | None = None,
    now: datetime | None = None,
) -> datetime:
    """
    Convert user supplied date input into an unambiguous UTC instant.

    Args:
        value: Bare date (YYYY-MM-DD), ISO-8601 datetime, or None for "now"
        tz: Timezone of the input, defaults to the clinic timezone
        now: Override for the current instant

    Returns:
        Aware datetime in UTC

    Raises:
        ValidationException: If the value cannot be parsed
    """
    if value is None or not value.strip():
        return (now or utcnow()).astimezone(UTC)

    tz = _clinic_tz(tz)
    value = value.strip()

    if _is_bare_date(value):
        day = parse_day(value)
        return datetime.combine(day, LOCAL_NOON, tzinfo=tz).astimezone(UTC)

    try:
        parsed = datetime.fromisoformat(value)
    except ValueError as e:
        raise ValidationException(f"Invalid date: {value!r}") from e

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=tz)
    return parsed.astimezone(UTC)


def combine_date_time(
    date_value: str,
    time_value: str | None,
    tz: tzinfo | None = None,
) -> datetime:
    """
    Build an instant from a separate calendar day and HH:MM wall-clock time.

    Raises:
        ValidationException: If either part cannot be parsed
    """
    tz = _clinic_tz(tz)
    if not date_value or not _is_bare_date(date_value.strip()):
        raise ValidationException(f"Invalid date: {date_value!r}")
    day = parse_day(date_value)

    if not time_value:
        return datetime.combine(day, LOCAL_NOON, tzinfo=tz).astimezone(UTC)

    try:
        wall_clock = time.fromisoformat(time_value.strip())
    except ValueError as e:
        raise ValidationException(f"Invalid time: {time_value!r}") from e

    # An explicit offset on the time wins over the clinic timezone
    return datetime.combine(day, wall_clock, tzinfo=wall_clock.tzinfo or tz).astimezone(UTC)


def local_today(tz: tzinfo | None = None, now: datetime | None = None) -> date:
    """Current calendar day in the clinic timezone."""
    return (now or utcnow()).astimezone(_clinic_tz(tz)).date()


def day_bounds(day: date, tz: tzinfo | None = None) -> tuple[datetime, datetime]:
    """Half-open [start, end) UTC window covering a local calendar day."""
    tz = _clinic_tz(tz)
    start = datetime.combine(day, time.min, tzinfo=tz)
    end = datetime.combine(day + timedelta(days=1), time.min, tzinfo=tz)
    return start.astimezone(UTC), end.astimezone(UTC)


def today_bounds(tz: tzinfo | None = None, now: datetime | None = None) -> tuple[datetime, datetime]:
    """Half-open UTC window for today in the clinic timezone."""
    tz = _clinic_tz(tz)
    return day_bounds(local_today(tz, now), tz)


def range_start(value: str | None, tz: tzinfo | None = None) -> datetime | None:
    """Lower agenda bound; a bare date means the start of that day."""
    if value is None or not value.strip():
        return None
    if _is_bare_date(value.strip()):
        return day_bounds(parse_day(value), tz)[0]
    return normalize(value, tz)


def range_end(value: str | None, tz: tzinfo | None = None) -> datetime | None:
    """Upper (inclusive) agenda bound; a bare date means the end of that day."""
    if value is None or not value.strip():
        return None
    if _is_bare_date(value.strip()):
        return day_bounds(parse_day(value), tz)[1] - timedelta(microseconds=1)
    return normalize(value, tz)
