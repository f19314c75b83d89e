"""Tests for date normalization."""

from datetime import UTC, date, datetime, timedelta, timezone
from zoneinfo import ZoneInfo

import pytest

from app.core import clock
from app.core.exceptions import ValidationException

SAO_PAULO = ZoneInfo("America/Sao_Paulo")


@pytest.mark.parametrize("offset_hours", range(-12, 15))
def test_bare_date_keeps_calendar_day_in_every_offset(offset_hours: int) -> None:
    """A bare date never rolls over to a neighbouring day."""
    tz = timezone(timedelta(hours=offset_hours))

    instant = clock.normalize("2024-03-15", tz=tz)

    assert instant.tzinfo is not None
    assert instant.astimezone(tz).date() == date(2024, 3, 15)


def test_bare_date_is_anchored_at_local_noon() -> None:
    """Sao Paulo noon is 15:00 UTC."""
    assert clock.normalize("2024-03-15", tz=SAO_PAULO) == datetime(2024, 3, 15, 15, 0, tzinfo=UTC)


def test_naive_datetime_is_read_in_clinic_timezone() -> None:
    """A time component is kept as given, in clinic time."""
    instant = clock.normalize("2024-06-01T09:00:00", tz=SAO_PAULO)
    assert instant == datetime(2024, 6, 1, 12, 0, tzinfo=UTC)


def test_offset_datetime_is_used_unmodified() -> None:
    """An explicit offset wins over the clinic timezone."""
    instant = clock.normalize("2024-06-01T09:00:00+02:00", tz=SAO_PAULO)
    assert instant == datetime(2024, 6, 1, 7, 0, tzinfo=UTC)


def test_missing_value_means_now() -> None:
    """None and blank input return the current instant."""
    now = datetime(2024, 1, 2, 3, 4, 5, tzinfo=UTC)
    assert clock.normalize(None, now=now) == now
    assert clock.normalize("  ", now=now) == now


@pytest.mark.parametrize("value", ["2024-13-01", "not a date", "2024-02-30", "2024-06-01T25:00"])
def test_malformed_input_raises_validation_error(value: str) -> None:
    """Unparsable dates are rejected."""
    with pytest.raises(ValidationException):
        clock.normalize(value, tz=SAO_PAULO)


def test_combine_date_time() -> None:
    """Follow-up day and time are read in clinic time."""
    instant = clock.combine_date_time("2024-06-08", "09:00", tz=SAO_PAULO)
    assert instant == datetime(2024, 6, 8, 12, 0, tzinfo=UTC)


def test_combine_date_time_keeps_explicit_offset() -> None:
    """A time carrying its own offset is not reinterpreted in clinic time."""
    assert clock.combine_date_time("2024-06-08", "09:00+05:00", tz=UTC) == datetime(
        2024, 6, 8, 4, 0, tzinfo=UTC
    )
    assert clock.combine_date_time("2024-06-08", "09:00Z", tz=SAO_PAULO) == datetime(
        2024, 6, 8, 9, 0, tzinfo=UTC
    )


def test_combine_date_time_without_time_uses_noon() -> None:
    """A missing time falls back to the noon anchor."""
    instant = clock.combine_date_time("2024-06-08", None, tz=SAO_PAULO)
    assert instant.astimezone(SAO_PAULO).hour == 12


@pytest.mark.parametrize(
    ("day", "at"),
    [("08/06/2024", "09:00"), ("2024-06-08", "9h"), ("", "09:00"), ("2024-06-08T09:00", None)],
)
def test_combine_date_time_rejects_malformed_input(day: str, at: str | None) -> None:
    """Malformed follow-up input is a validation error."""
    with pytest.raises(ValidationException):
        clock.combine_date_time(day, at, tz=SAO_PAULO)


def test_day_bounds_cover_the_local_day() -> None:
    """Bounds are local midnight to the next local midnight."""
    start, end = clock.day_bounds(date(2024, 6, 1), tz=SAO_PAULO)
    assert start == datetime(2024, 6, 1, 3, 0, tzinfo=UTC)
    assert end == datetime(2024, 6, 2, 3, 0, tzinfo=UTC)


def test_today_bounds_use_clinic_calendar_day() -> None:
    """At 01:00 UTC it is still the previous day in Sao Paulo."""
    now = datetime(2024, 6, 2, 1, 0, tzinfo=UTC)
    assert clock.local_today(SAO_PAULO, now) == date(2024, 6, 1)
    start, end = clock.today_bounds(SAO_PAULO, now)
    assert start <= now < end


def test_range_bounds_expand_bare_dates() -> None:
    """Agenda bounds cover whole days."""
    start = clock.range_start("2024-06-01", SAO_PAULO)
    end = clock.range_end("2024-06-01", SAO_PAULO)
    assert start == datetime(2024, 6, 1, 3, 0, tzinfo=UTC)
    assert end == datetime(2024, 6, 2, 3, 0, tzinfo=UTC) - timedelta(microseconds=1)
    assert clock.range_start(None) is None
    assert clock.range_end("") is None
