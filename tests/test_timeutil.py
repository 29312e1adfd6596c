"""Tests for HH:MM parsing and the day-of-week encoding."""

import pytest
from pydantic import ValidationError

from academy.domain.errors import InvalidTimeFormat
from academy.domain.models import DayOfWeek, ScheduleCandidate
from academy.services.timeutil import from_minutes, normalise_time, to_minutes


@pytest.mark.parametrize(
    ("raw", "expected"),
    [("00:00", 0), ("09:05", 545), ("9:05", 545), ("23:59", 1439), (" 12:30 ", 750)],
)
def test_to_minutes(raw, expected):
    assert to_minutes(raw) == expected


@pytest.mark.parametrize("raw", ["24:00", "12:60", "ab:cd", "", "12:5", "1200", "-1:00", "12:00:00"])
def test_to_minutes_rejects_malformed(raw):
    with pytest.raises(InvalidTimeFormat):
        to_minutes(raw)


def test_invalid_time_format_is_a_value_error():
    assert issubclass(InvalidTimeFormat, ValueError)


def test_normalise_time_pads_hour():
    assert normalise_time("9:05") == "09:05"
    assert from_minutes(0) == "00:00"
    with pytest.raises(InvalidTimeFormat):
        from_minutes(24 * 60)


def test_day_of_week_is_case_insensitive_but_not_abbreviated():
    assert DayOfWeek("monday") is DayOfWeek.MONDAY
    assert DayOfWeek(" Friday ") is DayOfWeek.FRIDAY
    with pytest.raises(ValueError):
        DayOfWeek("Mon")


def test_candidate_normalises_and_checks_range():
    candidate = ScheduleCandidate(
        academy_id="a", day_of_week="tuesday", start_time="9:00", end_time="10:00"
    )
    assert candidate.day_of_week is DayOfWeek.TUESDAY
    assert candidate.start_time == "09:00"

    with pytest.raises(ValidationError):
        ScheduleCandidate(academy_id="a", day_of_week="TUESDAY", start_time="10:00", end_time="10:00")
    with pytest.raises(ValidationError):
        ScheduleCandidate(academy_id="a", day_of_week="TUESDAY", start_time="25:00", end_time="26:00")
