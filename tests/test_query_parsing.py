from datetime import date, datetime

import pytest

from src.tuition_system.tuition_system.common.query import parse_attendance_filters, parse_date_range, parse_limit
from src.tuition_system.tuition_system.common.validators import parse_date_value, parse_datetime_value, require_hhmm
from src.tuition_system.tuition_system.core.exceptions import ValidationError


def test_parse_date_range_accepts_dates_and_timestamps():
    rng = parse_date_range({"startDate": "2024-01-01", "endDate": "2024-01-31T00:00:00.000Z"})
    assert rng.start == date(2024, 1, 1)
    assert rng.end == date(2024, 1, 31)


def test_parse_date_range_rejects_reversed_range():
    with pytest.raises(ValidationError):
        parse_date_range({"startDate": "2024-02-01", "endDate": "2024-01-01"})


def test_parse_date_range_rejects_garbage():
    with pytest.raises(ValidationError):
        parse_date_range({"startDate": "yesterday"})


def test_attendance_filters_ignore_blank_values():
    filters = parse_attendance_filters({"teacherId": " ", "studentId": "s1"})
    assert filters.teacher_id is None
    assert filters.student_id == "s1"


def test_parse_limit():
    assert parse_limit({}, 5) == 5
    assert parse_limit({"limit": "3"}, 5) == 3
    with pytest.raises(ValidationError):
        parse_limit({"limit": "abc"}, 5)
    with pytest.raises(ValidationError):
        parse_limit({"limit": "0"}, 5)


def test_require_hhmm_pads_hours():
    assert require_hhmm("9:05", "start time") == "09:05"
    with pytest.raises(ValidationError):
        require_hhmm("25:00", "start time")


def test_parse_datetime_value_normalizes_to_naive_utc():
    assert parse_datetime_value("2024-01-20T10:00:00Z", "start") == datetime(2024, 1, 20, 10, 0)
    assert parse_datetime_value("2024-01-20T12:00:00+02:00", "start") == datetime(2024, 1, 20, 10, 0)


def test_date_fields_keep_the_calendar_day_as_written():
    assert parse_date_value("2024-01-10T00:00:00+05:30", "classDate") == date(2024, 1, 10)
    assert parse_date_value("2024-01-10T23:30:00-08:00", "classDate") == date(2024, 1, 10)
    assert parse_date_value("2024-01-10T00:00:00.000Z", "classDate") == date(2024, 1, 10)


def test_datetime_fields_still_normalise_offsets_to_utc():
    assert parse_datetime_value("2024-01-10T00:00:00+05:30", "startTime") == datetime(2024, 1, 9, 18, 30)
