from datetime import date, datetime

import pytest

from src.tuition_system.tuition_system.analytics.calculator.lenient_calculator import LenientHoursCalculator
from src.tuition_system.tuition_system.analytics.calculator.strict_calculator import StrictHoursCalculator
from src.tuition_system.tuition_system.analytics.service import attendance_rate
from src.tuition_system.tuition_system.core.enums import Role
from src.tuition_system.tuition_system.core.exceptions import ValidationError

# A Monday
NOW = datetime(2024, 1, 15, 12, 0)


def _entry(container, day="Monday", student_id="s1", teacher_id="t1", subject_id="math", start="09:00", end="10:00"):
    return container.timetable_service.create_entry(
        current_role=Role.ADMIN,
        student_id=student_id,
        teacher_id=teacher_id,
        subject_id=subject_id,
        day=day,
        start_time=start,
        end_time=end,
    )


def _add(world, d, duration="1hr", teacher_id="t1", student_id="s1", subject_id="math"):
    world.attendance.add(
        teacher_id=teacher_id,
        student_id=student_id,
        subject_id=subject_id,
        class_date=d,
        duration=duration,
    )


def test_teacher_totals_and_duration_breakdown(container, world):
    _add(world, date(2024, 1, 8), "1hr")
    _add(world, date(2024, 1, 9), "1hr", student_id="s2", subject_id="eng")
    _add(world, date(2024, 1, 10), "30min")

    stats = container.analytics_service.teacher_detailed_stats("t1", now=NOW)

    assert stats["totalClasses"] == 3
    assert stats["totalHours"] == 2.5
    assert stats["durationBreakdown"] == {"1hr": 2, "30min": 1}
    assert stats["uniqueStudents"] == 2
    assert stats["uniqueSubjects"] == 2

    by_student = {row["studentId"]: row for row in stats["studentWiseBreakdown"]}
    assert by_student["s1"]["classes"] == 2
    assert by_student["s1"]["hours"] == 1.5
    assert by_student["s1"]["subjects"] == ["Mathematics"]
    assert by_student["s2"]["studentName"] == "Sue Student"

    by_subject = {row["subjectId"]: row for row in stats["subjectWiseBreakdown"]}
    assert by_subject["eng"] == {"subjectId": "eng", "subjectName": "English", "classes": 1, "hours": 1.0}


def test_rate_is_literal_zero_without_schedule(container, world):
    _add(world, date(2024, 1, 8))
    stats = container.analytics_service.teacher_detailed_stats("t1", now=NOW)
    assert stats["scheduledClassesPerWeek"] == 0
    assert stats["attendanceRate"] == "0"


def test_attendance_rate_formatting():
    assert attendance_rate(0, 0) == "0"
    assert attendance_rate(1, 3) == "33.3"
    assert attendance_rate(3, 2) == "150.0"


def test_missed_classes_for_one_past_monday(container):
    _entry(container, day="Monday")

    missed = container.analytics_service.missed_classes(
        "t1", start=date(2024, 1, 6), end=date(2024, 1, 12), now=NOW
    )
    assert len(missed) == 1
    m = missed[0]
    assert m["date"] == "2024-01-08"
    assert m["day"] == "Monday"
    assert (m["studentName"], m["teacherName"], m["subjectName"]) == ("Sam Student", "Tom Teacher", "Mathematics")
    assert (m["startTime"], m["endTime"]) == ("09:00", "10:00")


def test_attended_class_is_not_missed(container, world):
    _entry(container, day="Monday")
    _add(world, date(2024, 1, 8))

    missed = container.analytics_service.missed_classes("t1", start=date(2024, 1, 1), end=date(2024, 1, 12), now=NOW)
    assert [m["date"] for m in missed] == ["2024-01-01"]


def test_today_and_future_are_never_missed(container):
    _entry(container, day="Monday")

    missed = container.analytics_service.missed_classes("t1", start=date(2024, 1, 15), end=date(2024, 1, 29), now=NOW)
    assert missed == []


def test_missed_requires_ordered_range(container):
    with pytest.raises(ValidationError):
        container.analytics_service.missed_classes("t1", start=date(2024, 1, 10), end=date(2024, 1, 1), now=NOW)


def test_detailed_stats_without_range_look_back_thirty_days(container):
    _entry(container, day="Monday")
    _entry(container, day="Tuesday")

    stats = container.analytics_service.teacher_detailed_stats("t1", now=NOW)
    # Mondays and Tuesdays from 2023-12-16 up to (not including) 2024-01-15
    assert stats["missedClassesCount"] == 8
    assert stats["scheduledClassesPerWeek"] == 2
    assert stats["attendanceRate"] == "0.0"


def test_student_monthly_trend_and_recent_classes(container, world):
    for d in (date(2024, 2, 1), date(2023, 12, 5), date(2024, 1, 9), date(2024, 1, 2)):
        _add(world, d, "1.5hr")
    _add(world, date(2024, 1, 3), "2hr", teacher_id="t2", subject_id="eng")

    stats = container.analytics_service.student_detailed_stats("s1", now=NOW)

    assert [m["month"] for m in stats["monthlyTrend"]] == ["2023-12", "2024-01", "2024-02"]
    assert stats["monthlyTrend"][1] == {"month": "2024-01", "classes": 3, "hours": 5.0}
    assert stats["uniqueTeachers"] == 2
    assert [r["classDate"] for r in stats["recentClasses"]][:2] == ["2024-02-01", "2024-01-09"]
    by_teacher = {row["teacherId"]: row for row in stats["teacherWiseBreakdown"]}
    assert by_teacher["t2"]["subjects"] == ["English"]


def test_recent_classes_are_capped(container, world):
    for day in range(1, 16):
        _add(world, date(2023, 11, day))
    stats = container.analytics_service.student_detailed_stats("s1", now=NOW)
    assert len(stats["recentClasses"]) == 10
    assert stats["recentClasses"][0]["classDate"] == "2023-11-15"


def test_overall_stats(container, world):
    _add(world, date(2024, 1, 8))
    _add(world, date(2024, 1, 9), "2hr", teacher_id="t2", student_id="s2", subject_id="eng")
    _add(world, date(2023, 12, 1))

    stats = container.analytics_service.overall_stats(start=date(2024, 1, 1), end=date(2024, 1, 31))
    assert stats == {
        "totalClasses": 2,
        "totalHours": 3.0,
        "totalTeachers": 2,
        "totalStudents": 2,
        "totalSubjects": 2,
    }


def test_top_teachers_ranked_by_class_count(container, world):
    _add(world, date(2024, 1, 8), teacher_id="t2")
    for d in (date(2024, 1, 9), date(2024, 1, 10)):
        _add(world, d, teacher_id="t1", student_id="s2")
    _add(world, date(2024, 1, 11), teacher_id="t1")

    top = container.analytics_service.top_teachers(limit=5)
    assert [t["teacherId"] for t in top] == ["t1", "t2"]
    assert top[0]["totalClasses"] == 3
    assert top[0]["uniqueStudents"] == 2
    assert top[0]["teacherName"] == "Tom Teacher"

    assert len(container.analytics_service.top_teachers(limit=1)) == 1


def test_unknown_duration_counts_zero_hours(container, world):
    _add(world, date(2024, 1, 8), "4hr")
    _add(world, date(2024, 1, 9), "1hr")

    stats = container.analytics_service.teacher_detailed_stats("t1", now=NOW)
    assert stats["totalHours"] == 1.0
    assert stats["durationBreakdown"] == {"1hr": 1, "4hr": 1}


def test_strict_durations_reject_unknown_labels(world):
    _add(world, date(2024, 1, 8), "4hr")
    strict = world.container(strict_durations=True)

    with pytest.raises(ValidationError):
        strict.analytics_service.teacher_detailed_stats("t1", now=NOW)


def test_calculators_agree_on_known_durations():
    lenient, strict = LenientHoursCalculator(), StrictHoursCalculator()
    for label, hours in (("30min", 0.5), ("45min", 0.75), ("1.75hr", 1.75), ("3hr", 3.0)):
        assert lenient.hours(label) == strict.hours(label) == hours
    assert lenient.hours("bogus") == 0
