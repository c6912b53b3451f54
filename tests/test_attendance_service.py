import threading
from datetime import date

import pytest

from src.tuition_system.tuition_system.common.query import AttendanceFilters
from src.tuition_system.tuition_system.core.enums import Role
from src.tuition_system.tuition_system.core.exceptions import AuthorizationError, ConflictError, ValidationError

from fakes import NOW


def _mark(svc, **overrides):
    data = dict(
        current_user_id="t1",
        current_role=Role.TEACHER,
        student_id="s1",
        subject_id="math",
        class_date="2024-01-10",
        start_time="09:00",
        duration="1hr",
        now=NOW,
    )
    data.update(overrides)
    return svc.mark(**data)


def test_mark_records_class_for_calling_teacher(container):
    record = _mark(container.attendance_service, notes=" good ")
    assert record.teacher_id == "t1"
    assert record.class_date == date(2024, 1, 10)
    assert record.notes == "good"
    assert record.subject_name == "Mathematics"


def test_second_mark_same_day_is_rejected(container, world):
    svc = container.attendance_service
    _mark(svc)

    with pytest.raises(ConflictError) as exc:
        _mark(svc, start_time="15:00", duration="30min")
    assert str(exc.value) == "Attendance already marked for this class today"
    assert len(world.attendance.rows) == 1


def test_same_class_on_another_day_or_subject_is_allowed(container):
    svc = container.attendance_service
    _mark(svc)
    _mark(svc, class_date="2024-01-11")
    _mark(svc, subject_id="eng")


def test_check_if_class_marked(container):
    svc = container.attendance_service
    assert svc.check_if_class_marked(teacher_id="t1", student_id="s1", subject_id="math", class_date="2024-01-10") is None
    _mark(svc)
    found = svc.check_if_class_marked(teacher_id="t1", student_id="s1", subject_id="math", class_date=date(2024, 1, 10))
    assert found is not None


@pytest.mark.parametrize("duration", ["45min", "3hr", "90min"])
def test_only_markable_durations_are_accepted(container, duration):
    with pytest.raises(ValidationError) as exc:
        _mark(container.attendance_service, duration=duration)
    assert str(exc.value) == "Invalid duration. Must be one of: 30min, 1hr, 1.5hr, 2hr"


def test_missing_fields(container):
    with pytest.raises(ValidationError) as exc:
        _mark(container.attendance_service, subject_id=None)
    assert str(exc.value) == "Missing required fields"


def test_only_teachers_mark(container):
    with pytest.raises(AuthorizationError):
        _mark(container.attendance_service, current_user_id="a1", current_role=Role.ADMIN)


def test_teacher_listing_defaults_to_own_and_refuses_others(container, world):
    world.attendance.add(teacher_id="t1", student_id="s1", subject_id="math", class_date=date(2024, 1, 8))
    world.attendance.add(teacher_id="t2", student_id="s2", subject_id="eng", class_date=date(2024, 1, 9))
    svc = container.attendance_service

    own = svc.list_records(current_user_id="t1", current_role=Role.TEACHER, filters=AttendanceFilters())
    assert [r.teacher_id for r in own] == ["t1"]

    with pytest.raises(AuthorizationError):
        svc.list_records(current_user_id="t1", current_role=Role.TEACHER, filters=AttendanceFilters(teacher_id="t2"))


def test_student_listing_is_pinned_to_self(container, world):
    world.attendance.add(teacher_id="t1", student_id="s1", subject_id="math", class_date=date(2024, 1, 8))
    world.attendance.add(teacher_id="t1", student_id="s2", subject_id="math", class_date=date(2024, 1, 8))

    records = container.attendance_service.list_records(
        current_user_id="s2",
        current_role=Role.STUDENT,
        filters=AttendanceFilters(student_id="s1"),
    )
    assert [r.student_id for r in records] == ["s2"]


def test_listing_is_newest_first(container, world):
    for d in (date(2024, 1, 3), date(2024, 1, 10), date(2024, 1, 5)):
        world.attendance.add(teacher_id="t1", student_id="s1", subject_id="math", class_date=d)

    records = container.attendance_service.list_records(
        current_user_id="a1",
        current_role=Role.ADMIN,
        filters=AttendanceFilters(start_date=date(2024, 1, 4)),
    )
    assert [r.class_date.day for r in records] == [10, 5]


def test_today_scheduled_classes(container):
    tt = container.timetable_service
    for day in ("Monday", "Tuesday"):
        tt.create_entry(
            current_role=Role.ADMIN,
            student_id="s1",
            teacher_id="t1",
            subject_id="math",
            day=day,
            start_time="09:00",
            end_time="10:00",
        )

    classes = container.attendance_service.today_scheduled_classes("t1", today=date(2024, 1, 15))
    assert [c.day.value for c in classes] == ["Monday"]


def test_offset_timestamp_marks_the_day_it_names(container, world):
    svc = container.attendance_service
    record = _mark(svc, class_date="2024-01-10T00:00:00+05:30")
    assert record.class_date == date(2024, 1, 10)

    with pytest.raises(ConflictError):
        _mark(svc, class_date="2024-01-10")
    assert len(world.attendance.rows) == 1


def test_concurrent_marks_for_same_class_store_one_record(container, world):
    svc = container.attendance_service
    barrier = threading.Barrier(4)
    outcomes = []

    def mark():
        barrier.wait()
        try:
            outcomes.append(_mark(svc))
        except ConflictError as e:
            outcomes.append(e)

    threads = [threading.Thread(target=mark) for _ in range(4)]
    for t in threads:
        t.start()
    for t in threads:
        t.join(timeout=5)

    assert sum(1 for o in outcomes if isinstance(o, ConflictError)) == 3
    assert len(world.attendance.rows) == 1
