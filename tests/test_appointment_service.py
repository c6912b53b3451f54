from datetime import datetime

import pytest

from src.tuition_system.tuition_system.core.enums import AppointmentStatus, Role
from src.tuition_system.tuition_system.core.exceptions import (
    AuthorizationError,
    ConflictError,
    NotFoundError,
    ValidationError,
)


def _book(svc, student_id="s1", teacher_id="t1", start="2024-01-20T10:00:00", end="2024-01-20T11:00:00", **kw):
    return svc.create(
        current_role=Role.ADMIN,
        student_id=student_id,
        teacher_id=teacher_id,
        start_time=start,
        end_time=end,
        **kw,
    )


def _no_changes(**kw):
    changes = {"status": None, "punch_in_time": None, "start_time": None, "end_time": None}
    changes.update(kw)
    return changes


def test_create_defaults_to_scheduled(container):
    a = _book(container.appointment_service, notes="  intro  ")
    assert a.status == AppointmentStatus.SCHEDULED
    assert a.notes == "intro"
    assert a.start_time == datetime(2024, 1, 20, 10, 0)


def test_student_matching_existing_teacher_collides_across_roles(container):
    svc = container.appointment_service
    _book(svc, student_id="s1", teacher_id="t1")

    with pytest.raises(ConflictError) as exc:
        _book(svc, student_id="t1", teacher_id="t2", start="2024-01-20T10:30:00", end="2024-01-20T11:30:00")
    assert "overlap" in str(exc.value)


def test_back_to_back_appointments_are_allowed(container):
    svc = container.appointment_service
    _book(svc)
    _book(svc, start="2024-01-20T11:00:00", end="2024-01-20T12:00:00")


def test_same_time_of_day_on_another_date_is_allowed(container):
    svc = container.appointment_service
    _book(svc)
    _book(svc, start="2024-01-21T10:00:00", end="2024-01-21T11:00:00")


def test_unrelated_participants_may_share_a_slot(container):
    svc = container.appointment_service
    _book(svc)
    _book(svc, student_id="s2", teacher_id="t2")


def test_end_must_follow_start(container):
    with pytest.raises(ValidationError):
        _book(container.appointment_service, start="2024-01-20T11:00:00", end="2024-01-20T10:00:00")


def test_only_admin_creates(container):
    with pytest.raises(AuthorizationError):
        container.appointment_service.create(
            current_role=Role.TEACHER,
            student_id="s1",
            teacher_id="t1",
            start_time="2024-01-20T10:00:00",
            end_time="2024-01-20T11:00:00",
        )


def test_assigned_teacher_can_complete_with_punch_in(container):
    svc = container.appointment_service
    a = _book(svc)

    updated = svc.update(
        current_user_id="t1",
        current_role=Role.TEACHER,
        appointment_id=a.appointment_id,
        changes=_no_changes(status="completed", punch_in_time="2024-01-20T10:02:00Z"),
    )
    assert updated.status == AppointmentStatus.COMPLETED
    assert updated.punch_in_time == datetime(2024, 1, 20, 10, 2)


def test_other_teacher_cannot_update(container):
    svc = container.appointment_service
    a = _book(svc)
    with pytest.raises(AuthorizationError):
        svc.update(
            current_user_id="t2",
            current_role=Role.TEACHER,
            appointment_id=a.appointment_id,
            changes=_no_changes(status="cancelled"),
        )


def test_teacher_cannot_reschedule(container):
    svc = container.appointment_service
    a = _book(svc)
    with pytest.raises(AuthorizationError):
        svc.update(
            current_user_id="t1",
            current_role=Role.TEACHER,
            appointment_id=a.appointment_id,
            changes=_no_changes(start_time="2024-01-20T09:00:00"),
        )


def test_invalid_status_is_rejected(container):
    svc = container.appointment_service
    a = _book(svc)
    with pytest.raises(ValidationError):
        svc.update(
            current_user_id="a1",
            current_role=Role.ADMIN,
            appointment_id=a.appointment_id,
            changes=_no_changes(status="done"),
        )


def test_reschedule_into_overlap_is_rejected_but_self_is_ignored(container):
    svc = container.appointment_service
    first = _book(svc)
    second = _book(svc, start="2024-01-20T12:00:00", end="2024-01-20T13:00:00")

    moved = svc.update(
        current_user_id="a1",
        current_role=Role.ADMIN,
        appointment_id=first.appointment_id,
        changes=_no_changes(start_time="2024-01-20T10:30:00", end_time="2024-01-20T11:30:00"),
    )
    assert moved.start_time == datetime(2024, 1, 20, 10, 30)

    with pytest.raises(ConflictError):
        svc.update(
            current_user_id="a1",
            current_role=Role.ADMIN,
            appointment_id=second.appointment_id,
            changes=_no_changes(start_time="2024-01-20T11:00:00"),
        )


def test_soft_delete_hides_appointment_and_frees_slot(container):
    svc = container.appointment_service
    a = _book(svc)
    svc.soft_delete(current_role=Role.ADMIN, appointment_id=a.appointment_id)

    with pytest.raises(NotFoundError):
        svc.get(a.appointment_id)
    _book(svc)


def test_listing_is_pinned_to_the_caller_for_students_and_teachers(container):
    svc = container.appointment_service
    _book(svc, student_id="s1", teacher_id="t1")
    _book(svc, student_id="s2", teacher_id="t2")

    mine = svc.list_for(current_user_id="s1", current_role=Role.STUDENT, student_id="s2")
    assert [a.student_id for a in mine] == ["s1"]

    theirs = svc.list_for(current_user_id="t2", current_role=Role.TEACHER)
    assert [a.teacher_id for a in theirs] == ["t2"]

    assert len(svc.list_for(current_user_id="a1", current_role=Role.ADMIN)) == 2
    assert svc.list_for(current_user_id="a1", current_role=Role.ADMIN, status="cancelled") == []
