from __future__ import annotations

import logging
from typing import Mapping, Optional, Sequence

from ..common.intervals import first_overlap
from ..common.validators import (
    parse_datetime_value,
    require_enum,
    require_non_empty,
    require_time_order,
)
from ..core.enums import AppointmentStatus, Role
from ..core.exceptions import AuthorizationError, ConflictError, NotFoundError, ValidationError
from .model import Appointment, AppointmentFilters, NewAppointment
from .repository import AppointmentRepository

logger = logging.getLogger(__name__)


def _bounds(appointment: Appointment):
    return appointment.start_time, appointment.end_time


def _conflict_message(clash: Appointment) -> str:
    return (
        "Appointment time overlaps with an existing appointment for this student or teacher "
        f"({clash.start_time:%Y-%m-%d %H:%M} - {clash.end_time:%Y-%m-%d %H:%M})"
    )


def find_participant_conflict(candidate, existing: Sequence[Appointment]) -> Optional[Appointment]:
    """First appointment sharing a participant, in either role, whose time overlaps."""

    people = {candidate.student_id, candidate.teacher_id}
    sharing = [a for a in existing if a.student_id in people or a.teacher_id in people]
    return first_overlap(candidate.start_time, candidate.end_time, sharing, bounds=_bounds)


class AppointmentService:
    def __init__(self, appointments: AppointmentRepository):
        self._appointments = appointments

    def create(
        self,
        *,
        current_role: Role,
        student_id: str,
        teacher_id: str,
        start_time,
        end_time,
        status: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> Appointment:
        if current_role != Role.ADMIN:
            raise AuthorizationError("Unauthorized: Admin access required")

        new = NewAppointment(
            student_id=require_non_empty(student_id, "Student ID"),
            teacher_id=require_non_empty(teacher_id, "Teacher ID"),
            start_time=parse_datetime_value(start_time, "start time"),
            end_time=parse_datetime_value(end_time, "end time"),
            status=require_enum(status, AppointmentStatus, "status") if status else AppointmentStatus.SCHEDULED,
            notes=(notes or "").strip() or None,
        )
        require_time_order(new.start_time, new.end_time)

        def guard(existing: Sequence[Appointment]) -> None:
            clash = find_participant_conflict(new, existing)
            if clash:
                logger.warning(
                    "Rejected appointment %s/%s: overlaps %s", new.student_id, new.teacher_id, clash.appointment_id
                )
                raise ConflictError(_conflict_message(clash))

        created = self._appointments.create(new, guard=guard)
        logger.info("Created appointment %s", created.appointment_id)
        return created

    def list_for(
        self,
        *,
        current_user_id: str,
        current_role: Role,
        student_id: Optional[str] = None,
        teacher_id: Optional[str] = None,
        status: Optional[str] = None,
        start_date=None,
        end_date=None,
    ) -> Sequence[Appointment]:
        """List appointments; students and teachers only ever see their own."""

        if current_role == Role.STUDENT:
            student_id = current_user_id
        elif current_role == Role.TEACHER:
            teacher_id = current_user_id

        filters = AppointmentFilters(
            student_id=student_id or None,
            teacher_id=teacher_id or None,
            status=require_enum(status, AppointmentStatus, "status") if status else None,
            start_date=parse_datetime_value(start_date, "startDate") if start_date else None,
            end_date=parse_datetime_value(end_date, "endDate") if end_date else None,
        )
        return self._appointments.list_appointments(filters)

    def get(self, appointment_id: str) -> Appointment:
        appointment = self._appointments.get_by_id(appointment_id)
        if not appointment:
            raise NotFoundError("Appointment not found")
        return appointment

    def update(
        self,
        *,
        current_user_id: str,
        current_role: Role,
        appointment_id: str,
        changes: Mapping,
    ) -> Appointment:
        """Status/notes/punch-in by admin or the assigned teacher; rescheduling by admin only."""

        appointment = self.get(appointment_id)
        is_admin = current_role == Role.ADMIN
        if not is_admin and current_user_id != appointment.teacher_id:
            raise AuthorizationError("Unauthorized: Only admin or the assigned teacher can update this appointment")

        clean: dict = {}
        if changes.get("status") is not None:
            clean["status"] = require_enum(changes["status"], AppointmentStatus, "status")
        if "notes" in changes:
            clean["notes"] = (changes["notes"] or "").strip() or None
        if changes.get("punch_in_time"):
            clean["punch_in_time"] = parse_datetime_value(changes["punch_in_time"], "punch-in time")

        reschedule = changes.get("start_time") is not None or changes.get("end_time") is not None
        if reschedule:
            if not is_admin:
                raise AuthorizationError("Only admins can reschedule appointments")
            if changes.get("start_time") is not None:
                clean["start_time"] = parse_datetime_value(changes["start_time"], "start time")
            if changes.get("end_time") is not None:
                clean["end_time"] = parse_datetime_value(changes["end_time"], "end time")

        if not clean:
            raise ValidationError("Nothing to update")

        def guard(merged: Appointment, others: Sequence[Appointment]) -> None:
            if not reschedule:
                return
            require_time_order(merged.start_time, merged.end_time)
            clash = find_participant_conflict(merged, others)
            if clash:
                raise ConflictError(_conflict_message(clash))

        updated = self._appointments.update(appointment_id, changes=clean, guard=guard)
        if not updated:
            raise NotFoundError("Appointment not found")
        logger.info("Updated appointment %s (%s)", appointment_id, ", ".join(sorted(clean)))
        return updated

    def soft_delete(self, *, current_role: Role, appointment_id: str) -> Appointment:
        if current_role != Role.ADMIN:
            raise AuthorizationError("Unauthorized: Admin access required")
        deleted = self._appointments.soft_delete(appointment_id)
        if not deleted:
            raise NotFoundError("Appointment not found")
        logger.info("Soft-deleted appointment %s", appointment_id)
        return deleted
