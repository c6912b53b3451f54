from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..core.enums import AppointmentStatus


@dataclass(frozen=True)
class Appointment:
    """Domain entity: a one-off session between a student and a teacher."""

    appointment_id: str
    student_id: str
    teacher_id: str
    start_time: datetime
    end_time: datetime
    status: AppointmentStatus = AppointmentStatus.SCHEDULED
    notes: Optional[str] = None
    punch_in_time: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    deleted_at: Optional[datetime] = None

    @property
    def participants(self) -> tuple[str, str]:
        return self.student_id, self.teacher_id


@dataclass(frozen=True)
class NewAppointment:
    student_id: str
    teacher_id: str
    start_time: datetime
    end_time: datetime
    status: AppointmentStatus = AppointmentStatus.SCHEDULED
    notes: Optional[str] = None


@dataclass(frozen=True)
class AppointmentFilters:
    student_id: Optional[str] = None
    teacher_id: Optional[str] = None
    status: Optional[AppointmentStatus] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
