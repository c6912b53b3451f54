from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .analytics.calculator.lenient_calculator import LenientHoursCalculator
from .analytics.calculator.strict_calculator import StrictHoursCalculator
from .analytics.service import AnalyticsService
from .appointments.mysql_appointment_repository import MySQLAppointmentRepository
from .appointments.repository import AppointmentRepository
from .appointments.service import AppointmentService
from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.repository import AttendanceRepository
from .attendance.service import AttendanceService
from .database.connection import DBConfig, DatabaseConnection
from .subjects.mysql_subject_repository import MySQLSubjectRepository
from .subjects.repository import SubjectRepository
from .subjects.service import SubjectService
from .timetable.mysql_timetable_repository import MySQLTimetableRepository
from .timetable.repository import TimetableRepository
from .timetable.service import TimetableService
from .users.mysql_user_repository import MySQLUserRepository
from .users.repository import UserRepository
from .users.service import UserService


@dataclass(frozen=True)
class Container:
    users_repo: UserRepository
    subjects_repo: SubjectRepository
    timetable_repo: TimetableRepository
    appointments_repo: AppointmentRepository
    attendance_repo: AttendanceRepository

    user_service: UserService
    subject_service: SubjectService
    timetable_service: TimetableService
    appointment_service: AppointmentService
    attendance_service: AttendanceService
    analytics_service: AnalyticsService

    conn: Optional[DatabaseConnection] = None


def wire(
    *,
    users_repo: UserRepository,
    subjects_repo: SubjectRepository,
    timetable_repo: TimetableRepository,
    appointments_repo: AppointmentRepository,
    attendance_repo: AttendanceRepository,
    strict_durations: bool = False,
    conn: Optional[DatabaseConnection] = None,
) -> Container:
    """Build services on top of any set of repositories (MySQL or in-memory)."""

    calculator = StrictHoursCalculator() if strict_durations else LenientHoursCalculator()
    return Container(
        users_repo=users_repo,
        subjects_repo=subjects_repo,
        timetable_repo=timetable_repo,
        appointments_repo=appointments_repo,
        attendance_repo=attendance_repo,
        user_service=UserService(users_repo),
        subject_service=SubjectService(subjects_repo),
        timetable_service=TimetableService(timetable_repo),
        appointment_service=AppointmentService(appointments_repo),
        attendance_service=AttendanceService(attendance_repo, timetable_repo),
        analytics_service=AnalyticsService(attendance_repo, timetable_repo, calculator=calculator),
        conn=conn,
    )


def build_container(*, db_config: dict, strict_durations: bool = False) -> Container:
    conn = DatabaseConnection(DBConfig.from_mapping(db_config))

    return wire(
        users_repo=MySQLUserRepository(conn),
        subjects_repo=MySQLSubjectRepository(conn),
        timetable_repo=MySQLTimetableRepository(conn),
        appointments_repo=MySQLAppointmentRepository(conn),
        attendance_repo=MySQLAttendanceRepository(conn),
        strict_durations=strict_durations,
        conn=conn,
    )
