from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Mapping, Optional, Sequence

from ..common.intervals import first_overlap, first_overlapping_pair
from ..common.validators import require_enum, require_hhmm, require_non_empty, require_time_order
from ..core.enums import Role, Weekday
from ..core.exceptions import AuthorizationError, ConflictError, NotFoundError, ValidationError
from .model import NewTimetableEntry, TimetableEntry
from .repository import TimetableRepository

logger = logging.getLogger(__name__)


def _bounds(entry) -> tuple[str, str]:
    return entry.start_time, entry.end_time


def _clean_notes(notes) -> Optional[str]:
    if notes is None:
        return None
    return str(notes).strip() or None


def find_existing_conflict(
    candidates: Sequence[NewTimetableEntry | TimetableEntry],
    existing: Sequence[TimetableEntry],
) -> Optional[tuple]:
    """First (candidate, stored entry) pair sharing a day with overlapping times."""

    for candidate in candidates:
        same_day = [e for e in existing if e.day == candidate.day and e.is_active]
        clash = first_overlap(candidate.start_time, candidate.end_time, same_day, bounds=_bounds)
        if clash:
            return candidate, clash
    return None


def find_batch_conflict(entries: Sequence[NewTimetableEntry]) -> Optional[tuple]:
    """First overlapping pair inside a submitted batch, grouped by day."""

    by_day: dict[Weekday, list[NewTimetableEntry]] = {}
    for e in entries:
        by_day.setdefault(e.day, []).append(e)
    for group in by_day.values():
        pair = first_overlapping_pair(group, bounds=_bounds)
        if pair:
            return pair
    return None


class TimetableService:
    """Use cases around weekly timetable entries."""

    def __init__(self, timetable: TimetableRepository):
        self._timetable = timetable

    @staticmethod
    def _require_admin(current_role: Role) -> None:
        if current_role != Role.ADMIN:
            raise AuthorizationError("Unauthorized: Admin access required")

    @staticmethod
    def _build_entry(
        *,
        student_id: str,
        teacher_id: str,
        subject_id: str,
        day,
        start_time: str,
        end_time: str,
        notes: Optional[str] = None,
    ) -> NewTimetableEntry:
        student_id = require_non_empty(student_id, "Student ID")
        teacher_id = require_non_empty(teacher_id, "Teacher ID")
        subject_id = require_non_empty(subject_id, "Subject ID")
        day_enum = require_enum(day, Weekday, "day")
        start = require_hhmm(start_time, "start time")
        end = require_hhmm(end_time, "end time")
        return NewTimetableEntry(
            student_id=student_id,
            teacher_id=teacher_id,
            subject_id=subject_id,
            day=day_enum,
            start_time=start,
            end_time=end,
            notes=_clean_notes(notes),
        )

    def create_entry(
        self,
        *,
        current_role: Role,
        student_id: str,
        teacher_id: str,
        subject_id: str,
        day,
        start_time: str,
        end_time: str,
        notes: Optional[str] = None,
    ) -> TimetableEntry:
        self._require_admin(current_role)

        entry = self._build_entry(
            student_id=student_id,
            teacher_id=teacher_id,
            subject_id=subject_id,
            day=day,
            start_time=start_time,
            end_time=end_time,
            notes=notes,
        )
        require_time_order(entry.start_time, entry.end_time)

        def guard(existing: Sequence[TimetableEntry]) -> None:
            conflict = find_existing_conflict([entry], existing)
            if conflict:
                _, clash = conflict
                logger.warning("Rejected timetable entry for student %s on %s: overlap", entry.student_id, entry.day.value)
                raise ConflictError(
                    "Timetable entry overlaps with an existing entry for this student on "
                    f"{clash.day.value} ({clash.start_time}-{clash.end_time})"
                )

        created = self._timetable.create_entries(student_id=entry.student_id, entries=[entry], guard=guard)[0]
        logger.info("Created timetable entry %s for student %s", created.entry_id, created.student_id)
        return created

    def bulk_create(
        self,
        *,
        current_role: Role,
        student_id: str,
        entries: Sequence[Mapping],
    ) -> list[TimetableEntry]:
        """Create several entries for one student, all or nothing.

        Each mapping carries teacher_id, subject_id, day, start_time, end_time and optional notes.
        """

        self._require_admin(current_role)

        student_id = require_non_empty(student_id, "Student ID")
        if not entries:
            raise ValidationError("At least one entry is required")

        batch: list[NewTimetableEntry] = []
        for raw in entries:
            entry = self._build_entry(
                student_id=student_id,
                teacher_id=raw.get("teacher_id"),
                subject_id=raw.get("subject_id"),
                day=raw.get("day"),
                start_time=raw.get("start_time"),
                end_time=raw.get("end_time"),
                notes=raw.get("notes"),
            )
            require_time_order(
                entry.start_time,
                entry.end_time,
                f"Invalid time range for {entry.day.value}: end time must be after start time",
            )
            batch.append(entry)

        pair = find_batch_conflict(batch)
        if pair:
            a, b = pair
            raise ConflictError(
                f"Timetable entries overlap within the submitted batch on {a.day.value}: "
                f"{a.start_time}-{a.end_time} and {b.start_time}-{b.end_time}"
            )

        def guard(existing: Sequence[TimetableEntry]) -> None:
            conflict = find_existing_conflict(batch, existing)
            if conflict:
                candidate, clash = conflict
                logger.warning("Rejected bulk timetable for student %s: overlap on %s", student_id, clash.day.value)
                raise ConflictError(
                    f"Timetable entry {candidate.day.value} {candidate.start_time}-{candidate.end_time} overlaps "
                    f"with an existing entry for this student ({clash.start_time}-{clash.end_time})"
                )

        created = self._timetable.create_entries(student_id=student_id, entries=batch, guard=guard)
        logger.info("Created %d timetable entries for student %s", len(created), student_id)
        return created

    def get_entry(self, *, current_role: Role, entry_id: str) -> TimetableEntry:
        self._require_admin(current_role)
        entry = self._timetable.get_by_id(entry_id)
        if not entry:
            raise NotFoundError("Timetable entry not found")
        return entry

    def update_entry(self, *, current_role: Role, entry_id: str, changes: Mapping) -> TimetableEntry:
        """Apply a partial update and re-check overlaps, ignoring the entry itself."""

        self._require_admin(current_role)

        clean: dict = {}
        if changes.get("teacher_id") is not None:
            clean["teacher_id"] = require_non_empty(changes["teacher_id"], "Teacher ID")
        if changes.get("subject_id") is not None:
            clean["subject_id"] = require_non_empty(changes["subject_id"], "Subject ID")
        if changes.get("day") is not None:
            clean["day"] = require_enum(changes["day"], Weekday, "day")
        if changes.get("start_time") is not None:
            clean["start_time"] = require_hhmm(changes["start_time"], "start time")
        if changes.get("end_time") is not None:
            clean["end_time"] = require_hhmm(changes["end_time"], "end time")
        if "notes" in changes:
            clean["notes"] = _clean_notes(changes["notes"])
        if changes.get("is_active") is not None:
            if not isinstance(changes["is_active"], bool):
                raise ValidationError("isActive must be a boolean")
            clean["is_active"] = changes["is_active"]

        if "start_time" in clean and "end_time" in clean:
            require_time_order(clean["start_time"], clean["end_time"])

        def guard(merged: TimetableEntry, others: Sequence[TimetableEntry]) -> None:
            require_time_order(merged.start_time, merged.end_time)
            if not merged.is_active:
                return
            conflict = find_existing_conflict([merged], others)
            if conflict:
                _, clash = conflict
                raise ConflictError(
                    "Timetable entry overlaps with an existing entry for this student on "
                    f"{clash.day.value} ({clash.start_time}-{clash.end_time})"
                )

        updated = self._timetable.update_entry(entry_id, changes=clean, guard=guard)
        if not updated:
            raise NotFoundError("Timetable entry not found")
        logger.info("Updated timetable entry %s", entry_id)
        return updated

    def soft_delete(self, *, current_role: Role, entry_id: str) -> TimetableEntry:
        self._require_admin(current_role)
        deleted = self._timetable.soft_delete(entry_id)
        if not deleted:
            raise NotFoundError("Timetable entry not found")
        logger.info("Soft-deleted timetable entry %s", entry_id)
        return deleted

    def list_for_student(self, student_id: str) -> Sequence[TimetableEntry]:
        student_id = require_non_empty(student_id, "Student ID")
        return self._timetable.list_for_student(student_id)

    def list_for_teacher(self, teacher_id: str) -> Sequence[TimetableEntry]:
        return self._timetable.list_for_teacher(teacher_id)

    def upcoming_for_teacher(self, teacher_id: str, *, now: datetime) -> list[TimetableEntry]:
        """Entries still to come today plus everything scheduled tomorrow."""

        today = Weekday.of(now.date())
        tomorrow = Weekday.of(now.date() + timedelta(days=1))
        current = now.strftime("%H:%M")

        upcoming = []
        for e in self._timetable.list_for_teacher(teacher_id):
            if e.day == today and e.start_time > current:
                upcoming.append(e)
            elif e.day == tomorrow:
                upcoming.append(e)
        return upcoming

    def student_ids_for_teacher(self, teacher_id: str) -> list[str]:
        seen: dict[str, None] = {}
        for e in self._timetable.list_for_teacher(teacher_id):
            seen.setdefault(e.student_id, None)
        return list(seen)

    def student_timetable_for_teacher(self, *, teacher_id: str, student_id: str) -> Sequence[TimetableEntry]:
        student_id = require_non_empty(student_id, "Student ID")
        if student_id not in self.student_ids_for_teacher(teacher_id):
            raise AuthorizationError("Access denied")
        return self._timetable.list_for_student(student_id)
