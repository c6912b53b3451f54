from __future__ import annotations

from typing import Callable, Optional, Protocol, Sequence

from .model import NewTimetableEntry, TimetableEntry

# Raises to abort the write; receives the student's current active entries.
CreateGuard = Callable[[Sequence[TimetableEntry]], None]
# Receives the entry as it would look after the update, plus the student's other active entries.
UpdateGuard = Callable[[TimetableEntry, Sequence[TimetableEntry]], None]


class TimetableRepository(Protocol):
    def get_by_id(self, entry_id: str) -> Optional[TimetableEntry]:
        """Non-deleted entry by id, joined with names."""

        raise NotImplementedError

    def list_for_student(self, student_id: str) -> Sequence[TimetableEntry]:
        """Active, non-deleted entries ordered by day and start time."""

        raise NotImplementedError

    def list_for_teacher(self, teacher_id: str) -> Sequence[TimetableEntry]:
        """Active, non-deleted entries ordered by day and start time."""

        raise NotImplementedError

    def create_entries(
        self,
        *,
        student_id: str,
        entries: Sequence[NewTimetableEntry],
        guard: CreateGuard,
    ) -> list[TimetableEntry]:
        """Atomically check and insert.

        Serializes writers for the same student, runs `guard` against the
        student's active entries and inserts every entry only if it returns.
        """

        raise NotImplementedError

    def update_entry(self, entry_id: str, *, changes: dict, guard: UpdateGuard) -> Optional[TimetableEntry]:
        """Atomically re-validate and update; None when missing or soft-deleted."""

        raise NotImplementedError

    def soft_delete(self, entry_id: str) -> Optional[TimetableEntry]:
        raise NotImplementedError
