from __future__ import annotations

from typing import Callable, Optional, Protocol, Sequence

from .model import Appointment, AppointmentFilters, NewAppointment

# Receives every non-deleted appointment involving either participant (in either role).
CreateGuard = Callable[[Sequence[Appointment]], None]
# Receives the appointment as it would look after the update plus the others involving its participants.
UpdateGuard = Callable[[Appointment, Sequence[Appointment]], None]


class AppointmentRepository(Protocol):
    def get_by_id(self, appointment_id: str) -> Optional[Appointment]:
        """Non-deleted appointment by id."""

        raise NotImplementedError

    def list_appointments(self, filters: AppointmentFilters) -> Sequence[Appointment]:
        """Non-deleted appointments matching every given filter, ordered by start time."""

        raise NotImplementedError

    def create(self, new: NewAppointment, *, guard: CreateGuard) -> Appointment:
        """Atomically check and insert, serialized per participant."""

        raise NotImplementedError

    def update(self, appointment_id: str, *, changes: dict, guard: UpdateGuard) -> Optional[Appointment]:
        raise NotImplementedError

    def soft_delete(self, appointment_id: str) -> Optional[Appointment]:
        raise NotImplementedError
