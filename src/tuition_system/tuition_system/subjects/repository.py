from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import Subject


class SubjectRepository(Protocol):
    def get_by_id(self, subject_id: str) -> Optional[Subject]:
        raise NotImplementedError

    def list_all(self) -> Sequence[Subject]:
        raise NotImplementedError

    def create(self, *, name: str, description: Optional[str] = None) -> Subject:
        raise NotImplementedError

    def update(self, subject_id: str, *, changes: dict) -> Optional[Subject]:
        """Apply `name`/`description` changes; returns None when the subject is missing."""

        raise NotImplementedError

    def delete(self, subject_id: str) -> bool:
        raise NotImplementedError
