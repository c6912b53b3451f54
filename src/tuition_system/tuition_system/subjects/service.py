from __future__ import annotations

import logging
from typing import Optional, Sequence

from ..common.validators import require_max_length, require_non_empty
from ..core.constants import SUBJECT_DESCRIPTION_MAX, SUBJECT_NAME_MAX
from ..core.enums import Role
from ..core.exceptions import AuthorizationError, NotFoundError, ValidationError
from .model import Subject
from .repository import SubjectRepository

logger = logging.getLogger(__name__)


class SubjectService:
    def __init__(self, subjects: SubjectRepository):
        self._subjects = subjects

    @staticmethod
    def _require_admin(current_role: Role) -> None:
        if current_role != Role.ADMIN:
            raise AuthorizationError("Unauthorized: Admin access required")

    @staticmethod
    def _clean_name(name) -> str:
        name = require_non_empty(name, "Subject name")
        return require_max_length(name, "Subject name", SUBJECT_NAME_MAX)

    @staticmethod
    def _clean_description(description) -> Optional[str]:
        if description is None:
            return None
        if not isinstance(description, str):
            raise ValidationError("Description must be a string")
        description = description.strip()
        return require_max_length(description, "Description", SUBJECT_DESCRIPTION_MAX) or None

    def list_all(self, *, current_role: Role) -> Sequence[Subject]:
        self._require_admin(current_role)
        return self._subjects.list_all()

    def get(self, *, current_role: Role, subject_id: str) -> Subject:
        self._require_admin(current_role)
        subject = self._subjects.get_by_id(subject_id)
        if not subject:
            raise NotFoundError("Subject not found")
        return subject

    def create(self, *, current_role: Role, name: str, description: Optional[str] = None) -> Subject:
        self._require_admin(current_role)
        subject = self._subjects.create(name=self._clean_name(name), description=self._clean_description(description))
        logger.info("Created subject %s (%s)", subject.subject_id, subject.name)
        return subject

    def update(self, *, current_role: Role, subject_id: str, data: dict) -> Subject:
        self._require_admin(current_role)

        changes: dict = {}
        if "name" in data:
            changes["name"] = self._clean_name(data.get("name"))
        if "description" in data:
            changes["description"] = self._clean_description(data.get("description"))

        subject = self._subjects.update(subject_id, changes=changes)
        if not subject:
            raise NotFoundError("Subject not found")
        return subject

    def delete(self, *, current_role: Role, subject_id: str) -> None:
        self._require_admin(current_role)
        if not self._subjects.delete(subject_id):
            raise NotFoundError("Subject not found")
        logger.info("Deleted subject %s", subject_id)
