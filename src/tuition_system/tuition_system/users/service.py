from __future__ import annotations

import logging
from typing import Optional, Sequence

from ..common.validators import require_enum, require_non_empty
from ..core.constants import USER_LIST_LIMIT, USER_NOT_FOUND, USER_SEARCH_LIMIT
from ..core.enums import Role
from ..core.exceptions import AuthorizationError, NotFoundError
from .model import User
from .repository import UserRepository

logger = logging.getLogger(__name__)


class UserService:
    """Use case: look up users and let admins manage them."""

    def __init__(self, users: UserRepository):
        self._users = users

    def get(self, user_id: str) -> User:
        user = self._users.get_by_id(user_id)
        if not user:
            raise NotFoundError(USER_NOT_FOUND)
        return user

    def search(self, *, query: str, role: str) -> Sequence[User]:
        query = require_non_empty(query, "Query")
        role_enum = require_enum(role, Role, "role")
        return self._users.search(query=query, role=role_enum, limit=USER_SEARCH_LIMIT)

    def list_by_role(self, role: Optional[str] = None, *, limit: int = USER_LIST_LIMIT) -> Sequence[User]:
        role_enum = require_enum(role, Role, "role") if role else None
        return self._users.list_by_role(role=role_enum, limit=limit)

    def rename(self, *, current_role: Role, user_id: str, name: str) -> str:
        if current_role != Role.ADMIN:
            raise AuthorizationError("Unauthorized: Admin access required")

        user_id = require_non_empty(user_id, "User ID")
        name = require_non_empty(name, "Name")
        self.get(user_id)
        self._users.update_name(user_id, name=name)
        logger.info("Renamed user %s", user_id)
        return name

    def set_banned(self, *, current_role: Role, user_id: str, banned: bool, reason: Optional[str] = None) -> None:
        if current_role != Role.ADMIN:
            raise AuthorizationError("Unauthorized: Admin access required")

        reason = reason.strip() if reason else None
        self.get(user_id)
        self._users.set_banned(user_id, banned=bool(banned), reason=reason)
        logger.info("User %s banned=%s", user_id, bool(banned))
