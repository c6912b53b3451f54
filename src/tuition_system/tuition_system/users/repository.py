from __future__ import annotations

from typing import Optional, Protocol, Sequence

from ..core.enums import Role
from .model import User


class UserRepository(Protocol):
    """Repository interface for User.

    Note (DIP): services depend on this interface, not on a concrete DB.
    """

    def get_by_id(self, user_id: str) -> Optional[User]:
        raise NotImplementedError

    def search(self, *, query: str, role: Role, limit: int) -> Sequence[User]:
        """Case-insensitive substring match on name or email."""

        raise NotImplementedError

    def list_by_role(self, *, role: Optional[Role], limit: int) -> Sequence[User]:
        raise NotImplementedError

    def update_name(self, user_id: str, *, name: str) -> bool:
        raise NotImplementedError

    def set_banned(self, user_id: str, *, banned: bool, reason: Optional[str] = None) -> bool:
        raise NotImplementedError
