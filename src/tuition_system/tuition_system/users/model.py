from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..core.enums import Role


@dataclass(frozen=True)
class User:
    """Domain entity: User.

    Note: plain data object, no DB access code.
    """

    user_id: str
    name: str
    email: str
    role: Role
    banned: bool = False
    ban_reason: Optional[str] = None
