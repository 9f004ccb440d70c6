from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .enums import Role
from .exceptions import AuthorizationError


@dataclass(frozen=True)
class CallerContext:
    """Who is calling, as resolved by the identity provider.

    ``related_id`` is the teacher or student id the user account maps to
    (None for admins).
    """

    user_id: int
    role: Role
    related_id: Optional[int] = None

    def require_role(self, *roles: Role, message: str = "Permission denied") -> None:
        if self.role not in roles:
            raise AuthorizationError(message)
