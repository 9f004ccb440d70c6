from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class TokenBinding:
    """What a valid check-in token grants: the (course, group, issuer) triple."""

    course_id: int
    group_id: int
    issuer_id: int


@dataclass(frozen=True)
class SessionToken:
    token: str
    binding: TokenBinding
    issued_at: datetime
    expires_at: datetime

    def is_valid_at(self, now: datetime) -> bool:
        return self.issued_at <= now < self.expires_at
