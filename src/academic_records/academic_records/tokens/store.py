"""In-process table of outstanding check-in tokens.

The store is constructed once by the container and closed at shutdown, so it
can be replaced by a shared TTL cache without touching callers. Tokens stay
usable for every participant of the group until they expire.
"""
from __future__ import annotations

import secrets
import threading
from datetime import datetime, timedelta
from typing import Callable, Dict, Optional

import structlog

from ..common.datetime_utils import now_local
from ..core.constants import DEFAULT_TOKEN_BYTES, MIN_TOKEN_BYTES
from ..core.exceptions import ExpiredTokenError, InvalidTokenError, ValidationError
from .model import SessionToken, TokenBinding

logger = structlog.get_logger(__name__)

Clock = Callable[[], datetime]
RandomBytes = Callable[[int], bytes]


class SessionTokenStore:
    def __init__(
        self,
        *,
        clock: Clock = now_local,
        random_bytes: RandomBytes = secrets.token_bytes,
        token_bytes: int = DEFAULT_TOKEN_BYTES,
    ):
        if int(token_bytes) < MIN_TOKEN_BYTES:
            raise ValueError(f"token_bytes must be at least {MIN_TOKEN_BYTES}")
        self._clock = clock
        self._random_bytes = random_bytes
        self._token_bytes = int(token_bytes)
        self._tokens: Dict[str, SessionToken] = {}
        self._lock = threading.Lock()
        self._stop = threading.Event()
        self._sweeper: Optional[threading.Thread] = None

    def __len__(self) -> int:
        with self._lock:
            return len(self._tokens)

    def issue(self, *, course_id: int, group_id: int, issuer_id: int, validity: timedelta) -> SessionToken:
        if validity <= timedelta(0):
            raise ValidationError("Token validity must be positive")

        now = self._clock()
        try:
            expires_at = now + validity
        except OverflowError:
            raise ValidationError("Token validity is too large") from None

        token = self._random_bytes(self._token_bytes).hex()
        issued = SessionToken(
            token=token,
            binding=TokenBinding(course_id=int(course_id), group_id=int(group_id), issuer_id=int(issuer_id)),
            issued_at=now,
            expires_at=expires_at,
        )
        with self._lock:
            self._tokens[token] = issued
            removed = self._sweep_locked(now)

        logger.info(
            "checkin_token_issued",
            course_id=issued.binding.course_id,
            group_id=issued.binding.group_id,
            issuer_id=issued.binding.issuer_id,
            expires_at=issued.expires_at.isoformat(),
            swept=removed,
        )
        return issued

    def validate(self, token: str) -> TokenBinding:
        """Return the binding of a live token.

        An expired entry is evicted under the same lock that observed its
        expiry, so no caller can see it as valid afterwards.
        """
        now = self._clock()
        with self._lock:
            entry = self._tokens.get(token)
            if entry is None:
                raise InvalidTokenError("Invalid or unknown QR code")
            if now >= entry.expires_at:
                del self._tokens[token]
                raise ExpiredTokenError("QR code has expired")
            if now < entry.issued_at:
                raise InvalidTokenError("QR code is not active yet")
            return entry.binding

    def revoke(self, token: str) -> bool:
        with self._lock:
            return self._tokens.pop(token, None) is not None

    def sweep(self) -> int:
        now = self._clock()
        with self._lock:
            removed = self._sweep_locked(now)
        if removed:
            logger.debug("checkin_tokens_swept", removed=removed)
        return removed

    def _sweep_locked(self, now: datetime) -> int:
        expired = [k for k, v in self._tokens.items() if v.expires_at < now]
        for k in expired:
            del self._tokens[k]
        return len(expired)

    def start_sweeper(self, interval_seconds: float) -> None:
        """Run ``sweep`` every ``interval_seconds`` on a daemon thread."""
        if self._sweeper is not None:
            return
        self._stop.clear()

        def _run() -> None:
            while not self._stop.wait(interval_seconds):
                self.sweep()

        self._sweeper = threading.Thread(target=_run, name="checkin-token-sweeper", daemon=True)
        self._sweeper.start()

    def close(self) -> None:
        self._stop.set()
        if self._sweeper is not None:
            self._sweeper.join(timeout=5)
            self._sweeper = None
        with self._lock:
            self._tokens.clear()
