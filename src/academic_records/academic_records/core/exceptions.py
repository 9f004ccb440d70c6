from __future__ import annotations

from typing import Sequence


class DomainError(Exception):
    """Base exception for business rule violations.

    ``code`` is the stable error kind rendered to API clients.
    """

    code = "domain_error"


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""

    code = "validation_error"


class AuthorizationError(DomainError):
    """Raised when a caller lacks permission for an action."""

    code = "forbidden"


class NotFoundError(DomainError):
    """Raised when a referenced course/group/participant/reservation does not exist."""

    code = "not_found"


class InvalidTokenError(DomainError):
    """Raised when a check-in token is unknown to the token store."""

    code = "invalid_token"


class ExpiredTokenError(DomainError):
    """Raised when a check-in token was found but its window has closed."""

    code = "expired_token"


class NotEnrolledError(DomainError):
    """Raised when a participant checks in to a group they do not belong to."""

    code = "not_enrolled"


class AlreadyCheckedInError(DomainError):
    """Raised when the attendance record is already ``present`` for the day."""

    code = "already_checked_in"


class InvalidTimeWindowError(ValidationError):
    """Raised for malformed ``HH:MM`` input or when start is not before end."""

    code = "invalid_time_window"


class ScheduleConflictError(DomainError):
    """Raised when a reservation overlaps an existing one on a shared resource."""

    code = "schedule_conflict"

    def __init__(self, message: str, conflicts: Sequence[object] = ()):
        super().__init__(message)
        self.conflicts = list(conflicts)


class InfrastructureError(Exception):
    """Opaque storage/delivery failure. Details are logged, never shown to users."""

    code = "internal_error"


class DuplicateRecordError(Exception):
    """Raised by repositories when a unique key rejects an insert."""
