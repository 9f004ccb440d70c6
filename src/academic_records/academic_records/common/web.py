"""Helpers shared by the Flask controllers."""
from __future__ import annotations

from functools import wraps

import structlog
from flask import jsonify, session

from ..core.context import CallerContext
from ..core.enums import Role
from ..core.exceptions import (
    AlreadyCheckedInError,
    AuthorizationError,
    DomainError,
    ExpiredTokenError,
    InvalidTokenError,
    NotEnrolledError,
    NotFoundError,
    ScheduleConflictError,
    ValidationError,
)

logger = structlog.get_logger(__name__)

_STATUS_BY_ERROR = (
    (ScheduleConflictError, 409),
    (AlreadyCheckedInError, 409),
    (NotFoundError, 404),
    (AuthorizationError, 403),
    (NotEnrolledError, 403),
    (InvalidTokenError, 400),
    (ExpiredTokenError, 400),
    (ValidationError, 400),
)


def caller_from_session() -> CallerContext:
    """Build the caller context from what the login flow stored in the session."""
    related = session.get("related_id")
    return CallerContext(
        user_id=int(session["user_id"]),
        role=Role(session.get("role")),
        related_id=int(related) if related is not None else None,
    )


def login_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        if "user_id" not in session or session.get("role") not in {r.value for r in Role}:
            return jsonify({"success": False, "error": "unauthenticated", "message": "Authentication required"}), 401
        return view(*args, **kwargs)

    return wrapper


def domain_error_response(e: DomainError):
    status = next((code for cls, code in _STATUS_BY_ERROR if isinstance(e, cls)), 400)
    body = {"success": False, "error": e.code, "message": str(e)}
    if isinstance(e, ScheduleConflictError):
        body["conflicts"] = [c.to_dict() for c in e.conflicts]
    return jsonify(body), status


def internal_error_response(action: str):
    logger.exception("request_failed", action=action)
    return jsonify({"success": False, "error": "internal_error", "message": "Internal server error"}), 500
