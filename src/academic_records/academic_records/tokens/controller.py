from __future__ import annotations

import io
from datetime import timedelta

from flask import Flask, jsonify, request, send_file

from ..common.validators import require_positive_id
from ..common.web import caller_from_session, domain_error_response, internal_error_response, login_required
from ..container import Container
from ..core.enums import Role
from ..core.exceptions import DomainError, InvalidTokenError, NotFoundError, ValidationError
from .checkin_url import build_checkin_url, render_qr_png


def _requested_validity(raw, container: Container) -> timedelta:
    """Window from the request body; absent means the configured default."""
    if raw is None:
        return container.default_token_validity
    if isinstance(raw, bool):
        raise ValidationError("validityMinutes is invalid")
    try:
        minutes = int(raw)
    except (TypeError, ValueError):
        raise ValidationError("validityMinutes is invalid") from None

    max_minutes = int(container.max_token_validity.total_seconds() // 60)
    if not 0 < minutes <= max_minutes:
        raise ValidationError(f"validityMinutes must be between 1 and {max_minutes}")
    return timedelta(minutes=minutes)


def register(app: Flask, container: Container) -> None:
    @app.route("/api/attendance/qr", methods=["POST"], endpoint="api_attendance_qr_issue")
    @login_required
    def api_attendance_qr_issue():
        """Teacher opens a self check-in window for one course/group."""
        try:
            caller = caller_from_session()
            caller.require_role(Role.ADMIN, Role.TEACHER)

            data = request.get_json(silent=True) or {}
            course_id = require_positive_id(data.get("courseId"), "courseId")
            group_id = require_positive_id(data.get("groupId"), "groupId")
            validity = _requested_validity(data.get("validityMinutes"), container)

            if not container.directory_repo.get_course(course_id):
                raise NotFoundError("Course not found")
            if not container.directory_repo.group_exists(group_id):
                raise NotFoundError("Group not found")

            issued = container.token_store.issue(
                course_id=course_id,
                group_id=group_id,
                issuer_id=caller.related_id or caller.user_id,
                validity=validity,
            )
            return jsonify({
                "success": True,
                "data": {
                    "token": issued.token,
                    "expiresAt": issued.expires_at.isoformat(),
                    "qrCodeUrl": build_checkin_url(container.public_base_url, issued.token),
                },
            }), 201
        except DomainError as e:
            return domain_error_response(e)
        except Exception:
            return internal_error_response("issue_checkin_token")

    @app.route("/api/attendance/qr/image", methods=["GET"], endpoint="api_attendance_qr_image")
    @login_required
    def api_attendance_qr_image():
        """PNG of the check-in URL for the teacher to project."""
        try:
            caller_from_session().require_role(Role.ADMIN, Role.TEACHER)
            token = (request.args.get("token") or "").strip()
            if not token:
                raise InvalidTokenError("Token is required")
            container.token_store.validate(token)

            png = render_qr_png(build_checkin_url(container.public_base_url, token))
            return send_file(io.BytesIO(png), mimetype="image/png")
        except DomainError as e:
            return domain_error_response(e)
        except Exception:
            return internal_error_response("render_checkin_qr")

    @app.route("/api/attendance/qr/<token>", methods=["DELETE"], endpoint="api_attendance_qr_revoke")
    @login_required
    def api_attendance_qr_revoke(token: str):
        try:
            caller_from_session().require_role(Role.ADMIN, Role.TEACHER)
            if not container.token_store.revoke(token):
                raise InvalidTokenError("Invalid or unknown QR code")
            return jsonify({"success": True}), 200
        except DomainError as e:
            return domain_error_response(e)
        except Exception:
            return internal_error_response("revoke_checkin_token")
