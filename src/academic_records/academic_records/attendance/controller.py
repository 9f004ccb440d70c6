from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.datetime_utils import parse_iso_date
from ..common.web import caller_from_session, domain_error_response, internal_error_response, login_required
from ..container import Container
from ..core.exceptions import DomainError, InvalidTokenError, ValidationError
from .model import MarkEntry


def _parse_entry(raw: dict) -> MarkEntry:
    try:
        return MarkEntry(
            student_id=raw["student"],
            course_id=raw["course"],
            group_id=raw["group"],
            attendance_date=parse_iso_date(str(raw["date"])[:10]),
            status=raw["status"],
            notes=raw.get("notes"),
        )
    except (KeyError, TypeError, ValueError):
        raise ValidationError("Each record needs student, course, group, date (YYYY-MM-DD) and status") from None


def register(app: Flask, container: Container) -> None:
    @app.route("/api/attendance/qr-checkin", methods=["GET"], endpoint="api_attendance_qr_checkin")
    @login_required
    def api_attendance_qr_checkin():
        """Student lands here from the scanned QR code."""
        try:
            token = (request.args.get("token") or "").strip()
            if not token:
                raise InvalidTokenError("Token is required")

            record = container.attendance_service.check_in_by_token(caller=caller_from_session(), token=token)
            return jsonify({"success": True, "message": "Check-in successful!", "data": record.to_dict()}), 200
        except DomainError as e:
            return domain_error_response(e)
        except Exception:
            return internal_error_response("token_checkin")

    @app.route("/api/attendance", methods=["POST"], endpoint="api_attendance_mark")
    @login_required
    def api_attendance_mark():
        """Manual batch marking: body ``{"records": [...]}``."""
        try:
            data = request.get_json(silent=True) or {}
            raw_records = data.get("records")
            if not isinstance(raw_records, list) or not raw_records:
                raise ValidationError("records must be a non-empty list")

            entries = [_parse_entry(r) for r in raw_records]
            saved = container.attendance_service.mark_batch(caller=caller_from_session(), entries=entries)
            return jsonify({"success": True, "data": [r.to_dict() for r in saved]}), 201
        except DomainError as e:
            return domain_error_response(e)
        except Exception:
            return internal_error_response("mark_attendance")

    @app.route("/api/attendance/<int:attendance_id>", methods=["PUT"], endpoint="api_attendance_correct")
    @login_required
    def api_attendance_correct(attendance_id: int):
        try:
            data = request.get_json(silent=True) or {}
            if "status" not in data:
                raise ValidationError("status is required")

            record = container.attendance_service.correct_status(
                caller=caller_from_session(),
                attendance_id=attendance_id,
                status=data["status"],
                notes=data.get("notes"),
            )
            return jsonify({"success": True, "data": record.to_dict()}), 200
        except DomainError as e:
            return domain_error_response(e)
        except Exception:
            return internal_error_response("correct_attendance")
