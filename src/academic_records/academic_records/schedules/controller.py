from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.validators import require_enum, require_non_empty, require_positive_id
from ..common.web import caller_from_session, domain_error_response, internal_error_response, login_required
from ..container import Container
from ..core.constants import DEFAULT_ACADEMIC_YEAR
from ..core.enums import DayOfWeek, Role, SessionType
from ..core.exceptions import DomainError, ValidationError
from .model import ReservationSlot


def _slot_from_json(data: dict) -> ReservationSlot:
    try:
        semester = int(data.get("semester", 1))
    except (TypeError, ValueError):
        raise ValidationError("semester must be 1 or 2") from None
    if semester not in (1, 2):
        raise ValidationError("semester must be 1 or 2")

    return ReservationSlot.from_wire(
        course_id=require_positive_id(data.get("course"), "course"),
        group_id=require_positive_id(data.get("group"), "group"),
        teacher_id=require_positive_id(data.get("teacher"), "teacher"),
        room=require_non_empty(data.get("room") or "", "room"),
        day_of_week=require_enum(DayOfWeek, data.get("dayOfWeek"), "dayOfWeek"),
        start_time=str(data.get("startTime") or ""),
        end_time=str(data.get("endTime") or ""),
        session_type=require_enum(SessionType, data.get("type") or SessionType.COURS.value, "type"),
        semester=semester,
        academic_year=str(data.get("academicYear") or DEFAULT_ACADEMIC_YEAR),
    )


def register(app: Flask, container: Container) -> None:
    @app.route("/api/schedules", methods=["GET"], endpoint="api_schedules_list")
    @login_required
    def api_schedules_list():
        try:
            caller = caller_from_session()
            group_id = request.args.get("groupId", type=int)
            teacher_id = request.args.get("teacherId", type=int)
            semester = request.args.get("semester", type=int)
            day_arg = request.args.get("day")
            day_of_week = require_enum(DayOfWeek, day_arg, "day") if day_arg else None

            # Students see their group's timetable, teachers their own.
            if caller.role == Role.STUDENT and caller.related_id:
                student = container.directory_repo.get_student(caller.related_id)
                if student and student.group_id:
                    group_id = student.group_id
            elif caller.role == Role.TEACHER and caller.related_id:
                teacher_id = teacher_id or caller.related_id

            by_day = container.schedule_service.list_by_day(
                group_id=group_id, teacher_id=teacher_id, day_of_week=day_of_week, semester=semester
            )
            schedules = [s.to_dict() for slots in by_day.values() for s in slots]
            return jsonify({
                "success": True,
                "data": {
                    "schedules": schedules,
                    "byDay": {day.value: [s.to_dict() for s in slots] for day, slots in by_day.items()},
                    "total": len(schedules),
                },
            }), 200
        except DomainError as e:
            return domain_error_response(e)
        except Exception:
            return internal_error_response("list_schedules")

    @app.route("/api/schedules/availability", methods=["GET"], endpoint="api_schedules_availability")
    @login_required
    def api_schedules_availability():
        """Form pre-check: same fields as create, as query parameters, plus optional ``excludeId``."""
        try:
            caller_from_session().require_role(Role.ADMIN, Role.TEACHER)
            slot = _slot_from_json(request.args.to_dict())
            exclude_id = request.args.get("excludeId", type=int)

            conflicts = container.schedule_service.check_availability(slot, exclude_id=exclude_id)
            return jsonify({
                "success": True,
                "data": {"available": not conflicts, "conflicts": [c.to_dict() for c in conflicts]},
            }), 200
        except DomainError as e:
            return domain_error_response(e)
        except Exception:
            return internal_error_response("check_schedule_availability")

    @app.route("/api/schedules", methods=["POST"], endpoint="api_schedules_create")
    @login_required
    def api_schedules_create():
        try:
            slot = _slot_from_json(request.get_json(silent=True) or {})
            created = container.schedule_service.create(caller=caller_from_session(), slot=slot)
            return jsonify({"success": True, "data": created.to_dict()}), 201
        except DomainError as e:
            return domain_error_response(e)
        except Exception:
            return internal_error_response("create_schedule")

    @app.route("/api/schedules/<int:schedule_id>", methods=["GET"], endpoint="api_schedules_get")
    @login_required
    def api_schedules_get(schedule_id: int):
        try:
            return jsonify({"success": True, "data": container.schedule_service.get(schedule_id).to_dict()}), 200
        except DomainError as e:
            return domain_error_response(e)
        except Exception:
            return internal_error_response("get_schedule")

    @app.route("/api/schedules/<int:schedule_id>", methods=["PUT"], endpoint="api_schedules_update")
    @login_required
    def api_schedules_update(schedule_id: int):
        try:
            slot = _slot_from_json(request.get_json(silent=True) or {})
            updated = container.schedule_service.update(caller=caller_from_session(), schedule_id=schedule_id, slot=slot)
            return jsonify({"success": True, "data": updated.to_dict()}), 200
        except DomainError as e:
            return domain_error_response(e)
        except Exception:
            return internal_error_response("update_schedule")

    @app.route("/api/schedules/<int:schedule_id>", methods=["DELETE"], endpoint="api_schedules_delete")
    @login_required
    def api_schedules_delete(schedule_id: int):
        try:
            container.schedule_service.delete(caller=caller_from_session(), schedule_id=schedule_id)
            return jsonify({"success": True, "message": "Schedule deleted"}), 200
        except DomainError as e:
            return domain_error_response(e)
        except Exception:
            return internal_error_response("delete_schedule")
