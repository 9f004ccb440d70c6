from __future__ import annotations

from dataclasses import replace
from datetime import date, datetime
from typing import Callable, List, Optional, Sequence

import structlog

from ..common.datetime_utils import now_local
from ..common.validators import clean_notes, require_enum, require_positive_id
from ..core.constants import CHECKIN_MAX_ATTEMPTS
from ..core.context import CallerContext
from ..core.enums import AttendanceStatus, CheckInMethod, Role
from ..core.exceptions import (
    AlreadyCheckedInError,
    AuthorizationError,
    DuplicateRecordError,
    InfrastructureError,
    NotEnrolledError,
    NotFoundError,
    ValidationError,
)
from ..notifications.service import NotificationDispatcher
from ..tokens.model import TokenBinding
from ..tokens.store import SessionTokenStore
from ..users.repository import DirectoryRepository
from .model import AttendanceRecord, MarkEntry
from .repository import AttendanceRepository

logger = structlog.get_logger(__name__)


class AttendanceStateMachine:
    """Moves attendance records between states.

    Token check-in: (no record) -> present, or absent/late/excused -> present;
    a record already ``present`` rejects another token check-in that day.
    Manual marking may set any status at any time.
    """

    def __init__(
        self,
        attendance: AttendanceRepository,
        directory: DirectoryRepository,
        tokens: SessionTokenStore,
        notifier: Optional[NotificationDispatcher] = None,
        *,
        clock: Callable[[], datetime] = now_local,
    ):
        self._attendance = attendance
        self._directory = directory
        self._tokens = tokens
        self._notifier = notifier
        self._clock = clock

    def check_in_by_token(self, *, caller: CallerContext, token: str, now: Optional[datetime] = None) -> AttendanceRecord:
        caller.require_role(Role.STUDENT, message="Only students can check in")
        if not caller.related_id:
            raise AuthorizationError("Only students can check in")

        binding = self._tokens.validate(token)
        return self.check_in(student_id=caller.related_id, binding=binding, token=token, now=now)

    def check_in(
        self,
        *,
        student_id: int,
        binding: TokenBinding,
        token: str,
        now: Optional[datetime] = None,
    ) -> AttendanceRecord:
        student = self._directory.get_student(student_id)
        if not student:
            raise NotFoundError("Student not found")
        if student.group_id != binding.group_id:
            raise NotEnrolledError("You are not enrolled in this group")

        now = now or self._clock()
        today = now.date()
        log = logger.bind(student_id=student_id, course_id=binding.course_id, date=today.isoformat())

        # Each pass re-reads the key; losing a concurrent create or
        # compare-and-set sends us round again to decide on fresh state.
        for _ in range(CHECKIN_MAX_ATTEMPTS):
            existing = self._attendance.get_for_key(student_id, binding.course_id, today)

            if existing is None:
                try:
                    record = self._attendance.create(
                        AttendanceRecord(
                            student_id=student_id,
                            course_id=binding.course_id,
                            group_id=binding.group_id,
                            attendance_date=today,
                            status=AttendanceStatus.PRESENT,
                            check_in_time=now,
                            check_in_method=CheckInMethod.TOKEN,
                            token=token,
                            marked_by=binding.issuer_id,
                        )
                    )
                except DuplicateRecordError:
                    log.debug("checkin_create_lost_race")
                    continue
                log.info("checkin_recorded", transition="none->present")
                return record

            if existing.status == AttendanceStatus.PRESENT:
                raise AlreadyCheckedInError("You have already checked in")

            if self._attendance.transition(
                attendance_id=existing.attendance_id,
                expected_version=existing.version,
                status=AttendanceStatus.PRESENT,
                check_in_time=now,
                check_in_method=CheckInMethod.TOKEN,
                token=token,
            ):
                log.info("checkin_recorded", transition=f"{existing.status.value}->present")
                return replace(
                    existing,
                    status=AttendanceStatus.PRESENT,
                    check_in_time=now,
                    check_in_method=CheckInMethod.TOKEN,
                    token=token,
                    version=existing.version + 1,
                )
            log.debug("checkin_update_lost_race", attendance_id=existing.attendance_id)

        log.error("checkin_contention_exhausted", attempts=CHECKIN_MAX_ATTEMPTS)
        raise InfrastructureError("Could not record check-in")

    def mark_batch(self, *, caller: CallerContext, entries: Sequence[MarkEntry]) -> List[AttendanceRecord]:
        """Upsert each entry by (student, course, date); re-submitting overwrites."""
        caller.require_role(Role.ADMIN, Role.TEACHER)
        marked_by = caller.related_id or caller.user_id

        # Validate the whole batch before writing any of it.
        records = [self._manual_record(e, marked_by) for e in entries]

        results = []
        for record in records:
            saved = self._attendance.upsert_manual(record)
            results.append(saved)
            self._notify_absence(saved)

        logger.info("attendance_batch_marked", count=len(results), by=caller.user_id)
        return results

    def _manual_record(self, entry: MarkEntry, marked_by: int) -> AttendanceRecord:
        student_id = require_positive_id(entry.student_id, "student")
        course_id = require_positive_id(entry.course_id, "course")
        group_id = require_positive_id(entry.group_id, "group")
        status = require_enum(AttendanceStatus, entry.status, "status")

        student = self._directory.get_student(student_id)
        if not student:
            raise NotFoundError(f"Student {student_id} not found")
        if not self._directory.get_course(course_id):
            raise NotFoundError(f"Course {course_id} not found")
        if not self._directory.group_exists(group_id):
            raise NotFoundError(f"Group {group_id} not found")
        if student.group_id != group_id:
            raise ValidationError(f"Student {student_id} is not enrolled in group {group_id}")

        return AttendanceRecord(
            student_id=student_id,
            course_id=course_id,
            group_id=group_id,
            attendance_date=entry.attendance_date,
            status=status,
            check_in_method=CheckInMethod.MANUAL,
            marked_by=marked_by,
            notes=clean_notes(entry.notes),
        )

    def correct_status(
        self,
        *,
        caller: CallerContext,
        attendance_id: int,
        status,
        notes: Optional[str] = None,
    ) -> AttendanceRecord:
        caller.require_role(Role.ADMIN, Role.TEACHER)
        new_status = require_enum(AttendanceStatus, status, "status")
        notes = clean_notes(notes)
        marked_by = caller.related_id or caller.user_id

        existing = self._attendance.get_by_id(attendance_id)
        if not existing:
            raise NotFoundError("Attendance record not found")
        if not self._attendance.update_manual(
            attendance_id=attendance_id, status=new_status, notes=notes, marked_by=marked_by
        ):
            raise NotFoundError("Attendance record not found")

        logger.info(
            "attendance_corrected",
            attendance_id=attendance_id,
            transition=f"{existing.status.value}->{new_status.value}",
            by=caller.user_id,
        )
        updated = replace(existing, status=new_status, notes=notes, marked_by=marked_by, version=existing.version + 1)
        self._notify_absence(updated)
        return updated

    def get_today(self, *, student_id: int, course_id: int, today: Optional[date] = None) -> Optional[AttendanceRecord]:
        return self._attendance.get_for_key(student_id, course_id, today or self._clock().date())

    def _notify_absence(self, record: AttendanceRecord) -> None:
        if not self._notifier or record.status not in (AttendanceStatus.ABSENT, AttendanceStatus.LATE):
            return
        course = self._directory.get_course(record.course_id)
        self._notifier.notify_absence(
            student_id=record.student_id,
            course_name=course.name if course else str(record.course_id),
            on=record.attendance_date,
            status=record.status,
        )
