from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Protocol

from ..core.enums import AttendanceStatus, CheckInMethod
from .model import AttendanceRecord


class AttendanceRepository(Protocol):
    def get_by_id(self, attendance_id: int) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def get_for_key(self, student_id: int, course_id: int, attendance_date: date) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def create(self, record: AttendanceRecord) -> AttendanceRecord:
        """Insert a new record.

        Raises DuplicateRecordError if a record already exists for the key.
        """

        raise NotImplementedError

    def transition(
        self,
        *,
        attendance_id: int,
        expected_version: int,
        status: AttendanceStatus,
        check_in_time: Optional[datetime],
        check_in_method: CheckInMethod,
        token: Optional[str],
    ) -> bool:
        """Compare-and-set update; False when the row changed since it was read."""

        raise NotImplementedError

    def upsert_manual(self, record: AttendanceRecord) -> AttendanceRecord:
        """Create or overwrite status/notes/marked_by for the record's key."""

        raise NotImplementedError

    def update_manual(
        self,
        *,
        attendance_id: int,
        status: AttendanceStatus,
        notes: Optional[str],
        marked_by: Optional[int],
    ) -> bool:
        raise NotImplementedError
