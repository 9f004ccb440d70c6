from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional, Union

from ..core.enums import AttendanceStatus, CheckInMethod


@dataclass(frozen=True)
class AttendanceRecord:
    """Domain entity: one student's attendance for one course on one day.

    (student_id, course_id, attendance_date) is unique. ``version`` grows on
    every write and backs the compare-and-set used by token check-in.
    """

    student_id: int
    course_id: int
    group_id: int
    attendance_date: date
    status: AttendanceStatus
    check_in_method: CheckInMethod = CheckInMethod.MANUAL
    check_in_time: Optional[datetime] = None
    token: Optional[str] = None
    marked_by: Optional[int] = None
    notes: Optional[str] = None
    attendance_id: Optional[int] = None
    version: int = 0

    def to_dict(self) -> dict:
        return {
            "id": self.attendance_id,
            "student": self.student_id,
            "course": self.course_id,
            "group": self.group_id,
            "date": self.attendance_date.isoformat(),
            "status": self.status.value,
            "checkInTime": self.check_in_time.isoformat() if self.check_in_time else None,
            "checkInMethod": self.check_in_method.value,
            "markedBy": self.marked_by,
            "notes": self.notes,
        }


@dataclass(frozen=True)
class MarkEntry:
    """One line of a manual batch mark; ``status`` is validated by the service."""

    student_id: int
    course_id: int
    group_id: int
    attendance_date: date
    status: Union[AttendanceStatus, str]
    notes: Optional[str] = None
