from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Optional

from ..common.datetime_utils import format_hhmm, parse_hhmm
from ..core.constants import DEFAULT_ACADEMIC_YEAR
from ..core.enums import DayOfWeek, SessionType
from ..core.exceptions import InvalidTimeWindowError


@dataclass(frozen=True)
class ReservationSlot:
    """One recurring weekly class meeting.

    Times are minutes since midnight; the ``HH:MM`` form only exists at the
    API and database boundaries. ``schedule_id`` is None until persisted.
    """

    course_id: int
    group_id: int
    teacher_id: int
    room: str
    day_of_week: DayOfWeek
    start_minute: int
    end_minute: int
    session_type: SessionType = SessionType.COURS
    semester: int = 1
    academic_year: str = DEFAULT_ACADEMIC_YEAR
    schedule_id: Optional[int] = None

    def __post_init__(self):
        if self.start_minute >= self.end_minute:
            raise InvalidTimeWindowError("Start time must be before end time")

    @property
    def start_time(self) -> str:
        return format_hhmm(self.start_minute)

    @property
    def end_time(self) -> str:
        return format_hhmm(self.end_minute)

    def with_id(self, schedule_id: int) -> "ReservationSlot":
        return replace(self, schedule_id=int(schedule_id))

    @classmethod
    def from_wire(
        cls,
        *,
        course_id: int,
        group_id: int,
        teacher_id: int,
        room: str,
        day_of_week: DayOfWeek,
        start_time: str,
        end_time: str,
        **metadata,
    ) -> "ReservationSlot":
        return cls(
            course_id=course_id,
            group_id=group_id,
            teacher_id=teacher_id,
            room=room,
            day_of_week=day_of_week,
            start_minute=parse_hhmm(start_time),
            end_minute=parse_hhmm(end_time),
            **metadata,
        )

    def to_dict(self) -> dict:
        return {
            "id": self.schedule_id,
            "course": self.course_id,
            "group": self.group_id,
            "teacher": self.teacher_id,
            "room": self.room,
            "dayOfWeek": self.day_of_week.value,
            "startTime": self.start_time,
            "endTime": self.end_time,
            "type": self.session_type.value,
            "semester": self.semester,
            "academicYear": self.academic_year,
        }
