from __future__ import annotations

from typing import Optional, Protocol

from .model import Course, Student


class DirectoryRepository(Protocol):
    """Read-only lookups of the people and courses the coordination core refers to."""

    def get_student(self, student_id: int) -> Optional[Student]:
        raise NotImplementedError

    def get_course(self, course_id: int) -> Optional[Course]:
        raise NotImplementedError

    def group_exists(self, group_id: int) -> bool:
        raise NotImplementedError

    def teacher_exists(self, teacher_id: int) -> bool:
        raise NotImplementedError
