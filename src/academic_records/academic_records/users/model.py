from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class Student:
    """Domain entity: a participant and the group they are enrolled in."""

    student_id: int
    name: str
    group_id: Optional[int]


@dataclass(frozen=True)
class Course:
    course_id: int
    name: str
    code: str
