from __future__ import annotations

from typing import Optional

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchone
from .model import Course, Student
from .repository import DirectoryRepository


class MySQLDirectoryRepository(DirectoryRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_student(self, student_id: int) -> Optional[Student]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT student_id, name, group_id FROM students WHERE student_id=%s", (int(student_id),))
            r = fetchone(cur)
            if not r:
                return None
            return Student(
                student_id=int(r["student_id"]),
                name=r["name"],
                group_id=int(r["group_id"]) if r.get("group_id") is not None else None,
            )

    def get_course(self, course_id: int) -> Optional[Course]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT course_id, name, code FROM courses WHERE course_id=%s", (int(course_id),))
            r = fetchone(cur)
            if not r:
                return None
            return Course(course_id=int(r["course_id"]), name=r["name"], code=r["code"])

    def group_exists(self, group_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT 1 AS found FROM student_groups WHERE group_id=%s", (int(group_id),))
            return fetchone(cur) is not None

    def teacher_exists(self, teacher_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT 1 AS found FROM teachers WHERE teacher_id=%s", (int(teacher_id),))
            return fetchone(cur) is not None
