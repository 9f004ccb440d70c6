"""In-memory stand-ins for the repository protocols.

They enforce the same guarantees the MySQL schema does (unique attendance
key, version compare-and-set, serialized conflict-checked schedule writes),
so concurrency tests exercise the services' handling of those guarantees.
"""
from __future__ import annotations

import threading
from dataclasses import dataclass, field, replace
from datetime import datetime, timedelta
from typing import Optional

from src.academic_records.academic_records.core.enums import CheckInMethod
from src.academic_records.academic_records.core.exceptions import DuplicateRecordError, InfrastructureError
from src.academic_records.academic_records.schedules.conflicts import room_key
from src.academic_records.academic_records.users.model import Course, Student


class FakeClock:
    def __init__(self, start: datetime):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now = self.now + timedelta(**kwargs)


@dataclass
class InMemoryDirectory:
    students: dict = field(default_factory=dict)
    courses: dict = field(default_factory=dict)
    groups: set = field(default_factory=set)
    teachers: set = field(default_factory=set)

    def add_student(self, student_id: int, group_id: Optional[int], name: str = "Student") -> None:
        self.students[student_id] = Student(student_id=student_id, name=name, group_id=group_id)
        if group_id is not None:
            self.groups.add(group_id)

    def add_course(self, course_id: int, name: str = "Algorithms", code: str = "ALG101") -> None:
        self.courses[course_id] = Course(course_id=course_id, name=name, code=code)

    def get_student(self, student_id):
        return self.students.get(student_id)

    def get_course(self, course_id):
        return self.courses.get(course_id)

    def group_exists(self, group_id):
        return group_id in self.groups

    def teacher_exists(self, teacher_id):
        return teacher_id in self.teachers


class InMemoryAttendance:
    def __init__(self, *, race_barrier: Optional[threading.Barrier] = None):
        self._lock = threading.Lock()
        self._by_id: dict = {}
        self._next_id = 1
        self._barrier = race_barrier
        self._seen = threading.local()

    def _key_of(self, r):
        return (r.student_id, r.course_id, r.attendance_date)

    def _find(self, key):
        return next((r for r in self._by_id.values() if self._key_of(r) == key), None)

    @property
    def records(self):
        with self._lock:
            return list(self._by_id.values())

    def seed(self, record):
        with self._lock:
            rec = replace(record, attendance_id=self._next_id)
            self._by_id[rec.attendance_id] = rec
            self._next_id += 1
            return rec

    def get_by_id(self, attendance_id):
        with self._lock:
            return self._by_id.get(attendance_id)

    def get_for_key(self, student_id, course_id, attendance_date):
        with self._lock:
            found = self._find((student_id, course_id, attendance_date))
        # First read on each thread waits for the others, so every racer
        # decides on the same snapshot.
        if self._barrier is not None and not getattr(self._seen, "done", False):
            self._seen.done = True
            self._barrier.wait(timeout=5)
        return found

    def create(self, record):
        with self._lock:
            if self._find(self._key_of(record)) is not None:
                raise DuplicateRecordError("duplicate")
            rec = replace(record, attendance_id=self._next_id, version=0)
            self._by_id[rec.attendance_id] = rec
            self._next_id += 1
            return rec

    def transition(self, *, attendance_id, expected_version, status, check_in_time, check_in_method, token):
        with self._lock:
            cur = self._by_id.get(attendance_id)
            if cur is None or cur.version != expected_version:
                return False
            self._by_id[attendance_id] = replace(
                cur,
                status=status,
                check_in_time=check_in_time,
                check_in_method=check_in_method,
                token=token,
                version=cur.version + 1,
            )
            return True

    def upsert_manual(self, record):
        with self._lock:
            cur = self._find(self._key_of(record))
            if cur is None:
                rec = replace(record, attendance_id=self._next_id, check_in_method=CheckInMethod.MANUAL, version=0)
                self._next_id += 1
            else:
                rec = replace(
                    cur, status=record.status, notes=record.notes, marked_by=record.marked_by, version=cur.version + 1
                )
            self._by_id[rec.attendance_id] = rec
            return rec

    def update_manual(self, *, attendance_id, status, notes, marked_by):
        with self._lock:
            cur = self._by_id.get(attendance_id)
            if cur is None:
                return False
            self._by_id[attendance_id] = replace(
                cur, status=status, notes=notes, marked_by=marked_by, version=cur.version + 1
            )
            return True


class InMemorySchedules:
    """Guarded writes hold one lock for check + write, like the serializable transaction."""

    def __init__(self):
        self._lock = threading.Lock()
        self._by_id: dict = {}
        self._next_id = 1

    def _sharing(self, slot):
        return [
            s
            for s in self._by_id.values()
            if s.day_of_week == slot.day_of_week
            and (
                s.group_id == slot.group_id
                or s.teacher_id == slot.teacher_id
                or room_key(s.room) == room_key(slot.room)
            )
        ]

    def get_by_id(self, schedule_id):
        return self._by_id.get(schedule_id)

    def list_sharing_resources(self, slot):
        with self._lock:
            return self._sharing(slot)

    def list_filtered(self, *, group_id=None, teacher_id=None, day_of_week=None, semester=None):
        return [
            s
            for s in self._by_id.values()
            if (group_id is None or s.group_id == group_id)
            and (teacher_id is None or s.teacher_id == teacher_id)
            and (day_of_week is None or s.day_of_week == day_of_week)
            and (semester is None or s.semester == semester)
        ]

    def insert_guarded(self, slot, guard):
        with self._lock:
            guard(self._sharing(slot))
            schedule_id = self._next_id
            self._next_id += 1
            self._by_id[schedule_id] = slot.with_id(schedule_id)
            return schedule_id

    def update_guarded(self, slot, guard):
        with self._lock:
            if slot.schedule_id not in self._by_id:
                return False
            guard(self._sharing(slot))
            self._by_id[slot.schedule_id] = slot
            return True

    def delete(self, schedule_id):
        with self._lock:
            return self._by_id.pop(schedule_id, None) is not None


@dataclass
class InMemoryPreferences:
    by_user: dict = field(default_factory=dict)
    fail: bool = False

    def get_for_user(self, user_id):
        if self.fail:
            raise InfrastructureError("preferences unavailable")
        return self.by_user.get(user_id)


class RecordingChannel:
    def __init__(self, *, fail: bool = False):
        self.delivered = []
        self._fail = fail

    def deliver(self, notification):
        if self._fail:
            raise InfrastructureError("channel down")
        self.delivered.append(notification)
        return len(self.delivered)
