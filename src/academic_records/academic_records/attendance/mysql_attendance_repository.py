from __future__ import annotations

from dataclasses import replace
from datetime import date, datetime
from typing import Optional

import mysql.connector
from mysql.connector import errorcode

from ..core.enums import AttendanceStatus, CheckInMethod
from ..core.exceptions import DuplicateRecordError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchone
from .model import AttendanceRecord
from .repository import AttendanceRepository

_COLUMNS = (
    "attendance_id, student_id, course_id, group_id, attendance_date, status, "
    "check_in_time, check_in_method, token, marked_by, notes, version"
)


def _to_record(r: dict) -> AttendanceRecord:
    return AttendanceRecord(
        attendance_id=int(r["attendance_id"]),
        student_id=int(r["student_id"]),
        course_id=int(r["course_id"]),
        group_id=int(r["group_id"]),
        attendance_date=r["attendance_date"],
        status=AttendanceStatus(r["status"]),
        check_in_time=r.get("check_in_time"),
        check_in_method=CheckInMethod(r["check_in_method"]),
        token=r.get("token"),
        marked_by=int(r["marked_by"]) if r.get("marked_by") is not None else None,
        notes=r.get("notes"),
        version=int(r["version"]),
    )


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, attendance_id: int) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM attendance_records WHERE attendance_id=%s", (int(attendance_id),))
            r = fetchone(cur)
            return _to_record(r) if r else None

    def get_for_key(self, student_id: int, course_id: int, attendance_date: date) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_records
                WHERE student_id=%s AND course_id=%s AND attendance_date=%s
                """,
                (int(student_id), int(course_id), attendance_date),
            )
            r = fetchone(cur)
            return _to_record(r) if r else None

    def create(self, record: AttendanceRecord) -> AttendanceRecord:
        with db_cursor(self._conn_factory) as (_, cur):
            try:
                cur.execute(
                    """
                    INSERT INTO attendance_records(student_id, course_id, group_id, attendance_date, status,
                                                   check_in_time, check_in_method, token, marked_by, notes, version)
                    VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,0)
                    """,
                    (
                        int(record.student_id),
                        int(record.course_id),
                        int(record.group_id),
                        record.attendance_date,
                        record.status.value,
                        record.check_in_time,
                        record.check_in_method.value,
                        record.token,
                        record.marked_by,
                        record.notes,
                    ),
                )
            except mysql.connector.IntegrityError as e:
                if e.errno == errorcode.ER_DUP_ENTRY:
                    raise DuplicateRecordError("Attendance record already exists") from e
                raise
            return replace(record, attendance_id=int(cur.lastrowid), version=0)

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
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE attendance_records
                SET status=%s, check_in_time=%s, check_in_method=%s, token=%s, version=version+1
                WHERE attendance_id=%s AND version=%s
                """,
                (status.value, check_in_time, check_in_method.value, token, int(attendance_id), int(expected_version)),
            )
            return cur.rowcount > 0

    def upsert_manual(self, record: AttendanceRecord) -> AttendanceRecord:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO attendance_records(student_id, course_id, group_id, attendance_date, status,
                                               check_in_method, marked_by, notes, version)
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,0)
                ON DUPLICATE KEY UPDATE status=VALUES(status), notes=VALUES(notes),
                                        marked_by=VALUES(marked_by), version=version+1
                """,
                (
                    int(record.student_id),
                    int(record.course_id),
                    int(record.group_id),
                    record.attendance_date,
                    record.status.value,
                    CheckInMethod.MANUAL.value,
                    record.marked_by,
                    record.notes,
                ),
            )

            # On update lastrowid can be 0; read the row back by key.
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_records
                WHERE student_id=%s AND course_id=%s AND attendance_date=%s
                """,
                (int(record.student_id), int(record.course_id), record.attendance_date),
            )
            return _to_record(fetchone(cur))

    def update_manual(
        self,
        *,
        attendance_id: int,
        status: AttendanceStatus,
        notes: Optional[str],
        marked_by: Optional[int],
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE attendance_records
                SET status=%s, notes=%s, marked_by=%s, version=version+1
                WHERE attendance_id=%s
                """,
                (status.value, notes, marked_by, int(attendance_id)),
            )
            return cur.rowcount > 0
