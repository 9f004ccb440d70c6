from __future__ import annotations

from typing import Optional, Sequence

from ..core.enums import DayOfWeek, SessionType
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, minutes_to_time, time_to_minutes
from .model import ReservationSlot
from .repository import ConflictGuard, ScheduleRepository

_COLUMNS = (
    "schedule_id, course_id, group_id, teacher_id, room, day_of_week, "
    "start_time, end_time, session_type, semester, academic_year"
)


def _to_slot(r: dict) -> ReservationSlot:
    return ReservationSlot(
        schedule_id=int(r["schedule_id"]),
        course_id=int(r["course_id"]),
        group_id=int(r["group_id"]),
        teacher_id=int(r["teacher_id"]),
        room=r["room"],
        day_of_week=DayOfWeek(r["day_of_week"]),
        start_minute=time_to_minutes(r["start_time"]),
        end_minute=time_to_minutes(r["end_time"]),
        session_type=SessionType(r["session_type"]),
        semester=int(r["semester"]),
        academic_year=r["academic_year"],
    )


class MySQLScheduleRepository(ScheduleRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, schedule_id: int) -> Optional[ReservationSlot]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM schedules WHERE schedule_id=%s", (int(schedule_id),))
            r = fetchone(cur)
            return _to_slot(r) if r else None

    def _select_sharing(self, cur, slot: ReservationSlot, *, for_update: bool) -> Sequence[ReservationSlot]:
        lock = " FOR UPDATE" if for_update else ""
        cur.execute(
            f"""
            SELECT {_COLUMNS}
            FROM schedules
            WHERE day_of_week=%s AND (group_id=%s OR teacher_id=%s OR room=%s)
            ORDER BY start_time ASC{lock}
            """,
            (slot.day_of_week.value, int(slot.group_id), int(slot.teacher_id), slot.room.strip()),
        )
        return [_to_slot(r) for r in fetchall(cur)]

    def list_sharing_resources(self, slot: ReservationSlot) -> Sequence[ReservationSlot]:
        with db_cursor(self._conn_factory) as (_, cur):
            return self._select_sharing(cur, slot, for_update=False)

    def list_filtered(
        self,
        *,
        group_id: Optional[int] = None,
        teacher_id: Optional[int] = None,
        day_of_week: Optional[DayOfWeek] = None,
        semester: Optional[int] = None,
    ) -> Sequence[ReservationSlot]:
        clauses = ["1=1"]
        params: list[object] = []
        if group_id is not None:
            clauses.append("group_id=%s")
            params.append(int(group_id))
        if teacher_id is not None:
            clauses.append("teacher_id=%s")
            params.append(int(teacher_id))
        if day_of_week is not None:
            clauses.append("day_of_week=%s")
            params.append(day_of_week.value)
        if semester is not None:
            clauses.append("semester=%s")
            params.append(int(semester))

        where = " AND ".join(clauses)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM schedules WHERE {where} ORDER BY day_of_week ASC, start_time ASC",
                tuple(params),
            )
            return [_to_slot(r) for r in fetchall(cur)]

    def _params(self, slot: ReservationSlot) -> tuple:
        return (
            int(slot.course_id),
            int(slot.group_id),
            int(slot.teacher_id),
            slot.room.strip(),
            slot.day_of_week.value,
            minutes_to_time(slot.start_minute),
            minutes_to_time(slot.end_minute),
            slot.session_type.value,
            int(slot.semester),
            slot.academic_year,
        )

    def insert_guarded(self, slot: ReservationSlot, guard: ConflictGuard) -> int:
        # SERIALIZABLE + FOR UPDATE takes next-key locks on the (day_of_week, ...)
        # index range, so a concurrent writer for the same day waits here
        # instead of passing the same check.
        with db_cursor(self._conn_factory, isolation_level="SERIALIZABLE") as (_, cur):
            guard(self._select_sharing(cur, slot, for_update=True))
            cur.execute(
                """
                INSERT INTO schedules(course_id, group_id, teacher_id, room, day_of_week,
                                      start_time, end_time, session_type, semester, academic_year)
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                self._params(slot),
            )
            return int(cur.lastrowid)

    def update_guarded(self, slot: ReservationSlot, guard: ConflictGuard) -> bool:
        with db_cursor(self._conn_factory, isolation_level="SERIALIZABLE") as (_, cur):
            cur.execute("SELECT schedule_id FROM schedules WHERE schedule_id=%s FOR UPDATE", (int(slot.schedule_id),))
            if not fetchone(cur):
                return False
            guard(self._select_sharing(cur, slot, for_update=True))
            cur.execute(
                """
                UPDATE schedules
                SET course_id=%s, group_id=%s, teacher_id=%s, room=%s, day_of_week=%s,
                    start_time=%s, end_time=%s, session_type=%s, semester=%s, academic_year=%s
                WHERE schedule_id=%s
                """,
                self._params(slot) + (int(slot.schedule_id),),
            )
            return True

    def delete(self, schedule_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM schedules WHERE schedule_id=%s", (int(schedule_id),))
            return cur.rowcount > 0
