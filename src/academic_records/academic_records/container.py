from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta

from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.service import AttendanceStateMachine
from .core.constants import (
    DEFAULT_PUBLIC_BASE_URL,
    DEFAULT_TOKEN_BYTES,
    DEFAULT_TOKEN_SWEEP_SECONDS,
    DEFAULT_TOKEN_VALIDITY_MINUTES,
    MAX_TOKEN_VALIDITY_MINUTES,
)
from .database.connection import DBConfig, DatabaseConnection
from .notifications.mysql_notification_repository import MySQLNotificationChannel, MySQLPreferencesRepository
from .notifications.service import NotificationDispatcher
from .schedules.mysql_schedule_repository import MySQLScheduleRepository
from .schedules.service import ScheduleCoordinator
from .tokens.store import SessionTokenStore
from .users.mysql_directory_repository import MySQLDirectoryRepository


@dataclass(frozen=True)
class Container:
    conn: DatabaseConnection

    directory_repo: MySQLDirectoryRepository
    attendance_repo: MySQLAttendanceRepository
    schedules_repo: MySQLScheduleRepository

    token_store: SessionTokenStore
    notifier: NotificationDispatcher
    attendance_service: AttendanceStateMachine
    schedule_service: ScheduleCoordinator

    public_base_url: str
    default_token_validity: timedelta
    max_token_validity: timedelta = timedelta(minutes=MAX_TOKEN_VALIDITY_MINUTES)

    def close(self) -> None:
        self.token_store.close()


def build_container(
    *,
    db_config: dict,
    public_base_url: str = DEFAULT_PUBLIC_BASE_URL,
    token_validity_minutes: int = DEFAULT_TOKEN_VALIDITY_MINUTES,
    max_token_validity_minutes: int = MAX_TOKEN_VALIDITY_MINUTES,
    token_bytes: int = DEFAULT_TOKEN_BYTES,
    token_sweep_seconds: float = DEFAULT_TOKEN_SWEEP_SECONDS,
) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_dict(db_config))

    directory_repo = MySQLDirectoryRepository(conn)
    attendance_repo = MySQLAttendanceRepository(conn)
    schedules_repo = MySQLScheduleRepository(conn)

    token_store = SessionTokenStore(token_bytes=token_bytes)
    if token_sweep_seconds and token_sweep_seconds > 0:
        token_store.start_sweeper(token_sweep_seconds)

    notifier = NotificationDispatcher(MySQLPreferencesRepository(conn), MySQLNotificationChannel(conn))
    attendance_service = AttendanceStateMachine(attendance_repo, directory_repo, token_store, notifier)
    schedule_service = ScheduleCoordinator(schedules_repo, directory_repo, notifier)

    return Container(
        conn=conn,
        directory_repo=directory_repo,
        attendance_repo=attendance_repo,
        schedules_repo=schedules_repo,
        token_store=token_store,
        notifier=notifier,
        attendance_service=attendance_service,
        schedule_service=schedule_service,
        public_base_url=public_base_url,
        default_token_validity=timedelta(minutes=int(token_validity_minutes)),
        max_token_validity=timedelta(minutes=int(max_token_validity_minutes)),
    )
