from __future__ import annotations

import json
from typing import Optional

from ..common.datetime_utils import format_hhmm
from ..core.enums import NotificationType
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchone, time_to_minutes
from .model import Notification, NotificationPreferences
from .repository import NotificationChannel, PreferencesRepository


class MySQLPreferencesRepository(PreferencesRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_for_user(self, user_id: int) -> Optional[NotificationPreferences]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT user_id, grade_enabled, schedule_enabled, attendance_enabled,
                       announcement_enabled, reminder_enabled, alert_enabled,
                       quiet_hours_enabled, quiet_hours_start, quiet_hours_end
                FROM notification_preferences
                WHERE user_id=%s
                """,
                (int(user_id),),
            )
            r = fetchone(cur)
            if not r:
                return None

            disabled = frozenset(t for t in NotificationType if not r[f"{t.value}_enabled"])
            return NotificationPreferences(
                user_id=int(r["user_id"]),
                disabled_types=disabled,
                quiet_hours_enabled=bool(r["quiet_hours_enabled"]),
                quiet_hours_start=format_hhmm(time_to_minutes(r["quiet_hours_start"])),
                quiet_hours_end=format_hhmm(time_to_minutes(r["quiet_hours_end"])),
            )


class MySQLNotificationChannel(NotificationChannel):
    """In-app delivery: the notification becomes an unread row for the recipient."""

    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def deliver(self, notification: Notification) -> int:
        # Attendance notices are shown as alerts in the inbox.
        kind = NotificationType.ALERT if notification.type == NotificationType.ATTENDANCE else notification.type
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO notifications(recipient_id, recipient_type, title, message, type,
                                          priority, link, metadata, is_read)
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,0)
                """,
                (
                    int(notification.recipient_id),
                    notification.recipient_type.value,
                    notification.title,
                    notification.message,
                    kind.value,
                    notification.priority.value,
                    notification.link,
                    json.dumps(notification.metadata, default=str) if notification.metadata else None,
                ),
            )
            return int(cur.lastrowid)
