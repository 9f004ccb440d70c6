from __future__ import annotations

from datetime import date, datetime
from typing import Callable, Optional

import structlog

from ..common.datetime_utils import now_local
from ..core.enums import AttendanceStatus, NotificationPriority, NotificationType, RecipientType
from ..core.exceptions import InfrastructureError
from .model import DispatchOutcome, Notification
from .quiet_hours import is_quiet
from .repository import NotificationChannel, PreferencesRepository

logger = structlog.get_logger(__name__)

_SCHEDULE_MESSAGES = {
    "added": 'A new class "{course}" was added to your timetable.',
    "modified": 'The class "{course}" was changed in your timetable.',
    "cancelled": 'The class "{course}" was cancelled.',
}


class NotificationDispatcher:
    """Use case: deliver a notification unless the recipient opted out right now.

    Messages suppressed by quiet hours are not queued for later delivery.
    """

    def __init__(
        self,
        preferences: PreferencesRepository,
        channel: NotificationChannel,
        *,
        clock: Callable[[], datetime] = now_local,
    ):
        self._preferences = preferences
        self._channel = channel
        self._clock = clock

    def dispatch(self, notification: Notification, *, now: Optional[datetime] = None) -> DispatchOutcome:
        log = logger.bind(recipient_id=notification.recipient_id, type=notification.type.value)

        # Callers dispatch after their own write committed; a storage failure
        # here is reported as an outcome, never raised.
        try:
            prefs = self._preferences.get_for_user(notification.recipient_id)
        except InfrastructureError:
            log.exception("notification_preferences_unavailable")
            return DispatchOutcome.FAILED

        if prefs is not None:
            if not prefs.is_enabled(notification.type):
                log.info("notification_skipped_type_disabled")
                return DispatchOutcome.DISABLED

            if prefs.quiet_hours_enabled:
                now = now or self._clock()
                if is_quiet(now, prefs.quiet_window):
                    log.info("notification_skipped_quiet_hours", window=str(prefs.quiet_window))
                    return DispatchOutcome.QUIET_HOURS

        try:
            notification_id = self._channel.deliver(notification)
        except InfrastructureError:
            log.exception("notification_delivery_failed")
            return DispatchOutcome.FAILED

        log.info("notification_delivered", notification_id=notification_id)
        return DispatchOutcome.DELIVERED

    def notify_schedule_change(
        self,
        *,
        recipient_id: int,
        recipient_type: RecipientType,
        course_name: str,
        change: str,
        schedule_id: int,
    ) -> DispatchOutcome:
        title = "Timetable cancelled" if change == "cancelled" else "Timetable updated"
        return self.dispatch(
            Notification(
                recipient_id=recipient_id,
                recipient_type=recipient_type,
                title=title,
                message=_SCHEDULE_MESSAGES[change].format(course=course_name),
                type=NotificationType.SCHEDULE,
                priority=NotificationPriority.HIGH if change == "cancelled" else NotificationPriority.MEDIUM,
                link="/schedule",
                metadata={"scheduleId": schedule_id},
            )
        )

    def notify_absence(
        self,
        *,
        student_id: int,
        course_name: str,
        on: date,
        status: AttendanceStatus,
    ) -> DispatchOutcome:
        if status == AttendanceStatus.ABSENT:
            title = "Absence recorded"
            message = f"You were marked absent from {course_name} on {on:%d/%m/%Y}."
        else:
            title = "Late arrival recorded"
            message = f"You were marked late to {course_name} on {on:%d/%m/%Y}."

        return self.dispatch(
            Notification(
                recipient_id=student_id,
                recipient_type=RecipientType.STUDENT,
                title=title,
                message=message,
                type=NotificationType.ATTENDANCE,
                priority=NotificationPriority.HIGH,
                link="/attendance",
            )
        )
