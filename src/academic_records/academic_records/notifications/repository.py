from __future__ import annotations

from typing import Optional, Protocol

from .model import Notification, NotificationPreferences


class PreferencesRepository(Protocol):
    def get_for_user(self, user_id: int) -> Optional[NotificationPreferences]:
        raise NotImplementedError


class NotificationChannel(Protocol):
    """Delivery channel: accepts a fully formed message for one recipient."""

    def deliver(self, notification: Notification) -> int:
        """Returns the id of the delivered notification."""

        raise NotImplementedError
