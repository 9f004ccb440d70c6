from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, FrozenSet, Optional

from ..core.constants import DEFAULT_QUIET_HOURS_END, DEFAULT_QUIET_HOURS_START
from ..core.enums import NotificationPriority, NotificationType, RecipientType
from .quiet_hours import QuietWindow


class DispatchOutcome(str, Enum):
    DELIVERED = "delivered"
    DISABLED = "disabled"
    QUIET_HOURS = "quiet_hours"
    FAILED = "failed"


@dataclass(frozen=True)
class Notification:
    recipient_id: int
    recipient_type: RecipientType
    title: str
    message: str
    type: NotificationType
    priority: NotificationPriority = NotificationPriority.MEDIUM
    link: Optional[str] = None
    metadata: Dict[str, object] = field(default_factory=dict)


@dataclass(frozen=True)
class NotificationPreferences:
    """Per-user delivery preferences.

    ``disabled_types`` lists the notification types the user switched off;
    everything else is enabled.
    """

    user_id: int
    disabled_types: FrozenSet[NotificationType] = frozenset()
    quiet_hours_enabled: bool = False
    quiet_hours_start: str = DEFAULT_QUIET_HOURS_START
    quiet_hours_end: str = DEFAULT_QUIET_HOURS_END

    def is_enabled(self, kind: NotificationType) -> bool:
        return kind not in self.disabled_types

    @property
    def quiet_window(self) -> QuietWindow:
        return QuietWindow.parse(self.quiet_hours_start, self.quiet_hours_end)
