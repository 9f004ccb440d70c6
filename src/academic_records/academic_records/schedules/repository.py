from __future__ import annotations

from typing import Callable, Optional, Protocol, Sequence

from ..core.enums import DayOfWeek
from .model import ReservationSlot

# Receives the same-day slots sharing a resource with the slot being written;
# raises to abort the write.
ConflictGuard = Callable[[Sequence[ReservationSlot]], None]


class ScheduleRepository(Protocol):
    def get_by_id(self, schedule_id: int) -> Optional[ReservationSlot]:
        raise NotImplementedError

    def list_sharing_resources(self, slot: ReservationSlot) -> Sequence[ReservationSlot]:
        """Same-day slots that share group, teacher or room with ``slot``."""

        raise NotImplementedError

    def list_filtered(
        self,
        *,
        group_id: Optional[int] = None,
        teacher_id: Optional[int] = None,
        day_of_week: Optional[DayOfWeek] = None,
        semester: Optional[int] = None,
    ) -> Sequence[ReservationSlot]:
        raise NotImplementedError

    def insert_guarded(self, slot: ReservationSlot, guard: ConflictGuard) -> int:
        """Run ``guard`` and insert in one serializable unit. Returns schedule_id."""

        raise NotImplementedError

    def update_guarded(self, slot: ReservationSlot, guard: ConflictGuard) -> bool:
        """Same as insert_guarded for an existing ``slot.schedule_id``.

        Returns False when the row does not exist.
        """

        raise NotImplementedError

    def delete(self, schedule_id: int) -> bool:
        raise NotImplementedError
