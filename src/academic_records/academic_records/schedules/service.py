from __future__ import annotations

from dataclasses import replace
from typing import Dict, List, Optional, Sequence

import structlog

from ..core.context import CallerContext
from ..core.enums import DayOfWeek, RecipientType, Role
from ..core.exceptions import NotFoundError, ScheduleConflictError
from ..notifications.service import NotificationDispatcher
from ..users.repository import DirectoryRepository
from .conflicts import find_conflicts
from .model import ReservationSlot
from .repository import ConflictGuard, ScheduleRepository

logger = structlog.get_logger(__name__)


class ScheduleCoordinator:
    """Use case: create/edit/delete weekly class meetings without double-booking.

    The conflict predicate decides; the repository runs it inside the same
    serializable write so two concurrent requests cannot both pass it.
    """

    def __init__(
        self,
        schedules: ScheduleRepository,
        directory: DirectoryRepository,
        notifier: Optional[NotificationDispatcher] = None,
    ):
        self._schedules = schedules
        self._directory = directory
        self._notifier = notifier

    def _require_references(self, slot: ReservationSlot) -> str:
        course = self._directory.get_course(slot.course_id)
        if not course:
            raise NotFoundError("Course not found")
        if not self._directory.group_exists(slot.group_id):
            raise NotFoundError("Group not found")
        if not self._directory.teacher_exists(slot.teacher_id):
            raise NotFoundError("Teacher not found")
        return course.name

    def _guard(self, candidate: ReservationSlot, exclude_id: Optional[int] = None) -> ConflictGuard:
        def check(existing: Sequence[ReservationSlot]) -> None:
            conflicts = find_conflicts(candidate, existing, exclude_id)
            if conflicts:
                logger.info(
                    "schedule_conflict",
                    day=candidate.day_of_week.value,
                    start=candidate.start_time,
                    end=candidate.end_time,
                    conflicting_ids=[c.schedule_id for c in conflicts],
                )
                raise ScheduleConflictError("Schedule conflict detected", conflicts)

        return check

    def check_availability(self, slot: ReservationSlot, *, exclude_id: Optional[int] = None) -> List[ReservationSlot]:
        """Fast, non-locking pre-check for forms; the write path re-checks."""
        return find_conflicts(slot, self._schedules.list_sharing_resources(slot), exclude_id)

    def create(self, *, caller: CallerContext, slot: ReservationSlot) -> ReservationSlot:
        caller.require_role(Role.ADMIN, Role.TEACHER)
        course_name = self._require_references(slot)

        schedule_id = self._schedules.insert_guarded(slot, self._guard(slot))
        created = slot.with_id(schedule_id)
        logger.info("schedule_created", schedule_id=schedule_id, by=caller.user_id)

        self._notify(created, course_name, "added")
        return created

    def update(self, *, caller: CallerContext, schedule_id: int, slot: ReservationSlot) -> ReservationSlot:
        caller.require_role(Role.ADMIN, Role.TEACHER)
        if not self._schedules.get_by_id(schedule_id):
            raise NotFoundError("Schedule not found")
        course_name = self._require_references(slot)

        updated = replace(slot, schedule_id=int(schedule_id))
        if not self._schedules.update_guarded(updated, self._guard(updated, exclude_id=int(schedule_id))):
            raise NotFoundError("Schedule not found")
        logger.info("schedule_updated", schedule_id=schedule_id, by=caller.user_id)

        self._notify(updated, course_name, "modified")
        return updated

    def delete(self, *, caller: CallerContext, schedule_id: int) -> None:
        caller.require_role(Role.ADMIN)

        existing = self._schedules.get_by_id(schedule_id)
        if not existing or not self._schedules.delete(schedule_id):
            raise NotFoundError("Schedule not found")
        logger.info("schedule_deleted", schedule_id=schedule_id, by=caller.user_id)

        course = self._directory.get_course(existing.course_id)
        self._notify(existing, course.name if course else str(existing.course_id), "cancelled")

    def get(self, schedule_id: int) -> ReservationSlot:
        slot = self._schedules.get_by_id(schedule_id)
        if not slot:
            raise NotFoundError("Schedule not found")
        return slot

    def list_by_day(
        self,
        *,
        group_id: Optional[int] = None,
        teacher_id: Optional[int] = None,
        day_of_week: Optional[DayOfWeek] = None,
        semester: Optional[int] = None,
    ) -> Dict[DayOfWeek, List[ReservationSlot]]:
        slots = self._schedules.list_filtered(
            group_id=group_id, teacher_id=teacher_id, day_of_week=day_of_week, semester=semester
        )
        by_day: Dict[DayOfWeek, List[ReservationSlot]] = {day: [] for day in DayOfWeek}
        for s in sorted(slots, key=lambda s: s.start_minute):
            by_day[s.day_of_week].append(s)
        return by_day

    def _notify(self, slot: ReservationSlot, course_name: str, change: str) -> None:
        if not self._notifier:
            return
        self._notifier.notify_schedule_change(
            recipient_id=slot.teacher_id,
            recipient_type=RecipientType.TEACHER,
            course_name=course_name,
            change=change,
            schedule_id=slot.schedule_id,
        )
