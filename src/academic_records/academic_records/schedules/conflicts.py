"""Conflict detection between weekly reservation slots.

Two slots conflict when they are on the same day, share at least one of
group, teacher or room, and their half-open ``[start, end)`` intervals
overlap. Slots that only touch (one ends when the other starts) are fine.
"""
from __future__ import annotations

from typing import Iterable, List, Optional

from .model import ReservationSlot


def intervals_overlap(a_start: int, a_end: int, b_start: int, b_end: int) -> bool:
    return a_start < b_end and b_start < a_end


def room_key(room: str) -> str:
    """Rooms match ignoring surrounding whitespace and case, like the DB collation."""
    return room.strip().casefold()


def shared_resources(a: ReservationSlot, b: ReservationSlot) -> List[str]:
    shared = []
    if a.group_id == b.group_id:
        shared.append("group")
    if a.teacher_id == b.teacher_id:
        shared.append("teacher")
    if room_key(a.room) == room_key(b.room):
        shared.append("room")
    return shared


def slots_conflict(a: ReservationSlot, b: ReservationSlot) -> bool:
    if a.day_of_week != b.day_of_week:
        return False
    if not intervals_overlap(a.start_minute, a.end_minute, b.start_minute, b.end_minute):
        return False
    return bool(shared_resources(a, b))


def find_conflicts(
    candidate: ReservationSlot,
    existing: Iterable[ReservationSlot],
    exclude_id: Optional[int] = None,
) -> List[ReservationSlot]:
    out = []
    for other in existing:
        if exclude_id is not None and other.schedule_id == exclude_id:
            continue
        if slots_conflict(candidate, other):
            out.append(other)
    return out


def has_conflict(
    candidate: ReservationSlot,
    existing: Iterable[ReservationSlot],
    exclude_id: Optional[int] = None,
) -> bool:
    return bool(find_conflicts(candidate, existing, exclude_id))
