from __future__ import annotations

import threading

import pytest

from src.academic_records.academic_records.core.context import CallerContext
from src.academic_records.academic_records.core.enums import DayOfWeek, NotificationType, Role
from src.academic_records.academic_records.core.exceptions import (
    AuthorizationError,
    InvalidTimeWindowError,
    NotFoundError,
    ScheduleConflictError,
)
from src.academic_records.academic_records.notifications.service import NotificationDispatcher
from src.academic_records.academic_records.schedules.model import ReservationSlot
from src.academic_records.academic_records.schedules.service import ScheduleCoordinator
from tests.fakes import InMemoryDirectory, InMemoryPreferences, InMemorySchedules, RecordingChannel

ADMIN = CallerContext(user_id=1, role=Role.ADMIN)
TEACHER = CallerContext(user_id=2, role=Role.TEACHER, related_id=7)
STUDENT = CallerContext(user_id=3, role=Role.STUDENT, related_id=100)


def slot(*, group=1, teacher=7, room="R1", day=DayOfWeek.MONDAY, start="08:00", end="10:00"):
    return ReservationSlot.from_wire(
        course_id=1, group_id=group, teacher_id=teacher, room=room, day_of_week=day, start_time=start, end_time=end
    )


def build():
    directory = InMemoryDirectory()
    directory.add_course(1, name="Databases")
    directory.groups.update({1, 2})
    directory.teachers.update({7, 8})
    schedules = InMemorySchedules()
    channel = RecordingChannel()
    coordinator = ScheduleCoordinator(schedules, directory, NotificationDispatcher(InMemoryPreferences(), channel))
    return coordinator, schedules, channel


def test_create_persists_and_notifies_teacher():
    coordinator, schedules, channel = build()

    created = coordinator.create(caller=ADMIN, slot=slot())

    assert created.schedule_id == 1
    assert schedules.get_by_id(1) == created
    assert len(channel.delivered) == 1
    assert channel.delivered[0].recipient_id == 7
    assert channel.delivered[0].type == NotificationType.SCHEDULE
    assert "Databases" in channel.delivered[0].message


def test_shared_teacher_overlap_is_rejected_with_conflicting_slot():
    coordinator, _, _ = build()
    a = coordinator.create(caller=ADMIN, slot=slot(group=1, teacher=7, room="R1", start="08:00", end="10:00"))

    with pytest.raises(ScheduleConflictError) as exc:
        coordinator.create(caller=TEACHER, slot=slot(group=2, teacher=7, room="R2", start="09:00", end="11:00"))

    assert [c.schedule_id for c in exc.value.conflicts] == [a.schedule_id]


def test_adjacent_slot_on_same_resources_is_accepted():
    coordinator, schedules, _ = build()
    coordinator.create(caller=ADMIN, slot=slot(start="08:00", end="10:00"))
    coordinator.create(caller=ADMIN, slot=slot(start="10:00", end="12:00"))
    assert len(schedules.list_filtered()) == 2


def test_update_does_not_conflict_with_its_own_previous_version():
    coordinator, schedules, channel = build()
    created = coordinator.create(caller=ADMIN, slot=slot(start="08:00", end="10:00"))

    updated = coordinator.update(caller=ADMIN, schedule_id=created.schedule_id, slot=slot(start="09:00", end="11:00"))

    assert updated.schedule_id == created.schedule_id
    assert schedules.get_by_id(created.schedule_id).start_time == "09:00"
    assert "changed" in channel.delivered[-1].message


def test_update_still_conflicts_with_other_slots():
    coordinator, _, _ = build()
    coordinator.create(caller=ADMIN, slot=slot(group=1, teacher=7, room="R1", start="08:00", end="10:00"))
    other = coordinator.create(caller=ADMIN, slot=slot(group=2, teacher=8, room="R2", start="10:00", end="12:00"))

    with pytest.raises(ScheduleConflictError):
        coordinator.update(
            caller=ADMIN,
            schedule_id=other.schedule_id,
            slot=slot(group=2, teacher=8, room="R1", start="09:30", end="11:00"),
        )


def test_update_missing_schedule_is_not_found():
    coordinator, _, _ = build()
    with pytest.raises(NotFoundError):
        coordinator.update(caller=ADMIN, schedule_id=42, slot=slot())


def test_unknown_references_are_not_found():
    coordinator, _, _ = build()
    with pytest.raises(NotFoundError):
        coordinator.create(caller=ADMIN, slot=slot(group=99))
    with pytest.raises(NotFoundError):
        coordinator.create(caller=ADMIN, slot=slot(teacher=99))


def test_students_cannot_create_and_teachers_cannot_delete():
    coordinator, _, _ = build()
    with pytest.raises(AuthorizationError):
        coordinator.create(caller=STUDENT, slot=slot())

    created = coordinator.create(caller=TEACHER, slot=slot())
    with pytest.raises(AuthorizationError):
        coordinator.delete(caller=TEACHER, schedule_id=created.schedule_id)


def test_delete_removes_slot_and_sends_cancellation():
    coordinator, schedules, channel = build()
    created = coordinator.create(caller=ADMIN, slot=slot())

    coordinator.delete(caller=ADMIN, schedule_id=created.schedule_id)

    assert schedules.get_by_id(created.schedule_id) is None
    assert channel.delivered[-1].title == "Timetable cancelled"
    with pytest.raises(NotFoundError):
        coordinator.delete(caller=ADMIN, schedule_id=created.schedule_id)


def test_invalid_time_windows_are_rejected():
    with pytest.raises(InvalidTimeWindowError):
        slot(start="10:00", end="10:00")
    with pytest.raises(InvalidTimeWindowError):
        slot(start="11:00", end="10:00")
    with pytest.raises(InvalidTimeWindowError):
        slot(start="8h00", end="10:00")
    with pytest.raises(InvalidTimeWindowError):
        slot(start="24:00", end="10:00")


def test_list_by_day_groups_and_sorts():
    coordinator, _, _ = build()
    coordinator.create(caller=ADMIN, slot=slot(day=DayOfWeek.MONDAY, start="13:00", end="14:00"))
    coordinator.create(caller=ADMIN, slot=slot(day=DayOfWeek.MONDAY, start="08:00", end="09:00"))
    coordinator.create(caller=ADMIN, slot=slot(day=DayOfWeek.FRIDAY, start="08:00", end="09:00"))

    by_day = coordinator.list_by_day(group_id=1)

    assert [s.start_time for s in by_day[DayOfWeek.MONDAY]] == ["08:00", "13:00"]
    assert len(by_day[DayOfWeek.FRIDAY]) == 1
    assert by_day[DayOfWeek.TUESDAY] == []


def test_check_availability_reports_conflicts_without_writing():
    coordinator, schedules, _ = build()
    coordinator.create(caller=ADMIN, slot=slot(start="08:00", end="10:00"))

    assert len(coordinator.check_availability(slot(start="09:00", end="09:30"))) == 1
    assert coordinator.check_availability(slot(day=DayOfWeek.TUESDAY)) == []
    assert len(schedules.list_filtered()) == 1


def test_concurrent_conflicting_creates_accept_exactly_one():
    coordinator, schedules, _ = build()
    barrier = threading.Barrier(8)
    results = []
    lock = threading.Lock()

    def worker(i):
        barrier.wait()
        try:
            coordinator.create(caller=ADMIN, slot=slot(group=1, teacher=7, room=f"R{i}", start="08:00", end="10:00"))
            outcome = "ok"
        except ScheduleConflictError:
            outcome = "conflict"
        with lock:
            results.append(outcome)

    threads = [threading.Thread(target=worker, args=(i,)) for i in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert results.count("ok") == 1
    assert results.count("conflict") == 7
    assert len(schedules.list_filtered()) == 1


def test_create_succeeds_when_notification_preferences_are_unavailable():
    directory = InMemoryDirectory()
    directory.add_course(1, name="Databases")
    directory.groups.add(1)
    directory.teachers.add(7)
    schedules = InMemorySchedules()
    notifier = NotificationDispatcher(InMemoryPreferences(fail=True), RecordingChannel())
    coordinator = ScheduleCoordinator(schedules, directory, notifier)

    created = coordinator.create(caller=ADMIN, slot=slot())

    assert schedules.get_by_id(created.schedule_id) == created
