from src.academic_records.academic_records.core.enums import DayOfWeek
from src.academic_records.academic_records.schedules.conflicts import find_conflicts, has_conflict, shared_resources
from src.academic_records.academic_records.schedules.model import ReservationSlot


def slot(*, group=1, teacher=1, room="R1", day=DayOfWeek.MONDAY, start="08:00", end="10:00", schedule_id=None):
    return ReservationSlot.from_wire(
        course_id=1,
        group_id=group,
        teacher_id=teacher,
        room=room,
        day_of_week=day,
        start_time=start,
        end_time=end,
        schedule_id=schedule_id,
    )


def test_shared_teacher_with_overlap_conflicts_even_if_group_and_room_differ():
    a = slot(group=1, teacher=7, room="R1", start="08:00", end="10:00", schedule_id=1)
    b = slot(group=2, teacher=7, room="R2", start="09:00", end="11:00")

    assert has_conflict(b, [a]) is True
    assert shared_resources(a, b) == ["teacher"]


def test_each_resource_dimension_alone_is_enough():
    base = slot(group=1, teacher=1, room="R1", schedule_id=1)

    assert has_conflict(slot(group=1, teacher=2, room="R2"), [base])
    assert has_conflict(slot(group=2, teacher=1, room="R2"), [base])
    assert has_conflict(slot(group=2, teacher=2, room="R1"), [base])


def test_different_days_never_conflict():
    a = slot(day=DayOfWeek.MONDAY, schedule_id=1)
    b = slot(day=DayOfWeek.TUESDAY)

    assert has_conflict(b, [a]) is False
    assert has_conflict(a, [b]) is False


def test_identical_times_without_shared_resource_do_not_conflict():
    a = slot(group=1, teacher=1, room="R1", schedule_id=1)
    b = slot(group=2, teacher=2, room="R2")
    assert has_conflict(b, [a]) is False


def test_touching_intervals_do_not_conflict():
    a = slot(start="08:00", end="10:00", schedule_id=1)
    b = slot(start="10:00", end="12:00")

    assert has_conflict(b, [a]) is False
    assert has_conflict(a, [b]) is False


def test_one_minute_overlap_conflicts():
    a = slot(start="08:00", end="10:01", schedule_id=1)
    b = slot(start="10:00", end="12:00")
    assert has_conflict(b, [a]) is True


def test_conflict_is_symmetric():
    pairs = [
        (slot(start="08:00", end="09:30"), slot(start="09:00", end="11:00")),
        (slot(start="08:00", end="12:00"), slot(start="09:00", end="10:00")),
        (slot(start="08:00", end="09:00"), slot(start="09:00", end="10:00")),
        (slot(group=1, teacher=1, room="A"), slot(group=2, teacher=2, room="B")),
    ]
    for a, b in pairs:
        assert has_conflict(a, [b]) == has_conflict(b, [a])


def test_exclude_id_skips_previous_version_of_edited_slot():
    original = slot(start="08:00", end="10:00", schedule_id=5)
    edited = slot(start="09:00", end="11:00", schedule_id=5)

    assert has_conflict(edited, [original], exclude_id=5) is False
    assert has_conflict(edited, [original]) is True


def test_find_conflicts_returns_every_clashing_slot():
    existing = [
        slot(group=1, teacher=1, room="R1", start="08:00", end="09:00", schedule_id=1),
        slot(group=9, teacher=9, room="R1", start="08:30", end="09:30", schedule_id=2),
        slot(group=1, teacher=1, room="R1", start="11:00", end="12:00", schedule_id=3),
    ]
    found = find_conflicts(slot(start="08:45", end="10:00"), existing)
    assert [s.schedule_id for s in found] == [1, 2]


def test_rooms_match_ignoring_case_and_whitespace():
    a = slot(group=1, teacher=1, room="A101", schedule_id=1)
    b = slot(group=2, teacher=2, room=" a101 ")

    assert shared_resources(a, b) == ["room"]
    assert has_conflict(b, [a]) is True
