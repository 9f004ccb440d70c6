from datetime import datetime, time

import pytest

from src.academic_records.academic_records.core.exceptions import InvalidTimeWindowError
from src.academic_records.academic_records.notifications.quiet_hours import QuietWindow, is_quiet

OVERNIGHT = QuietWindow.parse("22:00", "07:00")


@pytest.mark.parametrize(
    "now, expected",
    [
        (time(23, 30), True),
        (time(22, 0), True),
        (time(0, 0), True),
        (time(6, 59), True),
        (time(7, 0), False),
        (time(12, 0), False),
        (time(21, 59), False),
    ],
)
def test_window_crossing_midnight(now, expected):
    assert OVERNIGHT.crosses_midnight
    assert is_quiet(now, OVERNIGHT) is expected


def test_daytime_window():
    window = QuietWindow.parse("12:00", "14:00")

    assert not window.crosses_midnight
    assert is_quiet(time(12, 0), window)
    assert is_quiet(time(13, 59), window)
    assert not is_quiet(time(14, 0), window)
    assert not is_quiet(time(11, 59), window)


def test_empty_window_is_never_quiet():
    window = QuietWindow.parse("08:00", "08:00")
    assert not any(is_quiet(m, window) for m in range(0, 24 * 60, 15))


def test_accepts_datetime_and_minute_of_day():
    assert is_quiet(datetime(2026, 1, 5, 23, 30), OVERNIGHT)
    assert is_quiet(23 * 60 + 30, OVERNIGHT)


def test_string_form():
    assert str(OVERNIGHT) == "22:00-07:00"


@pytest.mark.parametrize("bad", ["25:00", "7pm", "", "12:60"])
def test_rejects_malformed_times(bad):
    with pytest.raises(InvalidTimeWindowError):
        QuietWindow.parse(bad, "07:00")
