"""Quiet-hours evaluation.

A window is a pair of minutes-since-midnight with no ordering constraint:
``start > end`` means the window crosses midnight (e.g. 22:00 -> 07:00).
The end boundary is exclusive in both shapes.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, time
from typing import Union

from ..common.datetime_utils import format_hhmm, minute_of_day, parse_hhmm


@dataclass(frozen=True)
class QuietWindow:
    start_minute: int
    end_minute: int

    @classmethod
    def parse(cls, start: str, end: str) -> "QuietWindow":
        return cls(start_minute=parse_hhmm(start), end_minute=parse_hhmm(end))

    @property
    def crosses_midnight(self) -> bool:
        return self.start_minute > self.end_minute

    def __str__(self) -> str:
        return f"{format_hhmm(self.start_minute)}-{format_hhmm(self.end_minute)}"


def is_quiet(now: Union[datetime, time, int], window: QuietWindow) -> bool:
    cur = minute_of_day(now)
    start, end = window.start_minute, window.end_minute

    if start > end:
        return cur >= start or cur < end

    return start <= cur < end
