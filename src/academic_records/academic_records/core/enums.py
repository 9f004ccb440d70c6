from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """Caller role used for authorization decisions."""

    ADMIN = "admin"
    TEACHER = "teacher"
    STUDENT = "student"


class AttendanceStatus(str, Enum):
    """Attendance status as stored in the database."""

    PRESENT = "present"
    ABSENT = "absent"
    LATE = "late"
    EXCUSED = "excused"


class CheckInMethod(str, Enum):
    MANUAL = "manual"
    TOKEN = "token"


class DayOfWeek(str, Enum):
    MONDAY = "monday"
    TUESDAY = "tuesday"
    WEDNESDAY = "wednesday"
    THURSDAY = "thursday"
    FRIDAY = "friday"
    SATURDAY = "saturday"
    SUNDAY = "sunday"


class SessionType(str, Enum):
    """Kind of class meeting (lecture, tutorial, lab, exam)."""

    COURS = "cours"
    TD = "td"
    TP = "tp"
    EXAMEN = "examen"


class NotificationType(str, Enum):
    GRADE = "grade"
    SCHEDULE = "schedule"
    ATTENDANCE = "attendance"
    ANNOUNCEMENT = "announcement"
    REMINDER = "reminder"
    ALERT = "alert"


class NotificationPriority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class RecipientType(str, Enum):
    STUDENT = "student"
    TEACHER = "teacher"
    ADMIN = "admin"
