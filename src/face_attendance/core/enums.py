from __future__ import annotations

from enum import Enum


class AttendanceStatus(str, Enum):
    """Attendance status stored with each daily record."""

    PRESENT = "Present"
    ABSENT = "Absent"
    LEAVE = "Leave"


class AttendanceSource(str, Enum):
    """Where a record came from: an operator or the face matcher."""

    MANUAL = "manual"
    AUTO_FACE = "auto-face"
