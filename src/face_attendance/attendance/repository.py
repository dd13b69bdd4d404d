from __future__ import annotations

from datetime import date, time
from typing import Optional, Protocol, Sequence

from ..core.enums import AttendanceSource, AttendanceStatus
from .model import AttendanceRecord


class AttendanceRepository(Protocol):
    def create_record(
        self,
        *,
        student_id: str,
        attendance_date: date,
        attendance_time: time,
        status: AttendanceStatus,
        source: AttendanceSource,
        match_distance: Optional[float] = None,
    ) -> AttendanceRecord:
        """Insert one record.

        Must be atomic per (student_id, attendance_date): a second insert for
        the same key raises DuplicateAttendanceError, whatever the timing.
        """

        raise NotImplementedError

    def get_by_id(self, attendance_id: int) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def get_for_student_and_date(self, student_id: str, attendance_date: date) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def list_by_date(self, attendance_date: date) -> Sequence[AttendanceRecord]:
        """Records of one day, latest time first."""

        raise NotImplementedError

    def list_in_range(
        self,
        *,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        student_id: Optional[str] = None,
    ) -> Sequence[AttendanceRecord]:
        """Records with start_date <= date <= end_date; a missing bound is open."""

        raise NotImplementedError

    def delete_by_id(self, attendance_id: int) -> bool:
        raise NotImplementedError

    def delete_for_student(self, student_id: str) -> int:
        raise NotImplementedError
