from __future__ import annotations

import logging
from datetime import date, datetime, time
from typing import Callable, Optional

from ..common.datetime_utils import now_local
from ..core.constants import AVERAGE_DISTANCE_PRECISION, PERCENTAGE_PRECISION
from ..core.enums import AttendanceSource, AttendanceStatus
from ..core.exceptions import ValidationError
from ..students.repository import StudentRepository
from .model import AttendanceRecord, DailySummary, StudentAttendanceStats
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)


class AttendanceLedger:
    """Per-student, per-day attendance book.

    At most one record per (student, date); the repository enforces it, the
    ledger only fills in defaults and builds the read-models.
    """

    def __init__(
        self,
        attendance: AttendanceRepository,
        students: StudentRepository,
        *,
        clock: Callable[[], datetime] = now_local,
    ):
        self._attendance = attendance
        self._students = students
        self._clock = clock

    def mark(
        self,
        *,
        student_id: str,
        attendance_date: Optional[date] = None,
        attendance_time: Optional[time] = None,
        status: AttendanceStatus = AttendanceStatus.PRESENT,
        source: AttendanceSource = AttendanceSource.MANUAL,
        match_distance: Optional[float] = None,
    ) -> AttendanceRecord:
        now = self._clock()
        if source == AttendanceSource.MANUAL:
            match_distance = None

        record = self._attendance.create_record(
            student_id=student_id,
            attendance_date=attendance_date or now.date(),
            attendance_time=attendance_time or now.time().replace(microsecond=0),
            status=status,
            source=source,
            match_distance=match_distance,
        )
        logger.info(
            "Marked %s for student %s on %s (source=%s, distance=%s)",
            record.status.value, record.student_id, record.attendance_date, record.source.value, record.match_distance,
        )
        return record

    def query(self, attendance_date: Optional[date] = None) -> DailySummary:
        attendance_date = attendance_date or self._clock().date()
        records = list(self._attendance.list_by_date(attendance_date))

        students = {}
        for r in records:
            if r.student_id not in students:
                s = self._students.get_by_id(r.student_id)
                if s:
                    students[r.student_id] = s

        return DailySummary(attendance_date=attendance_date, records=records, students=students)

    def aggregate(
        self,
        *,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        student_id: Optional[str] = None,
    ) -> list[StudentAttendanceStats]:
        if start_date and end_date and start_date > end_date:
            raise ValidationError("'from' must not be after 'to'")

        records = self._attendance.list_in_range(start_date=start_date, end_date=end_date, student_id=student_id)

        groups: dict[str, list[AttendanceRecord]] = {}
        for r in records:
            groups.setdefault(r.student_id, []).append(r)

        rows: list[StudentAttendanceStats] = []
        for sid, items in groups.items():
            student = self._students.get_by_id(sid)
            if not student:
                # records of a deleted student are not reported
                continue

            total = len(items)
            present = sum(1 for r in items if r.status == AttendanceStatus.PRESENT)
            absent = sum(1 for r in items if r.status == AttendanceStatus.ABSENT)
            distances = [
                r.match_distance
                for r in items
                if r.source == AttendanceSource.AUTO_FACE and r.match_distance is not None
            ]

            rows.append(
                StudentAttendanceStats(
                    student=student,
                    total_days=total,
                    present_days=present,
                    absent_days=absent,
                    attendance_percentage=round(present / total * 100, PERCENTAGE_PRECISION) if total else 0.0,
                    average_match_distance=(
                        round(sum(distances) / len(distances), AVERAGE_DISTANCE_PRECISION) if distances else None
                    ),
                )
            )

        rows.sort(key=lambda row: row.student.name)
        return rows
