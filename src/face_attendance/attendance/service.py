from __future__ import annotations

import logging
import math
from datetime import date, time
from typing import Any, Optional, Sequence, Union

from ..core.enums import AttendanceSource, AttendanceStatus
from ..core.exceptions import (
    DuplicateAttendanceError,
    NoEnrollmentsError,
    NoMatchError,
    NotFoundError,
    ValidationError,
)
from ..common.validators import require_embedding
from ..matching.resolver import MatchResolver
from ..students.model import Student
from ..students.repository import StudentRepository
from .ledger import AttendanceLedger
from .model import AttendanceRecord, AttendanceReport, DailySummary, MarkResult
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)


def parse_status(value: Union[str, AttendanceStatus, None]) -> AttendanceStatus:
    if value is None or value == "":
        return AttendanceStatus.PRESENT
    try:
        return AttendanceStatus(value)
    except ValueError:
        allowed = ", ".join(s.value for s in AttendanceStatus)
        raise ValidationError(f"Invalid status {value!r}, expected one of: {allowed}")


class AttendanceService:
    """Use cases: mark attendance (manual or by face), daily summary, report."""

    def __init__(
        self,
        ledger: AttendanceLedger,
        students: StudentRepository,
        attendance: AttendanceRepository,
        matcher: MatchResolver,
    ):
        self._ledger = ledger
        self._students = students
        self._attendance = attendance
        self._matcher = matcher

    @property
    def threshold(self) -> float:
        return self._matcher.threshold

    def mark(
        self,
        *,
        student_id: Optional[str] = None,
        face_embedding: Optional[Sequence[Any]] = None,
        attendance_date: Optional[date] = None,
        attendance_time: Optional[time] = None,
        status: Union[str, AttendanceStatus, None] = None,
    ) -> MarkResult:
        """Mark by student id when given, otherwise by face embedding."""

        status = parse_status(status)
        if student_id:
            return self._mark_manual(student_id, attendance_date, attendance_time, status)
        if face_embedding is not None:
            return self.mark_by_face(
                face_embedding,
                attendance_date=attendance_date,
                attendance_time=attendance_time,
                status=status,
            )
        raise ValidationError("Either faceEmbedding or studentId is required")

    def mark_by_student(
        self,
        student_id: str,
        *,
        attendance_date: Optional[date] = None,
        attendance_time: Optional[time] = None,
        status: Union[str, AttendanceStatus, None] = None,
    ) -> AttendanceRecord:
        return self._mark_manual(student_id, attendance_date, attendance_time, parse_status(status)).record

    def _mark_manual(
        self,
        student_id: str,
        attendance_date: Optional[date],
        attendance_time: Optional[time],
        status: AttendanceStatus,
    ) -> MarkResult:
        student = self._students.get_by_id(student_id)
        if not student:
            raise NotFoundError("Student not found")

        record = self._record(student, attendance_date, attendance_time, status, AttendanceSource.MANUAL, None)
        return MarkResult(record=record, student=student)

    def mark_by_face(
        self,
        face_embedding: Sequence[Any],
        *,
        attendance_date: Optional[date] = None,
        attendance_time: Optional[time] = None,
        status: Union[str, AttendanceStatus, None] = None,
    ) -> MarkResult:
        probe = require_embedding(face_embedding)
        status = parse_status(status)

        candidates = self._students.list_enrolled()
        if not candidates:
            raise NoEnrollmentsError("No enrolled students found")

        outcome = self._matcher.resolve(probe, candidates)
        if not outcome.matched:
            shown = f"{outcome.best_distance:.3f}" if math.isfinite(outcome.best_distance) else "inf"
            logger.warning("Face rejected: best distance %s exceeds threshold %s", shown, outcome.threshold)
            raise NoMatchError(
                f"Best match distance ({shown}) exceeds threshold ({outcome.threshold})",
                best_distance=outcome.best_distance,
                threshold=outcome.threshold,
            )

        student: Student = outcome.student
        record = self._record(
            student, attendance_date, attendance_time, status, AttendanceSource.AUTO_FACE, outcome.best_distance
        )
        return MarkResult(
            record=record,
            student=student,
            distance=outcome.best_distance,
            confidence=outcome.confidence,
        )

    def _record(
        self,
        student: Student,
        attendance_date: Optional[date],
        attendance_time: Optional[time],
        status: AttendanceStatus,
        source: AttendanceSource,
        distance: Optional[float],
    ) -> AttendanceRecord:
        # No read-before-write: the storage key rejects the second mark.
        try:
            return self._ledger.mark(
                student_id=student.student_id,
                attendance_date=attendance_date,
                attendance_time=attendance_time,
                status=status,
                source=source,
                match_distance=distance,
            )
        except DuplicateAttendanceError as e:
            e.student = student
            logger.info("Duplicate mark for student %s (%s)", student.student_id, source.value)
            raise

    def get_by_date(self, attendance_date: Optional[date] = None) -> DailySummary:
        return self._ledger.query(attendance_date)

    def report(
        self,
        *,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        student_id: Optional[str] = None,
    ) -> AttendanceReport:
        rows = self._ledger.aggregate(start_date=start_date, end_date=end_date, student_id=student_id)
        return AttendanceReport(start_date=start_date, end_date=end_date, rows=rows)

    def get_record(self, attendance_id: int) -> tuple[AttendanceRecord, Optional[Student]]:
        record = self._attendance.get_by_id(attendance_id)
        if not record:
            raise NotFoundError("Attendance record not found")
        return record, self._students.get_by_id(record.student_id)

    def delete_record(self, attendance_id: int) -> None:
        if not self._attendance.delete_by_id(attendance_id):
            raise NotFoundError("Attendance record not found")
        logger.info("Deleted attendance record %s", attendance_id)
