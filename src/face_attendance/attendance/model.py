from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, time
from typing import Optional

from ..common.datetime_utils import format_date, format_time
from ..core.enums import AttendanceSource, AttendanceStatus
from ..students.model import Student


@dataclass(frozen=True)
class AttendanceRecord:
    """Domain entity: one student's attendance for one calendar day."""

    attendance_id: int
    student_id: str
    attendance_date: date
    attendance_time: time
    status: AttendanceStatus
    source: AttendanceSource
    match_distance: Optional[float] = None
    created_at: Optional[datetime] = None

    def to_dict(self, student: Optional[Student] = None) -> dict:
        return {
            "_id": self.attendance_id,
            "studentId": student.summary() if student else self.student_id,
            "date": format_date(self.attendance_date),
            "time": format_time(self.attendance_time),
            "status": self.status.value,
            "source": self.source.value,
            "matchDistance": self.match_distance,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
        }


@dataclass(frozen=True)
class DailySummary:
    attendance_date: date
    records: list[AttendanceRecord]
    students: dict[str, Student] = field(default_factory=dict)

    @property
    def total_marked(self) -> int:
        return len(self.records)

    @property
    def present_count(self) -> int:
        return sum(1 for r in self.records if r.status == AttendanceStatus.PRESENT)

    @property
    def absent_count(self) -> int:
        return sum(1 for r in self.records if r.status == AttendanceStatus.ABSENT)

    def to_dict(self) -> dict:
        return {
            "date": format_date(self.attendance_date),
            "totalMarked": self.total_marked,
            "presentCount": self.present_count,
            "absentCount": self.absent_count,
            "records": [r.to_dict(self.students.get(r.student_id)) for r in self.records],
        }


@dataclass(frozen=True)
class StudentAttendanceStats:
    """Read-model: one row of the attendance report."""

    student: Student
    total_days: int
    present_days: int
    absent_days: int
    attendance_percentage: float
    average_match_distance: Optional[float]

    def to_dict(self) -> dict:
        return {
            "student": self.student.summary(),
            "totalDays": self.total_days,
            "presentDays": self.present_days,
            "absentDays": self.absent_days,
            "attendancePercentage": self.attendance_percentage,
            "avgMatchDistance": self.average_match_distance,
        }


@dataclass(frozen=True)
class AttendanceReport:
    start_date: Optional[date]
    end_date: Optional[date]
    rows: list[StudentAttendanceStats]

    def to_dict(self) -> dict:
        return {
            "from": format_date(self.start_date) if self.start_date else None,
            "to": format_date(self.end_date) if self.end_date else None,
            "totalStudents": len(self.rows),
            "report": [r.to_dict() for r in self.rows],
        }


@dataclass(frozen=True)
class MarkResult:
    """Outcome of a successful mark; distance/confidence only for face marks."""

    record: AttendanceRecord
    student: Student
    distance: Optional[float] = None
    confidence: Optional[float] = None

    def to_dict(self) -> dict:
        data = {
            "message": (
                "Attendance marked successfully"
                if self.record.source == AttendanceSource.AUTO_FACE
                else "Attendance marked manually"
            ),
            "attendance": self.record.to_dict(),
            "student": self.student.summary(),
        }
        if self.distance is not None:
            data["matchDistance"] = self.distance
            data["matchConfidence"] = self.confidence
        return data
