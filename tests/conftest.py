from __future__ import annotations

from datetime import datetime

import pytest

from face_attendance.attendance.ledger import AttendanceLedger
from face_attendance.attendance.memory_attendance_repository import InMemoryAttendanceRepository
from face_attendance.attendance.service import AttendanceService
from face_attendance.common.images import FaceImageStore
from face_attendance.matching.resolver import LinearScanMatcher
from face_attendance.students.memory_student_repository import InMemoryStudentRepository
from face_attendance.students.service import StudentService


@pytest.fixture
def fixed_now() -> datetime:
    return datetime(2024, 1, 10, 8, 30, 0)


@pytest.fixture
def students_repo() -> InMemoryStudentRepository:
    return InMemoryStudentRepository()


@pytest.fixture
def attendance_repo() -> InMemoryAttendanceRepository:
    return InMemoryAttendanceRepository()


@pytest.fixture
def ledger(attendance_repo, students_repo, fixed_now) -> AttendanceLedger:
    return AttendanceLedger(attendance_repo, students_repo, clock=lambda: fixed_now)


@pytest.fixture
def attendance_service(ledger, students_repo, attendance_repo) -> AttendanceService:
    return AttendanceService(ledger, students_repo, attendance_repo, LinearScanMatcher(0.48))


@pytest.fixture
def student_service(students_repo, attendance_repo, tmp_path, fixed_now) -> StudentService:
    return StudentService(students_repo, attendance_repo, FaceImageStore(tmp_path), clock=lambda: fixed_now)
