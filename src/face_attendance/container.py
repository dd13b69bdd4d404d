from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from .attendance.ledger import AttendanceLedger
from .attendance.memory_attendance_repository import InMemoryAttendanceRepository
from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.repository import AttendanceRepository
from .attendance.service import AttendanceService
from .common.images import FaceImageStore
from .core.constants import DEFAULT_MATCH_THRESHOLD
from .database.connection import DatabaseConnection, DBConfig
from .matching.resolver import LinearScanMatcher
from .students.memory_student_repository import InMemoryStudentRepository
from .students.mysql_student_repository import MySQLStudentRepository
from .students.repository import StudentRepository
from .students.service import StudentService


@dataclass(frozen=True)
class Container:
    conn: Optional[DatabaseConnection]

    students_repo: StudentRepository
    attendance_repo: AttendanceRepository

    images: FaceImageStore
    matcher: LinearScanMatcher
    ledger: AttendanceLedger

    student_service: StudentService
    attendance_service: AttendanceService

    def close(self) -> None:
        if self.conn is not None and not self.conn.closed:
            self.conn.close()


def build_container(
    *,
    db_config: Optional[dict] = None,
    storage_backend: str = "mysql",
    threshold: float = DEFAULT_MATCH_THRESHOLD,
    upload_folder: str | Path = "public/uploads",
) -> Container:
    conn: Optional[DatabaseConnection] = None

    if storage_backend == "memory":
        students_repo: StudentRepository = InMemoryStudentRepository()
        attendance_repo: AttendanceRepository = InMemoryAttendanceRepository()
    elif storage_backend == "mysql":
        if db_config is None:
            raise ValueError("db_config is required for the mysql storage backend")
        conn = DatabaseConnection(DBConfig.from_mapping(db_config))
        students_repo = MySQLStudentRepository(conn)
        attendance_repo = MySQLAttendanceRepository(conn)
    else:
        raise ValueError(f"Unknown storage backend: {storage_backend!r}")

    images = FaceImageStore(upload_folder)
    matcher = LinearScanMatcher(threshold)
    ledger = AttendanceLedger(attendance_repo, students_repo)

    student_service = StudentService(students_repo, attendance_repo, images)
    attendance_service = AttendanceService(ledger, students_repo, attendance_repo, matcher)

    return Container(
        conn=conn,
        students_repo=students_repo,
        attendance_repo=attendance_repo,
        images=images,
        matcher=matcher,
        ledger=ledger,
        student_service=student_service,
        attendance_service=attendance_service,
    )
