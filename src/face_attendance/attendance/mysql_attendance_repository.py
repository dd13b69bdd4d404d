from __future__ import annotations

from datetime import date, time
from typing import Any, Dict, Optional, Sequence

import mysql.connector
from mysql.connector import errorcode

from ..core.enums import AttendanceSource, AttendanceStatus
from ..core.exceptions import DuplicateAttendanceError, NotFoundError, StorageError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import as_time, db_cursor, fetchall, fetchone, is_duplicate_key
from .model import AttendanceRecord
from .repository import AttendanceRepository

_COLUMNS = """
    attendance_id, student_id, attendance_date, attendance_time, status, source,
    match_distance, created_at
"""


def _to_record(r: Dict[str, Any]) -> AttendanceRecord:
    distance = r.get("match_distance")
    return AttendanceRecord(
        attendance_id=int(r["attendance_id"]),
        student_id=str(r["student_id"]),
        attendance_date=r["attendance_date"],
        attendance_time=as_time(r["attendance_time"]),
        status=AttendanceStatus(r["status"]),
        source=AttendanceSource(r["source"]),
        match_distance=float(distance) if distance is not None else None,
        created_at=r.get("created_at"),
    )


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

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
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    """
                    INSERT INTO attendance_records(
                        student_id, attendance_date, attendance_time, status, source, match_distance
                    )
                    VALUES(%s,%s,%s,%s,%s,%s)
                    """,
                    (student_id, attendance_date, attendance_time, status.value, source.value, match_distance),
                )
                attendance_id = int(cur.lastrowid)
        except mysql.connector.IntegrityError as e:
            # uq_attendance_student_date decides, not a prior SELECT
            if is_duplicate_key(e):
                existing = self.get_for_student_and_date(student_id, attendance_date)
                raise DuplicateAttendanceError(
                    "Attendance already marked for this student today", existing=existing
                ) from e
            if e.errno == errorcode.ER_NO_REFERENCED_ROW_2:
                raise NotFoundError("Student not found") from e
            raise StorageError("Database operation failed") from e
        return self.get_by_id(attendance_id)

    def get_by_id(self, attendance_id: int) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM attendance_records WHERE attendance_id=%s", (int(attendance_id),))
            r = fetchone(cur)
            return _to_record(r) if r else None

    def get_for_student_and_date(self, student_id: str, attendance_date: date) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_records
                WHERE student_id=%s AND attendance_date=%s
                """,
                (student_id, attendance_date),
            )
            r = fetchone(cur)
            return _to_record(r) if r else None

    def list_by_date(self, attendance_date: date) -> Sequence[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_records
                WHERE attendance_date=%s
                ORDER BY attendance_time DESC, attendance_id DESC
                """,
                (attendance_date,),
            )
            return [_to_record(r) for r in fetchall(cur)]

    def list_in_range(
        self,
        *,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        student_id: Optional[str] = None,
    ) -> Sequence[AttendanceRecord]:
        clauses = ["1=1"]
        params: list[object] = []

        if start_date is not None:
            clauses.append("attendance_date >= %s")
            params.append(start_date)
        if end_date is not None:
            clauses.append("attendance_date <= %s")
            params.append(end_date)
        if student_id is not None:
            clauses.append("student_id=%s")
            params.append(student_id)

        where = " AND ".join(clauses)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_records
                WHERE {where}
                ORDER BY attendance_date ASC, attendance_id ASC
                """,
                tuple(params),
            )
            return [_to_record(r) for r in fetchall(cur)]

    def delete_by_id(self, attendance_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM attendance_records WHERE attendance_id=%s", (int(attendance_id),))
            return cur.rowcount > 0

    def delete_for_student(self, student_id: str) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM attendance_records WHERE student_id=%s", (student_id,))
            return int(cur.rowcount)
