from __future__ import annotations

import threading
from datetime import date, time
from typing import Optional, Sequence

from ..common.datetime_utils import now_local
from ..core.enums import AttendanceSource, AttendanceStatus
from ..core.exceptions import DuplicateAttendanceError
from .model import AttendanceRecord
from .repository import AttendanceRepository


class InMemoryAttendanceRepository(AttendanceRepository):
    """Process-local ledger store used by the ``memory`` storage backend.

    The (student_id, attendance_date) key is checked and inserted under one
    lock, which plays the role of the UNIQUE KEY in the MySQL schema.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._by_student_date: dict[tuple[str, date], AttendanceRecord] = {}
        self._id = 0

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
        key = (student_id, attendance_date)
        with self._lock:
            existing = self._by_student_date.get(key)
            if existing:
                raise DuplicateAttendanceError("Attendance already marked for this student today", existing=existing)

            self._id += 1
            rec = AttendanceRecord(
                attendance_id=self._id,
                student_id=student_id,
                attendance_date=attendance_date,
                attendance_time=attendance_time,
                status=status,
                source=source,
                match_distance=match_distance,
                created_at=now_local(),
            )
            self._by_student_date[key] = rec
            return rec

    def get_by_id(self, attendance_id: int) -> Optional[AttendanceRecord]:
        for r in list(self._by_student_date.values()):
            if r.attendance_id == int(attendance_id):
                return r
        return None

    def get_for_student_and_date(self, student_id: str, attendance_date: date) -> Optional[AttendanceRecord]:
        return self._by_student_date.get((student_id, attendance_date))

    def list_by_date(self, attendance_date: date) -> Sequence[AttendanceRecord]:
        items = [r for r in list(self._by_student_date.values()) if r.attendance_date == attendance_date]
        items.sort(key=lambda r: (r.attendance_time, r.attendance_id), reverse=True)
        return items

    def list_in_range(
        self,
        *,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        student_id: Optional[str] = None,
    ) -> Sequence[AttendanceRecord]:
        items = []
        for r in list(self._by_student_date.values()):
            if start_date is not None and r.attendance_date < start_date:
                continue
            if end_date is not None and r.attendance_date > end_date:
                continue
            if student_id is not None and r.student_id != student_id:
                continue
            items.append(r)
        items.sort(key=lambda r: (r.attendance_date, r.attendance_id))
        return items

    def delete_by_id(self, attendance_id: int) -> bool:
        with self._lock:
            for key, r in list(self._by_student_date.items()):
                if r.attendance_id == int(attendance_id):
                    del self._by_student_date[key]
                    return True
        return False

    def delete_for_student(self, student_id: str) -> int:
        with self._lock:
            keys = [k for k in self._by_student_date if k[0] == student_id]
            for k in keys:
                del self._by_student_date[k]
            return len(keys)
