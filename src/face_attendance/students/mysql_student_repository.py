from __future__ import annotations

import uuid
from datetime import datetime
from typing import Any, Dict, Optional, Sequence

import mysql.connector

from ..core.exceptions import DuplicateRollNumberError, StorageError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, dump_embedding, fetchall, fetchone, is_duplicate_key, load_embedding
from .model import Student
from .repository import StudentRepository

_COLUMNS = """
    student_id, name, roll_number, class_name, face_embedding, face_image,
    is_enrolled, enrolled_at, created_at
"""


def _escape_like(value: str) -> str:
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def _to_student(r: Dict[str, Any]) -> Student:
    return Student(
        student_id=str(r["student_id"]),
        name=r["name"],
        roll_number=r["roll_number"],
        class_name=r.get("class_name") or "",
        face_embedding=load_embedding(r.get("face_embedding")),
        face_image=r.get("face_image") or "",
        is_enrolled=bool(r.get("is_enrolled")),
        enrolled_at=r.get("enrolled_at"),
        created_at=r.get("created_at"),
    )


class MySQLStudentRepository(StudentRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, student_id: str) -> Optional[Student]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM students WHERE student_id=%s", (student_id,))
            r = fetchone(cur)
            return _to_student(r) if r else None

    def get_by_roll_number(self, roll_number: str) -> Optional[Student]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM students WHERE roll_number=%s", (roll_number,))
            r = fetchone(cur)
            return _to_student(r) if r else None

    def list_students(
        self,
        *,
        search: Optional[str] = None,
        class_name: Optional[str] = None,
        is_enrolled: Optional[bool] = None,
    ) -> Sequence[Student]:
        clauses = ["1=1"]
        params: list[object] = []

        if search:
            pattern = f"%{_escape_like(search.lower())}%"
            clauses.append("(LOWER(name) LIKE %s OR LOWER(roll_number) LIKE %s OR LOWER(class_name) LIKE %s)")
            params.extend([pattern, pattern, pattern])
        if class_name:
            clauses.append("class_name=%s")
            params.append(class_name)
        if is_enrolled is not None:
            clauses.append("is_enrolled=%s")
            params.append(1 if is_enrolled else 0)

        where = " AND ".join(clauses)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM students WHERE {where} ORDER BY name ASC", tuple(params))
            return [_to_student(r) for r in fetchall(cur)]

    def list_enrolled(self) -> Sequence[Student]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM students
                WHERE is_enrolled=1 AND face_embedding IS NOT NULL AND face_embedding <> '[]'
                ORDER BY created_at ASC, student_id ASC
                """
            )
            return [_to_student(r) for r in fetchall(cur)]

    def create_student(self, *, name: str, roll_number: str, class_name: str) -> Student:
        student_id = uuid.uuid4().hex
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    """
                    INSERT INTO students(student_id, name, roll_number, class_name, is_enrolled)
                    VALUES(%s,%s,%s,%s,0)
                    """,
                    (student_id, name, roll_number, class_name),
                )
        except mysql.connector.IntegrityError as e:
            if is_duplicate_key(e):
                raise DuplicateRollNumberError("Student with this roll number already exists") from e
            raise StorageError("Database operation failed") from e
        return self.get_by_id(student_id)

    def update_profile(self, student_id: str, *, name: str, roll_number: str, class_name: str) -> Optional[Student]:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    """
                    UPDATE students
                    SET name=%s, roll_number=%s, class_name=%s
                    WHERE student_id=%s
                    """,
                    (name, roll_number, class_name, student_id),
                )
        except mysql.connector.IntegrityError as e:
            if is_duplicate_key(e):
                raise DuplicateRollNumberError("Student with this roll number already exists") from e
            raise StorageError("Database operation failed") from e
        return self.get_by_id(student_id)

    def save_enrollment(
        self,
        student_id: str,
        *,
        face_embedding: Sequence[float],
        face_image: Optional[str],
        enrolled_at: datetime,
    ) -> Optional[Student]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE students
                SET face_embedding=%s,
                    face_image=COALESCE(%s, face_image),
                    is_enrolled=1,
                    enrolled_at=%s
                WHERE student_id=%s
                """,
                (dump_embedding(face_embedding), face_image, enrolled_at, student_id),
            )
        # rowcount counts changed rows only; an identical resubmit reports 0
        return self.get_by_id(student_id)

    def delete_by_id(self, student_id: str) -> bool:
        # attendance_records rows go with it (ON DELETE CASCADE)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM students WHERE student_id=%s", (student_id,))
            return cur.rowcount > 0
