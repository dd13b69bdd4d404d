from __future__ import annotations

import threading
import uuid
from dataclasses import replace
from datetime import datetime
from typing import Optional, Sequence

from ..common.datetime_utils import now_local
from ..core.exceptions import DuplicateRollNumberError
from .model import Student
from .repository import StudentRepository


class InMemoryStudentRepository(StudentRepository):
    """Process-local student store used by the ``memory`` storage backend."""

    def __init__(self):
        self._lock = threading.Lock()
        self._by_id: dict[str, Student] = {}

    def get_by_id(self, student_id: str) -> Optional[Student]:
        return self._by_id.get(student_id)

    def get_by_roll_number(self, roll_number: str) -> Optional[Student]:
        for s in self._by_id.values():
            if s.roll_number == roll_number:
                return s
        return None

    def list_students(
        self,
        *,
        search: Optional[str] = None,
        class_name: Optional[str] = None,
        is_enrolled: Optional[bool] = None,
    ) -> Sequence[Student]:
        items = list(self._by_id.values())
        if search:
            needle = search.lower()
            items = [
                s
                for s in items
                if needle in s.name.lower() or needle in s.roll_number.lower() or needle in s.class_name.lower()
            ]
        if class_name:
            items = [s for s in items if s.class_name == class_name]
        if is_enrolled is not None:
            items = [s for s in items if s.is_enrolled == is_enrolled]
        return sorted(items, key=lambda s: s.name)

    def list_enrolled(self) -> Sequence[Student]:
        # dicts keep insertion order, so scan order follows creation order
        return [s for s in self._by_id.values() if s.is_enrolled and s.face_embedding]

    def create_student(self, *, name: str, roll_number: str, class_name: str) -> Student:
        with self._lock:
            if self.get_by_roll_number(roll_number):
                raise DuplicateRollNumberError("Student with this roll number already exists")
            student = Student(
                student_id=uuid.uuid4().hex,
                name=name,
                roll_number=roll_number,
                class_name=class_name,
                created_at=now_local(),
            )
            self._by_id[student.student_id] = student
            return student

    def update_profile(self, student_id: str, *, name: str, roll_number: str, class_name: str) -> Optional[Student]:
        with self._lock:
            current = self._by_id.get(student_id)
            if not current:
                return None
            other = self.get_by_roll_number(roll_number)
            if other and other.student_id != student_id:
                raise DuplicateRollNumberError("Student with this roll number already exists")
            updated = replace(current, name=name, roll_number=roll_number, class_name=class_name)
            self._by_id[student_id] = updated
            return updated

    def save_enrollment(
        self,
        student_id: str,
        *,
        face_embedding: Sequence[float],
        face_image: Optional[str],
        enrolled_at: datetime,
    ) -> Optional[Student]:
        with self._lock:
            current = self._by_id.get(student_id)
            if not current:
                return None
            updated = replace(
                current,
                face_embedding=tuple(float(v) for v in face_embedding),
                face_image=current.face_image if face_image is None else face_image,
                is_enrolled=True,
                enrolled_at=enrolled_at,
            )
            self._by_id[student_id] = updated
            return updated

    def delete_by_id(self, student_id: str) -> bool:
        with self._lock:
            return self._by_id.pop(student_id, None) is not None
