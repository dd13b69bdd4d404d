from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Callable, Optional, Sequence

from ..attendance.repository import AttendanceRepository
from ..common.datetime_utils import now_local
from ..common.images import FaceImageStore
from ..common.validators import require_embedding, require_non_empty
from ..core.exceptions import DuplicateRollNumberError, NotFoundError
from .model import Student
from .repository import StudentRepository

logger = logging.getLogger(__name__)


class StudentService:
    """Use cases: manage students and enroll their face embedding."""

    def __init__(
        self,
        students: StudentRepository,
        attendance: AttendanceRepository,
        images: FaceImageStore,
        *,
        clock: Callable[[], datetime] = now_local,
    ):
        self._students = students
        self._attendance = attendance
        self._images = images
        self._clock = clock

    def create_student(self, *, name: Any, roll_number: Any, class_name: Any = "") -> Student:
        name = require_non_empty(name, "Name")
        roll_number = require_non_empty(roll_number, "Roll number")
        class_name = (class_name or "").strip() if isinstance(class_name, str) else ""

        if self._students.get_by_roll_number(roll_number):
            raise DuplicateRollNumberError("Student with this roll number already exists")

        student = self._students.create_student(name=name, roll_number=roll_number, class_name=class_name)
        logger.info("Created student %s (roll %s)", student.student_id, roll_number)
        return student

    def list_students(
        self,
        *,
        search: Optional[str] = None,
        class_name: Optional[str] = None,
        is_enrolled: Optional[bool] = None,
    ) -> Sequence[Student]:
        return self._students.list_students(
            search=(search or "").strip() or None,
            class_name=class_name or None,
            is_enrolled=is_enrolled,
        )

    def list_enrolled(self) -> Sequence[Student]:
        return self._students.list_students(is_enrolled=True)

    def get_student(self, student_id: str) -> Student:
        student = self._students.get_by_id(student_id)
        if not student:
            raise NotFoundError("Student not found")
        return student

    def update_student(self, student_id: str, *, name: Any, roll_number: Any, class_name: Any = None) -> Student:
        current = self.get_student(student_id)
        name = require_non_empty(name, "Name")
        roll_number = require_non_empty(roll_number, "Roll number")
        if class_name is None:
            class_name = current.class_name
        class_name = class_name.strip() if isinstance(class_name, str) else ""

        other = self._students.get_by_roll_number(roll_number)
        if other and other.student_id != student_id:
            raise DuplicateRollNumberError("Student with this roll number already exists")

        updated = self._students.update_profile(student_id, name=name, roll_number=roll_number, class_name=class_name)
        if not updated:
            raise NotFoundError("Student not found")
        return updated

    def delete_student(self, student_id: str) -> None:
        self.get_student(student_id)
        removed = self._attendance.delete_for_student(student_id)
        if not self._students.delete_by_id(student_id):
            raise NotFoundError("Student not found")
        self._images.delete_student(student_id)
        logger.info("Deleted student %s and %d attendance record(s)", student_id, removed)

    def enroll_face(self, student_id: Any, face_embedding: Any, face_image: Optional[str] = None) -> Student:
        """Store the reference embedding and mark the student enrolled.

        Re-enrollment overwrites the previous embedding. The embedding, image
        path and enrolled flag go to storage in one write.
        """

        student_id = require_non_empty(student_id, "studentId")
        embedding = require_embedding(face_embedding)
        self.get_student(student_id)

        enrolled_at = self._clock()
        image_url = None
        if face_image:
            try:
                image_url = self._images.save_data_uri(
                    student_id, face_image, stamp=enrolled_at.strftime("%Y%m%d%H%M%S")
                )
            except (OSError, ValueError) as e:
                logger.warning("Could not save face image for student %s: %s", student_id, e)

        try:
            enrolled = self._students.save_enrollment(
                student_id,
                face_embedding=embedding,
                face_image=image_url,
                enrolled_at=enrolled_at,
            )
        except Exception:
            if image_url:
                self._images.discard(image_url)
            raise

        if not enrolled:
            if image_url:
                self._images.discard(image_url)
            raise NotFoundError("Student not found")

        logger.info("Enrolled face for student %s (dimension=%d)", student_id, len(embedding))
        return enrolled
