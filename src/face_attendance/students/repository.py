from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from .model import Student


class StudentRepository(Protocol):
    """Repository interface for Student.

    Note (DIP): the service layer depends on this interface, never on a concrete DB.
    """

    def get_by_id(self, student_id: str) -> Optional[Student]:
        raise NotImplementedError

    def get_by_roll_number(self, roll_number: str) -> Optional[Student]:
        raise NotImplementedError

    def list_students(
        self,
        *,
        search: Optional[str] = None,
        class_name: Optional[str] = None,
        is_enrolled: Optional[bool] = None,
    ) -> Sequence[Student]:
        """Students sorted by name; ``search`` is a case-insensitive substring."""

        raise NotImplementedError

    def list_enrolled(self) -> Sequence[Student]:
        """Enrolled students that carry a non-empty embedding, in stable order."""

        raise NotImplementedError

    def create_student(self, *, name: str, roll_number: str, class_name: str) -> Student:
        """Raises DuplicateRollNumberError when the roll number is taken."""

        raise NotImplementedError

    def update_profile(self, student_id: str, *, name: str, roll_number: str, class_name: str) -> Optional[Student]:
        raise NotImplementedError

    def save_enrollment(
        self,
        student_id: str,
        *,
        face_embedding: Sequence[float],
        face_image: Optional[str],
        enrolled_at: datetime,
    ) -> Optional[Student]:
        """Write embedding, image path and enrolled flag in a single update.

        ``face_image=None`` keeps the previous image.
        """

        raise NotImplementedError

    def delete_by_id(self, student_id: str) -> bool:
        raise NotImplementedError
