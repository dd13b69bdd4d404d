from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass(frozen=True)
class Student:
    """Domain entity: an enrolled (or not yet enrolled) student.

    Plain data object; no storage code here. ``face_embedding`` is empty until
    the first enrollment and is replaced on every re-enrollment.
    """

    student_id: str
    name: str
    roll_number: str
    class_name: str = ""
    face_embedding: tuple[float, ...] = ()
    face_image: str = ""
    is_enrolled: bool = False
    enrolled_at: Optional[datetime] = None
    created_at: Optional[datetime] = None

    def summary(self) -> dict:
        """Short identity card used in attendance responses."""
        return {
            "_id": self.student_id,
            "name": self.name,
            "rollNumber": self.roll_number,
            "className": self.class_name,
        }

    def to_dict(self, *, include_embedding: bool = False) -> dict:
        data = {
            **self.summary(),
            "faceImage": self.face_image,
            "isEnrolled": self.is_enrolled,
            "enrolledAt": self.enrolled_at.isoformat() if self.enrolled_at else None,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
            "embeddingDimension": len(self.face_embedding),
        }
        if include_embedding:
            data["faceEmbedding"] = list(self.face_embedding)
        return data
