from __future__ import annotations

import base64
import io
from datetime import date

import pytest
from PIL import Image

from face_attendance.core.exceptions import DuplicateRollNumberError, NotFoundError, StorageError, ValidationError
from tests.helpers import embedding


def _png_data_uri() -> str:
    buf = io.BytesIO()
    Image.new("RGB", (4, 4), color=(200, 10, 10)).save(buf, format="PNG")
    return "data:image/png;base64," + base64.b64encode(buf.getvalue()).decode("ascii")


def test_create_student_trims_and_starts_unenrolled(student_service):
    s = student_service.create_student(name="  Aarav  ", roll_number=" 001 ", class_name=" 10A ")

    assert s.name == "Aarav"
    assert s.roll_number == "001"
    assert s.class_name == "10A"
    assert not s.is_enrolled
    assert s.face_embedding == ()


@pytest.mark.parametrize("name, roll", [("", "1"), ("A", ""), (None, "1"), ("A", "   ")])
def test_create_student_requires_name_and_roll(student_service, name, roll):
    with pytest.raises(ValidationError):
        student_service.create_student(name=name, roll_number=roll)


def test_roll_number_is_unique(student_service):
    student_service.create_student(name="A", roll_number="001")
    with pytest.raises(DuplicateRollNumberError):
        student_service.create_student(name="B", roll_number="001")


def test_update_student_keeps_roll_unique(student_service):
    a = student_service.create_student(name="A", roll_number="001")
    b = student_service.create_student(name="B", roll_number="002", class_name="10B")

    with pytest.raises(DuplicateRollNumberError):
        student_service.update_student(b.student_id, name="B", roll_number="001")

    updated = student_service.update_student(a.student_id, name="Alice", roll_number="001")
    assert updated.name == "Alice"

    kept_class = student_service.update_student(b.student_id, name="Bob", roll_number="002")
    assert kept_class.class_name == "10B"


def test_list_students_search_and_filters(student_service):
    a = student_service.create_student(name="Priya Reddy", roll_number="002", class_name="10A")
    student_service.create_student(name="Aarav Sharma", roll_number="001", class_name="10A")
    student_service.create_student(name="Divya Nair", roll_number="004", class_name="10B")
    student_service.enroll_face(a.student_id, embedding(0.1))

    assert [s.name for s in student_service.list_students()] == ["Aarav Sharma", "Divya Nair", "Priya Reddy"]
    assert [s.name for s in student_service.list_students(search="REDD")] == ["Priya Reddy"]
    assert [s.name for s in student_service.list_students(search="10b")] == ["Divya Nair"]
    assert len(student_service.list_students(class_name="10A")) == 2
    assert [s.name for s in student_service.list_students(is_enrolled=True)] == ["Priya Reddy"]
    assert [s.name for s in student_service.list_enrolled()] == ["Priya Reddy"]


def test_enroll_face_sets_embedding_and_flag(student_service, fixed_now):
    s = student_service.create_student(name="A", roll_number="001")

    enrolled = student_service.enroll_face(s.student_id, embedding(0.25))

    assert enrolled.is_enrolled
    assert enrolled.enrolled_at == fixed_now
    assert len(enrolled.face_embedding) == 128
    assert enrolled.face_embedding[0] == 0.25


def test_re_enrollment_overwrites_embedding(student_service):
    s = student_service.create_student(name="A", roll_number="001")
    student_service.enroll_face(s.student_id, embedding(0.25))

    again = student_service.enroll_face(s.student_id, embedding(0.75))

    assert again.face_embedding[0] == 0.75
    assert len(again.face_embedding) == 128


@pytest.mark.parametrize("vector", [None, [], [0.1] * 127, [0.1] * 129, [float("nan")] * 128, [True] * 128])
def test_enroll_rejects_bad_embeddings(student_service, vector):
    s = student_service.create_student(name="A", roll_number="001")
    with pytest.raises(ValidationError):
        student_service.enroll_face(s.student_id, vector)
    assert not student_service.get_student(s.student_id).is_enrolled


def test_enroll_unknown_student_is_not_found(student_service):
    with pytest.raises(NotFoundError):
        student_service.enroll_face("missing", embedding(0.1))


def test_enroll_saves_face_image(student_service, tmp_path):
    s = student_service.create_student(name="A", roll_number="001")

    enrolled = student_service.enroll_face(s.student_id, embedding(0.1), _png_data_uri())

    assert enrolled.face_image.startswith(f"/uploads/students/{s.student_id}/")
    saved = tmp_path / enrolled.face_image[len("/uploads/"):]
    assert saved.exists()


def test_broken_image_does_not_block_enrollment(student_service):
    s = student_service.create_student(name="A", roll_number="001")

    enrolled = student_service.enroll_face(s.student_id, embedding(0.1), "data:image/png;base64,bm90LWFuLWltYWdl")

    assert enrolled.is_enrolled
    assert enrolled.face_image == ""


def test_failed_enrollment_write_leaves_student_unenrolled(student_service, students_repo, tmp_path, monkeypatch):
    s = student_service.create_student(name="A", roll_number="001")

    def boom(*args, **kwargs):
        raise StorageError("Database operation failed")

    monkeypatch.setattr(students_repo, "save_enrollment", boom)

    with pytest.raises(StorageError):
        student_service.enroll_face(s.student_id, embedding(0.1), _png_data_uri())

    current = students_repo.get_by_id(s.student_id)
    assert not current.is_enrolled
    assert current.face_embedding == ()
    assert list((tmp_path / "students" / s.student_id).glob("*")) == []


def test_delete_student_removes_records_and_images(student_service, attendance_service, attendance_repo, tmp_path):
    s = student_service.create_student(name="A", roll_number="001")
    student_service.enroll_face(s.student_id, embedding(0.1), _png_data_uri())
    attendance_service.mark_by_student(s.student_id, attendance_date=date(2024, 1, 10))

    student_service.delete_student(s.student_id)

    with pytest.raises(NotFoundError):
        student_service.get_student(s.student_id)
    assert attendance_repo.list_in_range(student_id=s.student_id) == []
    assert not (tmp_path / "students" / s.student_id).exists()

    with pytest.raises(NotFoundError):
        student_service.delete_student(s.student_id)


def test_oversized_image_does_not_block_enrollment(student_service, monkeypatch):
    s = student_service.create_student(name="A", roll_number="001")
    data_uri = _png_data_uri()
    # 4x4 is more than twice the limit, which Pillow treats as a decompression bomb
    monkeypatch.setattr(Image, "MAX_IMAGE_PIXELS", 4)

    enrolled = student_service.enroll_face(s.student_id, embedding(0.1), data_uri)

    assert enrolled.is_enrolled
    assert enrolled.face_image == ""


def test_unwritable_image_format_does_not_block_enrollment(student_service, tmp_path, monkeypatch):
    s = student_service.create_student(name="A", roll_number="001")
    data_uri = _png_data_uri()

    def no_writer(self, fp, format=None, **params):
        raise KeyError(format)

    monkeypatch.setattr(Image.Image, "save", no_writer)

    enrolled = student_service.enroll_face(s.student_id, embedding(0.1), data_uri)

    assert enrolled.is_enrolled
    assert enrolled.face_image == ""
    assert list((tmp_path / "students" / s.student_id).glob("*")) == []
