"""Example: drive the service layer directly (no Flask).

Controllers are a thin layer; the attendance rules live in the services.
"""

from face_attendance.container import build_container
from face_attendance.database.bootstrap import mock_embedding, seed_demo_students


def main():
    container = build_container(storage_backend="memory", upload_folder="public/uploads")
    seed_demo_students(container.students_repo)

    result = container.attendance_service.mark(face_embedding=mock_embedding(1003))
    print(result.to_dict())

    print(container.attendance_service.get_by_date().to_dict())
    print(container.attendance_service.report().to_dict())


if __name__ == "__main__":
    main()
