from __future__ import annotations

import importlib

from dotenv import load_dotenv

from face_attendance.database.bootstrap import seed_demo_students
from face_attendance.database.connection import DatabaseConnection, DBConfig
from face_attendance.settings import get_settings_module
from face_attendance.students.mysql_student_repository import MySQLStudentRepository


def main() -> None:
    load_dotenv(override=False)
    settings = importlib.import_module(get_settings_module())
    db_config = dict(settings.DB_CONFIG)

    conn = DatabaseConnection(DBConfig.from_mapping(db_config))
    try:
        added = seed_demo_students(MySQLStudentRepository(conn))
    finally:
        conn.close()

    print(
        f"OK: Seeded {added} demo student(s) -> "
        f"{db_config.get('user')}@{db_config.get('host')}:{db_config.get('port', 3306)}/{db_config.get('database')}"
    )


if __name__ == "__main__":
    main()
