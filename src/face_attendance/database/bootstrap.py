from __future__ import annotations

import logging
import math
import re
from contextlib import contextmanager
from pathlib import Path

import mysql.connector

from ..common.datetime_utils import now_local
from ..core.constants import EMBEDDING_DIMENSION
from ..students.repository import StudentRepository
from .connection import DBConfig

logger = logging.getLogger(__name__)

SCHEMA_PATH = Path(__file__).resolve().parent / "schema.sql"

DEMO_STUDENTS = [
    ("Aarav Sharma", "001", "10A", 1001),
    ("Priya Reddy", "002", "10A", 1002),
    ("Kunal Mehta", "003", "10A", 1003),
    ("Divya Nair", "004", "10B", 1004),
    ("Rohan Kumar", "005", "10B", 1005),
    ("Sneha Patil", "006", "10B", 1006),
    ("Abhinav Singh", "007", "10C", 1007),
    ("Meera Joshi", "008", "10C", 1008),
]


# token alternatives: quoted literal | ; | plain run | stray char
_SQL_TOKEN = re.compile(r"""'(?:\\.|[^'\\])*'|"(?:\\.|[^"\\])*"|;|[^'";]+|.""", re.DOTALL)
_DB_SCOPED = re.compile(r"^(CREATE\s+DATABASE|USE)\b", re.IGNORECASE)


def split_sql(sql: str) -> list[str]:
    """Split a script on ``;`` outside quoted strings."""

    statements: list[str] = []
    current: list[str] = []
    for token in _SQL_TOKEN.findall(sql):
        if token == ";":
            statements.append("".join(current).strip())
            current = []
        else:
            current.append(token)
    statements.append("".join(current).strip())
    return [s for s in statements if s]


def schema_statements(sql: str) -> list[str]:
    """Table statements of a schema file; CREATE DATABASE / USE are dropped
    so the configured database name always wins."""

    return [s for s in split_sql(sql) if not _DB_SCOPED.match(s)]


@contextmanager
def _server(target: DBConfig, *, with_database: bool = True):
    kwargs = dict(host=target.host, port=target.port, user=target.user, password=target.password, use_pure=True)
    if with_database:
        kwargs["database"] = target.database
    conn = mysql.connector.connect(**kwargs)
    try:
        yield conn
    finally:
        conn.close()


def ensure_database_exists(db_config: dict) -> None:
    target = DBConfig.from_mapping(db_config)
    with _server(target, with_database=False) as conn:
        conn.cursor().execute(
            f"CREATE DATABASE IF NOT EXISTS `{target.database}` CHARACTER SET utf8mb4 COLLATE utf8mb4_unicode_ci"
        )
        conn.commit()


def apply_schema(db_config: dict, *, schema_path: str | Path = SCHEMA_PATH) -> None:
    """Create the database if needed and run every table statement.

    Idempotent as long as the schema only uses CREATE ... IF NOT EXISTS.
    """

    ensure_database_exists(db_config)
    statements = schema_statements(Path(schema_path).read_text(encoding="utf-8"))

    with _server(DBConfig.from_mapping(db_config)) as conn:
        cur = conn.cursor()
        for stmt in statements:
            cur.execute(stmt)
        conn.commit()
    logger.info("Applied %d statement(s) from %s", len(statements), schema_path)


def list_tables(db_config: dict) -> list[str]:
    with _server(DBConfig.from_mapping(db_config)) as conn:
        cur = conn.cursor()
        cur.execute("SHOW TABLES")
        return [row[0] for row in cur.fetchall()]


def mock_embedding(seed: int, *, dimension: int = EMBEDDING_DIMENSION) -> list[float]:
    """Deterministic fake descriptor for demo data."""
    return [math.sin(seed + i) * 0.5 + math.cos(seed * i) * 0.3 for i in range(dimension)]


def seed_demo_students(students: StudentRepository) -> int:
    """Create and enroll the demo students that are missing; returns how many were added."""

    added = 0
    for name, roll_number, class_name, seed in DEMO_STUDENTS:
        if students.get_by_roll_number(roll_number):
            continue
        student = students.create_student(name=name, roll_number=roll_number, class_name=class_name)
        students.save_enrollment(
            student.student_id,
            face_embedding=mock_embedding(seed),
            face_image=None,
            enrolled_at=now_local(),
        )
        added += 1

    logger.info("Seeded %d demo student(s)", added)
    return added
