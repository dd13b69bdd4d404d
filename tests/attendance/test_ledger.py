from __future__ import annotations

import threading
from datetime import date, time

import pytest

from face_attendance.core.enums import AttendanceSource, AttendanceStatus
from face_attendance.core.exceptions import DuplicateAttendanceError, ValidationError


def _status_for_day(day: int) -> AttendanceStatus:
    return AttendanceStatus.PRESENT if day <= 3 else AttendanceStatus.ABSENT


def test_mark_defaults_to_clock_date_and_time(ledger, students_repo, fixed_now):
    s = students_repo.create_student(name="A", roll_number="S1", class_name="10A")

    rec = ledger.mark(student_id=s.student_id)

    assert rec.attendance_date == fixed_now.date()
    assert rec.attendance_time == fixed_now.time()
    assert rec.status == AttendanceStatus.PRESENT
    assert rec.source == AttendanceSource.MANUAL
    assert rec.match_distance is None


def test_second_mark_same_day_is_rejected_next_day_succeeds(ledger, students_repo):
    s = students_repo.create_student(name="A", roll_number="S1", class_name="")

    first = ledger.mark(student_id=s.student_id, attendance_date=date(2024, 1, 10))
    with pytest.raises(DuplicateAttendanceError) as exc:
        ledger.mark(student_id=s.student_id, attendance_date=date(2024, 1, 10), status=AttendanceStatus.ABSENT)
    assert exc.value.existing == first

    nxt = ledger.mark(student_id=s.student_id, attendance_date=date(2024, 1, 11))
    assert nxt.attendance_date == date(2024, 1, 11)


def test_manual_marks_never_carry_a_distance(ledger, students_repo):
    s = students_repo.create_student(name="A", roll_number="S1", class_name="")
    rec = ledger.mark(student_id=s.student_id, source=AttendanceSource.MANUAL, match_distance=0.2)
    assert rec.match_distance is None


def test_concurrent_marks_for_same_key_only_one_wins(ledger, students_repo):
    s = students_repo.create_student(name="A", roll_number="S1", class_name="")
    barrier = threading.Barrier(8)
    wins: list[int] = []
    dups: list[int] = []

    def worker():
        barrier.wait()
        try:
            ledger.mark(student_id=s.student_id, attendance_date=date(2024, 1, 10))
            wins.append(1)
        except DuplicateAttendanceError:
            dups.append(1)

    threads = [threading.Thread(target=worker) for _ in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert len(wins) == 1
    assert len(dups) == 7


def test_query_counts_present_and_absent(ledger, students_repo):
    a = students_repo.create_student(name="A", roll_number="1", class_name="")
    b = students_repo.create_student(name="B", roll_number="2", class_name="")
    c = students_repo.create_student(name="C", roll_number="3", class_name="")
    day = date(2024, 1, 10)

    ledger.mark(student_id=a.student_id, attendance_date=day, attendance_time=time(8, 0))
    ledger.mark(student_id=b.student_id, attendance_date=day, attendance_time=time(9, 0),
                status=AttendanceStatus.ABSENT)
    ledger.mark(student_id=c.student_id, attendance_date=day, attendance_time=time(10, 0),
                status=AttendanceStatus.LEAVE)
    ledger.mark(student_id=a.student_id, attendance_date=date(2024, 1, 11))

    summary = ledger.query(day)

    assert summary.total_marked == 3
    assert summary.present_count == 1
    assert summary.absent_count == 1
    assert [r.student_id for r in summary.records] == [c.student_id, b.student_id, a.student_id]
    assert summary.to_dict()["records"][0]["studentId"]["name"] == "C"


def test_query_defaults_to_today(ledger, students_repo, fixed_now):
    s = students_repo.create_student(name="A", roll_number="1", class_name="")
    ledger.mark(student_id=s.student_id)
    assert ledger.query().attendance_date == fixed_now.date()
    assert ledger.query().total_marked == 1


def test_aggregate_three_present_out_of_ten(ledger, students_repo):
    s = students_repo.create_student(name="A", roll_number="1", class_name="")
    for day in range(1, 11):
        ledger.mark(student_id=s.student_id, attendance_date=date(2024, 1, day), status=_status_for_day(day))

    rows = ledger.aggregate(start_date=date(2024, 1, 1), end_date=date(2024, 1, 10))

    assert len(rows) == 1
    row = rows[0]
    assert row.total_days == 10
    assert row.present_days == 3
    assert row.absent_days == 7
    assert row.attendance_percentage == 30.00
    assert row.average_match_distance is None


def test_aggregate_range_is_inclusive_and_filters_by_student(ledger, students_repo):
    a = students_repo.create_student(name="A", roll_number="1", class_name="")
    b = students_repo.create_student(name="B", roll_number="2", class_name="")
    for day in (1, 5, 10, 11):
        ledger.mark(student_id=a.student_id, attendance_date=date(2024, 1, day))
        ledger.mark(student_id=b.student_id, attendance_date=date(2024, 1, day))

    rows = ledger.aggregate(start_date=date(2024, 1, 5), end_date=date(2024, 1, 10), student_id=a.student_id)

    assert [r.student.student_id for r in rows] == [a.student_id]
    assert rows[0].total_days == 2


def test_aggregate_sorted_by_name_and_skips_students_without_records(ledger, students_repo):
    zed = students_repo.create_student(name="Zed", roll_number="1", class_name="")
    amy = students_repo.create_student(name="Amy", roll_number="2", class_name="")
    students_repo.create_student(name="Bob", roll_number="3", class_name="")

    ledger.mark(student_id=zed.student_id, attendance_date=date(2024, 1, 2))
    ledger.mark(student_id=amy.student_id, attendance_date=date(2024, 1, 2), status=AttendanceStatus.LEAVE)

    rows = ledger.aggregate(start_date=date(2024, 1, 1), end_date=date(2024, 1, 31))

    assert [r.student.name for r in rows] == ["Amy", "Zed"]
    assert rows[0].attendance_percentage == 0.0
    assert rows[0].absent_days == 0


def test_aggregate_empty_range_returns_no_rows(ledger):
    assert ledger.aggregate(start_date=date(2024, 1, 1), end_date=date(2024, 1, 31)) == []


def test_aggregate_averages_face_distances_only(ledger, students_repo):
    s = students_repo.create_student(name="A", roll_number="1", class_name="")
    ledger.mark(student_id=s.student_id, attendance_date=date(2024, 1, 1),
                source=AttendanceSource.AUTO_FACE, match_distance=0.1)
    ledger.mark(student_id=s.student_id, attendance_date=date(2024, 1, 2),
                source=AttendanceSource.AUTO_FACE, match_distance=0.2)
    ledger.mark(student_id=s.student_id, attendance_date=date(2024, 1, 3))

    row = ledger.aggregate(start_date=date(2024, 1, 1), end_date=date(2024, 1, 3))[0]

    assert row.average_match_distance == pytest.approx(0.15)
    assert row.attendance_percentage == 100.0


def test_aggregate_rejects_inverted_range(ledger):
    with pytest.raises(ValidationError):
        ledger.aggregate(start_date=date(2024, 2, 1), end_date=date(2024, 1, 1))
