from __future__ import annotations

import csv
import io

from flask import Flask, jsonify, request

from ..common.datetime_utils import format_date, parse_optional_date, parse_optional_time
from ..common.responses import json_body
from ..container import Container
from .model import AttendanceReport

REPORT_CSV_FIELDS = [
    "name",
    "roll_number",
    "class_name",
    "total_days",
    "present_days",
    "absent_days",
    "attendance_percentage",
    "avg_match_distance",
]


def register(app: Flask, container: Container) -> None:
    service = container.attendance_service

    def _report_from_args() -> AttendanceReport:
        return service.report(
            start_date=parse_optional_date(request.args.get("from")),
            end_date=parse_optional_date(request.args.get("to")),
            student_id=request.args.get("studentId") or None,
        )

    def _write_report_csv(*, report: AttendanceReport, filename: str):
        """Write report rows to a CSV response."""

        out = io.StringIO()
        writer = csv.DictWriter(out, fieldnames=REPORT_CSV_FIELDS)
        writer.writeheader()
        for row in report.rows:
            writer.writerow(
                {
                    "name": row.student.name,
                    "roll_number": row.student.roll_number,
                    "class_name": row.student.class_name,
                    "total_days": row.total_days,
                    "present_days": row.present_days,
                    "absent_days": row.absent_days,
                    "attendance_percentage": f"{row.attendance_percentage:.2f}",
                    "avg_match_distance": "" if row.average_match_distance is None else row.average_match_distance,
                }
            )

        csv_bytes = out.getvalue().encode("utf-8-sig")
        return app.response_class(
            csv_bytes,
            mimetype="text/csv",
            headers={"Content-Disposition": f"attachment; filename={filename}"},
        )

    @app.route("/api/attendance/mark", methods=["POST"], endpoint="mark_attendance")
    def mark_attendance():
        data = json_body()
        result = service.mark(
            student_id=data.get("studentId") or None,
            face_embedding=data.get("faceEmbedding"),
            attendance_date=parse_optional_date(data.get("date")),
            attendance_time=parse_optional_time(data.get("time")),
            status=data.get("status"),
        )
        return jsonify(result.to_dict()), 201

    @app.route("/api/attendance", methods=["GET"], endpoint="attendance_by_date")
    def attendance_by_date():
        summary = service.get_by_date(parse_optional_date(request.args.get("date")))
        return jsonify(summary.to_dict())

    @app.route("/api/attendance/report", methods=["GET"], endpoint="attendance_report")
    def attendance_report():
        return jsonify(_report_from_args().to_dict())

    @app.route("/api/attendance/report.csv", methods=["GET"], endpoint="attendance_report_csv")
    def attendance_report_csv():
        report = _report_from_args()
        start = format_date(report.start_date).replace("-", "") if report.start_date else "start"
        end = format_date(report.end_date).replace("-", "") if report.end_date else "today"
        return _write_report_csv(report=report, filename=f"attendance_{start}_{end}.csv")

    @app.route("/api/attendance/<int:attendance_id>", methods=["GET"], endpoint="get_attendance")
    def get_attendance(attendance_id: int):
        record, student = service.get_record(attendance_id)
        return jsonify(record.to_dict(student))

    @app.route("/api/attendance/<int:attendance_id>", methods=["DELETE"], endpoint="delete_attendance")
    def delete_attendance(attendance_id: int):
        service.delete_record(attendance_id)
        return jsonify({"message": "Attendance record deleted successfully"})
