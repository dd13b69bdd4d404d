from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.responses import json_body
from ..container import Container


def _parse_bool(value):
    if value is None or value == "":
        return None
    return value.lower() == "true"


def register(app: Flask, container: Container) -> None:
    service = container.student_service

    @app.route("/api/students", methods=["POST"], endpoint="create_student")
    def create_student():
        data = json_body()
        student = service.create_student(
            name=data.get("name"),
            roll_number=data.get("rollNumber"),
            class_name=data.get("className") or "",
        )
        return jsonify(student.to_dict()), 201

    @app.route("/api/students", methods=["GET"], endpoint="list_students")
    def list_students():
        students = service.list_students(
            search=request.args.get("search"),
            class_name=request.args.get("className"),
            is_enrolled=_parse_bool(request.args.get("isEnrolled")),
        )
        return jsonify([s.to_dict() for s in students])

    @app.route("/api/students/enrolled/list", methods=["GET"], endpoint="list_enrolled_students")
    def list_enrolled_students():
        return jsonify([s.to_dict(include_embedding=True) for s in service.list_enrolled()])

    @app.route("/api/students/enroll", methods=["POST"], endpoint="enroll_face")
    def enroll_face():
        data = json_body()
        student = service.enroll_face(
            data.get("studentId"),
            data.get("faceEmbedding"),
            data.get("faceImage"),
        )
        return jsonify({"message": "Face enrollment successful", "student": student.to_dict()})

    @app.route("/api/students/<student_id>", methods=["GET"], endpoint="get_student")
    def get_student(student_id: str):
        return jsonify(service.get_student(student_id).to_dict())

    @app.route("/api/students/<student_id>", methods=["PUT"], endpoint="update_student")
    def update_student(student_id: str):
        data = json_body()
        student = service.update_student(
            student_id,
            name=data.get("name"),
            roll_number=data.get("rollNumber"),
            class_name=data.get("className"),
        )
        return jsonify(student.to_dict())

    @app.route("/api/students/<student_id>", methods=["DELETE"], endpoint="delete_student")
    def delete_student(student_id: str):
        service.delete_student(student_id)
        return jsonify({"message": "Student deleted successfully"})
