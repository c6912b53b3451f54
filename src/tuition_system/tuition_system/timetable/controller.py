from __future__ import annotations

import logging

from flask import Flask, jsonify, request

from ..common.datetime_utils import now_local
from ..common.query import optional_param
from ..common.web import current_user, error_response, json_body, roles_required
from ..core.enums import Role
from ..core.exceptions import DomainError, ValidationError
from ..container import Container
from .serializers import timetable_to_json

logger = logging.getLogger(__name__)

_ADMIN_ONLY = "Unauthorized: Admin access required"

# JSON field -> service keyword
_FIELDS = {
    "teacherId": "teacher_id",
    "subjectId": "subject_id",
    "day": "day",
    "startTime": "start_time",
    "endTime": "end_time",
    "notes": "notes",
    "isActive": "is_active",
}


def _from_json(body: dict) -> dict:
    return {snake: body[camel] for camel, snake in _FIELDS.items() if camel in body}


def register(app: Flask, container: Container) -> None:
    @app.route("/api/timetable", methods=["GET", "POST"], endpoint="api_timetable")
    @roles_required(Role.ADMIN, message=_ADMIN_ONLY)
    def api_timetable():
        role = current_user().role
        try:
            if request.method == "GET":
                student_id = optional_param(request.args, "studentId")
                if not student_id:
                    return jsonify({"error": "Student ID is required"}), 400
                entries = container.timetable_service.list_for_student(student_id)
                return jsonify({"success": True, "data": [timetable_to_json(e) for e in entries]}), 200

            body = json_body()
            if isinstance(body.get("entries"), list):
                raw_entries = body["entries"]
                if not all(isinstance(e, dict) for e in raw_entries):
                    raise ValidationError("Each entry must be a JSON object")
                created = container.timetable_service.bulk_create(
                    current_role=role,
                    student_id=body.get("studentId"),
                    entries=[_from_json(e) for e in raw_entries],
                )
                return (
                    jsonify(
                        {
                            "success": True,
                            "data": [timetable_to_json(e) for e in created],
                            "message": f"Successfully created {len(created)} timetable entries",
                        }
                    ),
                    200,
                )

            fields = _from_json(body)
            fields.pop("is_active", None)
            entry = container.timetable_service.create_entry(
                current_role=role,
                student_id=body.get("studentId"),
                teacher_id=fields.get("teacher_id"),
                subject_id=fields.get("subject_id"),
                day=fields.get("day"),
                start_time=fields.get("start_time"),
                end_time=fields.get("end_time"),
                notes=fields.get("notes"),
            )
            return jsonify({"success": True, "data": timetable_to_json(entry)}), 200
        except DomainError as e:
            return error_response(e)
        except Exception:
            logger.exception("Timetable request failed")
            return jsonify({"error": "Internal server error"}), 500

    @app.route("/api/timetable/<entry_id>", methods=["GET", "PUT", "DELETE"], endpoint="api_timetable_entry")
    @roles_required(Role.ADMIN, message=_ADMIN_ONLY)
    def api_timetable_entry(entry_id: str):
        role = current_user().role
        try:
            if request.method == "PUT":
                entry = container.timetable_service.update_entry(
                    current_role=role,
                    entry_id=entry_id,
                    changes=_from_json(json_body()),
                )
                return (
                    jsonify(
                        {
                            "success": True,
                            "data": timetable_to_json(entry),
                            "message": "Timetable entry updated successfully",
                        }
                    ),
                    200,
                )
            if request.method == "DELETE":
                container.timetable_service.soft_delete(current_role=role, entry_id=entry_id)
                return jsonify({"success": True, "message": "Timetable entry deleted successfully"}), 200

            entry = container.timetable_service.get_entry(current_role=role, entry_id=entry_id)
            return jsonify({"success": True, "data": timetable_to_json(entry)}), 200
        except DomainError as e:
            return error_response(e)
        except Exception:
            logger.exception("Timetable request failed for %s", entry_id)
            return jsonify({"error": "Internal server error"}), 500

    @app.route("/api/teacher", methods=["GET"], endpoint="api_teacher_actions")
    @roles_required(Role.TEACHER, message="Unauthorized")
    def api_teacher_actions():
        teacher_id = current_user().user_id
        action = optional_param(request.args, "action")
        try:
            if action == "upcoming":
                entries = container.timetable_service.upcoming_for_teacher(teacher_id, now=now_local())
                return jsonify({"success": True, "data": [timetable_to_json(e) for e in entries]}), 200

            if action == "students":
                student_ids = set(container.timetable_service.student_ids_for_teacher(teacher_id))
                if not student_ids:
                    return jsonify({"success": True, "data": []}), 200
                students = [
                    {"id": u.user_id, "name": u.name, "email": u.email}
                    for u in container.user_service.list_by_role(Role.STUDENT.value)
                    if u.user_id in student_ids
                ]
                return jsonify({"success": True, "data": students}), 200

            if action == "student-timetable":
                student_id = optional_param(request.args, "studentId")
                if not student_id:
                    return jsonify({"error": "Student ID required"}), 400
                entries = container.timetable_service.student_timetable_for_teacher(
                    teacher_id=teacher_id,
                    student_id=student_id,
                )
                return jsonify({"success": True, "data": [timetable_to_json(e) for e in entries]}), 200

            return jsonify({"error": "Invalid action"}), 400
        except DomainError as e:
            return error_response(e)
        except Exception:
            logger.exception("Teacher action %s failed", action)
            return jsonify({"error": "Internal server error"}), 500

    @app.route("/api/student/timetable", methods=["GET"], endpoint="api_student_timetable")
    @roles_required(Role.STUDENT, message="Unauthorized")
    def api_student_timetable():
        try:
            entries = container.timetable_service.list_for_student(current_user().user_id)
            return jsonify({"success": True, "data": [timetable_to_json(e) for e in entries]}), 200
        except DomainError as e:
            return error_response(e)
        except Exception:
            logger.exception("Failed to fetch student timetable")
            return jsonify({"error": "Failed to fetch timetable"}), 500
