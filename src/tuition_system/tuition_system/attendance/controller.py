from __future__ import annotations

import logging

from flask import Flask, jsonify, request

from ..common.query import AttendanceFilters, parse_attendance_filters, parse_date_range
from ..common.web import current_user, error_response, json_body, login_required, roles_required
from ..core.enums import Role
from ..core.exceptions import DomainError
from ..container import Container
from ..timetable.serializers import timetable_to_json
from .serializers import attendance_to_json

logger = logging.getLogger(__name__)


def register(app: Flask, container: Container) -> None:
    # Duplicate marks answer 400.
    def _error(e: DomainError):
        return error_response(e, conflict_status=400)

    @app.route("/api/teacher/attendance", methods=["POST"], endpoint="api_mark_attendance")
    @roles_required(Role.TEACHER, message="Only teachers can mark attendance")
    def api_mark_attendance():
        user = current_user()
        try:
            body = json_body()
            record = container.attendance_service.mark(
                current_user_id=user.user_id,
                current_role=user.role,
                student_id=body.get("studentId"),
                subject_id=body.get("subjectId"),
                timetable_id=body.get("timetableId"),
                class_date=body.get("classDate"),
                start_time=body.get("startTime"),
                duration=body.get("duration"),
                notes=body.get("notes"),
            )
            return jsonify({"message": "Attendance marked successfully", "attendance": attendance_to_json(record)}), 201
        except DomainError as e:
            return _error(e)
        except Exception:
            logger.exception("Failed to mark attendance")
            return jsonify({"error": "Failed to mark attendance"}), 500

    @app.route("/api/teacher/attendance", methods=["GET"], endpoint="api_list_attendance")
    @login_required
    def api_list_attendance():
        user = current_user()
        try:
            records = container.attendance_service.list_records(
                current_user_id=user.user_id,
                current_role=user.role,
                filters=parse_attendance_filters(request.args),
            )
            return jsonify({"attendance": [attendance_to_json(r) for r in records]}), 200
        except DomainError as e:
            return _error(e)
        except Exception:
            logger.exception("Failed to fetch attendance records")
            return jsonify({"error": "Failed to fetch attendance records"}), 500

    @app.route("/api/teacher/scheduled-classes", methods=["GET"], endpoint="api_scheduled_classes")
    @roles_required(Role.TEACHER, message="Only teachers can access scheduled classes")
    def api_scheduled_classes():
        try:
            classes = container.attendance_service.today_scheduled_classes(current_user().user_id)
            return jsonify({"classes": [timetable_to_json(e) for e in classes]}), 200
        except DomainError as e:
            return _error(e)
        except Exception:
            logger.exception("Failed to fetch scheduled classes")
            return jsonify({"error": "Failed to fetch scheduled classes"}), 500

    @app.route("/api/student/attendance", methods=["GET"], endpoint="api_student_attendance")
    @roles_required(Role.STUDENT, message="Unauthorized")
    def api_student_attendance():
        user = current_user()
        try:
            rng = parse_date_range(request.args)
            records = container.attendance_service.list_records(
                current_user_id=user.user_id,
                current_role=user.role,
                filters=AttendanceFilters(student_id=user.user_id, start_date=rng.start, end_date=rng.end),
            )
            return jsonify({"attendance": [attendance_to_json(r) for r in records]}), 200
        except DomainError as e:
            return _error(e)
        except Exception:
            logger.exception("Failed to fetch student attendance")
            return jsonify({"error": "Failed to fetch attendance"}), 500
