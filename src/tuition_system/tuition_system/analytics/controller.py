from __future__ import annotations

import logging

from flask import Flask, jsonify, request

from ..common.query import optional_param, parse_date_range, parse_limit
from ..common.web import error_response, roles_required
from ..core.constants import DEFAULT_TOP_TEACHERS_LIMIT
from ..core.enums import Role
from ..core.exceptions import DomainError
from ..container import Container

logger = logging.getLogger(__name__)


def register(app: Flask, container: Container) -> None:
    @app.route("/api/admin/analytics", methods=["GET"], endpoint="api_admin_analytics")
    @roles_required(Role.ADMIN, message="Only admins can access analytics")
    def api_admin_analytics():
        kind = optional_param(request.args, "type")
        teacher_id = optional_param(request.args, "teacherId")
        student_id = optional_param(request.args, "studentId")
        analytics = container.analytics_service
        try:
            rng = parse_date_range(request.args)

            if kind == "teacher":
                if not teacher_id:
                    return jsonify({"error": "Teacher ID is required"}), 400
                return jsonify({"stats": analytics.teacher_detailed_stats(teacher_id, start=rng.start, end=rng.end)}), 200

            if kind == "student":
                if not student_id:
                    return jsonify({"error": "Student ID is required"}), 400
                return jsonify({"stats": analytics.student_detailed_stats(student_id, start=rng.start, end=rng.end)}), 200

            if kind == "overall":
                return jsonify({"stats": analytics.overall_stats(start=rng.start, end=rng.end)}), 200

            if kind == "top-teachers":
                limit = parse_limit(request.args, DEFAULT_TOP_TEACHERS_LIMIT)
                return jsonify({"teachers": analytics.top_teachers(limit=limit, start=rng.start, end=rng.end)}), 200

            if kind == "missed":
                if not teacher_id or not rng.start or not rng.end:
                    return (
                        jsonify({"error": "Teacher ID, start date and end date are required for missed classes"}),
                        400,
                    )
                missed = analytics.missed_classes(teacher_id, start=rng.start, end=rng.end)
                return jsonify({"missedClasses": missed}), 200

            return jsonify({"error": "Invalid analytics type"}), 400
        except DomainError as e:
            return error_response(e)
        except Exception:
            logger.exception("Analytics query %s failed", kind)
            return jsonify({"error": "Failed to fetch analytics"}), 500
