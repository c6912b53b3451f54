from __future__ import annotations

import logging

from flask import Flask, jsonify, request

from ..common.query import optional_param
from ..common.web import current_user, error_response, json_body, login_required, roles_required
from ..core.enums import Role
from ..core.exceptions import DomainError
from ..container import Container
from .model import Appointment

logger = logging.getLogger(__name__)


def _iso(value):
    return value.isoformat() if value else None


def _to_json(a: Appointment) -> dict:
    return {
        "id": a.appointment_id,
        "studentId": a.student_id,
        "teacherId": a.teacher_id,
        "startTime": _iso(a.start_time),
        "endTime": _iso(a.end_time),
        "status": a.status.value,
        "notes": a.notes,
        "punchInTime": _iso(a.punch_in_time),
        "createdAt": _iso(a.created_at),
        "updatedAt": _iso(a.updated_at),
        "deletedAt": _iso(a.deleted_at),
    }


def register(app: Flask, container: Container) -> None:
    # Appointment conflicts answer 400; clients look for "overlap" in the message.
    def _error(e: DomainError):
        return error_response(e, conflict_status=400)

    @app.route("/api/appointments", methods=["GET", "POST"], endpoint="api_appointments")
    @login_required
    def api_appointments():
        user = current_user()
        try:
            if request.method == "POST":
                body = json_body()
                appointment = container.appointment_service.create(
                    current_role=user.role,
                    student_id=body.get("studentId"),
                    teacher_id=body.get("teacherId"),
                    start_time=body.get("startTime"),
                    end_time=body.get("endTime"),
                    status=body.get("status"),
                    notes=body.get("notes"),
                )
                return jsonify(_to_json(appointment)), 200

            appointments = container.appointment_service.list_for(
                current_user_id=user.user_id,
                current_role=user.role,
                student_id=optional_param(request.args, "studentId"),
                teacher_id=optional_param(request.args, "teacherId"),
                status=optional_param(request.args, "status"),
                start_date=optional_param(request.args, "startDate"),
                end_date=optional_param(request.args, "endDate"),
            )
            return jsonify([_to_json(a) for a in appointments]), 200
        except DomainError as e:
            return _error(e)
        except Exception:
            logger.exception("Appointment request failed")
            return jsonify({"error": "Internal server error"}), 500

    @app.route("/api/appointments/<appointment_id>", methods=["GET", "PATCH"], endpoint="api_appointment_detail")
    @login_required
    def api_appointment_detail(appointment_id: str):
        user = current_user()
        try:
            if request.method == "PATCH":
                body = json_body()
                changes = {
                    "status": body.get("status"),
                    "punch_in_time": body.get("punchInTime"),
                    "start_time": body.get("startTime"),
                    "end_time": body.get("endTime"),
                }
                if "notes" in body:
                    changes["notes"] = body["notes"]
                appointment = container.appointment_service.update(
                    current_user_id=user.user_id,
                    current_role=user.role,
                    appointment_id=appointment_id,
                    changes=changes,
                )
                return jsonify(_to_json(appointment)), 200

            return jsonify(_to_json(container.appointment_service.get(appointment_id))), 200
        except DomainError as e:
            return _error(e)
        except Exception:
            logger.exception("Appointment request failed for %s", appointment_id)
            return jsonify({"error": "Internal server error"}), 500

    @app.route("/api/appointments/<appointment_id>", methods=["DELETE"], endpoint="api_appointment_delete")
    @roles_required(Role.ADMIN, message="Unauthorized: Admin access required")
    def api_appointment_delete(appointment_id: str):
        try:
            container.appointment_service.soft_delete(current_role=current_user().role, appointment_id=appointment_id)
            return jsonify({"message": "Appointment deleted"}), 200
        except DomainError as e:
            return _error(e)
        except Exception:
            logger.exception("Failed to delete appointment %s", appointment_id)
            return jsonify({"error": "Internal server error"}), 500
