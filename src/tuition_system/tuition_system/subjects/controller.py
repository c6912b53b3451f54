from __future__ import annotations

import logging

from flask import Flask, jsonify, request

from ..common.web import current_user, error_response, json_body, roles_required
from ..core.enums import Role
from ..core.exceptions import DomainError
from ..container import Container
from .model import Subject

logger = logging.getLogger(__name__)

_ADMIN_ONLY = "Unauthorized: Admin access required"


def _to_json(s: Subject) -> dict:
    return {
        "id": s.subject_id,
        "name": s.name,
        "description": s.description,
        "createdAt": s.created_at.isoformat() if s.created_at else None,
        "updatedAt": s.updated_at.isoformat() if s.updated_at else None,
    }


def register(app: Flask, container: Container) -> None:
    @app.route("/api/subjects", methods=["GET", "POST"], endpoint="api_subjects")
    @roles_required(Role.ADMIN, message=_ADMIN_ONLY)
    def api_subjects():
        role = current_user().role
        try:
            if request.method == "POST":
                body = json_body()
                subject = container.subject_service.create(
                    current_role=role,
                    name=body.get("name"),
                    description=body.get("description"),
                )
                return jsonify({"success": True, "data": _to_json(subject)}), 200

            subjects = container.subject_service.list_all(current_role=role)
            return jsonify({"success": True, "data": [_to_json(s) for s in subjects]}), 200
        except DomainError as e:
            return error_response(e)
        except Exception:
            logger.exception("Subject request failed")
            return jsonify({"error": "Internal server error"}), 500

    @app.route("/api/subjects/<subject_id>", methods=["GET", "PUT", "DELETE"], endpoint="api_subject_detail")
    @roles_required(Role.ADMIN, message=_ADMIN_ONLY)
    def api_subject_detail(subject_id: str):
        role = current_user().role
        try:
            if request.method == "PUT":
                subject = container.subject_service.update(current_role=role, subject_id=subject_id, data=json_body())
                return jsonify({"success": True, "data": _to_json(subject)}), 200
            if request.method == "DELETE":
                container.subject_service.delete(current_role=role, subject_id=subject_id)
                return jsonify({"success": True, "message": "Subject deleted successfully"}), 200

            subject = container.subject_service.get(current_role=role, subject_id=subject_id)
            return jsonify({"success": True, "data": _to_json(subject)}), 200
        except DomainError as e:
            return error_response(e)
        except Exception:
            logger.exception("Subject request failed for %s", subject_id)
            return jsonify({"error": "Internal server error"}), 500
