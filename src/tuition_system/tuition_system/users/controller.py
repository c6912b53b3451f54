from __future__ import annotations

import logging

from flask import Flask, jsonify, request

from ..common.query import optional_param
from ..common.web import current_user, error_response, json_body, login_required, roles_required
from ..core.enums import Role
from ..core.exceptions import DomainError
from ..container import Container
from .model import User

logger = logging.getLogger(__name__)


def _to_json(u: User) -> dict:
    return {"id": u.user_id, "name": u.name, "email": u.email, "role": u.role.value, "banned": u.banned}


def register(app: Flask, container: Container) -> None:
    @app.route("/api/users/<user_id>", methods=["GET"], endpoint="api_user_detail")
    @login_required
    def api_user_detail(user_id: str):
        try:
            return jsonify(_to_json(container.user_service.get(user_id))), 200
        except DomainError as e:
            return error_response(e)
        except Exception:
            logger.exception("Failed to fetch user %s", user_id)
            return jsonify({"error": "Failed to fetch user"}), 500

    @app.route("/api/users/search", methods=["GET"], endpoint="api_user_search")
    @login_required
    def api_user_search():
        query = optional_param(request.args, "query")
        role = optional_param(request.args, "role")
        if not query or not role:
            return jsonify({"error": "Query and role are required"}), 400
        try:
            users = container.user_service.search(query=query, role=role)
            return jsonify([{"id": u.user_id, "name": u.name, "email": u.email} for u in users]), 200
        except DomainError as e:
            return error_response(e)
        except Exception:
            logger.exception("User search failed")
            return jsonify({"error": "Failed to search users"}), 500

    @app.route("/api/users", methods=["GET"], endpoint="api_user_list")
    @login_required
    def api_user_list():
        try:
            users = container.user_service.list_by_role(optional_param(request.args, "role"))
            return jsonify({"success": True, "data": [_to_json(u) for u in users]}), 200
        except DomainError as e:
            return error_response(e)
        except Exception:
            logger.exception("Failed to list users")
            return jsonify({"error": "Failed to fetch users"}), 500

    @app.route("/api/admin/users/update", methods=["POST"], endpoint="api_admin_user_update")
    @roles_required(Role.ADMIN, message="Unauthorized: Admin access required")
    def api_admin_user_update():
        try:
            body = json_body()
            user_id = body.get("userId")
            name = body.get("name")
            if not user_id or not name:
                return jsonify({"error": "User ID and name are required"}), 400
            if not isinstance(name, str) or not name.strip():
                return jsonify({"error": "Name must be a non-empty string"}), 400

            new_name = container.user_service.rename(current_role=current_user().role, user_id=str(user_id), name=name)
            return jsonify({"message": "User name updated successfully", "userId": user_id, "name": new_name}), 200
        except DomainError as e:
            return error_response(e)
        except Exception:
            logger.exception("Failed to update user name")
            return jsonify({"error": "Failed to update user name"}), 500

    @app.route("/api/admin/users/<user_id>/ban", methods=["POST"], endpoint="api_admin_user_ban")
    @roles_required(Role.ADMIN, message="Unauthorized: Admin access required")
    def api_admin_user_ban(user_id: str):
        try:
            body = request.get_json(silent=True) or {}
            banned = body.get("banned", True)
            if not isinstance(banned, bool):
                return jsonify({"error": "banned must be a boolean"}), 400
            container.user_service.set_banned(
                current_role=current_user().role,
                user_id=user_id,
                banned=banned,
                reason=body.get("reason"),
            )
            return jsonify({"success": True, "userId": user_id, "banned": banned}), 200
        except DomainError as e:
            return error_response(e)
        except Exception:
            logger.exception("Failed to change ban state for %s", user_id)
            return jsonify({"error": "Failed to update user"}), 500
