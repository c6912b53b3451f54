"""Request helpers shared by the JSON controllers.

Login itself happens elsewhere; by the time a request reaches these views the
session carries `user_id` and `role`.
"""

from __future__ import annotations

from dataclasses import dataclass
from functools import wraps
from typing import Optional

from flask import jsonify, request, session

from ..core.enums import Role
from ..core.exceptions import (
    AuthenticationError,
    AuthorizationError,
    ConflictError,
    DomainError,
    NotFoundError,
    ValidationError,
)


@dataclass(frozen=True)
class CurrentUser:
    user_id: str
    role: Role


def current_user() -> Optional[CurrentUser]:
    user_id = session.get("user_id")
    role = session.get("role")
    if not user_id or not role:
        return None
    try:
        return CurrentUser(user_id=str(user_id), role=Role(role))
    except ValueError:
        return None


def login_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        if current_user() is None:
            return jsonify({"error": "Unauthorized"}), 401
        return view(*args, **kwargs)

    return wrapper


def roles_required(*roles: Role, message: str = "Forbidden"):
    def decorator(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            user = current_user()
            if user is None:
                return jsonify({"error": "Unauthorized"}), 401
            if user.role not in roles:
                return jsonify({"error": message}), 403
            return view(*args, **kwargs)

        return wrapper

    return decorator


def json_body() -> dict:
    body = request.get_json(silent=True)
    if not isinstance(body, dict):
        raise ValidationError("Request body must be a JSON object")
    return body


def error_response(err: DomainError, *, conflict_status: int = 409):
    """Map a domain error onto its HTTP status."""

    if isinstance(err, ConflictError):
        status = conflict_status
    elif isinstance(err, NotFoundError):
        status = 404
    elif isinstance(err, AuthenticationError):
        status = 401
    elif isinstance(err, AuthorizationError):
        status = 403
    else:
        status = 400
    return jsonify({"error": str(err)}), status
