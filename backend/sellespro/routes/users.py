# Overview: Flask API routes for staff account management; parses input and returns JSON responses.

# backend/sellespro/routes/users.py
"""
Staff account routes.

SECURITY: MANAGER only. Passwords are accepted on create but never
returned. The bootstrap "admin" account cannot be deleted by anyone.
"""

from flask import Blueprint, request, jsonify, current_app

from ..extensions import state_store
from ..errors import PosError
from ..models import Role
from ..services import auth_service
from ..validation import ModelValidationPolicy, USER_FIELDS, validate_payload
from ..decorators import require_auth, require_role

USER_POLICY = ModelValidationPolicy(
    writable_fields={"username", "password", "role"},
    required_on_create={"username", "password"},
)

users_bp = Blueprint("users", __name__, url_prefix="/api/users")


@users_bp.get("")
@require_auth
@require_role(Role.MANAGER)
def list_users_route():
    users = state_store.state.users
    return jsonify({"users": [u.to_dict() for u in users], "count": len(users)}), 200


@users_bp.post("")
@require_auth
@require_role(Role.MANAGER)
def create_user_route():
    """
    Create a staff account.

    Request body:
    {
        "username": "cashier2",
        "password": "secret",
        "role": "USER"  // optional, USER or MANAGER
    }
    """
    payload = request.get_json(silent=True) or {}

    try:
        patch = validate_payload(fields=USER_FIELDS, payload=payload, policy=USER_POLICY, partial=False)
        user = state_store.apply(
            auth_service.create_user,
            patch["username"],
            patch["password"],
            patch.get("role", Role.USER),
        )
    except PosError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception:
        current_app.logger.exception("Failed to create user")
        return jsonify({"error": "Internal server error"}), 500

    return jsonify({"user": user.to_dict()}), 201


@users_bp.delete("/<user_id>")
@require_auth
@require_role(Role.MANAGER)
def delete_user_route(user_id: str):
    """Delete a staff account. 403 for the bootstrap manager."""
    try:
        state_store.apply(auth_service.delete_user, user_id)
    except PosError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception:
        current_app.logger.exception("Failed to delete user")
        return jsonify({"error": "Internal server error"}), 500

    return jsonify({"ok": True}), 200
