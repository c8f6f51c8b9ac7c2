# Overview: Flask API routes for auth operations; parses input and returns JSON responses.

# backend/sellespro/routes/auth.py
"""
Authentication API routes.

The terminal has a single session slot: logging in replaces whoever was
logged in before; logging out clears it but leaves the active shift open.
"""

from flask import Blueprint, request, jsonify, current_app, g

from ..extensions import state_store
from ..errors import AuthenticationError
from ..services import auth_service
from ..services.shift_service import requires_shift
from ..decorators import require_auth


auth_bp = Blueprint("auth", __name__, url_prefix="/api/auth")


def _session_payload(user) -> dict:
    active_shift = state_store.state.active_shift
    return {
        "user": user.to_dict(),
        "active_shift": active_shift.to_dict() if active_shift else None,
        "shift_required": requires_shift(user, active_shift),
    }


@auth_bp.post("/login")
def login_route():
    """
    Authenticate user and occupy the terminal session.

    Returns the user, the active shift, and whether the user must activate
    a shift before selling.
    """
    try:
        data = request.get_json(silent=True) or {}
        username = data.get("username")
        password = data.get("password")

        if not all([username, password]):
            return jsonify({"error": "username and password required"}), 400

        user = state_store.apply(auth_service.login, username, password)
        return jsonify(_session_payload(user)), 200

    except AuthenticationError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception:
        current_app.logger.exception("Failed to login user")
        return jsonify({"error": "Internal server error"}), 500


@auth_bp.post("/logout")
@require_auth
def logout_route():
    try:
        state_store.apply(auth_service.logout)
        return jsonify({"ok": True}), 200
    except Exception:
        current_app.logger.exception("Failed to logout user")
        return jsonify({"error": "Internal server error"}), 500


@auth_bp.get("/me")
@require_auth
def me_route():
    """Current operator and shift gate status."""
    return jsonify(_session_payload(g.current_user)), 200
