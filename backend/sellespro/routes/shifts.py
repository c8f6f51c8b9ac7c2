# Overview: Flask API routes for shift operations; parses input and returns JSON responses.

# backend/sellespro/routes/shifts.py
"""
Shift management routes.

Key features:
- Single active shift slot for the terminal
- Activation by the logged-in operator (type A or B)
- Closed shift history for managers
"""

from flask import Blueprint, request, jsonify, current_app, g

from ..extensions import state_store
from ..errors import PosError
from ..models import Role
from ..services import shift_service
from ..decorators import require_auth, require_role


shifts_bp = Blueprint("shifts", __name__, url_prefix="/api/shifts")


@shifts_bp.get("/active")
@require_auth
def active_shift_route():
    active = state_store.state.active_shift
    return jsonify({"shift": active.to_dict() if active else None}), 200


@shifts_bp.post("/activate")
@require_auth
def activate_shift_route():
    """
    Activate a shift for the logged-in operator.

    Request body:
    {
        "type": "A"  // or "B"
    }

    Returns 409 if a shift is already active.
    """
    try:
        data = request.get_json(silent=True) or {}
        shift_type = data.get("type")

        if not shift_type:
            return jsonify({"error": "type required"}), 400

        shift = state_store.apply(
            shift_service.activate_shift,
            g.current_user.id,
            shift_type,
        )
        return jsonify({"shift": shift.to_dict()}), 201

    except PosError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception:
        current_app.logger.exception("Failed to activate shift")
        return jsonify({"error": "Internal server error"}), 500


@shifts_bp.post("/<shift_id>/deactivate")
@require_auth
def deactivate_shift_route(shift_id: str):
    """
    Close the active shift. The shift becomes immutable once closed.

    Returns 409 if shift_id is not the active shift.
    """
    try:
        shift = state_store.apply(shift_service.deactivate_shift, shift_id)
        return jsonify({"shift": shift.to_dict()}), 200

    except PosError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception:
        current_app.logger.exception("Failed to deactivate shift")
        return jsonify({"error": "Internal server error"}), 500


@shifts_bp.get("")
@require_auth
@require_role(Role.MANAGER)
def list_shifts_route():
    """Closed shift history, most recent first."""
    shifts = reversed(state_store.state.shifts)
    return jsonify({"shifts": [s.to_dict() for s in shifts]}), 200
