# Overview: Request and role decorators for API routes.

from functools import wraps
from flask import jsonify, g

from .extensions import state_store
from .models import Role
from .services.shift_service import requires_shift


def _is_authenticated() -> bool:
    return hasattr(g, 'current_user')


def require_auth(f):
    """
    Require a logged-in operator on this terminal.

    Sets g.current_user to the live User record. Returns 401 if nobody is
    logged in or the account has since been deleted.
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        state = state_store.state
        session_user = state.current_user

        if session_user is None:
            return jsonify({"error": "Authentication required"}), 401

        user = state.find_user(session_user.id)
        if user is None:
            return jsonify({"error": "Session user no longer exists"}), 401

        g.current_user = user
        return f(*args, **kwargs)

    return decorated_function


def require_role(*roles: Role):
    """Require the operator's role to be one of roles. Use after @require_auth."""
    allowed = set(roles)

    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            if not _is_authenticated():
                return jsonify({"error": "Authentication required"}), 401

            if g.current_user.role not in allowed:
                return jsonify({
                    "error": "Permission denied",
                    "required_roles": sorted(r.value for r in allowed),
                }), 403

            return f(*args, **kwargs)

        return decorated_function
    return decorator


def require_shift(f):
    """
    Gate selling and inventory views behind shift activation.

    A USER who does not hold the active shift gets 409 with
    shift_required=True; managers pass through.
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        if not _is_authenticated():
            return jsonify({"error": "Authentication required"}), 401

        if requires_shift(g.current_user, state_store.state.active_shift):
            return jsonify({
                "error": "Shift activation required",
                "shift_required": True,
            }), 409

        return f(*args, **kwargs)

    return decorated_function
