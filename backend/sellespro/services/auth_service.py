# Overview: Identity store operations; authenticates operators and manages staff accounts.

"""
Authentication and staff account service.

WHY: Every sale and catalog change must be attributable to an operator.
Accounts are plain records in the application state; passwords are stored
as bcrypt hashes.

SECURITY NOTES:
- Username and password comparisons are case-sensitive
- A failed login never reveals which field was wrong
- The bootstrap manager ("admin") can never be deleted
"""

from __future__ import annotations

import logging
from dataclasses import replace

import bcrypt
from flask import current_app, has_app_context

from ..errors import AuthenticationError, NotFoundError, ProtectedAccountError, ValidationError
from ..models import Role, User
from ..state import AppState, new_id

logger = logging.getLogger(__name__)

DEFAULT_BCRYPT_ROUNDS = 12

# bcrypt only reads the first 72 bytes of a password (newer releases refuse more)
MAX_PASSWORD_BYTES = 72


def _bcrypt_rounds() -> int:
    if has_app_context():
        return int(current_app.config.get("BCRYPT_LOG_ROUNDS", DEFAULT_BCRYPT_ROUNDS))
    return DEFAULT_BCRYPT_ROUNDS


def hash_password(password: str, rounds: int | None = None) -> str:
    """
    Hash password using bcrypt.

    rounds defaults to BCRYPT_LOG_ROUNDS from the app config (12 outside an
    app context). Tests lower it to keep fixtures fast.
    """
    salt = bcrypt.gensalt(rounds=rounds or _bcrypt_rounds())
    hashed = bcrypt.hashpw(password.encode("utf-8"), salt)
    return hashed.decode("utf-8")  # Stored as string in the snapshot


def verify_password(password: str, password_hash: str) -> bool:
    """Timing-safe check of password against a bcrypt hash; malformed hashes never match."""
    if not isinstance(password, str) or not password_hash:
        return False
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        return False


def authenticate(state: AppState, username: str, password: str) -> User:
    """
    Return the user whose username and password both match exactly.

    Raises AuthenticationError with a generic message otherwise, including
    for non-string credentials.
    """
    if not isinstance(username, str) or not isinstance(password, str):
        raise AuthenticationError()
    for user in state.users:
        if user.username == username and verify_password(password, user.password_hash):
            return user
    raise AuthenticationError()


def login(state: AppState, username: str, password: str) -> tuple[AppState, User]:
    """Authenticate and occupy the terminal's session slot."""
    user = authenticate(state, username, password)
    logger.info("User %s logged in", user.username)
    return replace(state, current_user=user), user


def logout(state: AppState) -> tuple[AppState, None]:
    # The active shift survives logout; only the session slot is cleared
    return replace(state, current_user=None), None


def _coerce_role(role) -> Role:
    if isinstance(role, Role):
        return role
    try:
        return Role(str(role).upper())
    except ValueError:
        raise ValidationError(f"role must be one of: {', '.join(r.value for r in Role)}")


def create_user(
    state: AppState,
    username: str,
    password: str,
    role=Role.USER,
    *,
    rounds: int | None = None,
) -> tuple[AppState, User]:
    """
    Create a staff account.

    Raises:
        ValidationError: blank username/password, a password over 72 bytes,
            unknown role, or a username that is already taken
    """
    if not username or not str(username).strip():
        raise ValidationError("username cannot be blank")
    if not isinstance(password, str) or not password.strip():
        raise ValidationError("password cannot be blank")
    if len(password.encode("utf-8")) > MAX_PASSWORD_BYTES:
        raise ValidationError(f"password cannot be longer than {MAX_PASSWORD_BYTES} bytes")

    username = str(username).strip()
    role = _coerce_role(role)

    if any(u.username == username for u in state.users):
        raise ValidationError(f"Username '{username}' already exists")

    user = User(
        id=new_id("user"),
        username=username,
        password_hash=hash_password(password, rounds=rounds),
        role=role,
    )
    logger.info("Created %s account %s", role.value, username)
    return replace(state, users=state.users + (user,)), user


def delete_user(state: AppState, user_id: str) -> tuple[AppState, User]:
    """
    Delete a staff account unconditionally, except the bootstrap manager.

    Sales keep the deleted operator's username, so history stays readable.
    """
    user = state.find_user(user_id)
    if user is None:
        raise NotFoundError("User not found", details={"user_id": user_id})

    if user.is_bootstrap:
        raise ProtectedAccountError(
            "The bootstrap manager account cannot be deleted",
            details={"user_id": user.id, "username": user.username},
        )

    users = tuple(u for u in state.users if u.id != user_id)
    current_user = state.current_user
    if current_user is not None and current_user.id == user_id:
        current_user = None

    logger.info("Deleted account %s", user.username)
    return replace(state, users=users, current_user=current_user), user
