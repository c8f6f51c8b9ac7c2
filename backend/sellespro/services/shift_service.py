"""
Shift tracking service.

WHY: A cashier may only sell during a shift, and every sale records the
shift type it happened in.

DESIGN PRINCIPLES:
- One active shift for the whole terminal at a time
- Shifts move NoShift -> Active -> closed, never back
- Closed shifts are kept in state.shifts and never modified
"""

from __future__ import annotations

import logging
from dataclasses import replace
from datetime import datetime

from ..errors import NoActiveShiftError, NotFoundError, ShiftAlreadyActiveError, ValidationError
from ..models import Role, ShiftRecord, ShiftType, User
from ..state import AppState, new_id
from ..time_utils import utcnow

logger = logging.getLogger(__name__)


def _coerce_shift_type(shift_type) -> ShiftType:
    if isinstance(shift_type, ShiftType):
        return shift_type
    try:
        return ShiftType(str(shift_type).upper())
    except ValueError:
        raise ValidationError(f"shift type must be one of: {', '.join(t.value for t in ShiftType)}")


def activate_shift(
    state: AppState,
    operator_id: str,
    shift_type,
    now: datetime | None = None,
) -> tuple[AppState, ShiftRecord]:
    """
    Open a shift for operator_id.

    Raises:
        ShiftAlreadyActiveError: a shift is already open (it is left as is)
        NotFoundError: operator_id does not name an account
    """
    if state.active_shift is not None:
        raise ShiftAlreadyActiveError(state.active_shift.id)

    shift_type = _coerce_shift_type(shift_type)

    operator = state.find_user(operator_id)
    if operator is None:
        raise NotFoundError("User not found", details={"user_id": operator_id})

    shift = ShiftRecord(
        id=new_id("shift"),
        user_id=operator.id,
        start_time=now or utcnow(),
        type=shift_type,
        is_active=True,
    )
    logger.info("Shift %s (%s) opened by %s", shift.id, shift.type.value, operator.username)
    return replace(state, active_shift=shift), shift


def deactivate_shift(
    state: AppState,
    shift_id: str | None = None,
    now: datetime | None = None,
) -> tuple[AppState, ShiftRecord]:
    """
    Close the active shift.

    If shift_id is given it must name the active shift.
    """
    active = state.active_shift
    if active is None:
        raise NoActiveShiftError()
    if shift_id is not None and shift_id != active.id:
        raise NoActiveShiftError(f"Shift {shift_id} is not the active shift")

    closed = active.close(now or utcnow())
    logger.info("Shift %s closed", closed.id)
    return replace(state, active_shift=None, shifts=state.shifts + (closed,)), closed


def holds_shift(user: User, active_shift: ShiftRecord | None) -> bool:
    return active_shift is not None and active_shift.is_active and active_shift.user_id == user.id


def requires_shift(user: User, active_shift: ShiftRecord | None) -> bool:
    """
    Session gate: a USER without the active shift must activate one before
    selling or browsing inventory. Managers are never gated.
    """
    if user.role is Role.MANAGER:
        return False
    return not holds_shift(user, active_shift)
