"""
Snapshot persistence for the application state.

WHY: The whole state is small and changes as a unit, so it is stored as a
single JSON document. Writes happen after the in-memory transition has
already been swapped in; a failed write is logged and retried on the next
flush instead of rolling anything back.
"""

from __future__ import annotations

import logging
import threading

from flask import current_app
from sqlalchemy.exc import SQLAlchemyError

from ..extensions import db
from ..models import Product, Role, User
from ..models.snapshot import StateSnapshot
from ..money_utils import to_money
from ..state import AppState
from ..time_utils import utcnow
from .auth_service import hash_password
from .concurrency import run_with_retry

logger = logging.getLogger(__name__)

SNAPSHOT_ID = 1

SEED_PRODUCTS = (
    ("1", "Coffee Beans", 50, "COF01", "1001001", "15.50"),
    ("2", "Milk 1L", 30, "MILK01", "2002002", "2.50"),
    ("3", "Sugar 1kg", 100, "SUG01", "3003003", "1.20"),
)

# (id, username, role, password)
SEED_USERS = (
    ("admin", "admin", Role.MANAGER, "password"),
    ("user1", "cashier1", Role.USER, "password"),
)


def seed_state(rounds: int | None = None) -> AppState:
    """Fixed starting catalog and accounts used when nothing was persisted yet."""
    products = tuple(
        Product(
            id=pid,
            name=name,
            quantity=quantity,
            local_code=local_code,
            bar_code=bar_code,
            price=to_money(price),
        )
        for pid, name, quantity, local_code, bar_code, price in SEED_PRODUCTS
    )
    users = tuple(
        User(id=uid, username=username, role=role, password_hash=hash_password(password, rounds=rounds))
        for uid, username, role, password in SEED_USERS
    )
    return AppState(products=products, users=users)


def read_snapshot() -> StateSnapshot | None:
    return db.session.get(StateSnapshot, SNAPSHOT_ID)


def save_state(state: AppState) -> StateSnapshot:
    """Upsert the single snapshot row with the given state."""
    payload = state.to_dict()

    def _op():
        snapshot = db.session.get(StateSnapshot, SNAPSHOT_ID)
        if snapshot is None:
            snapshot = StateSnapshot(id=SNAPSHOT_ID, payload=payload)
            db.session.add(snapshot)
        else:
            snapshot.payload = payload
        snapshot.saved_at = utcnow()
        db.session.commit()
        return snapshot

    return run_with_retry(_op)


def load_state() -> AppState:
    """
    Read the persisted state, falling back to the seed data.

    The seed is written back immediately so the first boot leaves a snapshot
    behind even before any mutation.
    """
    snapshot = read_snapshot()
    if snapshot is not None:
        return AppState.from_dict(snapshot.payload)

    if not current_app.config.get("SEED_ON_EMPTY", True):
        return AppState()

    state = seed_state()
    save_state(state)
    logger.info("No snapshot found; loaded seed catalog (%d products, %d users)",
                len(state.products), len(state.users))
    return state


class SnapshotWriter:
    """
    State subscriber that remembers the latest state until it is flushed.

    Only the newest state matters, so intermediate states between two
    flushes are never written.
    """

    def __init__(self):
        self._pending: AppState | None = None
        self._lock = threading.Lock()

    def __call__(self, state: AppState, result) -> None:
        with self._lock:
            self._pending = state

    @property
    def has_pending(self) -> bool:
        return self._pending is not None

    def flush(self) -> bool:
        with self._lock:
            pending = self._pending
            self._pending = None
        if pending is None:
            return False

        try:
            save_state(pending)
        except SQLAlchemyError:
            db.session.rollback()
            logger.exception("Failed to persist state snapshot; will retry on next flush")
            with self._lock:
                # A newer state may have arrived while we were writing
                if self._pending is None:
                    self._pending = pending
            return False
        return True
