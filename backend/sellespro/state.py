"""
Application state container.

WHY: All of users, products, sales, the active shift and the logged-in
operator live in one immutable AppState value. Services are pure
transitions `(state, ...) -> (new_state, result)`; the container runs a
transition under a lock and swaps in the result, so a stock check and its
decrement are never observable separately and a failed transition leaves
the previous state in place.

DESIGN PRINCIPLES:
- AppState is never mutated; every change produces a new value
- Only StateContainer.apply() replaces the current state
- Subscribers see each new state in the order transitions happened
- Persistence is a subscriber and never undoes an in-memory result
"""

from __future__ import annotations

import logging
import threading
import uuid
from dataclasses import dataclass
from typing import Callable

from flask import current_app

from .models import Product, SaleRecord, ShiftRecord, User

logger = logging.getLogger(__name__)


def new_id(prefix: str) -> str:
    return f"{prefix}_{uuid.uuid4().hex[:12]}"


@dataclass(frozen=True)
class AppState:
    current_user: User | None = None
    active_shift: ShiftRecord | None = None
    products: tuple[Product, ...] = ()
    sales: tuple[SaleRecord, ...] = ()
    users: tuple[User, ...] = ()
    # Closed shifts, oldest first
    shifts: tuple[ShiftRecord, ...] = ()

    def find_product(self, product_id: str) -> Product | None:
        for product in self.products:
            if product.id == product_id:
                return product
        return None

    def find_user(self, user_id: str) -> User | None:
        for user in self.users:
            if user.id == user_id:
                return user
        return None

    def to_dict(self) -> dict:
        """Snapshot layout. Includes password hashes: never send it to clients."""
        return {
            "currentUser": self.current_user.to_dict(include_secret=True) if self.current_user else None,
            "activeShift": self.active_shift.to_dict() if self.active_shift else None,
            "products": [p.to_dict() for p in self.products],
            "sales": [s.to_dict() for s in self.sales],
            "users": [u.to_dict(include_secret=True) for u in self.users],
            "shifts": [s.to_dict() for s in self.shifts],
        }

    @classmethod
    def from_dict(cls, data: dict) -> "AppState":
        current = data.get("currentUser")
        active = data.get("activeShift")
        return cls(
            current_user=User.from_dict(current) if current else None,
            active_shift=ShiftRecord.from_dict(active) if active else None,
            products=tuple(Product.from_dict(p) for p in data.get("products", [])),
            sales=tuple(SaleRecord.from_dict(s) for s in data.get("sales", [])),
            users=tuple(User.from_dict(u) for u in data.get("users", [])),
            shifts=tuple(ShiftRecord.from_dict(s) for s in data.get("shifts", [])),
        )


Transition = Callable[..., "tuple[AppState, object]"]
Listener = Callable[[AppState, object], None]


class StateContainer:
    """Owns the current AppState and serializes transitions against it."""

    def __init__(self, initial: AppState | None = None):
        self._state = initial if initial is not None else AppState()
        self._lock = threading.RLock()
        self._listeners: list[Listener] = []

    @property
    def state(self) -> AppState:
        return self._state

    def subscribe(self, listener: Listener) -> Listener:
        with self._lock:
            self._listeners.append(listener)
        return listener

    def apply(self, transition: Transition, *args, **kwargs):
        """
        Run transition(current_state, *args, **kwargs) and swap in its new state.

        If the transition raises, the current state is untouched and the
        exception propagates to the caller.
        """
        with self._lock:
            new_state, result = transition(self._state, *args, **kwargs)
            self._state = new_state
            self._notify(new_state, result)
        return result

    def reset(self, state: AppState) -> None:
        with self._lock:
            self._state = state
            self._notify(state, None)

    def _notify(self, state: AppState, result) -> None:
        for listener in self._listeners:
            try:
                listener(state, result)
            except Exception:
                logger.exception("State listener %r failed", listener)


class StateStore:
    """
    Flask extension binding one StateContainer to each application.

    The container is loaded lazily from the persisted snapshot on first use
    inside an app context; pending snapshots are flushed after each request.
    """

    extension_key = "sellespro_state"

    def __init__(self, app=None):
        if app is not None:
            self.init_app(app)

    def init_app(self, app) -> None:
        from .services.snapshot_service import SnapshotWriter

        app.extensions[self.extension_key] = {
            "container": None,
            "writer": SnapshotWriter(),
            "lock": threading.Lock(),
        }

        @app.after_request
        def flush_state_snapshot(response):
            self.flush()
            return response

    def _binding(self) -> dict:
        return current_app.extensions[self.extension_key]

    @property
    def container(self) -> StateContainer:
        binding = self._binding()
        if binding["container"] is None:
            with binding["lock"]:
                if binding["container"] is None:
                    from .services.snapshot_service import load_state

                    container = StateContainer(load_state())
                    container.subscribe(binding["writer"])
                    binding["container"] = container
        return binding["container"]

    @property
    def state(self) -> AppState:
        return self.container.state

    def apply(self, transition: Transition, *args, **kwargs):
        return self.container.apply(transition, *args, **kwargs)

    def flush(self) -> bool:
        return self._binding()["writer"].flush()

    def reload(self) -> AppState:
        """Discard the in-memory state and read the persisted snapshot again."""
        from .services.snapshot_service import load_state

        state = load_state()
        self.container.reset(state)
        return state
