"""
Pytest fixtures for Sellespro backend tests.

Provides a fresh application (in-memory SQLite, fast bcrypt), test client,
login helpers, and pure AppState fixtures for service-level tests.
"""

from dataclasses import replace
from datetime import datetime, timezone
from decimal import Decimal

import pytest

from sellespro import create_app
from sellespro.extensions import db, state_store
from sellespro.services.snapshot_service import seed_state
from sellespro.state import AppState

TEST_ROUNDS = 4

# Fixed "now" for window-sensitive service tests: Wednesday 2026-03-18, noon UTC
NOW = datetime(2026, 3, 18, 12, 0, tzinfo=timezone.utc)


@pytest.fixture(scope='function')
def app():
    """Create application for testing. Seeded on first state access."""
    app = create_app({
        'TESTING': True,
        'SQLALCHEMY_DATABASE_URI': 'sqlite:///:memory:',
        'SQLALCHEMY_TRACK_MODIFICATIONS': False,
        'BCRYPT_LOG_ROUNDS': TEST_ROUNDS,
        'INSIGHTS_URL': None,
    })

    with app.app_context():
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture(scope='function')
def client(app):
    """Create test client."""
    return app.test_client()


@pytest.fixture(scope='function')
def store(app):
    """The app's state store, loaded from the seed."""
    state_store.state  # force the lazy load
    return state_store


@pytest.fixture(scope='function')
def seeded() -> AppState:
    """Seed catalog and accounts as a pure state value (no app needed)."""
    return seed_state(rounds=TEST_ROUNDS)


@pytest.fixture(scope='function')
def five_left(seeded) -> AppState:
    """Seed state with product '1' down to exactly 5 units."""
    products = tuple(replace(p, quantity=5) if p.id == "1" else p for p in seeded.products)
    return replace(seeded, products=products)


def login(client, username: str, password: str = "password"):
    """Helper to log an operator into the terminal session."""
    return client.post('/api/auth/login', json={
        'username': username,
        'password': password,
    })


def login_manager(client):
    resp = login(client, "admin")
    assert resp.status_code == 200
    return resp


def login_cashier(client, activate: str | None = "A"):
    """Log in cashier1 and, unless activate is None, open a shift of that type."""
    resp = login(client, "cashier1")
    assert resp.status_code == 200
    if activate:
        shift_resp = client.post('/api/shifts/activate', json={'type': activate})
        assert shift_resp.status_code == 201
    return resp


def money(value) -> Decimal:
    return Decimal(str(value)).quantize(Decimal("0.01"))
