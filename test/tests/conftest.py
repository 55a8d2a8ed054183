"""
Project: Restaurant POS Admin Backend
Date: October 2026

Description:
Shared fixtures: an in-memory app, a test client, and clients carrying an
admin or a read-only session.
"""

import os, sys
import pytest

# --- Make sure project root is importable ---
TESTS_DIR = os.path.dirname(__file__)
PROJECT_ROOT = os.path.abspath(os.path.join(TESTS_DIR, os.pardir, os.pardir))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

# Socket.IO must not need eventlet under pytest; Config reads this at import
os.environ.setdefault("SOCKETIO_ASYNC_MODE", "threading")

from app import create_app  # noqa: E402
from models import db  # noqa: E402


@pytest.fixture
def app():
    app = create_app(testing=True)
    with app.app_context():
        db.drop_all()
        db.create_all()
        yield app
        db.session.remove()


@pytest.fixture
def client(app):
    return app.test_client()


def _login(client, user_id, role):
    with client.session_transaction() as sess:
        sess["user_id"] = user_id
        sess["role"] = role
    return client


@pytest.fixture
def admin_client(app):
    return _login(app.test_client(), 1, "SUPER_ADMIN")


@pytest.fixture
def staff_client(app):
    return _login(app.test_client(), 2, "CASHIER")
