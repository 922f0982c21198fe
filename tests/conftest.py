"""
Pytest configuration and fixtures.

Every test gets a fresh app bound to an in-memory SQLite database with the
schema created up front and an app context pushed for direct service calls.
"""

from datetime import datetime, timedelta

import pytest

from app import create_app
from config import TestingConfig
from extensions import db as _db
from models.entry_model import FeelingEntry, LogEntry
from models.user_model import User

USER_ID = "00000000-0000-0000-0000-000000000001"
OTHER_USER_ID = "00000000-0000-0000-0000-000000000002"

# Fixed clock for service-level tests.
NOW = datetime(2026, 10, 19, 12, 0, 0)


@pytest.fixture
def app():
    app = create_app(TestingConfig)
    with app.app_context():
        _db.create_all()
        yield app
        _db.session.remove()
        _db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def db(app):
    return _db


@pytest.fixture
def user_headers():
    return {"X-User-Id": USER_ID}


@pytest.fixture
def make_entry(db):
    """Create a log entry ``days_ago`` before NOW (or at an explicit time)."""

    def _make_entry(entry_type="workout", days_ago=1, occurred_at=None, user_id=USER_ID):
        if occurred_at is None:
            occurred_at = NOW - timedelta(days=days_ago)
        User.ensure_user(user_id)
        entry = LogEntry(
            user_id=user_id,
            type=entry_type,
            raw_text=f"{entry_type} session",
            occurred_at=occurred_at,
        )
        db.session.add(entry)
        db.session.commit()
        return entry

    return _make_entry


@pytest.fixture
def add_feeling(db):
    def _add_feeling(entry, when="post", energy=3, valence=3, stress=3, notes=None):
        feeling = FeelingEntry(
            log_entry_id=entry.id,
            when=when,
            energy=energy,
            valence=valence,
            stress=stress,
            notes=notes,
        )
        db.session.add(feeling)
        db.session.commit()
        return feeling

    return _add_feeling
