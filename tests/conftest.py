"""Shared test fixtures and configuration.

Sets up fake environment variables before any trackademic imports,
and provides common fixtures like a temp DB and a fixed clock.
"""

import os

# Patch env vars BEFORE any trackademic imports
os.environ.setdefault("DATABASE_PATH", ":memory:")
os.environ.setdefault("SENDGRID_API_KEY", "")
os.environ.setdefault("REMINDER_INTERVAL_MINUTES", "15")
os.environ.setdefault("TIMEZONE", "UTC")

from datetime import datetime, timezone

import pytest

NOW = datetime(2025, 3, 10, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def now():
    """A fixed 'current time' for deterministic reminder windows."""
    return NOW


@pytest.fixture
def tmp_db_path(tmp_path):
    """Return a temporary SQLite DB path."""
    return str(tmp_path / "test_trackademic.db")


@pytest.fixture
def assignment_db(tmp_db_path):
    """Return an AssignmentDB instance backed by a temp file."""
    from trackademic.data.db import AssignmentDB
    return AssignmentDB(db_path=tmp_db_path)


@pytest.fixture
def student(assignment_db):
    """A registered student in the temp DB."""
    return assignment_db.add_user(email="Ada@Example.com", name="Ada")
