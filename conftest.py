"""Shared pytest setup: run the app against in-memory stores unless told otherwise."""
import os

os.environ.setdefault("STORAGE_BACKEND", "memory")
os.environ.setdefault("ACCESS_LOG_THRESHOLD", "30")
os.environ.setdefault("PARKING_SPACES", "50")
os.environ.setdefault("LOG_LEVEL", "WARNING")

import pytest  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from member_access.core.database import create_tables  # noqa: E402


@pytest.fixture
def sqlite_engine():
    """Fresh in-memory SQLite database with the service schema."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    create_tables(engine)
    yield engine
    engine.dispose()
