"""Shared fixtures for the cors-probe test suite."""

from __future__ import annotations

import asyncio
import os
import tempfile

# Settings are cached on first import; point them at a throwaway database
# and keep capture off until a test turns it on.
_DB_DIR = tempfile.mkdtemp(prefix="corsprobe-tests-")
os.environ.setdefault("DATABASE_URL", f"sqlite:///{os.path.join(_DB_DIR, 'test.db')}")
os.environ.setdefault("CAPTURE_ON_STARTUP", "false")

import pytest  # noqa: E402

from corsprobe import models  # noqa: E402
from corsprobe.db.session import Base, SessionLocal, engine  # noqa: E402
from corsprobe.services.diagnostics import SignalInterceptor  # noqa: E402


@pytest.fixture(scope="session", autouse=True)
def _create_schema():
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture(autouse=True)
def _empty_tables():
    db = SessionLocal()
    try:
        db.query(models.HistoryEntry).delete()
        db.query(models.Favorite).delete()
        db.commit()
    finally:
        db.close()
    yield


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def capture_loop():
    loop = asyncio.new_event_loop()
    yield loop
    loop.close()


@pytest.fixture
def interceptor(capture_loop):
    """An interceptor bound to a private loop; always disabled on teardown."""
    interceptor = SignalInterceptor(loop=capture_loop)
    yield interceptor
    interceptor.disable()
