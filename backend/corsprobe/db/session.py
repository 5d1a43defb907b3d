# backend/corsprobe/db/session.py
from __future__ import annotations

"""
Engine, session factory and declarative base for request history storage.

Only history entries and favorites live in the database; diagnoses and
captured signals are kept in memory for the lifetime of one attempt.
"""

from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker

from corsprobe.config import get_settings

settings = get_settings()


def _connect_args(database_url: str) -> dict:
    # Sync routes run in a threadpool; SQLite connections must be shareable.
    if database_url.startswith("sqlite"):
        return {"check_same_thread": False}
    return {}


engine = create_engine(
    settings.database_url,
    future=True,
    connect_args=_connect_args(settings.database_url),
)

SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)

Base = declarative_base()


def get_db():
    """Yield a session for one API request and close it afterwards."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
