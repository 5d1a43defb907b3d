# backend/corsprobe/models/__init__.py
from __future__ import annotations

"""
ORM models for the cors-probe backend.

This module depends on:
- corsprobe.db.session.Base for the declarative base

It is used by:
- corsprobe.schemas (for type references)
- API routes and corsprobe.services.history

Models:
- HistoryEntry: a request that completed successfully, newest first
- Favorite: a request saved by the user for reuse

Diagnoses and captured signals are never persisted.
"""

import uuid
from datetime import datetime

from sqlalchemy import Column, DateTime, Integer, String, Text

from corsprobe.db.session import Base


class HistoryEntry(Base):
    __tablename__ = "history_entries"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    url = Column(String, nullable=False)
    method = Column(String, nullable=False)

    # Raw editor text, kept verbatim so the form can be restored as typed
    headers = Column(Text, nullable=True)
    body = Column(Text, nullable=True)

    status = Column(Integer, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)


class Favorite(Base):
    """
    A saved request. Identity is (url, method, headers, body); the same
    request cannot be saved twice.
    """

    __tablename__ = "favorites"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    url = Column(String, nullable=False)
    method = Column(String, nullable=False)
    headers = Column(Text, nullable=True)
    body = Column(Text, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
