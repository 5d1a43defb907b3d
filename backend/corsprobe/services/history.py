from __future__ import annotations

"""backend/corsprobe/services/history.py

Request history and favorites persistence.

- record_history: store a successful request and trim to the newest N
- delete_history_entry / clear_history
- add_favorite / remove_favorite / find_favorite

Header and body text is stored exactly as the user typed it.
"""

import json
import logging
from typing import Any

from sqlalchemy.orm import Session

from corsprobe import models
from corsprobe.config import get_settings

logger = logging.getLogger(__name__)


def _as_text(value: Any) -> str | None:
    if value is None or isinstance(value, str):
        return value
    # Already-parsed values from API clients; keep a stable JSON form.
    return json.dumps(value, sort_keys=True)


def list_history(db: Session) -> list[models.HistoryEntry]:
    return (
        db.query(models.HistoryEntry)
        .order_by(models.HistoryEntry.created_at.desc())
        .all()
    )


def record_history(
    db: Session,
    *,
    url: str,
    method: str,
    headers: Any = None,
    body: Any = None,
    status: int | None = None,
    limit: int | None = None,
) -> models.HistoryEntry:
    """Insert a history entry and drop anything beyond the newest ``limit``."""
    limit = limit if limit is not None else get_settings().history_limit
    entry = models.HistoryEntry(
        url=url,
        method=method,
        headers=_as_text(headers),
        body=_as_text(body),
        status=status,
    )
    db.add(entry)
    db.commit()
    db.refresh(entry)

    stale = list_history(db)[limit:]
    for old in stale:
        db.delete(old)
    if stale:
        db.commit()
        logger.debug("Trimmed %d history entries", len(stale))
    return entry


def delete_history_entry(db: Session, entry_id: str) -> bool:
    entry = db.query(models.HistoryEntry).filter(models.HistoryEntry.id == entry_id).first()
    if entry is None:
        return False
    db.delete(entry)
    db.commit()
    return True


def clear_history(db: Session) -> int:
    count = db.query(models.HistoryEntry).delete()
    db.commit()
    return count


def list_favorites(db: Session) -> list[models.Favorite]:
    return db.query(models.Favorite).order_by(models.Favorite.created_at.desc()).all()


def find_favorite(
    db: Session,
    *,
    url: str,
    method: str,
    headers: Any = None,
    body: Any = None,
) -> models.Favorite | None:
    return (
        db.query(models.Favorite)
        .filter(
            models.Favorite.url == url,
            models.Favorite.method == method,
            models.Favorite.headers.is_(None) if headers is None else models.Favorite.headers == _as_text(headers),
            models.Favorite.body.is_(None) if body is None else models.Favorite.body == _as_text(body),
        )
        .first()
    )


def add_favorite(
    db: Session,
    *,
    url: str,
    method: str,
    headers: Any = None,
    body: Any = None,
) -> models.Favorite:
    """Save a favorite; an identical request already saved is returned as is."""
    existing = find_favorite(db, url=url, method=method, headers=headers, body=body)
    if existing is not None:
        return existing
    favorite = models.Favorite(
        url=url,
        method=method,
        headers=_as_text(headers),
        body=_as_text(body),
    )
    db.add(favorite)
    db.commit()
    db.refresh(favorite)
    return favorite


def remove_favorite(db: Session, favorite_id: str) -> bool:
    favorite = db.query(models.Favorite).filter(models.Favorite.id == favorite_id).first()
    if favorite is None:
        return False
    db.delete(favorite)
    db.commit()
    return True


def clear_favorites(db: Session) -> int:
    count = db.query(models.Favorite).delete()
    db.commit()
    return count
