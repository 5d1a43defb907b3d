"""Tests for request history and favorites persistence."""

from __future__ import annotations

from corsprobe import models
from corsprobe.services import history


def test_history_keeps_newest_entries(db):
    entries = [
        history.record_history(db, url=f"https://api.example.com/{i}", method="GET", status=200, limit=3)
        for i in range(5)
    ]

    kept = history.list_history(db)

    assert len(kept) == 3
    assert entries[-1].id in {entry.id for entry in kept}
    assert kept[0].created_at >= kept[-1].created_at


def test_history_stores_editor_text_verbatim(db):
    entry = history.record_history(
        db,
        url="https://api.example.com/",
        method="POST",
        headers='{"a":  1}',
        body={"b": 2, "a": 1},
        status=201,
    )

    assert entry.headers == '{"a":  1}'
    assert entry.body == '{"a": 1, "b": 2}'


def test_delete_and_clear_history(db):
    first = history.record_history(db, url="https://a.test/", method="GET", status=200)
    history.record_history(db, url="https://b.test/", method="GET", status=200)

    assert history.delete_history_entry(db, first.id)
    assert not history.delete_history_entry(db, first.id)
    assert history.clear_history(db) == 1
    assert history.list_history(db) == []


def test_identical_favorite_saved_once(db):
    first = history.add_favorite(db, url="https://a.test/", method="GET")
    again = history.add_favorite(db, url="https://a.test/", method="GET")
    other = history.add_favorite(db, url="https://a.test/", method="GET", headers='{"x": "1"}')

    assert again.id == first.id
    assert other.id != first.id
    assert db.query(models.Favorite).count() == 2


def test_find_and_remove_favorite(db):
    favorite = history.add_favorite(db, url="https://a.test/", method="POST", body='{"k": 1}')

    assert history.find_favorite(db, url="https://a.test/", method="POST", body='{"k": 1}').id == favorite.id
    assert history.find_favorite(db, url="https://a.test/", method="POST") is None

    assert history.remove_favorite(db, favorite.id)
    assert not history.remove_favorite(db, favorite.id)
    assert history.list_favorites(db) == []


def test_clear_favorites(db):
    history.add_favorite(db, url="https://a.test/", method="GET")
    history.add_favorite(db, url="https://b.test/", method="GET")

    assert history.clear_favorites(db) == 2
    assert history.list_favorites(db) == []
