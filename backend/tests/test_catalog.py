"""Tests for the static diagnosis catalog (no classifier or capture involved)."""

from __future__ import annotations

import pytest

from corsprobe.services.diagnostics.catalog import (
    DIAGNOSIS_CATALOG,
    SEVERITY_BY_CATEGORY,
    Category,
    Severity,
    get_catalog_entry,
)


def test_one_entry_per_category():
    assert set(DIAGNOSIS_CATALOG) == set(Category)
    assert len(DIAGNOSIS_CATALOG) == 10


@pytest.mark.parametrize("category", list(Category), ids=lambda c: c.value)
def test_entry_is_complete(category):
    entry = get_catalog_entry(category)

    assert entry.title.strip()
    assert entry.description.strip()
    assert 3 <= len(entry.checklist) <= 5
    assert 2 <= len(entry.solutions) <= 4
    assert all(item.strip() for item in entry.checklist)
    assert all(item.strip() for item in entry.solutions)


def test_only_cors_has_code_examples():
    with_examples = {c for c, entry in DIAGNOSIS_CATALOG.items() if entry.code_examples}
    assert with_examples == {Category.CORS}

    for example in DIAGNOSIS_CATALOG[Category.CORS].code_examples:
        assert example.language
        assert example.code.strip()


def test_cors_examples_cover_common_servers():
    languages = [e.language for e in DIAGNOSIS_CATALOG[Category.CORS].code_examples]
    assert languages == ["Node.js (Express)", "Python (Flask)", "Java (Spring Boot)"]


def test_http_title_has_status_slot():
    assert "{status_code}" in DIAGNOSIS_CATALOG[Category.HTTP].title


def test_severity_mapping():
    assert {c for c, s in SEVERITY_BY_CATEGORY.items() if s is Severity.ERROR} == {
        Category.NETWORK,
        Category.SERVER,
    }
    assert {c for c, s in SEVERITY_BY_CATEGORY.items() if s is Severity.WARNING} == {
        Category.CORS,
        Category.FORBIDDEN,
        Category.UNAUTHORIZED,
    }
    assert {c for c, s in SEVERITY_BY_CATEGORY.items() if s is Severity.INFO} == {
        Category.NOTFOUND,
        Category.RATELIMIT,
        Category.REQUEST,
        Category.HTTP,
        Category.UNKNOWN,
    }


def test_catalog_is_read_only():
    with pytest.raises(TypeError):
        DIAGNOSIS_CATALOG[Category.UNKNOWN] = DIAGNOSIS_CATALOG[Category.CORS]  # type: ignore[index]
