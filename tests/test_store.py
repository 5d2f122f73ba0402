"""
Tests for digest/store.py

Uses a temporary SQLite file so the real database is never touched.

Run with: pytest tests/test_store.py
"""

import sqlite3

import pytest

from digest.models import HistoryItem, Source, SummaryData, Theme, User
from digest.store import Store


@pytest.fixture
def store(tmp_path) -> Store:
    """A Store backed by a fresh temp file for each test."""
    s = Store(tmp_path / "nested" / "test.db")
    s.init_db()
    return s


@pytest.fixture
def sample_item() -> HistoryItem:
    return HistoryItem(
        query="What is X?",
        summary_data=SummaryData(
            title="About X",
            summary="X is...",
            sources=[
                Source(title="Wikipedia", uri="https://en.wikipedia.org/wiki/X"),
                Source(title="Wikipedia", uri="https://en.wikipedia.org/wiki/X"),
            ],
        ),
    )


class TestPreferences:
    def test_creates_parent_directory(self, store):
        assert store.db_path.exists()

    def test_identity_absent_by_default(self, store):
        assert store.load_identity() is None

    def test_identity_round_trip_and_clear(self, store):
        store.save_identity(User(name="ada"))
        assert store.load_identity() == User(name="ada")
        store.clear_identity()
        assert store.load_identity() is None

    def test_identity_overwritten(self, store):
        store.save_identity(User(name="ada"))
        store.save_identity(User(name="grace"))
        assert store.load_identity().name == "grace"

    def test_theme_defaults_to_dark(self, store):
        assert store.load_theme() == Theme.DARK

    def test_theme_persisted(self, store):
        store.save_theme(Theme.LIGHT)
        assert store.load_theme() == Theme.LIGHT

    def test_unknown_theme_falls_back(self, store):
        with sqlite3.connect(store.db_path) as conn:
            conn.execute("INSERT INTO preferences VALUES ('theme', 'sepia')")
        assert store.load_theme() == Theme.DARK


class TestHistory:
    def test_missing_identity_returns_empty(self, store):
        assert store.load_history("nobody") == []

    def test_save_and_load(self, store, sample_item):
        store.save_history("ada", [sample_item])
        loaded = store.load_history("ada")

        assert len(loaded) == 1
        assert loaded[0].id == sample_item.id
        assert loaded[0].summary_data.title == "About X"
        # duplicates survive storage
        assert len(loaded[0].summary_data.sources) == 2

    def test_save_overwrites_whole_list(self, store, sample_item):
        other = sample_item.model_copy(update={"id": "2", "query": "Y?"})
        store.save_history("ada", [sample_item, other])
        store.save_history("ada", [other])
        assert [h.query for h in store.load_history("ada")] == ["Y?"]

    def test_histories_are_per_identity(self, store, sample_item):
        store.save_history("ada", [sample_item])
        assert store.load_history("grace") == []

    def test_clear(self, store, sample_item):
        store.save_history("ada", [sample_item])
        store.clear_history("ada")
        assert store.load_history("ada") == []

    def test_corrupt_record_is_discarded(self, store):
        with sqlite3.connect(store.db_path) as conn:
            conn.execute("INSERT INTO histories VALUES ('ada', 'not json')")
        assert store.load_history("ada") == []
