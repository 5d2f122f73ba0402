"""
SQLite-backed persistence for Thread Digest.

Schema
──────
table: preferences
  key    TEXT PRIMARY KEY   ("identity" | "theme")
  value  TEXT NOT NULL

table: histories
  identity  TEXT PRIMARY KEY
  items     TEXT NOT NULL   (list[HistoryItem] serialised as JSON)

A history list is always written as a whole; there are no per-item rows.
"""

from __future__ import annotations

import logging
import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Optional

from pydantic import TypeAdapter, ValidationError

from digest.models import HistoryItem, Theme, User

logger = logging.getLogger(__name__)

_IDENTITY_KEY = "identity"
_THEME_KEY = "theme"

_history_adapter = TypeAdapter(list[HistoryItem])


class Store:
    """Persists the signed-in identity, theme and per-identity histories."""

    def __init__(self, db_path: Path | str) -> None:
        self.db_path = Path(db_path)

    @contextmanager
    def _connect(self):
        """Yield a connected sqlite3.Connection, creating the file/dir if needed."""
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        conn = sqlite3.connect(str(self.db_path))
        conn.row_factory = sqlite3.Row
        try:
            yield conn
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    def init_db(self) -> None:
        """Create the tables if they don't exist yet."""
        with self._connect() as conn:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS preferences (
                    key   TEXT PRIMARY KEY,
                    value TEXT NOT NULL
                )
                """
            )
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS histories (
                    identity TEXT PRIMARY KEY,
                    items    TEXT NOT NULL
                )
                """
            )
        logger.info("Store initialised at %s", self.db_path)

    # ── Preferences ────────────────────────────────────────────────────────

    def _get_pref(self, key: str) -> Optional[str]:
        with self._connect() as conn:
            row = conn.execute(
                "SELECT value FROM preferences WHERE key = ?", (key,)
            ).fetchone()
        return row["value"] if row else None

    def _set_pref(self, key: str, value: str) -> None:
        with self._connect() as conn:
            conn.execute(
                "INSERT INTO preferences (key, value) VALUES (?, ?) "
                "ON CONFLICT(key) DO UPDATE SET value = excluded.value",
                (key, value),
            )

    def load_identity(self) -> Optional[User]:
        """Return the persisted identity, or None if nobody is signed in."""
        raw = self._get_pref(_IDENTITY_KEY)
        if raw is None:
            return None
        try:
            return User.model_validate_json(raw)
        except ValidationError as exc:
            logger.warning("Ignoring corrupt identity record: %s", exc)
            return None

    def save_identity(self, user: User) -> None:
        self._set_pref(_IDENTITY_KEY, user.model_dump_json())

    def clear_identity(self) -> None:
        with self._connect() as conn:
            conn.execute("DELETE FROM preferences WHERE key = ?", (_IDENTITY_KEY,))

    def load_theme(self, default: Theme = Theme.DARK) -> Theme:
        raw = self._get_pref(_THEME_KEY)
        try:
            return Theme(raw) if raw is not None else default
        except ValueError:
            logger.warning("Ignoring unknown theme %r", raw)
            return default

    def save_theme(self, theme: Theme) -> None:
        self._set_pref(_THEME_KEY, theme.value)

    # ── History ────────────────────────────────────────────────────────────

    def load_history(self, identity: str) -> list[HistoryItem]:
        """Return the full history list for *identity* (oldest first)."""
        with self._connect() as conn:
            row = conn.execute(
                "SELECT items FROM histories WHERE identity = ?", (identity,)
            ).fetchone()

        if row is None:
            return []
        try:
            return _history_adapter.validate_json(row["items"])
        except ValidationError as exc:
            logger.warning("Discarding corrupt history for identity=%r: %s", identity, exc)
            return []

    def save_history(self, identity: str, items: list[HistoryItem]) -> None:
        """Overwrite the stored history of *identity* with *items*."""
        payload = _history_adapter.dump_json(items).decode("utf-8")
        with self._connect() as conn:
            conn.execute(
                "INSERT INTO histories (identity, items) VALUES (?, ?) "
                "ON CONFLICT(identity) DO UPDATE SET items = excluded.items",
                (identity, payload),
            )
        logger.info("Saved %d history items for identity=%r", len(items), identity)

    def clear_history(self, identity: str) -> None:
        with self._connect() as conn:
            conn.execute("DELETE FROM histories WHERE identity = ?", (identity,))
        logger.info("Cleared history for identity=%r", identity)
