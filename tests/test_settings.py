"""Tests for config/settings.py"""

from __future__ import annotations

from pathlib import Path

import pytest

from config.settings import DEFAULT_DB_PATH, Settings


class TestSettings:
    def test_defaults(self, monkeypatch):
        for name in ("MODEL", "THINKING_BUDGET", "DB_PATH", "STRIP_FALLBACK_TITLE", "REQUEST_TIMEOUT"):
            monkeypatch.delenv(name, raising=False)
        s = Settings()
        assert s.thinking_budget == 1024
        assert s.db_path == DEFAULT_DB_PATH
        assert s.strip_fallback_title is False
        assert s.request_timeout == 120.0

    def test_reads_environment(self, monkeypatch):
        monkeypatch.setenv("DB_PATH", "/tmp/x.db")
        monkeypatch.setenv("STRIP_FALLBACK_TITLE", "true")
        monkeypatch.setenv("REQUEST_TIMEOUT", "5")
        s = Settings()
        assert s.db_path == Path("/tmp/x.db")
        assert s.strip_fallback_title is True
        assert s.request_timeout == 5.0

    def test_validate_requires_api_key(self):
        with pytest.raises(ValueError, match="ANTHROPIC_API_KEY"):
            Settings(anthropic_api_key="").validate()

    def test_validate_token_budget(self):
        with pytest.raises(ValueError, match="MAX_TOKENS"):
            Settings(anthropic_api_key="k", max_tokens=1024, thinking_budget=1024).validate()

    def test_validate_ok(self):
        Settings(anthropic_api_key="k", max_tokens=4096, thinking_budget=1024, request_timeout=10).validate()
