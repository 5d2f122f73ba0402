"""Application settings — all configuration loaded from environment variables.

Usage:
    from config.settings import Settings
    settings = Settings()
    settings.validate()   # raises ValueError if ANTHROPIC_API_KEY is missing
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

DEFAULT_DB_PATH = Path(__file__).parent.parent / "data" / "thread_digest.db"


def _env_flag(name: str, default: str = "0") -> bool:
    return os.environ.get(name, default).strip().lower() in ("1", "true", "yes")


@dataclass
class Settings:
    """Centralised application configuration.

    All values are read from environment variables at instantiation time
    so that tests can override them by patching ``os.environ``.
    """

    # ── API Keys ────────────────────────────────────────────────────────────
    anthropic_api_key: str = field(
        default_factory=lambda: os.environ.get("ANTHROPIC_API_KEY", "")
    )

    # ── Flask ───────────────────────────────────────────────────────────────
    debug: bool = field(default_factory=lambda: _env_flag("FLASK_DEBUG"))
    port: int = field(
        default_factory=lambda: int(os.environ.get("PORT", "5001"))
    )

    # ── Storage ─────────────────────────────────────────────────────────────
    db_path: Path = field(
        default_factory=lambda: Path(os.environ.get("DB_PATH") or DEFAULT_DB_PATH)
    )

    # ── AI Model ────────────────────────────────────────────────────────────
    #: Model used for the grounded summarisation call.
    model: str = field(
        default_factory=lambda: os.environ.get("MODEL", "claude-haiku-4-5")
    )
    #: Extended-thinking budget in tokens (the API minimum is 1024).
    thinking_budget: int = field(
        default_factory=lambda: int(os.environ.get("THINKING_BUDGET", "1024"))
    )
    #: Must be larger than ``thinking_budget``.
    max_tokens: int = field(
        default_factory=lambda: int(os.environ.get("MAX_TOKENS", "4096"))
    )
    max_web_searches: int = field(
        default_factory=lambda: int(os.environ.get("MAX_WEB_SEARCHES", "3"))
    )
    #: Seconds before a pending model call is abandoned as failed.
    request_timeout: float = field(
        default_factory=lambda: float(os.environ.get("REQUEST_TIMEOUT", "120"))
    )

    # ── Response parsing ────────────────────────────────────────────────────
    #: Remove the heuristic title line from the body instead of repeating it.
    strip_fallback_title: bool = field(
        default_factory=lambda: _env_flag("STRIP_FALLBACK_TITLE")
    )

    def validate(self) -> None:
        """Raise ``ValueError`` if any required setting is missing or inconsistent."""
        if not self.anthropic_api_key:
            raise ValueError(
                "ANTHROPIC_API_KEY environment variable is not set. "
                "Copy .env.example to .env and add your key."
            )
        if self.max_tokens <= self.thinking_budget:
            raise ValueError(
                f"MAX_TOKENS ({self.max_tokens}) must exceed "
                f"THINKING_BUDGET ({self.thinking_budget})."
            )
        if self.request_timeout <= 0:
            raise ValueError("REQUEST_TIMEOUT must be a positive number of seconds.")
