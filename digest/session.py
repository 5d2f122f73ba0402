"""
Chat session state for Thread Digest.

``ChatSession`` owns the process-wide state of the app: signed-in identity,
theme, the conversation transcript, the identity's history list and the
status of the latest submission. Every mutation goes through one method,
and the store is written right after the in-memory transition.

Only one submission may be pending at a time. A second ``submit`` while the
first is in flight raises ``SessionBusyError``; nothing is queued.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Sequence
from datetime import timedelta
from typing import Optional

from digest.client import GenerationError
from digest.models import (
    HistoryItem,
    LoadingState,
    Message,
    Role,
    SummaryData,
    Theme,
    User,
)
from digest.store import Store

logger = logging.getLogger(__name__)

#: ``(query, prior_turns) -> SummaryData``; raises GenerationError on failure.
Analyzer = Callable[[str, Sequence[Message]], SummaryData]


class SessionBusyError(RuntimeError):
    """Raised when a submission arrives while another one is pending."""


class ChatSession:
    """Single-user conversation state with a capacity-1 submission gate."""

    def __init__(self, store: Store, analyze: Analyzer) -> None:
        self.store = store
        self.analyze = analyze

        self.user: Optional[User] = None
        self.theme: Theme = Theme.DARK
        self.messages: list[Message] = []
        self.history: list[HistoryItem] = []
        self.status: LoadingState = LoadingState.IDLE

        self._gate = threading.Lock()

    # ── Startup ────────────────────────────────────────────────────────────

    def load(self) -> None:
        """Restore theme, identity and that identity's history from the store."""
        self.theme = self.store.load_theme()
        self.user = self.store.load_identity()
        self.history = self.store.load_history(self.user.name) if self.user else []
        logger.info(
            "Session loaded: user=%r theme=%s history=%d",
            self.user.name if self.user else None, self.theme.value, len(self.history),
        )

    @property
    def is_pending(self) -> bool:
        return self.status == LoadingState.LOADING

    # ── Identity ───────────────────────────────────────────────────────────

    def sign_in(self, name: str, password: str) -> User:
        """Sign in as *name*. The password is required but never checked.

        Raises:
            ValueError: If name or password is blank.
        """
        name = (name or "").strip()
        if not name or not (password or "").strip():
            raise ValueError("Name and password must not be empty.")

        self.user = User(name=name)
        self.store.save_identity(self.user)
        self.history = self.store.load_history(name)
        logger.info("Signed in as %r (%d history items)", name, len(self.history))
        return self.user

    def sign_out(self) -> None:
        """Forget the identity and reset all in-memory conversation state."""
        if self.user:
            logger.info("Signed out %r", self.user.name)
        self.user = None
        self.history = []
        self.messages = []
        self.status = LoadingState.IDLE
        self.store.clear_identity()

    # ── Theme ──────────────────────────────────────────────────────────────

    def toggle_theme(self) -> Theme:
        self.theme = Theme.LIGHT if self.theme == Theme.DARK else Theme.DARK
        self.store.save_theme(self.theme)
        return self.theme

    # ── Conversation ───────────────────────────────────────────────────────

    def submit(self, query: str) -> Message:
        """Send *query* to the model and append both turns to the transcript.

        Returns:
            The model message: the summary on success, an ``"Error: ..."``
            message on failure.

        Raises:
            ValueError: If the query is blank.
            SessionBusyError: If another submission is still pending.
        """
        query = (query or "").strip()
        if not query:
            raise ValueError("Query must not be empty.")

        if not self._gate.acquire(blocking=False):
            raise SessionBusyError("A request is already in progress.")

        try:
            self.status = LoadingState.LOADING
            prior_turns = list(self.messages)
            self.messages.append(Message(role=Role.USER, content=query))

            try:
                result = self.analyze(query, prior_turns)
            except GenerationError as exc:
                logger.exception("Generation failed for query=%r", query)
                reply = Message(
                    role=Role.MODEL,
                    content=f"Error: {str(exc) or 'Failed to analyze. Please try again.'}",
                )
                self.messages.append(reply)
                self.status = LoadingState.ERROR
                return reply

            reply = Message(
                role=Role.MODEL,
                content=result.summary,
                title=result.title,
                sources=result.sources,
            )
            self.messages.append(reply)
            self.status = LoadingState.SUCCESS

            if self.user:
                self.history.append(HistoryItem(query=query, summary_data=result))
                self.store.save_history(self.user.name, self.history)

            return reply
        finally:
            if self.status == LoadingState.LOADING:
                self.status = LoadingState.ERROR
            self._gate.release()

    def new_session(self) -> None:
        """Start over with an empty transcript."""
        self.messages = []
        self.status = LoadingState.IDLE

    # ── History ────────────────────────────────────────────────────────────

    def load_history_item(self, item_id: str) -> list[Message]:
        """Replace the transcript with a stored exchange.

        Raises:
            KeyError: If no history item has *item_id*.
        """
        item = next((h for h in self.history if h.id == item_id), None)
        if item is None:
            raise KeyError(item_id)

        data = item.summary_data
        self.messages = [
            Message(role=Role.USER, content=item.query, timestamp=item.timestamp),
            Message(
                role=Role.MODEL,
                content=data.summary,
                title=data.title,
                sources=data.sources,
                timestamp=item.timestamp + timedelta(seconds=1),
            ),
        ]
        self.status = LoadingState.SUCCESS
        return self.messages

    def clear_history(self) -> None:
        self.history = []
        if self.user:
            self.store.clear_history(self.user.name)
