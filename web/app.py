"""
Flask web server for Thread Digest.

Routes
──────
GET    /api/state                 Identity, theme, status and rendered transcript
POST   /api/login                 {"name", "password"} — no credential check
POST   /api/logout                Sign out and reset the conversation
POST   /api/theme                 Toggle light / dark
POST   /api/query                 {"query"} — summarise a link or answer a question
POST   /api/session/new           Clear the transcript
GET    /api/history               List the signed-in identity's history
POST   /api/history/<id>/load     Replace the transcript with a history item
DELETE /api/history               Clear the history
"""

from __future__ import annotations

import logging
import os
import sys
from functools import partial
from typing import Optional

from dotenv import load_dotenv
from flask import Flask, jsonify, request

# Allow running as `python web/app.py` from the project root
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

load_dotenv()

from config.settings import Settings
from digest.analyzer import analyze_query
from digest.client import ModelClient
from digest.interpreter import dedupe_sources
from digest.markdown import render_html, render_sources
from digest.models import Message
from digest.session import ChatSession, SessionBusyError
from digest.store import Store

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def _message_json(message: Message) -> dict:
    """Serialise a message for display: Markdown rendered, citations deduplicated."""
    sources = dedupe_sources(message.sources or [])
    return {
        **message.model_dump(mode="json"),
        "html": render_html(message.content),
        "display_sources": [s.model_dump() for s in sources],
        "sources_html": render_sources(sources),
    }


def build_session(settings: Settings) -> ChatSession:
    """Wire store, model client and analyzer into a loaded ChatSession."""
    store = Store(settings.db_path)
    store.init_db()
    client = ModelClient(settings)
    session = ChatSession(
        store,
        partial(analyze_query, client=client, settings=settings),
    )
    session.load()
    return session


def create_app(
    settings: Optional[Settings] = None,
    session: Optional[ChatSession] = None,
) -> Flask:
    """Application factory.

    Args:
        settings: Configuration; read from the environment when omitted.
        session: Pre-built session (tests); built from *settings* when omitted.
    """
    settings = settings or Settings()
    if session is None:
        settings.validate()
        session = build_session(settings)

    app = Flask(__name__)
    app.config["DIGEST_SESSION"] = session

    # ── State ──────────────────────────────────────────────────────────────

    @app.route("/api/state")
    def get_state():
        return jsonify(
            {
                "user": session.user.model_dump() if session.user else None,
                "theme": session.theme.value,
                "status": session.status.value,
                "messages": [_message_json(m) for m in session.messages],
            }
        )

    # ── Identity & theme ───────────────────────────────────────────────────

    @app.route("/api/login", methods=["POST"])
    def login():
        payload = request.get_json(silent=True) or {}
        try:
            user = session.sign_in(payload.get("name", ""), payload.get("password", ""))
        except ValueError as exc:
            return jsonify({"error": str(exc)}), 400
        return jsonify({"user": user.model_dump(), "history_count": len(session.history)})

    @app.route("/api/logout", methods=["POST"])
    def logout():
        session.sign_out()
        return jsonify({"user": None})

    @app.route("/api/theme", methods=["POST"])
    def toggle_theme():
        return jsonify({"theme": session.toggle_theme().value})

    # ── Conversation ───────────────────────────────────────────────────────

    @app.route("/api/query", methods=["POST"])
    def submit_query():
        """Run one query. Model failures come back as an error message, not a 5xx."""
        payload = request.get_json(silent=True) or {}
        query = str(payload.get("query", "")).strip()
        if not query:
            return jsonify({"error": "query is required"}), 400

        try:
            reply = session.submit(query)
        except SessionBusyError as exc:
            return jsonify({"error": str(exc)}), 409

        return jsonify(
            {
                "status": session.status.value,
                "message": _message_json(reply),
            }
        )

    @app.route("/api/session/new", methods=["POST"])
    def new_session():
        session.new_session()
        return jsonify({"messages": []})

    # ── History ────────────────────────────────────────────────────────────

    @app.route("/api/history")
    def list_history():
        """Return the signed-in identity's history, newest first."""
        return jsonify(
            [
                {
                    "id": item.id,
                    "query": item.query,
                    "title": item.summary_data.title,
                    "timestamp": item.timestamp.isoformat(),
                }
                for item in reversed(session.history)
            ]
        )

    @app.route("/api/history/<item_id>/load", methods=["POST"])
    def load_history_item(item_id: str):
        try:
            messages = session.load_history_item(item_id)
        except KeyError:
            return jsonify({"error": "Not found"}), 404
        return jsonify({"messages": [_message_json(m) for m in messages]})

    @app.route("/api/history", methods=["DELETE"])
    def clear_history():
        session.clear_history()
        return jsonify({"cleared": True})

    return app


# ── Entry point ────────────────────────────────────────────────────────────

if __name__ == "__main__":
    settings = Settings()
    create_app(settings).run(debug=settings.debug, host="0.0.0.0", port=settings.port)
