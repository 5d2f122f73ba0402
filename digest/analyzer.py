"""
Query → SummaryData pipeline.

build_prompt(query, history)  →  ModelClient.invoke(bundle)  →  interpret(...)
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import TYPE_CHECKING

from digest.interpreter import interpret
from digest.models import Message, SummaryData
from digest.prompts import build_prompt

if TYPE_CHECKING:
    from config.settings import Settings
    from digest.client import ModelClient

logger = logging.getLogger(__name__)


def analyze_query(
    query: str,
    history: Sequence[Message],
    client: ModelClient,
    settings: Settings,
) -> SummaryData:
    """Summarise a link or answer a question in the context of *history*.

    Args:
        query: Trimmed, non-empty user input.
        history: Transcript before this query, oldest first.
        client: Model boundary used for the single grounded call.
        settings: Supplies ``strip_fallback_title``.

    Returns:
        Title, Markdown body and citations.

    Raises:
        digest.client.GenerationError: If the model call fails.
    """
    bundle = build_prompt(query, history)
    logger.info(
        "Analyzing query=%r mode=%s context_turns=%d",
        query, "url" if bundle.is_url_mode else "topic", len(history),
    )

    response = client.invoke(bundle)
    result = interpret(
        response.text,
        response.grounding_chunks,
        query,
        bundle.is_url_mode,
        strip_fallback_title=settings.strip_fallback_title,
    )

    logger.info("Summary ready: title=%r sources=%d", result.title, len(result.sources))
    return result
