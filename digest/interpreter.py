"""Turn raw model output into a ``SummaryData``.

Title extraction, first match wins:

1. A leading ``TITLE: ...`` line (case-insensitive). The line and the blank
   lines after it are dropped from the body.
2. A short first line (< 100 chars) that is not a Markdown heading. The body
   is left as-is, so the line appears twice unless ``strip_fallback_title``
   is set.
3. A placeholder: ``"Link Summary"`` for links, the query itself otherwise.

Citations come from the grounding chunks; they are deduplicated only when
displayed, never when stored.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable, Sequence

from digest.models import DEFAULT_SOURCE_TITLE, GroundingChunk, Source, SummaryData

logger = logging.getLogger(__name__)

#: Fallback title used in URL mode when nothing better is found.
LINK_SUMMARY_TITLE = "Link Summary"

#: First lines at or above this length are never taken as a title.
MAX_FALLBACK_TITLE_LENGTH = 100

_TITLE_LINE = re.compile(r"^TITLE:\s*(.*)", re.IGNORECASE)


def _drop_first_line(text: str) -> str:
    """Remove the first line and any blank lines directly after it."""
    lines = text.split("\n")[1:]
    while lines and not lines[0].strip():
        lines.pop(0)
    return "\n".join(lines).strip()


def extract_title(
    raw_text: str,
    query: str,
    is_url_mode: bool,
    strip_fallback_title: bool = False,
) -> tuple[str, str]:
    """Split *raw_text* into ``(title, body)``.

    Args:
        raw_text: Text returned by the model.
        query: The user's original query, used as the topic-mode fallback.
        is_url_mode: Whether the query was routed as a link.
        strip_fallback_title: Also remove the heuristic title line from the
            body. Off by default to keep the historical duplication.

    Returns:
        The title and the Markdown body.

    Examples:
        >>> extract_title("TITLE: Foo\\n\\nBody text", "q", False)
        ('Foo', 'Body text')
    """
    first_line = raw_text.split("\n", 1)[0]

    match = _TITLE_LINE.match(first_line)
    if match:
        return match.group(1).strip(), _drop_first_line(raw_text)

    candidate = first_line.strip()
    if len(candidate) < MAX_FALLBACK_TITLE_LENGTH and not candidate.startswith("#"):
        body = _drop_first_line(raw_text) if strip_fallback_title else raw_text
        return candidate, body

    return (LINK_SUMMARY_TITLE if is_url_mode else query), raw_text


def extract_sources(grounding_chunks: Iterable[GroundingChunk]) -> list[Source]:
    """Build citations from grounding chunks, skipping unusable entries."""
    sources: list[Source] = []
    for chunk in grounding_chunks:
        web = chunk.web
        if web is None:
            continue
        if not web.uri:
            logger.debug("Skipping grounding chunk without uri: %r", web)
            continue
        sources.append(Source(title=web.title or DEFAULT_SOURCE_TITLE, uri=web.uri))
    return sources


def interpret(
    raw_text: str,
    grounding_chunks: Iterable[GroundingChunk],
    query: str,
    is_url_mode: bool,
    strip_fallback_title: bool = False,
) -> SummaryData:
    """Parse one model response into title, Markdown body and citations."""
    title, body = extract_title(raw_text, query, is_url_mode, strip_fallback_title)
    return SummaryData(
        title=title,
        summary=body,
        sources=extract_sources(grounding_chunks),
    )


def dedupe_sources(sources: Sequence[Source]) -> list[Source]:
    """Keep the first source for each exact URI, preserving order.

    URIs are compared verbatim: no scheme, case or trailing-slash folding.
    """
    seen: set[str] = set()
    unique: list[Source] = []
    for source in sources:
        if source.uri not in seen:
            seen.add(source.uri)
            unique.append(source)
    return unique
