"""Minimal line-oriented Markdown renderer for summary bodies.

Each physical line is classified on its own; there is no block state, so
fenced code, nested lists and tables are not recognised. The only inline
style is ``**bold**``.
"""

from __future__ import annotations

import html as html_mod
import re
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Optional

from digest.models import Source

_HEADINGS = (("### ", 3), ("## ", 2), ("# ", 1))
_BULLET_MARKER = re.compile(r"^\s*[-*]\s*")
_NUMBERED = re.compile(r"^(\d+\.)\s")
_BOLD = re.compile(r"\*\*(.*?)\*\*")


@dataclass(frozen=True)
class Block:
    """One rendered line.

    ``kind`` is one of ``heading``, ``bullet``, ``numbered``, ``spacer`` or
    ``paragraph``. ``html`` is already escaped.
    """

    kind: str
    html: str = ""
    level: int = 0
    label: Optional[str] = None


def escape(text: str) -> str:
    return html_mod.escape(text, quote=False)


def _attr(text: str) -> str:
    return html_mod.escape(text, quote=True)


def inline(text: str) -> str:
    """Escape *text*, then turn ``**x**`` into ``<strong>x</strong>``."""
    return _BOLD.sub(r"<strong>\1</strong>", escape(text))


def parse_line(line: str) -> Block:
    for marker, level in _HEADINGS:
        if line.startswith(marker):
            return Block("heading", escape(line[len(marker):]), level=level)

    stripped = line.strip()
    if stripped.startswith("- ") or stripped.startswith("* "):
        return Block("bullet", inline(_BULLET_MARKER.sub("", line, count=1)))

    match = _NUMBERED.match(stripped)
    if match:
        return Block("numbered", inline(stripped[match.end():]), label=match.group(1))

    if not stripped:
        return Block("spacer")

    return Block("paragraph", inline(line))


def parse_blocks(text: str) -> list[Block]:
    return [parse_line(line) for line in text.split("\n")]


def _block_html(block: Block) -> str:
    if block.kind == "heading":
        return f"<h{block.level}>{block.html}</h{block.level}>"
    if block.kind == "bullet":
        return f'<div class="item"><span class="marker">•</span><span>{block.html}</span></div>'
    if block.kind == "numbered":
        return (
            f'<div class="item"><span class="marker">{escape(block.label or "")}</span>'
            f"<span>{block.html}</span></div>"
        )
    if block.kind == "spacer":
        return '<div class="spacer"></div>'
    return f"<p>{block.html}</p>"


def render_html(text: str) -> str:
    """Render a summary body to an HTML fragment."""
    return "\n".join(_block_html(block) for block in parse_blocks(text))


def render_sources(sources: Sequence[Source]) -> str:
    """Render an (already deduplicated) citation list as links."""
    if not sources:
        return ""
    links = "".join(
        f'<a href="{_attr(s.uri)}" target="_blank" '
        f'rel="noopener noreferrer">{escape(s.title or "Reference")}</a>'
        for s in sources
    )
    return f'<div class="sources">{links}</div>'
