"""
Pydantic models shared across the Thread Digest core.
"""

from __future__ import annotations

import threading
import time
from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

#: Title shown for a citation whose grounding chunk carries no title.
DEFAULT_SOURCE_TITLE = "Web Source"


# ── Enums ──────────────────────────────────────────────────────────────────


class Role(str, Enum):
    """Author of a conversational turn."""

    USER = "user"
    MODEL = "model"


class Theme(str, Enum):
    """Persisted colour-scheme preference."""

    LIGHT = "light"
    DARK = "dark"


class LoadingState(str, Enum):
    """Status of the most recent submission."""

    IDLE = "idle"
    LOADING = "loading"
    SUCCESS = "success"
    ERROR = "error"


# ── Identifiers ────────────────────────────────────────────────────────────

_id_lock = threading.Lock()
_last_id = 0


def new_id() -> str:
    """Return a process-unique, strictly increasing identifier."""
    global _last_id
    with _id_lock:
        _last_id = max(time.time_ns(), _last_id + 1)
        return str(_last_id)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


# ── Conversation ───────────────────────────────────────────────────────────


class Source(BaseModel):
    """A web citation. Two sources are the same citation iff their URIs match."""

    title: str = DEFAULT_SOURCE_TITLE
    uri: str


class SummaryData(BaseModel):
    """Structured result of one model invocation."""

    title: str
    summary: str
    sources: list[Source] = Field(default_factory=list)


class Message(BaseModel):
    """One turn of the conversation transcript."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=new_id)
    role: Role
    content: str
    title: Optional[str] = None
    sources: Optional[list[Source]] = None
    timestamp: datetime = Field(default_factory=utc_now)


class HistoryItem(BaseModel):
    """A completed query recorded for a signed-in identity."""

    id: str = Field(default_factory=new_id)
    query: str
    summary_data: SummaryData
    timestamp: datetime = Field(default_factory=utc_now)


class User(BaseModel):
    """Signed-in identity. Only the display name is kept."""

    name: str


# ── Model boundary ─────────────────────────────────────────────────────────


class WebReference(BaseModel):
    """Web source attached to a grounding chunk. Fields may be missing."""

    title: Optional[str] = None
    uri: Optional[str] = None


class GroundingChunk(BaseModel):
    """One entry of the grounding metadata returned alongside generated text."""

    web: Optional[WebReference] = None


class ModelResponse(BaseModel):
    """Raw output of a single model invocation."""

    text: str
    grounding_chunks: list[GroundingChunk] = Field(default_factory=list)


class PromptBundle(BaseModel):
    """Everything needed to issue one model call."""

    system_instruction: str
    prompt: str
    is_url_mode: bool
