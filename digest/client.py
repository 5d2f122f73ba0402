"""
Model invocation for Thread Digest.

One call per query: Claude with the server-side ``web_search`` tool for
grounding and a fixed extended-thinking budget. The SDK response is reduced
to a ``ModelResponse`` (text + grounding chunks); everything that goes wrong
on the way is reported as a single ``GenerationError``.

No retries, no caching, no degraded fallback.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import anthropic

from digest.models import GroundingChunk, ModelResponse, PromptBundle, WebReference

if TYPE_CHECKING:
    from config.settings import Settings

logger = logging.getLogger(__name__)

WEB_SEARCH_BETA = "web-search-2025-03-05"
WEB_SEARCH_TOOL = {"type": "web_search_20250305", "name": "web_search"}


class GenerationError(RuntimeError):
    """The model call failed: network, API, timeout or unusable response."""


def _collect(content: list[object]) -> ModelResponse:
    """Flatten SDK content blocks into text and grounding chunks."""
    text_parts: list[str] = []
    chunks: list[GroundingChunk] = []

    for block in content or []:
        block_type = getattr(block, "type", None)

        # ── Generated text ─────────────────────────────────────────────────
        if block_type == "text":
            text_parts.append(getattr(block, "text", "") or "")

        # ── Search results used for grounding ──────────────────────────────
        elif block_type == "web_search_tool_result":
            results = getattr(block, "content", None)
            # An error result is a single object, not a list
            if not isinstance(results, list):
                logger.warning("Web search returned an error: %r", results)
                continue
            for item in results:
                if getattr(item, "type", None) != "web_search_result":
                    continue
                chunks.append(GroundingChunk(web=WebReference(
                    title=getattr(item, "title", None) or None,
                    uri=getattr(item, "url", None) or None,
                )))

    return ModelResponse(text="".join(text_parts), grounding_chunks=chunks)


class ModelClient:
    """Thin wrapper around the Anthropic SDK.

    The SDK client is lazy-initialised so the class can be constructed in
    tests without a live API key.
    """

    def __init__(self, settings: Settings) -> None:
        self.settings = settings
        self._client: object = None  # Lazy-initialised anthropic.Anthropic

    @property
    def client(self) -> object:
        """Lazy-initialise and return the Anthropic SDK client."""
        if self._client is None:
            self._client = anthropic.Anthropic(
                api_key=self.settings.anthropic_api_key,
                max_retries=0,
                timeout=self.settings.request_timeout,
            )
        return self._client

    def invoke(self, bundle: PromptBundle) -> ModelResponse:
        """Run one grounded generation.

        Args:
            bundle: Output of ``prompts.build_prompt``.

        Returns:
            The generated text and any grounding chunks.

        Raises:
            GenerationError: On any API failure or an empty response.
        """
        tool = {**WEB_SEARCH_TOOL, "max_uses": self.settings.max_web_searches}

        try:
            response = self.client.beta.messages.create(
                model=self.settings.model,
                max_tokens=self.settings.max_tokens,
                betas=[WEB_SEARCH_BETA],
                tools=[tool],
                thinking={"type": "enabled", "budget_tokens": self.settings.thinking_budget},
                system=bundle.system_instruction,
                messages=[{"role": "user", "content": bundle.prompt}],
            )
        except anthropic.APITimeoutError as exc:
            raise GenerationError(
                f"The model did not respond within {self.settings.request_timeout:g}s."
            ) from exc
        except anthropic.AnthropicError as exc:
            raise GenerationError(str(exc) or exc.__class__.__name__) from exc

        result = _collect(getattr(response, "content", None))
        if not result.text.strip():
            raise GenerationError("No summary could be generated.")

        logger.info(
            "Model call complete: %d chars, %d grounding chunks",
            len(result.text), len(result.grounding_chunks),
        )
        return result
