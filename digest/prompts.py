"""
Prompt assembly for Thread Digest.

A query is routed on a single check: anything starting with ``http`` is
treated as a link to summarise, everything else as a question to answer.
Prior turns are flattened into a plain-text context preamble.
"""

from __future__ import annotations

from collections.abc import Sequence

from digest.models import Message, PromptBundle, Role

# ── System instruction ─────────────────────────────────────────────────────

SYSTEM_INSTRUCTION = """\
You are ThreadDigest AI, an intelligent and helpful assistant specialized in summarizing online content.

Your goal is to provide clear, comprehensive, and easy-to-understand summaries.

GUIDELINES:
1. **Synthesize Information**: Read the provided content (or user query) and distill it into its most essential points. Do not simply repeat it.
2. **Add Value**: You MAY use your broad knowledge to explain technical terms, add necessary context, or clarify concepts mentioned in the thread if it helps the user understand better.
3. **Be Objective**: Report on the consensus and the conflicts within the discussion.

OUTPUT FORMATTING:
You MUST start your response with a single line containing the title, prefixed with "TITLE: ".
Example:
TITLE: Summary of Topic

After the title line, provide the Markdown summary.
"""

# ── Task templates ─────────────────────────────────────────────────────────

URL_TEMPLATE = """\
Analyze the content at this URL: {query}

Task:
1. Extract the title.
2. Provide a "Deep Dive" summary of the discussion.

Structure:
# 🧐 Executive Summary
A high-level overview of the topic and the main sentiment.

## 🔑 Key Takeaways
*   Critical facts, arguments, and consensus points.
*   Highlight any interesting debates or unique perspectives.

## 💡 The Verdict
A final "TL;DR" conclusion.
"""

TOPIC_TEMPLATE = """\
Answer this query: "{query}"

Task:
1. Generate a clear title.
2. Provide a comprehensive answer using your knowledge and the context provided.

Structure:
# 🎯 Direct Answer
A clear, direct answer to the user's question.

## 📝 Details & Context
*   Elaborate on important details.
*   Provide examples or background info if helpful.

## 🔎 Conclusion
A brief wrap-up.
"""

CONTEXT_HEADER = "Previous Conversation Context:\n"

_ACTORS: dict[Role, str] = {
    Role.USER: "User",
    Role.MODEL: "Assistant",
}


def is_url_query(query: str) -> bool:
    """Return True when *query* should be summarised as a link."""
    return query.startswith("http")


def serialize_context(prior_turns: Sequence[Message]) -> str:
    """Render prior turns as ``"User: ..."`` / ``"Assistant: ..."`` lines.

    Examples:
        >>> serialize_context([])
        ''
    """
    return "\n".join(f"{_ACTORS[turn.role]}: {turn.content}" for turn in prior_turns)


def build_prompt(query: str, prior_turns: Sequence[Message] = ()) -> PromptBundle:
    """Assemble the system instruction and user prompt for one model call.

    Args:
        query: Non-empty, already-trimmed user input.
        prior_turns: Transcript preceding this query, oldest first.

    Returns:
        A ``PromptBundle`` carrying the prompt texts and the detected mode.
    """
    url_mode = is_url_query(query)
    template = URL_TEMPLATE if url_mode else TOPIC_TEMPLATE

    context = serialize_context(prior_turns)
    preamble = f"{CONTEXT_HEADER}{context}\n\n" if context else ""

    return PromptBundle(
        system_instruction=SYSTEM_INSTRUCTION,
        prompt=preamble + template.format(query=query),
        is_url_mode=url_mode,
    )
