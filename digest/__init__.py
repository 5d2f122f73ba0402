"""
thread-digest core package.

Modules
───────
models       — Pydantic data models (Message, SummaryData, HistoryItem, Source)
prompts      — prompt builder: URL/topic routing, context preamble, templates
client       — Claude + web_search tool: one grounded call per query
interpreter  — title extraction, citation extraction, citation dedup
analyzer     — prompt → model → interpret pipeline
markdown     — line-oriented Markdown → HTML renderer
session      — chat session state (identity, theme, transcript, history)
store        — SQLite persistence for identity, theme and history
"""
