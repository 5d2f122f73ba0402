"""Tests for digest/markdown.py — line classification and inline escaping."""

from __future__ import annotations

from digest.markdown import Block, inline, parse_blocks, parse_line, render_html, render_sources
from digest.models import Source


class TestParseBlocks:
    def test_mixed_document(self):
        blocks = parse_blocks("## Hi\n- one\n- **two**\n\npara")
        assert blocks == [
            Block("heading", "Hi", level=2),
            Block("bullet", "one"),
            Block("bullet", "<strong>two</strong>"),
            Block("spacer"),
            Block("paragraph", "para"),
        ]

    def test_heading_levels(self):
        assert parse_line("# A") == Block("heading", "A", level=1)
        assert parse_line("## A") == Block("heading", "A", level=2)
        assert parse_line("### A") == Block("heading", "A", level=3)

    def test_hash_without_space_is_paragraph(self):
        assert parse_line("#tag").kind == "paragraph"

    def test_star_and_indented_bullets(self):
        assert parse_line("*   spaced").html == "spaced"
        assert parse_line("   - indented").html == "indented"

    def test_numbered_item_keeps_label(self):
        block = parse_line("12. Twelfth **point**")
        assert block.kind == "numbered"
        assert block.label == "12."
        assert block.html == "Twelfth <strong>point</strong>"

    def test_number_without_space_is_paragraph(self):
        assert parse_line("3.14 is pi").kind == "paragraph"

    def test_whitespace_line_is_spacer(self):
        assert parse_line("   \t").kind == "spacer"

    def test_no_multiline_state(self):
        kinds = [b.kind for b in parse_blocks("```\n# not code\n```")]
        assert kinds == ["paragraph", "heading", "paragraph"]


class TestInline:
    def test_script_is_escaped(self):
        html = render_html("<script>alert(1)</script>")
        assert "<script>" not in html
        assert "&lt;script&gt;alert(1)&lt;/script&gt;" in html

    def test_ampersand_escaped_before_bold(self):
        assert inline("**a & b**") == "<strong>a &amp; b</strong>"

    def test_non_greedy_bold(self):
        assert inline("**a** and **b**") == "<strong>a</strong> and <strong>b</strong>"

    def test_other_styles_untouched(self):
        assert inline("*it* `code` [l](u)") == "*it* `code` [l](u)"

    def test_heading_is_escaped_without_emphasis(self):
        assert parse_line("# <b>**x**</b>").html == "&lt;b&gt;**x**&lt;/b&gt;"


class TestRenderHtml:
    def test_renders_each_kind(self):
        html = render_html("# T\n- a\n1. b\n\np")
        assert "<h1>T</h1>" in html
        assert '<span class="marker">•</span><span>a</span>' in html
        assert '<span class="marker">1.</span><span>b</span>' in html
        assert '<div class="spacer"></div>' in html
        assert "<p>p</p>" in html


class TestRenderSources:
    def test_empty(self):
        assert render_sources([]) == ""

    def test_links_are_escaped(self):
        html = render_sources([Source(uri='https://x.com/?a=1&b="2"', title="<T>")])
        assert 'href="https://x.com/?a=1&amp;b=&quot;2&quot;"' in html
        assert "&lt;T&gt;" in html

    def test_single_quote_in_href_is_escaped(self):
        html = render_sources([Source(uri="https://x.com/it's", title="It's")])
        assert 'href="https://x.com/it&#x27;s"' in html
        assert ">It's<" in html

    def test_blank_title_falls_back(self):
        assert ">Reference<" in render_sources([Source(uri="u", title="")])
