"""Tests for feed text utility helpers."""
from __future__ import annotations

from postfeed.utils.text import excerpt, html_to_plain_text


def test_html_to_plain_text_strips_tags_and_images() -> None:
    source = '<p>hi <img src="http://y.com/b.png"> more</p>'
    assert html_to_plain_text(source) == "hi more"


def test_html_to_plain_text_decodes_entities() -> None:
    assert html_to_plain_text("Cats &amp; dogs") == "Cats & dogs"


def test_html_to_plain_text_handles_non_string_values() -> None:
    assert html_to_plain_text(None) == ""
    assert html_to_plain_text(42) == ""


def test_html_to_plain_text_normalises_whitespace() -> None:
    source = "Line one.\n\n  <br/>Line two."
    assert html_to_plain_text(source) == "Line one. Line two."


def test_excerpt_truncates_and_appends_ellipsis() -> None:
    assert excerpt("abcdef", limit=3) == "abc..."
    assert excerpt("short") == "short..."
