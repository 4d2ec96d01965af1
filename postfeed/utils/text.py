"""Utilities for working with feed item text."""
from __future__ import annotations

import re
from typing import Any

from bs4 import BeautifulSoup


_WHITESPACE_RE = re.compile(r"\s+")


def html_to_plain_text(value: Any) -> str:
    """Convert an HTML description into a plain text snippet.

    Feed descriptions routinely embed markup, images, and entity-encoded
    characters. Tags are dropped, entities are decoded, and whitespace is
    collapsed so that the snippet reads as a single paragraph. Non-string
    inputs return an empty string to keep rendering predictable.
    """

    if not isinstance(value, str) or not value.strip():
        return ""

    if "<" not in value and "&" not in value:
        text = value
    else:
        text = BeautifulSoup(value, "html.parser").get_text(" ")

    return _WHITESPACE_RE.sub(" ", text).strip()


def excerpt(value: str, limit: int = 200) -> str:
    """Return the first ``limit`` characters of ``value`` followed by an ellipsis."""

    return f"{value[:limit]}..."


__all__ = ["excerpt", "html_to_plain_text"]
