"""Map raw feed items onto :class:`CanonicalPost` records."""

from __future__ import annotations

import logging
from urllib.parse import urlparse

from postfeed.models.feed import CanonicalPost, RawFeedItem
from postfeed.services.thumbnails import extract_thumbnail

LOGGER = logging.getLogger(__name__)

DEFAULT_PLACEHOLDER = "Untitled Post"
UNKNOWN_SOURCE = "Unknown"


def normalize_entry(
    item: RawFeedItem,
    source_url: str,
    *,
    placeholder: str = DEFAULT_PLACEHOLDER,
    label: str | None = None,
) -> CanonicalPost:
    """Build a :class:`CanonicalPost` from ``item``.

    Each field falls back to its default independently so that one malformed
    value never discards the rest of the item. ``label`` replaces the
    host-derived source name when the source has a display name of its own.
    """

    return CanonicalPost(
        title=_guard(lambda: item.title, None) or placeholder,
        description=_guard(lambda: item.snippet_text or item.description_html, None) or "",
        link=_guard(lambda: item.link, None) or "#",
        pub_date=_guard(lambda: item.published, None) or "",
        source=label or source_name(source_url),
        thumbnail=extract_thumbnail(item),
    )


def source_name(url: str) -> str:
    """Return the feed host without a leading ``www.``, or ``"Unknown"``."""

    try:
        hostname = urlparse(url).hostname
    except (TypeError, ValueError, AttributeError):
        return UNKNOWN_SOURCE
    if not hostname:
        return UNKNOWN_SOURCE
    return hostname.lower().removeprefix("www.")


def _guard(getter, default):
    try:
        return getter()
    except Exception as exc:
        LOGGER.warning("Ignoring malformed feed field: %s", exc)
        return default
