"""Best-effort thumbnail extraction for raw feed items."""

from __future__ import annotations

import logging
import re
from collections.abc import Mapping
from typing import Any

from postfeed.models.feed import RawFeedItem, descriptor_url, nested_thumbnails

LOGGER = logging.getLogger(__name__)

_IMG_SRC_RE = re.compile(r"""<img[^>]+src\s*=\s*["']([^"']+)["']""", re.IGNORECASE)
_HTTP_URL_RE = re.compile(r"^https?://", re.IGNORECASE)
_LEADING_INT_RE = re.compile(r"^\s*(\d+)")
_MIN_URL_LENGTH = 10


def extract_thumbnail(item: RawFeedItem) -> str | None:
    """Return a validated absolute image URL for ``item`` or ``None``.

    Strategies are tried in priority order and the first one whose structure is
    present on the item decides the candidate: enclosure, largest
    ``media:thumbnail``, ``media:content`` (including nested thumbnails), a
    generic ``thumbnail`` field, then the first ``<img>`` in the description.
    A candidate that fails validation yields ``None``; lower-priority
    strategies are not consulted.
    """

    try:
        candidate = _select_candidate(item)
    except Exception as exc:
        LOGGER.warning("Thumbnail extraction failed: %s", exc)
        return None

    if not is_valid_thumbnail(candidate):
        return None

    LOGGER.debug("Extracted thumbnail %s", candidate)
    return candidate.strip()


def is_valid_thumbnail(candidate: Any) -> bool:
    """Return ``True`` when ``candidate`` is an absolute http(s) URL of plausible length."""

    if not isinstance(candidate, str):
        return False
    trimmed = candidate.strip()
    return len(trimmed) > _MIN_URL_LENGTH and bool(_HTTP_URL_RE.match(trimmed))


def _select_candidate(item: RawFeedItem) -> Any:
    enclosure = item.enclosure_url
    if enclosure:
        return enclosure

    thumbnails = item.media_thumbnails
    if thumbnails:
        return descriptor_url(_largest(thumbnails))

    contents = item.media_contents
    if contents:
        return _from_media_contents(contents)

    thumbnail = item.thumbnail
    if thumbnail:
        return descriptor_url(thumbnail)

    text = item.description_html or item.snippet_text
    if text:
        match = _IMG_SRC_RE.search(text)
        if match:
            return match.group(1).strip()

    return None


def _largest(descriptors: list[Any]) -> Any:
    # max() keeps the first of several equal widths.
    return max(descriptors, key=_declared_width)


def _declared_width(descriptor: Any) -> int:
    if not isinstance(descriptor, Mapping):
        return 0
    raw = descriptor.get("width")
    attributes = descriptor.get("$")
    if raw is None and isinstance(attributes, Mapping):
        raw = attributes.get("width")
    if isinstance(raw, int):
        return raw
    match = _LEADING_INT_RE.match(str(raw or ""))
    return int(match.group(1)) if match else 0


def _from_media_contents(contents: list[Any]) -> Any:
    candidate = None
    for content in contents:
        if isinstance(content, Mapping):
            direct = descriptor_url(content)
            if direct:
                return direct
        nested = nested_thumbnails(content)
        if nested:
            candidate = descriptor_url(nested[0])
            if candidate:
                return candidate
    return candidate
