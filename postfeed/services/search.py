"""Thumbnail enhancement for web search results."""

from __future__ import annotations

from dataclasses import replace
import logging
from typing import Any, Sequence
from urllib.parse import quote

import httpx

from postfeed.models.feed import CanonicalPost
from postfeed.services.thumbnails import is_valid_thumbnail

LOGGER = logging.getLogger(__name__)

DUCKDUCKGO_API_URL = "https://api.duckduckgo.com/"
PLACEHOLDER_TEMPLATE = "https://via.placeholder.com/320x180/4A90E2/FFFFFF?text={text}"


def placeholder_thumbnail(query: str) -> str:
    """Return a placeholder image URL captioned with the start of ``query``."""

    return PLACEHOLDER_TEMPLATE.format(text=quote(query[:20], safe=""))


class DuckDuckGoThumbnailEnhancer:
    """Give the top search result an image when its feed item carried none."""

    def __init__(self, client: httpx.Client | None = None, *, timeout: float = 10.0) -> None:
        self._client = client or httpx.Client(timeout=timeout)
        self._timeout = timeout

    def close(self) -> None:
        self._client.close()

    def enhance(self, posts: Sequence[CanonicalPost], query: str) -> list[CanonicalPost]:
        enhanced = list(posts)
        if not enhanced or enhanced[0].thumbnail:
            return enhanced

        thumbnail = self._lookup(query) or placeholder_thumbnail(query)
        LOGGER.info("Enhanced top search result thumbnail: %s", thumbnail)
        enhanced[0] = replace(enhanced[0], thumbnail=thumbnail)
        return enhanced

    def _lookup(self, query: str) -> str | None:
        params = {"q": f"images {query}", "format": "json", "no_html": "1"}
        try:
            response = self._client.get(DUCKDUCKGO_API_URL, params=params, timeout=self._timeout)
            response.raise_for_status()
            payload = response.json()
        except (httpx.HTTPError, ValueError) as exc:
            LOGGER.warning("Image enhancement failed: %s", exc)
            return None

        candidate = _first_icon_url(payload)
        return candidate if is_valid_thumbnail(candidate) else None


def _first_icon_url(payload: Any) -> Any:
    if not isinstance(payload, dict):
        return None
    topics = payload.get("RelatedTopics") or []
    if not topics or not isinstance(topics[0], dict):
        return None
    icon = topics[0].get("Icon")
    if not isinstance(icon, dict):
        return None
    return icon.get("URL")
