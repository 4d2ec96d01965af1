"""Retrieve and parse RSS/Atom documents for the aggregator."""

from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence
import json
import logging
import os
from typing import Any
from urllib.parse import urlparse

import feedparser
import httpx

from postfeed.errors import FeedFetchError
from postfeed.models.feed import RawFeedItem
from postfeed.services.synthetic import SYNTHETIC_FEEDS, SYNTHETIC_SCHEME

LOGGER = logging.getLogger(__name__)


Downloader = Callable[[str], str | bytes]


class FeedFetcher:
    """Download a feed over HTTP and return its entries as :class:`RawFeedItem` views."""

    _DEFAULT_HEADERS: Mapping[str, str] = {
        "User-Agent": "PostFeedAggregator/1.0",
        "Accept": "application/rss+xml, application/atom+xml;q=0.9, application/xml;q=0.8, */*;q=0.5",
    }
    _HEADERS_ENV_VAR = "POSTFEED_FEED_HEADERS"
    _TIMEOUT_ENV_VAR = "POSTFEED_FEED_TIMEOUT"
    _DEFAULT_TIMEOUT = 10.0

    def __init__(
        self,
        *,
        downloader: Downloader | None = None,
        headers: Mapping[str, str] | None = None,
        timeout: float | None = None,
        client: httpx.Client | None = None,
        synthetic_feeds: Mapping[str, Sequence[Mapping[str, Any]]] | None = None,
    ) -> None:
        self._headers = self._build_headers(headers)
        self._timeout = self._resolve_timeout(timeout)
        self._client = client or httpx.Client(headers=self._headers, timeout=self._timeout, follow_redirects=True)
        self._downloader = downloader or self._default_downloader
        self._synthetic_feeds = dict(SYNTHETIC_FEEDS if synthetic_feeds is None else synthetic_feeds)

    def fetch(self, url: str) -> list[RawFeedItem]:
        """Return the entries of the feed at ``url``.

        Raises :class:`FeedFetchError` when the document cannot be retrieved or
        parsed. Failures are not retried.
        """

        if urlparse(url).scheme == SYNTHETIC_SCHEME:
            return self._fetch_synthetic(url)

        try:
            document = self._downloader(url)
        except httpx.HTTPError as exc:
            raise FeedFetchError(url, exc) from exc

        parsed = feedparser.parse(document)
        if parsed.bozo and not parsed.entries:
            cause = parsed.get("bozo_exception") or "document is not a valid feed"
            raise FeedFetchError(url, cause)

        return [RawFeedItem.from_entry(entry) for entry in parsed.entries]

    def close(self) -> None:
        self._client.close()

    def _fetch_synthetic(self, url: str) -> list[RawFeedItem]:
        entries = self._synthetic_feeds.get(url)
        if entries is None:
            raise FeedFetchError(url, "no synthetic feed registered for this URL")
        LOGGER.info("Serving synthetic feed %s", url)
        return [RawFeedItem.from_entry(entry) for entry in entries]

    def _default_downloader(self, url: str) -> bytes:
        """Fetch the raw feed bytes so feedparser can honour the declared encoding."""

        response = self._client.get(url, headers=self._headers, timeout=self._timeout)
        response.raise_for_status()
        return response.content

    def _build_headers(self, headers: Mapping[str, str] | None) -> dict[str, str]:
        """Layer environment and caller headers over the defaults, later ones winning."""

        merged = {**self._DEFAULT_HEADERS, **_env_headers(self._HEADERS_ENV_VAR)}
        for key, value in (headers or {}).items():
            merged[str(key)] = str(value)
        return merged

    def _resolve_timeout(self, timeout: float | None) -> float:
        if timeout is not None:
            return float(timeout)
        return _env_timeout(self._TIMEOUT_ENV_VAR) or self._DEFAULT_TIMEOUT


def _env_headers(name: str) -> dict[str, str]:
    """Read extra request headers from a JSON object stored in ``name``."""

    raw = os.getenv(name)
    if not raw:
        return {}
    try:
        decoded = json.loads(raw)
    except json.JSONDecodeError:
        LOGGER.warning("%s is not valid JSON; no extra headers applied", name)
        return {}
    if not isinstance(decoded, dict):
        LOGGER.warning("%s must hold a JSON object; no extra headers applied", name)
        return {}
    return {str(key): str(value) for key, value in decoded.items() if value is not None}


def _env_timeout(name: str) -> float | None:
    """Return the positive timeout stored in ``name``, or ``None`` when unset or unusable."""

    raw = os.getenv(name)
    if not raw:
        return None
    try:
        seconds = float(raw)
    except ValueError:
        seconds = 0.0
    if seconds <= 0:
        LOGGER.warning("Ignoring timeout %r from %s", raw, name)
        return None
    return seconds
