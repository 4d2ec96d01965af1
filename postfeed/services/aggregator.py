"""Aggregate normalised posts across the configured feed sources."""

from __future__ import annotations

from collections.abc import Callable, Sequence
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
import logging
import os
from typing import Protocol

from postfeed.errors import FeedFetchError
from postfeed.models.feed import CanonicalPost, FeedSource, RawFeedItem
from postfeed.services.fetcher import FeedFetcher
from postfeed.services.normalizer import DEFAULT_PLACEHOLDER, normalize_entry

LOGGER = logging.getLogger(__name__)


PostPredicate = Callable[[CanonicalPost], bool]


class SupportsFetch(Protocol):
    """Subset of :class:`FeedFetcher` relied on by the aggregator."""

    def fetch(self, url: str) -> list[RawFeedItem]:
        """Return the raw entries of the feed at ``url``."""


@dataclass(slots=True)
class AggregationResult:
    """Outcome of running the aggregator across configured feeds."""

    items: list[CanonicalPost]
    errors: list[str] = field(default_factory=list)
    source_count: int = 0

    @property
    def degraded(self) -> bool:
        """Return ``True`` when every configured source failed."""

        return self.source_count > 0 and len(self.errors) >= self.source_count


@dataclass(slots=True)
class _SourceOutcome:
    posts: list[CanonicalPost]
    error: str | None = None


class FeedAggregator:
    """Fan out the fetcher across sources, then filter, deduplicate and truncate."""

    _MAX_WORKERS_ENV_VAR = "POSTFEED_MAX_WORKERS"

    def __init__(self, fetcher: SupportsFetch | None = None, *, max_workers: int | None = None) -> None:
        self._fetcher = fetcher or FeedFetcher()
        self._max_workers = max_workers if max_workers is not None else _load_workers_from_env(self._MAX_WORKERS_ENV_VAR)

    def close(self) -> None:
        """Close the fetcher when it holds a connection pool."""

        close = getattr(self._fetcher, "close", None)
        if callable(close):
            close()

    def aggregate(
        self,
        sources: Sequence[FeedSource],
        count: int,
        *,
        predicate: PostPredicate | None = None,
        placeholder: str = DEFAULT_PLACEHOLDER,
    ) -> AggregationResult:
        """Collect up to ``count`` unique posts from ``sources``.

        Every source contributes at most ``count`` items, in source-list order
        regardless of which fetch completes first. A failing source is logged
        and skipped; the call itself never fails.
        """

        limit = max(0, count)
        outcomes = self._collect(sources, limit, placeholder)

        collected: list[CanonicalPost] = []
        errors: list[str] = []
        for outcome in outcomes:
            if outcome.error:
                errors.append(outcome.error)
            collected.extend(outcome.posts)

        if predicate is not None:
            collected = [post for post in collected if predicate(post)]

        unique = deduplicate(collected)[:limit]
        if sources and len(errors) == len(sources):
            LOGGER.warning("All %d feed sources failed; returning no posts", len(sources))
        return AggregationResult(items=unique, errors=errors, source_count=len(sources))

    def _collect(self, sources: Sequence[FeedSource], limit: int, placeholder: str) -> list[_SourceOutcome]:
        def run(source: FeedSource) -> _SourceOutcome:
            return self._gather_source(source, limit, placeholder)

        workers = min(self._max_workers, len(sources))
        if workers <= 1:
            return [run(source) for source in sources]

        # Executor.map yields results in submission order.
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="postfeed-fetch") as executor:
            return list(executor.map(run, sources))

    def _gather_source(self, source: FeedSource, limit: int, placeholder: str) -> _SourceOutcome:
        try:
            entries = self._fetcher.fetch(source.url)
        except FeedFetchError as exc:
            if source.fallback is not None:
                LOGGER.warning("%s; using fallback source %s", exc, source.fallback.url)
                return self._gather_source(source.fallback, limit, placeholder)
            LOGGER.warning(str(exc))
            return _SourceOutcome(posts=[], error=str(exc))
        except Exception as exc:
            error_message = f"Unexpected error fetching feed '{source.url}': {exc}"
            LOGGER.warning(error_message)
            return _SourceOutcome(posts=[], error=error_message)

        if not entries and source.fallback is not None:
            LOGGER.info("Feed '%s' returned no entries; using fallback source %s", source.url, source.fallback.url)
            return self._gather_source(source.fallback, limit, placeholder)

        posts = [
            normalize_entry(entry, source.url, placeholder=placeholder, label=source.label)
            for entry in entries[:limit]
        ]
        LOGGER.info("Fetched %d item(s) from %s", len(posts), source.url)
        return _SourceOutcome(posts=posts)


def deduplicate(posts: Sequence[CanonicalPost]) -> list[CanonicalPost]:
    """Keep the first post for each case-insensitive title."""

    seen: set[str] = set()
    unique: list[CanonicalPost] = []
    for post in posts:
        key = post.title.lower()
        if key in seen:
            continue
        seen.add(key)
        unique.append(post)
    return unique


def keyword_filter(keyword: str | None) -> PostPredicate | None:
    """Return a predicate matching ``keyword`` in the title or description, or ``None`` when blank."""

    needle = (keyword or "").strip().lower()
    if not needle:
        return None

    def _matches(post: CanonicalPost) -> bool:
        return needle in post.title.lower() or needle in post.description.lower()

    return _matches


def _load_workers_from_env(variable_name: str, default: int = 4) -> int:
    """Return the fetch concurrency specified by the environment, falling back to ``default``."""

    raw_value = os.getenv(variable_name)
    if not raw_value:
        return default

    try:
        workers = int(raw_value)
    except ValueError:
        LOGGER.warning("Ignoring invalid worker count in %s", variable_name)
        return default

    if workers <= 0:
        LOGGER.warning("Ignoring non-positive worker count in %s", variable_name)
        return default

    return workers
