"""Data models describing feed sources, raw feed items, and canonical posts."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

from postfeed.utils.text import html_to_plain_text


@dataclass(slots=True, frozen=True)
class FeedSource:
    """Configuration for a single RSS/Atom source contributing to an aggregation."""

    url: str
    label: str | None = None
    fallback: "FeedSource | None" = None


@dataclass(slots=True, frozen=True)
class AggregationRequest:
    """Sources and limits resolved for one operation invocation."""

    sources: tuple[FeedSource, ...]
    count: int
    keyword: str = ""
    placeholder: str = "Untitled Post"


@dataclass(slots=True, frozen=True)
class CanonicalPost:
    """Normalised post produced from a single raw feed item."""

    title: str
    description: str = ""
    link: str = "#"
    pub_date: str = ""
    source: str | None = None
    thumbnail: str | None = None

    def to_payload(self) -> dict[str, Any]:
        """Return the record using the field names exposed to operation callers."""

        return {
            "title": self.title,
            "description": self.description,
            "link": self.link,
            "pubDate": self.pub_date,
            "_source": self.source,
            "thumbnail": self.thumbnail,
        }


@dataclass(slots=True, frozen=True)
class RawFeedItem:
    """Read-only view over a feedparser entry (or any mapping shaped like one).

    Feeds disagree about which fields they carry and whether a field holds a
    single value or a list, so every accessor returns ``None`` or an empty list
    when the data is missing rather than raising.
    """

    data: Mapping[str, Any] = field(default_factory=dict)

    @classmethod
    def from_entry(cls, entry: Mapping[str, Any]) -> "RawFeedItem":
        return cls(data=entry)

    def _text(self, *keys: str) -> str | None:
        for key in keys:
            value = self.data.get(key)
            if isinstance(value, str) and value.strip():
                return value
        return None

    @property
    def title(self) -> str | None:
        value = self._text("title")
        return value.strip() if value else None

    @property
    def link(self) -> str | None:
        value = self._text("link")
        return value.strip() if value else None

    @property
    def published(self) -> str | None:
        value = self._text("published", "pubDate", "updated")
        return value.strip() if value else None

    @property
    def description_html(self) -> str | None:
        value = self._text("summary", "description")
        if value:
            return value
        for item in _as_list(self.data.get("content")):
            if isinstance(item, Mapping):
                candidate = item.get("value")
                if isinstance(candidate, str) and candidate.strip():
                    return candidate
        return None

    @property
    def snippet_text(self) -> str | None:
        explicit = self._text("content_snippet", "contentSnippet")
        if explicit:
            return explicit.strip()
        return html_to_plain_text(self.description_html) or None

    @property
    def enclosure_url(self) -> str | None:
        for enclosure in _as_list(self.data.get("enclosures")) + _as_list(self.data.get("enclosure")):
            url = descriptor_url(enclosure)
            if url:
                return url
        return None

    @property
    def media_thumbnails(self) -> list[Any]:
        return _as_list(self.data.get("media_thumbnail"))

    @property
    def media_contents(self) -> list[Any]:
        return _as_list(self.data.get("media_content"))

    @property
    def thumbnail(self) -> Any:
        return self.data.get("thumbnail") or None


def descriptor_url(value: Any) -> str | None:
    """Return the URL carried by a media descriptor.

    Descriptors may be a bare string, a mapping with ``url``/``href``, or a
    mapping keeping XML attributes under ``$``.
    """

    if isinstance(value, str):
        return value or None
    if not isinstance(value, Mapping):
        return None
    attributes = value.get("$")
    if isinstance(attributes, Mapping):
        nested = attributes.get("url")
        if nested:
            return nested
    return value.get("url") or value.get("href") or None


def nested_thumbnails(content: Any) -> list[Any]:
    """Return thumbnail descriptors nested inside a ``media:content`` entry."""

    if not isinstance(content, Mapping):
        return []
    for key in ("media_thumbnail", "media:thumbnail", "thumbnail"):
        nested = content.get(key)
        if nested:
            return _as_list(nested)
    return []


def _as_list(value: Any) -> list[Any]:
    if value is None:
        return []
    if isinstance(value, (str, bytes)) or isinstance(value, Mapping):
        return [value]
    if isinstance(value, Sequence):
        return list(value)
    return [value]
