"""Helpers for serving canned feed documents in tests."""

from __future__ import annotations

from collections.abc import Mapping

import httpx

from postfeed.services.fetcher import FeedFetcher


class FeedServer:
    """Serve canned feed documents to a :class:`FeedFetcher` and record requests.

    Documents are looked up by full URL first and then by the URL without its
    query string. Unknown URLs behave like unreachable hosts.
    """

    def __init__(self, documents: Mapping[str, str] | None = None) -> None:
        self.documents: dict[str, str] = dict(documents or {})
        self.requested: list[str] = []
        self.fetcher = FeedFetcher(downloader=self.download)

    def download(self, url: str) -> str:
        self.requested.append(url)
        document = self.documents.get(url) or self.documents.get(url.split("?", 1)[0])
        if document is None:
            raise httpx.ConnectError("Connection refused", request=httpx.Request("GET", url))
        return document


def rss(*titles: str, description: str = "Body text") -> str:
    """Return a minimal RSS 2.0 document containing one item per title."""

    items = "\n".join(
        f"""    <item>
      <title>{title}</title>
      <link>https://example.com/{index}</link>
      <description>{description}</description>
    </item>"""
        for index, title in enumerate(titles)
    )
    return f"""<?xml version='1.0' encoding='UTF-8'?>
<rss version="2.0">
  <channel>
    <title>Sample Feed</title>
    <link>https://example.com</link>
    <description>Sample items</description>
{items}
  </channel>
</rss>
"""
