from __future__ import annotations

import pytest

from postfeed.models.feed import CanonicalPost, RawFeedItem
from postfeed.services.normalizer import normalize_entry, source_name


def test_normalize_entry_maps_all_fields() -> None:
    item = RawFeedItem(
        data={
            "title": "  Cat meme  ",
            "summary": "<p>Cats &amp; <b>boxes</b></p>",
            "link": "https://memebase.cheezburger.com/cat-meme",
            "published": "Tue, 02 Jan 2024 09:00:00 GMT",
            "enclosures": [{"href": "http://x.com/a.jpg"}],
        }
    )

    post = normalize_entry(item, "https://memebase.cheezburger.com/rss", placeholder="Untitled Meme")

    assert post == CanonicalPost(
        title="Cat meme",
        description="Cats & boxes",
        link="https://memebase.cheezburger.com/cat-meme",
        pub_date="Tue, 02 Jan 2024 09:00:00 GMT",
        source="memebase.cheezburger.com",
        thumbnail="http://x.com/a.jpg",
    )


def test_normalize_entry_applies_defaults() -> None:
    post = normalize_entry(RawFeedItem(data={}), "https://www.reddit.com/r/memes/.rss", placeholder="Untitled Meme")

    assert post.title == "Untitled Meme"
    assert post.description == ""
    assert post.link == "#"
    assert post.pub_date == ""
    assert post.source == "reddit.com"
    assert post.thumbnail is None


def test_normalize_entry_prefers_plain_snippet_over_markup() -> None:
    item = RawFeedItem(data={"contentSnippet": "Plain words", "description": "<p>Marked <i>up</i></p>"})

    assert normalize_entry(item, "https://example.com/feed").description == "Plain words"


def test_normalize_entry_uses_atom_content_when_summary_missing() -> None:
    item = RawFeedItem(data={"content": [{"type": "text/html", "value": "<div>Atom body</div>"}], "updated": "2024-01-02T09:00:00Z"})

    post = normalize_entry(item, "https://example.com/atom.xml")

    assert post.description == "Atom body"
    assert post.pub_date == "2024-01-02T09:00:00Z"


def test_normalize_entry_label_overrides_host() -> None:
    post = normalize_entry(RawFeedItem(data={"title": "Result"}), "https://www.bing.com/search?q=x", label="Bing")

    assert post.source == "Bing"


def test_normalize_entry_is_idempotent() -> None:
    item = RawFeedItem(
        data={
            "title": "Story",
            "summary": '<p>Once upon a time <img src="https://cdn.example.com/story.png"></p>',
            "link": "https://example.com/story",
        }
    )

    first = normalize_entry(item, "https://www.fictionontheweb.co.uk/feeds/posts/default?alt=rss")
    second = normalize_entry(item, "https://www.fictionontheweb.co.uk/feeds/posts/default?alt=rss")

    assert first == second
    assert first.thumbnail == "https://cdn.example.com/story.png"
    assert first.source == "fictionontheweb.co.uk"


@pytest.mark.parametrize(
    ("url", "expected"),
    [
        ("https://WWW.Example.COM/feed", "example.com"),
        ("https://news.www.example.com/rss", "news.www.example.com"),
        ("not a url", "Unknown"),
        ("http://[invalid", "Unknown"),
        ("", "Unknown"),
    ],
)
def test_source_name(url: str, expected: str) -> None:
    assert source_name(url) == expected
