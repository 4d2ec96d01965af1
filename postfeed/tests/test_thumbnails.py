from __future__ import annotations

import pytest

from postfeed.models.feed import RawFeedItem
from postfeed.services.thumbnails import extract_thumbnail, is_valid_thumbnail


def _item(**fields: object) -> RawFeedItem:
    return RawFeedItem(data=fields)


def test_enclosure_outranks_media_thumbnails() -> None:
    item = _item(
        enclosures=[{"href": "http://x.com/a.jpg", "type": "image/jpeg"}],
        media_thumbnail=[{"url": "https://cdn.example.com/large.jpg", "width": "800"}],
    )

    assert extract_thumbnail(item) == "http://x.com/a.jpg"


def test_single_enclosure_mapping_is_supported() -> None:
    item = _item(enclosure={"url": "https://i.redd.it/meme-of-the-day.png"})

    assert extract_thumbnail(item) == "https://i.redd.it/meme-of-the-day.png"


def test_largest_media_thumbnail_wins_and_ties_keep_original_order() -> None:
    item = _item(
        media_thumbnail=[
            {"url": "https://cdn.example.com/200.jpg", "width": "200"},
            {"url": "https://cdn.example.com/800-first.jpg", "width": "800"},
            {"url": "https://cdn.example.com/800-second.jpg", "width": "800"},
            {"url": "https://cdn.example.com/100.jpg", "width": "100"},
        ]
    )

    assert extract_thumbnail(item) == "https://cdn.example.com/800-first.jpg"


def test_media_thumbnail_missing_width_counts_as_zero() -> None:
    item = _item(
        media_thumbnail=[
            {"url": "https://cdn.example.com/no-width.jpg"},
            {"$": {"url": "https://cdn.example.com/attrs.jpg", "width": "64px"}},
        ]
    )

    assert extract_thumbnail(item) == "https://cdn.example.com/attrs.jpg"


def test_media_content_prefers_first_direct_url() -> None:
    item = _item(
        media_content=[
            {"medium": "image"},
            {"url": "https://cdn.example.com/content-1.jpg"},
            {"url": "https://cdn.example.com/content-2.jpg"},
        ]
    )

    assert extract_thumbnail(item) == "https://cdn.example.com/content-1.jpg"


def test_media_content_falls_back_to_nested_thumbnail() -> None:
    item = _item(
        media_content=[
            {"medium": "video"},
            {"media_thumbnail": [{"url": "https://cdn.example.com/nested.jpg"}, {"url": "https://cdn.example.com/other.jpg"}]},
        ]
    )

    assert extract_thumbnail(item) == "https://cdn.example.com/nested.jpg"


def test_media_content_reads_top_level_url_when_attributes_lack_one() -> None:
    item = _item(media_content=[{"$": {"medium": "image"}, "url": "https://cdn.example.com/c.jpg"}])

    assert extract_thumbnail(item) == "https://cdn.example.com/c.jpg"


@pytest.mark.parametrize(
    "thumbnail",
    ["https://cdn.example.com/generic.jpg", {"url": "https://cdn.example.com/generic.jpg"}],
)
def test_generic_thumbnail_field_accepts_string_or_mapping(thumbnail: object) -> None:
    assert extract_thumbnail(_item(thumbnail=thumbnail)) == "https://cdn.example.com/generic.jpg"


def test_inline_image_is_extracted_from_description() -> None:
    item = _item(summary='<p>hi <img src="http://y.com/b.png"> more</p>')

    assert extract_thumbnail(item) == "http://y.com/b.png"


def test_inline_image_match_is_case_insensitive_and_trimmed() -> None:
    item = _item(description="<P><IMG alt='x' SRC=' https://y.com/upper.png '></P>")

    assert extract_thumbnail(item) == "https://y.com/upper.png"


def test_short_candidate_is_rejected() -> None:
    assert extract_thumbnail(_item(thumbnail="abc")) is None


def test_relative_candidate_is_rejected_without_trying_later_strategies() -> None:
    item = _item(
        enclosures=[{"href": "/images/relative-path.jpg"}],
        summary='<img src="https://y.com/would-be-valid.png">',
    )

    assert extract_thumbnail(item) is None


def test_item_without_candidates_has_no_thumbnail() -> None:
    assert extract_thumbnail(_item(title="Plain text", summary="No images here")) is None


def test_malformed_structures_degrade_to_none() -> None:
    assert extract_thumbnail(_item(media_thumbnail=42)) is None
    assert extract_thumbnail(_item(media_content=[None, "not-a-mapping"])) is None
    assert extract_thumbnail(_item(thumbnail={"width": "100"})) is None


def test_every_extracted_thumbnail_satisfies_validation() -> None:
    samples = [
        _item(enclosures=[{"href": "ftp://files.example.com/a.jpg"}]),
        _item(thumbnail="HTTPS://CDN.EXAMPLE.COM/A.JPG"),
        _item(media_thumbnail=[{"url": "http://a.b"}]),
        _item(summary='<img src="data:image/png;base64,AAAA">'),
        _item(media_content=[{"url": "https://cdn.example.com/ok.jpg"}]),
    ]

    for sample in samples:
        result = extract_thumbnail(sample)
        assert result is None or (is_valid_thumbnail(result) and len(result) > 10)

    assert extract_thumbnail(samples[1]) == "HTTPS://CDN.EXAMPLE.COM/A.JPG"
    assert extract_thumbnail(samples[2]) is None


def test_is_valid_thumbnail_rejects_non_strings() -> None:
    assert not is_valid_thumbnail(None)
    assert not is_valid_thumbnail(12345678901)
    assert is_valid_thumbnail("https://example.com/a.png")
