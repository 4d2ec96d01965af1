"""Catalogue of the feed operations exposed to clients."""

from __future__ import annotations

import os
from typing import Literal
from urllib.parse import urlencode

from pydantic import BaseModel, ConfigDict, Field

from postfeed.models.feed import AggregationRequest, CanonicalPost, FeedSource
from postfeed.services.aggregator import FeedAggregator
from postfeed.services.registry import OperationRegistry, OperationSpec
from postfeed.services.search import DuckDuckGoThumbnailEnhancer
from postfeed.services.synthetic import X_POSTS_URL


MEME_FEEDS = (
    "https://memebase.cheezburger.com/rss",
    "https://www.reddit.com/r/memes/.rss",
)
STORY_FEEDS = {
    "micro": ("https://www.fictionontheweb.co.uk/feeds/posts/default?alt=rss",),
    "literary": ("https://americanshortfiction.org/feed/",),
}
AI_SCIENCE_FEEDS = {
    "ai": (
        "https://www.technologyreview.com/feed/",
        "https://openai.com/blog/rss/",
    ),
    "science": (
        "https://www.nature.com/nature.rss",
        "https://www.sciencemag.org/rss/news_current.xml",
    ),
}
BING_SEARCH_URL = "https://www.bing.com/search"

DEFAULT_X_QUERY = '(AI OR "artificial intelligence") breakthroughs 2025 filter:media min_faves:50'
DEFAULT_SEARCH_QUERY = "AI breakthroughs 2025"

_RSS_BRIDGE_ENV_VAR = "POSTFEED_RSS_BRIDGE_URL"
_DEFAULT_RSS_BRIDGE_URL = "http://localhost:3001/"
_X_PROXY_ENV_VAR = "POSTFEED_X_PROXY_URL"
_DEFAULT_X_PROXY_URL = "https://rsshub.app/twitter/search"

SYNTHETIC_X_SOURCE = FeedSource(url=X_POSTS_URL, label="X (fresh)")


class MemesInput(BaseModel):
    count: int = Field(default=10, ge=0, description="Max memes")


class StoriesInput(BaseModel):
    genre: Literal["micro", "literary"] = Field(
        default="micro", description="micro for bite-sized, literary for deeper reads"
    )
    count: int = Field(default=10, ge=0, description="Max stories")


class AiScienceInput(BaseModel):
    type: Literal["ai", "science"] = Field(
        default="ai", description="ai for tech innovations, science for breakthroughs"
    )
    count: int = Field(default=10, ge=0, description="Max posts")


class XPostsInput(BaseModel):
    query: str = Field(default=DEFAULT_X_QUERY, description="X search query with operators")
    count: int = Field(default=10, ge=0, description="Max posts")


class PersonalizeInput(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    base_interest: Literal["memes", "stories", "ai-science", "x-posts"] = Field(
        default="memes", alias="baseInterest"
    )
    user_query: str = Field(
        default="",
        alias="userQuery",
        description='Keywords to filter/append, e.g., "funny" or "2025"',
    )
    count: int = Field(default=10, ge=0, description="Max posts")


class SearchInput(BaseModel):
    query: str = Field(default=DEFAULT_SEARCH_QUERY, description="Search query")
    count: int = Field(default=10, ge=0, description="Max results")


def _sources(urls: tuple[str, ...]) -> tuple[FeedSource, ...]:
    return tuple(FeedSource(url=url) for url in urls)


def _rss_bridge_source(query: str) -> FeedSource:
    base = os.getenv(_RSS_BRIDGE_ENV_VAR) or _DEFAULT_RSS_BRIDGE_URL
    params = urlencode(
        {"action": "display", "bridge": "Twitter", "context": "Search", "q": query, "format": "Mrss"}
    )
    return FeedSource(url=f"{base}?{params}", label="X (via RSS Bridge)", fallback=SYNTHETIC_X_SOURCE)


def _x_proxy_source(query: str) -> FeedSource:
    base = os.getenv(_X_PROXY_ENV_VAR) or _DEFAULT_X_PROXY_URL
    return FeedSource(url=f"{base}?{urlencode({'q': query})}", label="X (via Proxy)", fallback=SYNTHETIC_X_SOURCE)


def resolve_memes(payload: MemesInput) -> AggregationRequest:
    return AggregationRequest(sources=_sources(MEME_FEEDS), count=payload.count, placeholder="Untitled Meme")


def resolve_stories(payload: StoriesInput) -> AggregationRequest:
    return AggregationRequest(
        sources=_sources(STORY_FEEDS[payload.genre]), count=payload.count, placeholder="Untitled Story"
    )


def resolve_ai_science(payload: AiScienceInput) -> AggregationRequest:
    return AggregationRequest(
        sources=_sources(AI_SCIENCE_FEEDS[payload.type]), count=payload.count, placeholder="Breakthrough Post"
    )


def resolve_x_posts(payload: XPostsInput) -> AggregationRequest:
    return AggregationRequest(
        sources=(_rss_bridge_source(payload.query),), count=payload.count, placeholder="Untitled X Post"
    )


def resolve_personalized(payload: PersonalizeInput) -> AggregationRequest:
    """Resolve the base interest's sources and filter them by the user's keywords.

    For X posts the keywords are also prepended to the search query.
    """

    keyword = payload.user_query.strip()
    if payload.base_interest == "memes":
        base = resolve_memes(MemesInput(count=payload.count))
    elif payload.base_interest == "stories":
        base = resolve_stories(StoriesInput(count=payload.count))
    elif payload.base_interest == "ai-science":
        base = resolve_ai_science(AiScienceInput(count=payload.count))
    else:
        query = f"{keyword} {DEFAULT_X_QUERY}" if keyword else DEFAULT_X_QUERY
        base = AggregationRequest(
            sources=(_x_proxy_source(query),), count=payload.count, placeholder="Untitled X Post"
        )
    return AggregationRequest(
        sources=base.sources, count=base.count, keyword=keyword, placeholder=base.placeholder
    )


def resolve_search(payload: SearchInput) -> AggregationRequest:
    params = urlencode({"q": payload.query, "count": payload.count, "format": "rss"})
    source = FeedSource(url=f"{BING_SEARCH_URL}?{params}", label="Bing")
    return AggregationRequest(sources=(source,), count=payload.count, placeholder="Search Result")


def build_default_registry(
    aggregator: FeedAggregator | None = None,
    *,
    enhancer: DuckDuckGoThumbnailEnhancer | None = None,
) -> OperationRegistry:
    """Return a registry populated with every built-in feed operation."""

    registry = OperationRegistry(aggregator)
    search_enhancer = registry.manage(enhancer or DuckDuckGoThumbnailEnhancer())

    def enhance_search(posts: list[CanonicalPost], payload: SearchInput) -> list[CanonicalPost]:
        return search_enhancer.enhance(posts, payload.query)

    registry.register(
        OperationSpec(
            name="fetch_memes",
            title="Meme Fetch Tool",
            description="Fetch recent memes from fun RSS feeds (e.g., Cheezburger or Reddit).",
            input_model=MemesInput,
            output_key="memes",
            resolve=resolve_memes,
        )
    )
    registry.register(
        OperationSpec(
            name="fetch_stories",
            title="Story Fetch Tool",
            description="Fetch short stories or fiction from creative RSS feeds.",
            input_model=StoriesInput,
            output_key="stories",
            resolve=resolve_stories,
        )
    )
    registry.register(
        OperationSpec(
            name="fetch_ai_science",
            title="AI & Science Breakthroughs Tool",
            description="Fetch recent AI news or science breakthroughs from specialized RSS feeds.",
            input_model=AiScienceInput,
            output_key="posts",
            resolve=resolve_ai_science,
        )
    )
    registry.register(
        OperationSpec(
            name="fetch_x_posts",
            title="X Posts Fetch Tool",
            description="Fetch recent X (Twitter) posts via RSS Bridge, falling back to a labelled sample feed.",
            input_model=XPostsInput,
            output_key="posts",
            resolve=resolve_x_posts,
        )
    )
    registry.register(
        OperationSpec(
            name="personalize_feed",
            title="Personalize Feed Tool",
            description='Refine a feed with user keywords (e.g., "funny AI stories").',
            input_model=PersonalizeInput,
            output_key="posts",
            resolve=resolve_personalized,
        )
    )
    registry.register(
        OperationSpec(
            name="fetch_ddg_search",
            title="Search Tool (Bing RSS)",
            description="Fetch web search results from Bing RSS with image enhancement.",
            input_model=SearchInput,
            output_key="results",
            resolve=resolve_search,
            enhance=enhance_search,
        )
    )
    return registry
