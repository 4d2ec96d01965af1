"""In-process sample feeds served through the regular fetcher interface.

Synthetic feeds stand in for upstreams that are frequently unavailable (for
example a self-hosted RSS Bridge). They are addressed with ``synthetic://``
URLs and always labelled as such by the sources that reference them.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

SYNTHETIC_SCHEME = "synthetic"

X_POSTS_URL = "synthetic://x-posts"

_X_POSTS: Sequence[Mapping[str, Any]] = (
    {
        "title": "Privacy engines built on homomorphic encryption",
        "summary": "FHE noise reduction results from Eurocrypt 2025 point to encrypted transactions at scale.",
        "link": "https://x.com/search?q=fully%20homomorphic%20encryption",
        "published": "2025-10-09T18:09:20Z",
        "media_thumbnail": [{"url": "https://pbs.twimg.com/media/sample-fhe.jpg", "width": "1200"}],
    },
    {
        "title": "Practical quantum computers within two years",
        "summary": "Expected impact on AI, materials science, genome editing and energy production.",
        "link": "https://x.com/search?q=practical%20quantum%20computers",
        "published": "2025-10-02T16:12:33Z",
    },
    {
        "title": "Frontier model posts new reasoning benchmark highs",
        "summary": "Multimodal model handles text, images, audio and video with stronger benchmark reasoning.",
        "link": "https://x.com/search?q=reasoning%20benchmarks",
        "published": "2025-10-10T04:00:23Z",
    },
    {
        "title": "26-page AI outlook report",
        "summary": "Fresh insights into where AI research is headed this year.",
        "link": "https://x.com/search?q=ai%20outlook%20report",
        "published": "2025-10-01T10:11:56Z",
        "media_thumbnail": [{"url": "https://pbs.twimg.com/media/sample-report.jpg", "width": "800"}],
    },
    {
        "title": "New accelerators for AI infrastructure",
        "summary": "Train faster, run bigger models and scale without vendor lock-in.",
        "link": "https://x.com/search?q=ai%20accelerators",
        "published": "2025-10-01T14:00:39Z",
        "media_thumbnail": [{"url": "https://pbs.twimg.com/media/sample-accelerator.jpg", "width": "640"}],
    },
    {
        "title": "AI reinventing scientific discovery",
        "summary": "AI-designed drugs in clinical trials, plasma control for fusion, eight-minute weather forecasts.",
        "link": "https://x.com/search?q=ai%20scientific%20discovery",
        "published": "2025-10-08T13:47:21Z",
        "media_thumbnail": [{"url": "https://pbs.twimg.com/media/sample-discovery.jpg", "width": "1024"}],
    },
    {
        "title": "AI ripple effects from robotics to simulations",
        "summary": "Robotics, quantum computing, autonomous vehicles and world-model simulations all build on AI.",
        "link": "https://x.com/search?q=ai%20robotics%20simulation",
        "published": "2025-10-04T14:38:37Z",
    },
)

SYNTHETIC_FEEDS: Mapping[str, Sequence[Mapping[str, Any]]] = {
    X_POSTS_URL: _X_POSTS,
}
