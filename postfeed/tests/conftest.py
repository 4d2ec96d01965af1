"""Shared fixtures for the test suite."""

from __future__ import annotations

from collections.abc import Iterator

import pytest

from feed_support import FeedServer


@pytest.fixture()
def feed_server() -> Iterator[FeedServer]:
    """Provide a :class:`FeedServer` with no documents registered."""

    server = FeedServer()
    yield server
    server.fetcher.close()
