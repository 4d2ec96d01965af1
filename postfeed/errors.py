"""Error taxonomy shared by the feed pipeline and the operation boundary."""

from __future__ import annotations

from typing import Any, Sequence


class PostFeedError(Exception):
    """Base class for errors raised by the post aggregation core."""


class FeedFetchError(PostFeedError):
    """A configured source was unreachable or returned unparsable content."""

    def __init__(self, url: str, cause: BaseException | str) -> None:
        self.url = url
        self.cause = cause
        super().__init__(f"Failed to fetch feed '{url}': {cause}")


SourceFetchError = FeedFetchError


class OperationInputError(PostFeedError):
    """Operation arguments did not satisfy the declared input schema."""

    def __init__(self, operation: str, errors: Sequence[dict[str, Any]]) -> None:
        self.operation = operation
        self.errors = list(errors)
        details = "; ".join(_format_error(error) for error in self.errors) or "invalid input"
        super().__init__(f"Invalid input for '{operation}': {details}")


class UnknownOperationError(PostFeedError):
    """No operation is registered under the requested name."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Unknown operation '{name}'")


def _format_error(error: dict[str, Any]) -> str:
    location = ".".join(str(part) for part in error.get("loc", ())) or "input"
    return f"{location}: {error.get('msg', 'invalid value')}"


__all__ = [
    "FeedFetchError",
    "OperationInputError",
    "PostFeedError",
    "SourceFetchError",
    "UnknownOperationError",
]
