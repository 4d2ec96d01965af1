"""Invoke a registered feed operation from the command line.

The structured payload is printed as JSON on stdout, so the command can be
piped into other tools. Rendered summaries and source failures are logged.

Examples:
    python -m postfeed.scripts.run_operation --list
    python -m postfeed.scripts.run_operation fetch_memes --arg count=5
    python -m postfeed.scripts.run_operation personalize_feed --arg baseInterest=stories --arg userQuery=ghost
"""
from __future__ import annotations

import argparse
import json
import logging
import os
import sys

from postfeed.errors import UnknownOperationError
from postfeed.services.operations import build_default_registry
from postfeed.services.registry import OperationRegistry

LOGGER = logging.getLogger("postfeed.cli")


def _configure_logging() -> None:
    level_name = os.getenv("POSTFEED_LOG_LEVEL", "INFO").upper()
    level = getattr(logging, level_name, logging.INFO)
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        stream=sys.stderr,
    )


def _parse_arguments(pairs: list[str]) -> dict[str, str]:
    """Split ``key=value`` pairs; values stay strings and the input schema coerces them."""

    arguments: dict[str, str] = {}
    for pair in pairs:
        key, separator, value = pair.partition("=")
        if not separator or not key.strip():
            raise SystemExit(f"Arguments must look like key=value, got '{pair}'")
        arguments[key.strip()] = value
    return arguments


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Run a PostFeed aggregation operation.")
    parser.add_argument("operation", nargs="?", help="Name of the operation to invoke.")
    parser.add_argument(
        "--arg",
        dest="arguments",
        action="append",
        default=[],
        metavar="KEY=VALUE",
        help="Operation argument; repeat for several.",
    )
    parser.add_argument("--list", action="store_true", help="List the available operations and exit.")
    return parser.parse_args(argv)


def run(argv: list[str] | None = None, *, registry: OperationRegistry | None = None) -> int:
    _configure_logging()
    args = _parse_args(argv)
    if registry is not None:
        return _run(args, registry)

    owned = build_default_registry()
    try:
        return _run(args, owned)
    finally:
        owned.close()


def _run(args: argparse.Namespace, registry: OperationRegistry) -> int:
    if args.list or not args.operation:
        for description in registry.describe():
            print(f"{description['name']}: {description['description']}")
        return 0

    try:
        result = registry.call(args.operation, _parse_arguments(args.arguments))
    except UnknownOperationError as exc:
        LOGGER.error(str(exc))
        return 2

    for error in result.source_errors:
        LOGGER.warning(error)

    if result.is_error:
        LOGGER.error(result.error)
        return 1

    if result.degraded:
        LOGGER.warning("Every source failed for %s; no posts were returned.", args.operation)

    for text in result.texts:
        LOGGER.info("%s", text)

    print(json.dumps(result.structured_content, ensure_ascii=False))
    return 0


if __name__ == "__main__":  # pragma: no cover - script entry point
    raise SystemExit(run())
