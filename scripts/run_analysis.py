"""Run the executive analysis once and print it as JSON.

Useful from cron (to warm the hourly cache) or for inspecting what the
dashboard would receive.

Example usages::

    # Serve from cache when fresh, otherwise regenerate.
    python -m scripts.run_analysis

    # Always regenerate and overwrite today's snapshot.
    python -m scripts.run_analysis --force-refresh

    # Only merge the live sources, no analytics and no persistence.
    python -m scripts.run_analysis --live-only --query "weekly review"
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from typing import Any, Callable, Dict

from pydantic import ValidationError

from preflight.core.config import get_settings
from preflight.core.logging import configure_logging

EXIT_OK = 0
EXIT_VALIDATION_ERROR = 2
EXIT_RUNTIME_ERROR = 5

logger = logging.getLogger(__name__)


def _default_engine_factory() -> Any:
    from preflight.dependencies import get_preflight_engine

    return get_preflight_engine()


async def _run(engine: Any, args: argparse.Namespace) -> Dict[str, Any]:
    if args.live_only:
        snapshot = await engine.fetch_all_live_data(args.query)
        return snapshot.to_payload()
    return await engine.get_ceo_analysis(force_refresh=args.force_refresh)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument(
        "--force-refresh",
        action="store_true",
        help="Ignore a fresh cached analysis and regenerate.",
    )
    parser.add_argument(
        "--live-only",
        action="store_true",
        help="Print the merged live snapshot without computing analytics.",
    )
    parser.add_argument(
        "--query",
        default="",
        help="Free-text context recorded in the snapshot metadata (live-only).",
    )
    parser.add_argument(
        "--indent",
        type=int,
        default=2,
        help="JSON indentation; 0 prints compact output.",
    )
    return parser


def main(
    argv: list[str] | None = None,
    *,
    engine_factory: Callable[[], Any] = _default_engine_factory,
) -> int:
    args = _build_parser().parse_args(argv)

    try:
        settings = get_settings()
    except ValidationError as exc:
        print(f"Configuration is invalid:\n{exc}", file=sys.stderr)
        return EXIT_VALIDATION_ERROR

    # stdout carries the JSON payload.
    configure_logging(settings.log_level, stream=sys.stderr)

    try:
        payload = asyncio.run(_run(engine_factory(), args))
    except Exception as exc:  # pragma: no cover - the engine itself does not raise
        logger.exception("Analysis run failed")
        print(f"Analysis run failed: {exc}", file=sys.stderr)
        return EXIT_RUNTIME_ERROR

    print(json.dumps(payload, indent=args.indent or None, default=str))
    return EXIT_OK


if __name__ == "__main__":  # pragma: no cover - manual execution path
    sys.exit(main())
