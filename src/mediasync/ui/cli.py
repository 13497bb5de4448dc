# ruff: noqa: T201

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from datetime import timedelta
from signal import SIGINT, signal
from typing import TYPE_CHECKING
from uuid import UUID

from dotenv import load_dotenv

from mediasync.app import (
    build_app,
    build_providers,
    load_details,
    recent_failures,
    refresh_media,
    sweep_sources,
)
from mediasync.config import configure_logging
from mediasync.domain.model import MediaLot, MediaSource

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import FrameType

    from mediasync.app import MediaSyncApp
    from mediasync.domain.query import MediaDetails

log = logging.getLogger(__name__)


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Synchronise media metadata from providers")
    parser.add_argument("--verbose", "-v", action="store_true", help="Log at DEBUG level")
    subparsers = parser.add_subparsers(dest="command", required=True)

    refresh = subparsers.add_parser("refresh", help="Refresh one provider item now")
    refresh.add_argument(
        "--source",
        type=MediaSource,
        required=True,
        choices=list(MediaSource),
        help="Provider to fetch from",
    )
    refresh.add_argument(
        "--lot",
        type=MediaLot,
        required=True,
        choices=list(MediaLot),
        help="Media kind of the item",
    )
    refresh.add_argument(
        "--identifier",
        type=str,
        required=True,
        help="Provider-specific identifier of the item",
    )
    refresh.add_argument(
        "--timeout",
        type=float,
        default=60.0,
        help="Seconds to wait for the refresh (default: %(default)s)",
    )

    details = subparsers.add_parser("details", help="Show a stored record")
    details.add_argument("internal_id", type=str, help="Internal record id")

    sweep = subparsers.add_parser("sweep", help="Refresh stale items of the given providers")
    sweep.add_argument(
        "--source",
        type=MediaSource,
        action="append",
        required=True,
        choices=list(MediaSource),
        help="Provider to sweep; may be repeated",
    )
    sweep.add_argument(
        "--interval-hours",
        type=float,
        default=24.0,
        help="Items synced longer ago than this are refreshed (default: %(default)s)",
    )
    sweep.add_argument(
        "--drain-seconds",
        type=float,
        default=600.0,
        help="How long to wait for queued refreshes (default: %(default)s)",
    )

    failures = subparsers.add_parser("failures", help="List recent sync failures")
    failures.add_argument(
        "--limit",
        type=int,
        default=20,
        help="Number of failures to show (default: %(default)s)",
    )

    return parser.parse_args(list(argv))


def _parse_uuid(value: str) -> UUID:
    try:
        return UUID(value)
    except ValueError as exc:
        raise ValueError(f"Invalid UUID: {value}") from exc


def _validate(args: argparse.Namespace) -> None:
    if args.command == "details":
        args.internal_id = _parse_uuid(args.internal_id)
    elif args.command == "refresh":
        if args.timeout is not None and args.timeout <= 0:
            raise ValueError("Timeout must be positive")
    elif args.command == "sweep":
        if args.interval_hours <= 0:
            raise ValueError("Interval hours must be positive")
        if args.drain_seconds < 0:
            raise ValueError("Drain seconds must be non-negative")
    elif args.command == "failures" and args.limit < 1:
        raise ValueError("Limit must be at least 1")


def _print_details(details: MediaDetails) -> None:
    print(json.dumps(details.as_dict(), indent=2, ensure_ascii=False))


def _app_for(args: argparse.Namespace) -> MediaSyncApp:
    if args.command == "refresh":
        return build_app(providers=build_providers([args.source]))
    if args.command == "sweep":
        return build_app(providers=build_providers(dict.fromkeys(args.source)))
    return build_app(providers=[])


async def _run(args: argparse.Namespace) -> None:
    async with _app_for(args) as app:
        if args.command == "refresh":
            details = await refresh_media(
                app,
                source=args.source,
                lot=args.lot,
                identifier=args.identifier,
                timeout=args.timeout,
            )
            _print_details(details)
        elif args.command == "details":
            _print_details(load_details(app, args.internal_id))
        elif args.command == "sweep":
            remaining = await sweep_sources(
                app,
                args.source,
                interval=timedelta(hours=args.interval_hours),
                drain_seconds=args.drain_seconds,
            )
            log.info("Sweep finished, %d jobs still queued", remaining)
        elif args.command == "failures":
            for failure in recent_failures(app, limit=args.limit):
                print(
                    f"{failure.failed_at.isoformat()} {failure.target_key} "
                    f"[{failure.error_type}/{failure.error_kind or '-'}] "
                    f"after {failure.attempts} attempts: {failure.message}"
                )
        else:
            raise ValueError(f"Unsupported command: {args.command}")


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    parsed_args: argparse.Namespace
    try:
        parsed_args = _parse_args(args_list)
        _validate(parsed_args)
    except ValueError:
        configure_logging()
        log.exception("CLI validation error")
        sys.exit(2)

    configure_logging(level=logging.DEBUG if parsed_args.verbose else logging.INFO)
    try:
        asyncio.run(_run(parsed_args))
    except Exception:
        log.exception("Fatal error during sync")
        sys.exit(1)


def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """Handle SIGINT (Ctrl+C) gracefully."""
    log.info("Closed by user (Ctrl+C)")
    sys.exit(0)


def run() -> None:
    load_dotenv()
    signal(SIGINT, sigint_handler)
    main()


if __name__ == "__main__":
    run()
