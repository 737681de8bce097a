"""Entry point for ``python -m limitwatch.sdk``: watch the limits in a terminal."""

from __future__ import annotations

import argparse
import asyncio

from limitwatch.intervals import DEFAULT_REFRESH_MS, REFRESH_INTERVALS_MS, resolve_interval
from limitwatch.logging_config import setup_logging
from limitwatch.sdk.client import AsyncLimitWatchClient
from limitwatch.sdk.display import ConsoleDisplay
from limitwatch.sdk.refresh import RefreshController


async def watch(
    base_url: str,
    interval_ms: int,
    *,
    discard_stale: bool = False,
) -> None:
    """Print the limits on load and on every tick until cancelled."""
    async with AsyncLimitWatchClient(base_url) as client:
        controller = RefreshController(
            client.limits, ConsoleDisplay(), discard_stale=discard_stale
        )
        await controller.refresh_now()
        controller.start(interval_ms)
        try:
            while True:
                await asyncio.sleep(3600)
        finally:
            controller.stop()
            await controller.drain()


def main(argv: list[str] | None = None) -> None:
    choices = ", ".join(str(ms) for ms in REFRESH_INTERVALS_MS)
    parser = argparse.ArgumentParser(description="Watch upstream rate limits")
    parser.add_argument(
        "--base-url",
        default="http://127.0.0.1:8000",
        help="LimitWatch server URL (default: http://127.0.0.1:8000)",
    )
    parser.add_argument(
        "--interval-ms",
        default=str(DEFAULT_REFRESH_MS),
        help=f"Refresh interval in milliseconds ({choices}; default: {DEFAULT_REFRESH_MS})",
    )
    parser.add_argument(
        "--discard-stale",
        action="store_true",
        help="Drop results that arrive after a newer one was shown",
    )
    parser.add_argument("--log-level", default="WARNING")
    parser.add_argument("--log-format", choices=["text", "json"], default="text")
    args = parser.parse_args(argv)

    setup_logging(args.log_level, args.log_format)
    try:
        asyncio.run(
            watch(
                args.base_url,
                resolve_interval(args.interval_ms),
                discard_stale=args.discard_stale,
            )
        )
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    main()
