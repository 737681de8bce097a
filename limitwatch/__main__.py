"""Entry point for ``python -m limitwatch``: serve the proxy and status page."""

from __future__ import annotations

import argparse

import uvicorn


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="LimitWatch server")
    parser.add_argument(
        "--host",
        default="127.0.0.1",
        help="Bind address (default: 127.0.0.1)",
    )
    parser.add_argument(
        "--port",
        type=int,
        default=8000,
        help="Port (default: 8000)",
    )
    args = parser.parse_args(argv)
    # RequestLoggingMiddleware writes the access log.
    uvicorn.run(
        "limitwatch.api.main:app",
        host=args.host,
        port=args.port,
        access_log=False,
    )


if __name__ == "__main__":
    main()
