#!/usr/bin/env python3
"""
Console front end for the short link engine.

Shortens the URLs given on the command line, then keeps reading URLs from
stdin (one per line) and prints a short link for each. The local redirect
server keeps serving until EOF, Ctrl+C or SIGTERM.

Usage:
    shortlink [URL ...] [--log-level LEVEL]
    python -m shortlink example.com/page

Environment variables:
    SHORTLINK_HOST - Loopback address to bind
    SHORTLINK_PORT - Port to listen on (0 = any free port)
    SHORTLINK_PUBLIC_HOST - Host used in short links
    SHORTLINK_TOKEN_LENGTH - Length of generated tokens
    SHORTLINK_LOG_LEVEL - Logging level
"""

import argparse
import signal
import sys
from typing import Optional, Sequence, TextIO

from .config import LOG_LEVELS, load_config
from .common.logging_config import setup_logging
from .exceptions import EmptyURLError, ShortLinkError
from .service import ShortLinkService


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="shortlink",
        description="Create short local redirect links served from this machine.",
    )
    parser.add_argument("urls", nargs="*", help="URLs to shorten")
    parser.add_argument(
        "--log-level",
        type=str.upper,
        choices=LOG_LEVELS,
        help="Logging level (overrides SHORTLINK_LOG_LEVEL)",
    )
    return parser.parse_args(argv)


def shorten_and_report(service: ShortLinkService, raw_url: str, out: TextIO) -> bool:
    """Shorten one URL and print the result or the error. Returns True on success."""
    try:
        short_url = service.shorten(raw_url)
    except EmptyURLError:
        print("Enter a link.", file=out)
        return False
    except ShortLinkError as e:
        print(f"Error: {e}", file=out)
        return False

    print(short_url, file=out)
    return True


def main(
    argv: Optional[Sequence[str]] = None,
    stdin: Optional[TextIO] = None,
    stdout: Optional[TextIO] = None,
) -> int:
    """Main entry point."""
    args = parse_args(argv)
    stdin = stdin or sys.stdin
    stdout = stdout or sys.stdout

    overrides = {"log_level": args.log_level} if args.log_level else {}
    config = load_config(**overrides)

    logger = setup_logging(
        level=config.log_level,
        log_file=config.log_file,
        json_format=config.log_json,
    )

    def announce(port: int) -> None:
        print(
            f"Local server started on http://{config.public_host}:{port}/ "
            f"(short links look like http://{config.public_host}:{port}/{config.route_prefix}/{{token}})",
            file=stdout,
        )

    def handle_signal(signum, frame):
        logger.info(f"Received signal {signum}, initiating shutdown...")
        raise KeyboardInterrupt

    try:
        previous_handler = signal.signal(signal.SIGTERM, handle_signal)
    except ValueError:
        # Not on the main thread
        previous_handler = None

    failures = 0
    service = ShortLinkService(config=config, logger=logger, on_server_started=announce)
    try:
        for raw_url in args.urls:
            if not shorten_and_report(service, raw_url, stdout):
                failures += 1

        for line in stdin:
            if not line.strip():
                continue
            if not shorten_and_report(service, line, stdout):
                failures += 1
    except KeyboardInterrupt:
        logger.info("Interrupted")
    finally:
        service.shutdown()
        if previous_handler is not None:
            signal.signal(signal.SIGTERM, previous_handler)

    return 1 if failures else 0


if __name__ == "__main__":
    sys.exit(main())
