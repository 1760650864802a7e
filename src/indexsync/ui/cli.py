from __future__ import annotations

import argparse
import logging
import os
import sys
from signal import SIGINT, signal
from typing import TYPE_CHECKING

from dotenv import load_dotenv

from indexsync.app import index_object
from indexsync.config import ConfigurationError, configure_logging
from indexsync.domain.reconcile import MAX_ATTEMPTS, RETRY_DELAY_SECONDS

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import FrameType

log = logging.getLogger(__name__)

INPUT_URL_ENV_VAR = "INPUT_URL"


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Merge size and hashes of a blob store object into its index record"
    )
    parser.add_argument(
        "url",
        nargs="?",
        help=f"Object URL, e.g. s3://bucket/key (defaults to ${INPUT_URL_ENV_VAR})",
    )
    parser.add_argument(
        "--max-attempts",
        type=int,
        default=MAX_ATTEMPTS,
        help="Failed network interactions tolerated before giving up (default: %(default)s)",
    )
    parser.add_argument(
        "--retry-delay",
        type=float,
        default=RETRY_DELAY_SECONDS,
        help="Seconds to wait between attempts (default: %(default)s)",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable debug logging",
    )
    return parser.parse_args(list(argv))


def _resolve_url(args: argparse.Namespace) -> str:
    url = args.url or os.getenv(INPUT_URL_ENV_VAR)
    if not url or not url.strip():
        raise ValueError(f"No object URL given and {INPUT_URL_ENV_VAR} is not set")
    if args.max_attempts < 1:
        raise ValueError("--max-attempts must be at least 1")
    if args.retry_delay < 0:
        raise ValueError("--retry-delay must be non-negative")
    return url


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    parsed_args = _parse_args(args_list)
    configure_logging(level=logging.DEBUG if parsed_args.verbose else logging.INFO)
    try:
        url = _resolve_url(parsed_args)
    except ValueError:
        log.exception("CLI validation error")
        sys.exit(2)

    try:
        result = index_object(
            url,
            max_attempts=parsed_args.max_attempts,
            retry_delay=parsed_args.retry_delay,
        )
    except ConfigurationError:
        log.exception("Configuration error")
        sys.exit(2)
    except Exception:
        log.exception("Fatal error during reconciliation")
        sys.exit(1)

    if not result.ok:
        log.error("Reconciliation of %s failed: %s", url, result.error)
        sys.exit(1)
    log.info("Done.")


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
