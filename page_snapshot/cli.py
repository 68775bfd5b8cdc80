"""Command-line entry point for the page snapshot tool."""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import Sequence

from .config import SnapshotConfig
from .pipeline import clone_website

logger = logging.getLogger("page_snapshot.cli")


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Render a web page with Playwright and save a static, offline copy.",
    )
    parser.add_argument("url", help="Absolute URL of the page to clone")
    parser.add_argument(
        "--folder",
        default=None,
        help="Destination folder name (default: cloned-<hostname>)",
    )
    parser.add_argument(
        "--output",
        default=".",
        type=Path,
        help="Directory in which the destination folder is created",
    )
    parser.add_argument(
        "--wait",
        type=float,
        default=3.0,
        help="Seconds to wait after scrolling to the bottom before reading HTML",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=30.0,
        help="Navigation timeout in seconds",
    )
    parser.add_argument(
        "--fetch-timeout",
        type=float,
        default=10.0,
        help="Per-resource download timeout in seconds",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable verbose logging",
    )
    return parser.parse_args(argv)


def main(argv: Sequence[str] | None = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        force=True,
    )

    config = SnapshotConfig(
        output_root=Path(args.output).resolve(),
        settle_seconds=args.wait,
        navigation_timeout=args.timeout,
        fetch_timeout=args.fetch_timeout,
    )
    logger.debug("Cloning %s into %s", args.url, config.output_root)
    message = asyncio.run(clone_website(args.url, args.folder, config))
    print(message)
    return 1 if message.startswith("Error") else 0


if __name__ == "__main__":
    sys.exit(main())
