#!/usr/bin/env python3
# -*- coding: utf-8 -*-
from __future__ import annotations

import argparse
import logging
import sys

from .app import BrowserApp
from .config import load_config, setup_logging

logger = logging.getLogger("browser")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Terminal browser with reader mode")
    parser.add_argument("url", nargs="?", help="Address to open on start")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    parser.add_argument("--theme", type=str, help="Set theme for this run")
    parser.add_argument(
        "--private", action="store_true", help="Start in a private tab"
    )
    parser.add_argument(
        "--no-persist",
        action="store_true",
        help="Do not read or write history, reading list or page cache",
    )
    return parser


# --- Entrypoint ---
def main(argv: list[str] | None = None) -> None:
    args = build_parser().parse_args(argv)

    debug_path = setup_logging(args.debug)
    if debug_path:
        print(f"Debug logging enabled: {debug_path}", file=sys.stderr)

    config = load_config()
    if args.theme:
        config["theme"] = args.theme
    logger.info("Using theme: %s", config.get("theme"))

    try:
        app = BrowserApp(
            config=config,
            persist=False if args.no_persist else None,
            start_url=args.url,
            private=args.private,
        )
        app.run()
    except Exception as e:
        logger.exception("Application crashed: %s", e)
        print(f"Application crashed: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
