#!/usr/bin/env python3
"""
measurelab/main.py

Command-line launcher for the measurement canvas. Opens a PDF page or an
image in the Tk host, optionally with a JSON configuration:

    measurelab plan.pdf --page 2 --config measure.json --log-level DEBUG
"""
from __future__ import annotations

import argparse
import logging
import sys
from typing import List, Optional

from .config import load_config
from .logging_config import setup_logging

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="measurelab", description="Measure lengths, areas and counts on drawings.")
    parser.add_argument("document", nargs="?", help="PDF or image to open")
    parser.add_argument("--page", type=int, default=1, help="1-based page number for PDFs (default: 1)")
    parser.add_argument("--config", help="JSON configuration file")
    parser.add_argument("--log-level", default="INFO",
                        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
                        help="console log level (default: INFO)")
    parser.add_argument("--log-file", help="also write log records to this file")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(level=getattr(logging, args.log_level), log_file=args.log_file)
    if args.page < 1:
        logger.error("Page numbers start at 1, got %d", args.page)
        return 2
    try:
        config = load_config(args.config) if args.config else None
    except (OSError, ValueError, TypeError) as e:
        logger.error("Failed to load configuration %s: %s", args.config, e)
        return 2

    # Imported late so the parser works without a display
    from .gui_client import main as run_gui
    try:
        run_gui(args.document, args.page - 1, config)
    except RuntimeError as e:
        logger.error("%s", e)
        return 1
    return 0


if __name__ == '__main__':
    sys.exit(main())
