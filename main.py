# main.py

"""Entry point for the productlens command-line extractor."""

import argparse
import asyncio
import logging
import sys
from pathlib import Path

from productlens.config.logging_config import setup_logging

logger = logging.getLogger("productlens.main")


def _build_parser() -> argparse.ArgumentParser:
    """Build the argument parser for the CLI."""
    parser = argparse.ArgumentParser(
        prog="productlens",
        description=(
            "Extract bounded product content and structured product "
            "data from saved pages or live URLs."
        ),
    )
    parser.add_argument(
        "sources",
        nargs="+",
        help="HTML files or http(s) URLs to process.",
    )
    parser.add_argument(
        "-f",
        "--format",
        choices=["json", "table", "text"],
        default="json",
        dest="output_format",
        help="Output format (default: json).",
    )
    parser.add_argument(
        "--max-length",
        type=int,
        default=None,
        dest="max_length",
        help="Override the packed content budget in characters.",
    )
    parser.add_argument(
        "--track",
        action="store_true",
        default=False,
        help="Record prices in the history store and report alerts.",
    )
    parser.add_argument(
        "--store",
        default=None,
        dest="store_path",
        help="Custom price history database path.",
    )
    return parser


def main() -> None:
    """Parse arguments and run a headless extraction."""
    log_file = setup_logging()
    logger.info("productlens starting, log file: %s", log_file)

    args = _build_parser().parse_args()

    from productlens.cli.runner import cli_extract

    exit_code = asyncio.run(
        cli_extract(
            sources=args.sources,
            output_format=args.output_format,
            max_length=args.max_length,
            track=args.track,
            store_path=Path(args.store_path) if args.store_path else None,
        )
    )
    sys.exit(exit_code)


if __name__ == "__main__":
    main()
