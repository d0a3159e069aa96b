#!/usr/bin/env python3
"""
CLI runner for PDF keyword highlighting.

Provides command-line interface for:
- Searching a PDF for keywords and printing highlight JSON
- Converting a PDF into page images

Usage:
    python cli.py search invoice total --pdf ./doc.pdf
    python cli.py search "net\\s+amount" --pdf https://example.com/doc.pdf --zoom 1.5
    python cli.py search "a.b" --pdf ./doc.pdf --literal
    python cli.py convert --pdf ./scan.pdf
"""

import argparse
import json
import sys
from typing import Optional

import structlog

# Configure logging before imports
structlog.configure(
    processors=[
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.add_log_level,
        structlog.dev.ConsoleRenderer()
    ],
    logger_factory=structlog.PrintLoggerFactory(file=sys.stderr)
)

logger = structlog.get_logger()

from config import settings
from highlighting.matcher import MatchMode
from highlighting.search import search_pdf
from pdf_processing.rasterizer import PageRasterizer


def cmd_search(keywords: list[str], pdf: str, zoom: Optional[float], literal: bool) -> int:
    """Search a PDF and print its highlights as JSON."""
    mode = MatchMode.LITERAL if literal else None
    highlights = search_pdf(keywords, pdf, zoom, match_mode=mode)

    print(json.dumps([h.to_dict() for h in highlights], indent=2, ensure_ascii=False))
    logger.info("Search complete", pdf=pdf, highlights=len(highlights))
    return 0


def cmd_convert(pdf: str, resolution: Optional[int]) -> int:
    """Convert a PDF to images and report the page count."""
    try:
        images = PageRasterizer(resolution=resolution).convert(pdf)
    except Exception as e:
        logger.error("Conversion failed", pdf=pdf, error=str(e))
        return 1

    print(f"Converted {len(images)} page(s)")
    return 0


def main():
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description=f"{settings.APP_NAME} CLI",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Commands:
  search    Search a PDF for keywords and print highlights
  convert   Convert a PDF into page images

Examples:
  python cli.py search invoice --pdf ./doc.pdf
  python cli.py convert --pdf ./scan.pdf
        """
    )

    parser.add_argument(
        "command",
        choices=["search", "convert"],
        help="Command to execute"
    )

    parser.add_argument(
        "keywords",
        nargs="*",
        help="Keywords to search for (for 'search' command)"
    )

    parser.add_argument(
        "--pdf",
        required=True,
        help="URL or path of the PDF"
    )

    parser.add_argument(
        "--zoom",
        type=float,
        default=None,
        help=f"Viewport zoom (default: {settings.DEFAULT_ZOOM})"
    )

    parser.add_argument(
        "--literal",
        action="store_true",
        help="Match keywords as plain text instead of regular expressions"
    )

    parser.add_argument(
        "--resolution",
        type=int,
        default=None,
        help=f"Image resolution in DPI for 'convert' (default: {settings.IMAGE_RESOLUTION})"
    )

    args = parser.parse_args()

    if args.command == "search":
        sys.exit(cmd_search(args.keywords, args.pdf, args.zoom, args.literal))
    elif args.command == "convert":
        sys.exit(cmd_convert(args.pdf, args.resolution))


if __name__ == "__main__":
    main()
