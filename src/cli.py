"""Command line entry point: ``parasearch PATTERN [PATH]``.

Prints every match once the whole tree has been searched. Per-file errors
are logged to stderr and never change the exit status.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import os
import sys
from importlib import metadata
from pathlib import Path
from typing import List, Optional, Sequence, TextIO

from config import LOG_LEVEL
from core.errors import GovernorError, ValidationError
from core.log import configure_logging
from core.models import SearchRequest
from output.formatter import format_matches
from search.walker import run_search

DISTRIBUTION = "parasearch"

logger = logging.getLogger(__name__)


def package_version() -> str:
    try:
        return metadata.version(DISTRIBUTION)
    except metadata.PackageNotFoundError:
        # Running from a source checkout without an install
        return "0+unknown"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="parasearch",
        description="Recursively search text files for a literal pattern.",
    )
    parser.add_argument("pattern", help="literal text to search for")
    parser.add_argument("path", nargs="?", default=".", help="file or directory to search (default: .)")
    parser.add_argument("--no-color", action="store_true", help="disable colored output")
    parser.add_argument("--log-level", default=LOG_LEVEL, help="stderr log level (default: %(default)s)")
    parser.add_argument("--version", action="version", version=f"%(prog)s {package_version()}")
    return parser


def use_color(stream: TextIO, *, disabled: bool = False) -> bool:
    if disabled or os.environ.get("NO_COLOR"):
        return False
    force = os.environ.get("CLICOLOR_FORCE", "")
    if force and force != "0":
        return True
    isatty = getattr(stream, "isatty", None)
    return bool(isatty and isatty())


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        request = SearchRequest(pattern=args.pattern, root=Path(args.path))
    except ValidationError as e:
        parser.error(str(e))

    configure_logging(args.log_level)

    try:
        matches = asyncio.run(run_search(request))
    except GovernorError as e:
        logger.critical("search aborted: %s", e)
        return 1

    lines: List[str] = format_matches(matches, request.pattern, color=use_color(sys.stdout, disabled=args.no_color))
    for line in lines:
        print(line)
    return 0


if __name__ == "__main__":
    sys.exit(main())
