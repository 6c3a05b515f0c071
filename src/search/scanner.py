"""Line-by-line literal substring scanning of text files."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import List, Optional

from config import MAX_READ_ERRORS
from core.errors import ScanError
from core.interfaces import PermitPool
from core.models import Match

logger = logging.getLogger(__name__)


def decode_line(raw: bytes) -> Optional[str]:
    """Strip the line terminator and decode as UTF-8.

    Returns None for lines that are not valid UTF-8; classification only
    samples the head of a file, so malformed lines further in are expected.
    """
    if raw.endswith(b"\n"):
        raw = raw[:-1]
        if raw.endswith(b"\r"):
            raw = raw[:-1]
    try:
        return raw.decode("utf-8")
    except UnicodeDecodeError:
        return None


def scan_lines(path: Path, pattern: str, *, max_read_errors: int = MAX_READ_ERRORS) -> List[Match]:
    """Return a Match for every line of path containing pattern, in line order."""
    try:
        handle = open(path, "rb")
    except OSError as e:
        raise ScanError(f"error opening file: {path}. {e}") from e

    matches: List[Match] = []
    line_number = 0
    consecutive_errors = 0

    with handle:
        while True:
            try:
                raw = handle.readline()
            except OSError as e:
                logger.error("failed to read line from file %s: %s", path, e)
                consecutive_errors += 1
                if consecutive_errors >= max_read_errors:
                    logger.error("giving up on file %s after %d read errors", path, consecutive_errors)
                    break
                line_number += 1
                continue

            consecutive_errors = 0
            if not raw:
                break

            line = decode_line(raw)
            if line is not None and pattern in line:
                matches.append(Match(file_path=path, line_number=line_number, line=line))
            line_number += 1

    return matches


async def scan(path: Path, pattern: str, *, governor: PermitPool) -> List[Match]:
    async with governor.permit():
        # Offload blocking file IO to a thread to keep the event loop responsive
        return await asyncio.to_thread(scan_lines, path, pattern)
