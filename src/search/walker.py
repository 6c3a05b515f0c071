"""Recursive, concurrent directory traversal.

Each directory lists its children off the event loop, spawns one task per
child and merges the children's match lists once all of them finish.
Failures below the top level are logged and leave a hole in the results;
only a GovernorError escapes.
"""

from __future__ import annotations

import asyncio
import logging
import os
from pathlib import Path
from typing import List, Optional, Union

from core.errors import ClassificationError, GovernorError, ScanError
from core.governor import default_governor
from core.interfaces import PermitPool
from core.models import Classification, Match, SearchRequest
from search.classifier import classify
from search.scanner import scan

logger = logging.getLogger(__name__)

PathLike = Union[str, os.PathLike]


def list_children(path: Path) -> List[Path]:
    # Entries that fail mid-iteration are logged; scandir cannot resume after them
    children: List[Path] = []
    with os.scandir(path) as entries:
        while True:
            try:
                entry = next(entries)
            except StopIteration:
                break
            except OSError as e:
                logger.error("could not get child entry: %s", e)
                break
            children.append(Path(entry.path))
    return children


async def search_file(path: Path, pattern: str, *, governor: PermitPool) -> List[Match]:
    try:
        classification = await classify(path, governor=governor)
    except ClassificationError as e:
        # Unreadable files are treated as binary
        logger.error("Error detecting file type: %s", e)
        classification = Classification.BINARY

    if classification is not Classification.TEXT:
        return []

    try:
        return await scan(path, pattern, governor=governor)
    except ScanError as e:
        logger.error("%s", e)
        return []


async def search_dir(path: Path, pattern: str, *, governor: PermitPool) -> List[Match]:
    try:
        children = await asyncio.to_thread(list_children, path)
    except OSError as e:
        logger.error("%s", e)
        return []

    tasks = [
        asyncio.create_task(search(child, pattern, governor=governor))
        for child in children
    ]
    results = await asyncio.gather(*tasks, return_exceptions=True)

    matches: List[Match] = []
    fatal: Optional[GovernorError] = None
    for result in results:
        if isinstance(result, GovernorError):
            fatal = fatal or result
            continue
        if isinstance(result, BaseException):
            logger.error("Error getting results: %r", result)
            continue
        matches.extend(result)

    if fatal is not None:
        raise fatal
    return matches


async def search(
    path: PathLike,
    pattern: str,
    *,
    governor: Optional[PermitPool] = None,
) -> List[Match]:
    """Search a file or a directory tree for lines containing pattern.

    Match order across files is completion order; within one file matches
    keep line order.
    """
    if governor is None:
        governor = default_governor()

    p = Path(path)
    if p.is_dir():
        return await search_dir(p, pattern, governor=governor)
    return await search_file(p, pattern, governor=governor)


async def run_search(request: SearchRequest, *, governor: Optional[PermitPool] = None) -> List[Match]:
    return await search(request.root, request.pattern, governor=governor)
