"""Text/binary classification from a bounded byte sample.

``inspect`` is a pure sniffing heuristic over the first bytes of a file;
``classify`` samples a file on disk under a governor permit.
"""

from __future__ import annotations

import asyncio
import os
from pathlib import Path
from typing import Tuple

from config import SAMPLE_SIZE
from core.errors import ClassificationError
from core.interfaces import PermitPool
from core.models import Classification, ContentType

# Longer marks first: the UTF-32LE mark starts with the UTF-16LE one
BYTE_ORDER_MARKS: Tuple[Tuple[bytes, ContentType], ...] = (
    (b"\xef\xbb\xbf", ContentType.UTF_8_BOM),
    (b"\x00\x00\xfe\xff", ContentType.UTF_32BE),
    (b"\xff\xfe\x00\x00", ContentType.UTF_32LE),
    (b"\xfe\xff", ContentType.UTF_16BE),
    (b"\xff\xfe", ContentType.UTF_16LE),
)

BINARY_MAGIC_NUMBERS: Tuple[bytes, ...] = (b"%PDF", b"\x89PNG")

# Only this prefix of the sample is searched for NUL bytes
NUL_SCAN_LENGTH = 1024


def inspect(sample: bytes) -> ContentType:
    """Guess the content type of a byte sample."""
    for mark, content_type in BYTE_ORDER_MARKS:
        if sample.startswith(mark):
            return content_type

    if b"\x00" in sample[:NUL_SCAN_LENGTH]:
        return ContentType.BINARY

    if sample.startswith(BINARY_MAGIC_NUMBERS):
        return ContentType.BINARY

    return ContentType.UTF_8


def read_sample(path: Path, sample_size: int = SAMPLE_SIZE) -> bytes:
    """Read exactly min(file size, sample_size) bytes from the start of path.

    A short read is an error, not a smaller sample.
    """
    try:
        handle = open(path, "rb")
    except OSError as e:
        raise ClassificationError(f"error opening file: {path}. {e}") from e

    with handle:
        try:
            file_length = os.fstat(handle.fileno()).st_size
        except OSError as e:
            raise ClassificationError(f"error getting file metadata: {path}. {e}") from e

        length_to_read = min(file_length, sample_size)
        try:
            sample = handle.read(length_to_read)
        except OSError as e:
            raise ClassificationError(f"error scanning file for content type: {path}. {e}") from e

    if len(sample) != length_to_read:
        raise ClassificationError(
            f"error scanning file for content type: {path}. "
            f"expected {length_to_read} bytes, read {len(sample)}"
        )
    return sample


async def classify(
    path: Path,
    *,
    governor: PermitPool,
    sample_size: int = SAMPLE_SIZE,
) -> Classification:
    # The permit covers exactly the lifetime of the open handle
    async with governor.permit():
        sample = await asyncio.to_thread(read_sample, path, sample_size)

    return Classification.from_content_type(inspect(sample))
