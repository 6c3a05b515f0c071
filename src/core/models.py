"""Immutable data types shared by the search engine and its front ends.

Match is the only value produced by a search; SearchRequest bundles the
two inputs; ContentType and Classification describe file sniffing results.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from pathlib import Path

from core.errors import ValidationError


@dataclass(frozen=True)
class Match:
    """One line of a text file that contains the pattern.

    line_number is 0-based; line has its line terminator stripped.
    """

    file_path: Path
    line_number: int
    line: str


@dataclass(frozen=True)
class SearchRequest:
    pattern: str
    root: Path = Path(".")

    def __post_init__(self) -> None:
        if not self.pattern:
            raise ValidationError("Pattern is empty")


class ContentType(enum.Enum):
    UTF_8 = "utf-8"
    UTF_8_BOM = "utf-8-bom"
    UTF_16LE = "utf-16le"
    UTF_16BE = "utf-16be"
    UTF_32LE = "utf-32le"
    UTF_32BE = "utf-32be"
    BINARY = "binary"

    @property
    def is_text(self) -> bool:
        return self is not ContentType.BINARY


class Classification(enum.Enum):
    TEXT = "text"
    BINARY = "binary"

    @classmethod
    def from_content_type(cls, content_type: ContentType) -> "Classification":
        return cls.TEXT if content_type.is_text else cls.BINARY
