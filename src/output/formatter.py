"""Aligned, highlighted rendering of search results.

Every line renders as ``<path:line_number padded><glyph><line>``. The prefix
column is sized over the whole match set so all separators line up.
"""

from __future__ import annotations

from typing import Iterable, List, Sequence, Tuple

from core.models import Match

SEPARATOR = "│"

# ANSI SGR sequences
RED = "\x1b[31m"
BLUE = "\x1b[34m"
RESET = "\x1b[0m"


def paint(text: str, code: str, *, color: bool) -> str:
    if not color or not text:
        return text
    return f"{code}{text}{RESET}"


def column_widths(matches: Sequence[Match]) -> Tuple[int, int]:
    """Return (max path width, max line number width); (0, 0) when empty."""
    path_width = max((len(str(m.file_path)) for m in matches), default=0)
    line_number_width = max((len(str(m.line_number)) for m in matches), default=0)
    return path_width, line_number_width


def highlight(line: str, pattern: str, *, color: bool = True) -> str:
    # str.replace scans left to right and never overlaps replacements
    if not pattern:
        return line
    return line.replace(pattern, paint(pattern, BLUE, color=color))


def format_match(
    match: Match,
    pattern: str,
    path_width: int,
    line_number_width: int,
    *,
    color: bool = True,
) -> str:
    file_ref = f"{match.file_path}:{match.line_number}"
    # +1 for the colon between path and line number
    file_ref_width = path_width + line_number_width + 1

    prefix = f"{file_ref:<{file_ref_width}}{SEPARATOR}"
    return f"{paint(prefix, RED, color=color)}{highlight(match.line, pattern, color=color)}"


def format_matches(matches: Sequence[Match], pattern: str, *, color: bool = True) -> List[str]:
    path_width, line_number_width = column_widths(matches)
    return [
        format_match(m, pattern, path_width, line_number_width, color=color)
        for m in matches
    ]


def sort_matches(matches: Iterable[Match]) -> List[Match]:
    """Order matches by path then line number."""
    return sorted(matches, key=lambda m: (str(m.file_path), m.line_number))
