"""MCP tool that searches a directory tree for a literal pattern.

Registers the 'search_text' tool which runs the concurrent search engine
under PROJECT_ROOT and returns plain, aligned result lines.
"""

from __future__ import annotations

import dataclasses
from typing import List, Optional

from mcp.server.fastmcp import FastMCP

from config import PROJECT_ROOT
from core.errors import NotFoundError, ValidationError
from core.interfaces import PermitPool
from core.paths import display_path, resolve_under_root
from output.formatter import format_matches, sort_matches
from search.walker import search


def register(mcp: FastMCP, *, governor: Optional[PermitPool] = None) -> None:
    @mcp.tool(name="search_text")
    async def search_text(pattern: str = "", root: str = ".") -> List[str]:
        """Search text files under a directory for a literal substring.

        Binary files are skipped. Matching is exact and case-sensitive.

        Params:
          - pattern: literal text to look for (required, non-empty).
          - root: file or directory relative to the project root (default: ".").

        Returns:
          One line per match, "path:line_number│line", sorted by path then
          line number. Line numbers are 0-based.

        Raises:
          ValidationError for a missing pattern or root, AccessDeniedError
          when root escapes the project, NotFoundError when it does not exist.
        """
        if not pattern:
            raise ValidationError("Missing pattern")

        base = resolve_under_root(PROJECT_ROOT, root)
        if not base.exists():
            raise NotFoundError(f"Path not found: {root}")

        matches = await search(base, pattern, governor=governor)
        relative = [
            dataclasses.replace(m, file_path=display_path(m.file_path, PROJECT_ROOT))
            for m in matches
        ]
        return format_matches(sort_matches(relative), pattern, color=False)
