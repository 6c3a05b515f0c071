"""Path utilities for the MCP search surface.

Resolves user-supplied roots inside a project directory and renders
result paths relative to it in POSIX form.
"""

from __future__ import annotations

from pathlib import Path

from core.errors import AccessDeniedError, ValidationError


def resolve_under_root(project_root: Path, rel_path: str) -> Path:
    """Resolve rel_path against project_root, refusing anything outside it."""
    raw = (rel_path or "").strip()
    if not raw:
        raise ValidationError("Path is empty")

    base = project_root.resolve()
    p = (base / raw).resolve()

    # Strong containment check to prevent directory traversal/outside access
    try:
        p.relative_to(base)
    except ValueError as e:
        raise AccessDeniedError("Access outside project root is not allowed") from e

    return p


def display_path(path: Path, project_root: Path) -> Path:
    """Return path relative to project_root when it lies inside it."""
    try:
        rel = path.relative_to(project_root.resolve())
    except ValueError:
        return path
    # Use POSIX-style paths to keep results stable across OSes
    return Path(rel.as_posix())
