"""Configuration and environment helpers for the project.

Provides small helpers to read typed environment variables and exposes
project-level configuration constants used across the codebase (e.g.
PROJECT_ROOT, SAMPLE_SIZE, MAX_OPEN_FILES and the default log level).
"""

from __future__ import annotations

import os
from pathlib import Path


def _env_str(name: str, default: str) -> str:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip()


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if raw is None:
        return default
    try:
        return int(raw.strip())
    except ValueError:
        return default


# Containment root for the MCP search tool
PROJECT_ROOT = Path(os.environ.get("PROJECT_ROOT", ".")).resolve()

# Classification reads at most this many bytes from the start of a file
SAMPLE_SIZE = max(0, _env_int("PARASEARCH_SAMPLE_SIZE", 2048))

# Permit pool size; 0 means "use the process open-file limit"
MAX_OPEN_FILES = _env_int("PARASEARCH_MAX_OPEN_FILES", 0)

# Consecutive read errors tolerated before a file is abandoned
MAX_READ_ERRORS = max(1, _env_int("PARASEARCH_MAX_READ_ERRORS", 8))

# Logging
LOG_LEVEL = _env_str("PARASEARCH_LOG_LEVEL", "WARNING").upper()
