"""Logging setup for the command line and the MCP server.

Results go to stdout, so every diagnostic is routed to stderr.
"""

from __future__ import annotations

import logging
import sys
from typing import Optional, Union

from config import LOG_LEVEL

LOGGER_NAMESPACES = ("core", "search", "output", "tools", "server", "cli")

_installed_handler: Optional[logging.Handler] = None


def configure_logging(level: Optional[Union[int, str]] = None) -> logging.Handler:
    global _installed_handler

    resolved = level if level is not None else LOG_LEVEL
    if isinstance(resolved, str):
        resolved = logging.getLevelName(resolved.upper())
        if not isinstance(resolved, int):
            resolved = logging.WARNING

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter("%(message)s"))

    for name in LOGGER_NAMESPACES:
        logger = logging.getLogger(name)
        # Replace the handler from an earlier call instead of stacking them
        if _installed_handler is not None:
            logger.removeHandler(_installed_handler)
        logger.addHandler(handler)
        logger.setLevel(resolved)

    _installed_handler = handler
    return handler
