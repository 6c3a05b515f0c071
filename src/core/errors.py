from __future__ import annotations


class ParasearchError(Exception):
    """Base error for the search tool."""


class ValidationError(ParasearchError):
    """Raised when user input is invalid."""


class AccessDeniedError(ParasearchError):
    """Raised when an operation tries to access data outside allowed scope."""


class NotFoundError(ParasearchError):
    """Raised when a requested path does not exist."""


class ClassificationError(ParasearchError):
    """Raised when a file cannot be sampled for its content type."""


class ScanError(ParasearchError):
    """Raised when a text file cannot be opened for scanning."""


class GovernorError(ParasearchError):
    """Raised when the open-file permit pool itself malfunctions."""
