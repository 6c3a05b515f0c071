"""Core protocol definitions.

Defines the PermitPool protocol the classifier and scanner depend on, so a
search can run against the process-wide governor or an injected one.
"""

from __future__ import annotations

from typing import AsyncContextManager, Protocol


class Permit(Protocol):
    """Opaque right to hold one file handle open."""


class PermitPool(Protocol):
    """Contract for a bounded pool of open-file permits."""
    async def acquire(self) -> Permit:
        ...

    def release(self, permit: Permit) -> None:
        ...

    def permit(self) -> AsyncContextManager[Permit]:
        ...
