"""Bounded pool of open-file permits.

Every file open in the search engine happens inside ``governor.permit()``
so the number of simultaneously open handles never exceeds the pool
capacity. The default pool is sized from RLIMIT_NOFILE, one pool per event loop.
"""

from __future__ import annotations

import asyncio
import itertools
import resource
import weakref
from contextlib import asynccontextmanager
from dataclasses import dataclass
from functools import lru_cache
from typing import AsyncIterator, Set

from config import MAX_OPEN_FILES
from core.errors import GovernorError, ValidationError

FALLBACK_OPEN_FILES = 1024


@dataclass(frozen=True, slots=True)
class GrantedPermit:
    # Opaque token; the serial only keeps permits distinct
    serial: int


@lru_cache(maxsize=None)
def max_open_files() -> int:
    """Return the permit pool size for this process.

    Queried once: PARASEARCH_MAX_OPEN_FILES when positive, otherwise the
    soft RLIMIT_NOFILE (the hard limit when the soft one is unlimited).
    """
    if MAX_OPEN_FILES > 0:
        return MAX_OPEN_FILES

    soft, hard = resource.getrlimit(resource.RLIMIT_NOFILE)
    for limit in (soft, hard):
        if limit != resource.RLIM_INFINITY and limit > 0:
            return int(limit)
    return FALLBACK_OPEN_FILES


class ConcurrencyGovernor:
    # Counting semaphore plus bookkeeping of outstanding permits
    def __init__(self, *, capacity: int) -> None:
        capacity = int(capacity)
        if capacity < 1:
            raise ValidationError(f"Permit capacity must be at least 1, got {capacity}")

        self._capacity = capacity
        self._semaphore = asyncio.BoundedSemaphore(capacity)
        self._serials = itertools.count()
        self._outstanding: Set[GrantedPermit] = set()
        self._peak = 0

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def outstanding(self) -> int:
        return len(self._outstanding)

    @property
    def peak(self) -> int:
        return self._peak

    async def acquire(self) -> GrantedPermit:
        # Contention only suspends; a failing wait primitive is fatal
        try:
            await self._semaphore.acquire()
        except RuntimeError as e:
            raise GovernorError(f"error acquiring permit: {e}") from e

        permit = GrantedPermit(next(self._serials))
        self._outstanding.add(permit)
        self._peak = max(self._peak, len(self._outstanding))
        return permit

    def release(self, permit: GrantedPermit) -> None:
        if permit not in self._outstanding:
            raise GovernorError(f"error releasing permit: {permit} is not outstanding")
        self._outstanding.discard(permit)

        try:
            self._semaphore.release()
        except ValueError as e:
            raise GovernorError(f"error releasing permit: {e}") from e

    @asynccontextmanager
    async def permit(self) -> AsyncIterator[GrantedPermit]:
        granted = await self.acquire()
        try:
            yield granted
        finally:
            self.release(granted)


# asyncio primitives bind to the loop that first waits on them, so each
# running loop gets its own pool sized from the process-wide limit
_governors: "weakref.WeakKeyDictionary[asyncio.AbstractEventLoop, ConcurrencyGovernor]" = weakref.WeakKeyDictionary()


def default_governor() -> ConcurrencyGovernor:
    """Return the governor for the running event loop, creating it on first use."""
    loop = asyncio.get_running_loop()
    governor = _governors.get(loop)
    if governor is None:
        governor = ConcurrencyGovernor(capacity=max_open_files())
        _governors[loop] = governor
    return governor
