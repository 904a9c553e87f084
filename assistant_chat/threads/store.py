"""Thread affinity: which gateway thread belongs to which caller.

The store is an injected dependency rather than module state, so it can be
swapped for a durable or shared implementation. Callers hold ``lock()``
while they look up and create a thread, which keeps at most one thread per
caller even when first turns overlap.
"""

import asyncio
import logging
from contextlib import AbstractAsyncContextManager
from typing import Protocol

logger = logging.getLogger(__name__)


class ThreadAffinityStore(Protocol):
    """Mapping from caller identity to conversation thread id."""

    async def get(self, caller_id: str) -> str | None: ...

    async def set(self, caller_id: str, thread_id: str) -> None: ...

    def lock(self, caller_id: str) -> AbstractAsyncContextManager[object]: ...


class InMemoryThreadStore:
    """Process-lifetime store backed by a dict.

    No eviction and no persistence; entries vanish on restart. One
    ``asyncio.Lock`` per caller serialises thread creation for that caller.
    """

    def __init__(self) -> None:
        self._threads: dict[str, str] = {}
        self._locks: dict[str, asyncio.Lock] = {}

    async def get(self, caller_id: str) -> str | None:
        return self._threads.get(caller_id)

    async def set(self, caller_id: str, thread_id: str) -> None:
        previous = self._threads.get(caller_id)
        if previous is not None and previous != thread_id:
            logger.warning(f"Replacing thread {previous} of caller {caller_id} with {thread_id}")
        self._threads[caller_id] = thread_id

    def lock(self, caller_id: str) -> asyncio.Lock:
        # no await between lookup and insert
        return self._locks.setdefault(caller_id, asyncio.Lock())

    def __len__(self) -> int:
        return len(self._threads)
