from __future__ import annotations

import asyncio


class DocumentLockRegistry:
    """
    Provides a stable asyncio lock per document id so unrelated documents never contend.
    """

    def __init__(self) -> None:
        self._locks: dict[str, asyncio.Lock] = {}

    def lock_for(self, doc_id: str) -> asyncio.Lock:
        lock = self._locks.get(doc_id)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[doc_id] = lock
        return lock
