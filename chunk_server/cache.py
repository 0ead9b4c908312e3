"""In-process memo of fully materialized chunk sequences.

Entries are built once per key and then served as-is for the life of the
process. They are never refreshed: a file that grows or changes after its
entry was built keeps being served from the original chunks. Requests that
need current content go through the on-demand path instead.
"""

from __future__ import annotations

import logging
import threading
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable

    from .chunking import Chunk

LOG = logging.getLogger("chunk_server.cache")


class ChunkCache:
    def __init__(self) -> None:
        self._entries: dict[str, tuple[Chunk, ...]] = {}
        self._lock = threading.Lock()
        self._build_locks: dict[str, threading.Lock] = {}

    def get_or_build(
        self, key: str, build: Callable[[], Iterable[Chunk] | None]
    ) -> tuple[Chunk, ...] | None:
        """Return the chunks cached under ``key``, building them on first use.

        Concurrent first requests for the same key run ``build`` once; the
        others wait for that build and share its result. A build that returns
        None is not cached, so the next request tries again.
        """
        entry = self._entries.get(key)
        if entry is not None:
            return entry

        with self._lock:
            build_lock = self._build_locks.setdefault(key, threading.Lock())

        try:
            with build_lock:
                entry = self._entries.get(key)
                if entry is not None:
                    return entry

                chunks = build()
                if chunks is None:
                    LOG.debug("nothing cached for %s (build failed)", key)
                    return None

                entry = tuple(chunks)
                self._entries[key] = entry
        finally:
            with self._lock:
                if self._build_locks.get(key) is build_lock:
                    del self._build_locks[key]

        LOG.info("cached %s in %d chunks", key, len(entry))
        return entry

    def lookup(self, key: str, index: int) -> Chunk | None:
        entry = self._entries.get(key)
        if entry is None or not 0 <= index < len(entry):
            return None
        return entry[index]

    def clear(self) -> None:
        with self._lock:
            count = len(self._entries)
            self._entries.clear()
            self._build_locks.clear()
        if count:
            LOG.info("released %d cached chunk lists", count)

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)
