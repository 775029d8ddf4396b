"""Bounded memoization of EnhancedTypeInfo keyed by type name."""

from __future__ import annotations

import logging
import time
from collections import OrderedDict
from typing import Any

from fhirnav.models.schema import EnhancedTypeInfo

logger = logging.getLogger(__name__)


class EnhancedTypeCache:
    """
    LRU cache with an optional TTL.

    Only a latency optimisation: a miss must never change what the caller
    eventually computes. ``ttl_seconds`` of None or 0 disables expiry.
    """

    def __init__(self, max_size: int = 100, ttl_seconds: float | None = None):
        if max_size < 1:
            raise ValueError("max_size must be at least 1")
        self.max_size = max_size
        self.ttl_seconds = ttl_seconds or None
        self._entries: OrderedDict[tuple[str, str | None], tuple[float, EnhancedTypeInfo]] = (
            OrderedDict()
        )
        self.hits = 0
        self.misses = 0

    def get(self, type_name: str, context_key: str | None = None) -> EnhancedTypeInfo | None:
        key = (type_name, context_key)
        entry = self._entries.get(key)
        if entry is None:
            self.misses += 1
            return None

        stored_at, value = entry
        if self.ttl_seconds is not None and time.monotonic() - stored_at > self.ttl_seconds:
            del self._entries[key]
            self.misses += 1
            return None

        self._entries.move_to_end(key)
        self.hits += 1
        return value

    def put(
        self, type_name: str, value: EnhancedTypeInfo, context_key: str | None = None
    ) -> None:
        key = (type_name, context_key)
        self._entries[key] = (time.monotonic(), value)
        self._entries.move_to_end(key)
        while len(self._entries) > self.max_size:
            evicted, _ = self._entries.popitem(last=False)
            logger.debug("Evicted '%s' from enhanced type cache", evicted[0])

    def clear(self) -> None:
        self._entries.clear()
        self.hits = 0
        self.misses = 0

    def stats(self) -> dict[str, Any]:
        return {
            "size": len(self._entries),
            "max_size": self.max_size,
            "hits": self.hits,
            "misses": self.misses,
        }

    def __len__(self) -> int:
        return len(self._entries)
