"""In-memory key-value cache with per-entry TTL.

One instance is created by the caller and passed into the components that
memoize work (region resolver, orchestrator). Nothing in the engine keeps a
process-wide cache of its own.
"""

from __future__ import annotations

import hashlib
import json
import logging
import time
from dataclasses import dataclass
from typing import Any, Callable

logger = logging.getLogger(__name__)


@dataclass
class _Entry:
    value: Any
    expires_at: float | None


def make_key(namespace: str, *parts: Any) -> str:
    """Stable cache key: namespace plus a short digest of the JSON-encoded parts."""
    payload = json.dumps(parts, sort_keys=True, default=str)
    return f"{namespace}:{hashlib.sha256(payload.encode()).hexdigest()[:16]}"


class CacheService:
    """get / set / cleanup store used for memoizing layout and document work."""

    def __init__(
        self,
        default_ttl: float | None = 3600,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._entries: dict[str, _Entry] = {}
        self._default_ttl = default_ttl
        self._clock = clock
        self.hits = 0
        self.misses = 0

    def get(self, key: str) -> Any | None:
        entry = self._entries.get(key)
        if entry is None:
            self.misses += 1
            return None
        if entry.expires_at is not None and entry.expires_at <= self._clock():
            del self._entries[key]
            self.misses += 1
            return None
        self.hits += 1
        return entry.value

    def set(self, key: str, value: Any, ttl: float | None = None) -> None:
        ttl = self._default_ttl if ttl is None else ttl
        expires_at = self._clock() + ttl if ttl else None
        self._entries[key] = _Entry(value=value, expires_at=expires_at)

    def delete(self, key: str) -> bool:
        return self._entries.pop(key, None) is not None

    def cleanup(self) -> dict[str, int]:
        """Drop expired entries."""
        now = self._clock()
        expired = [
            key for key, entry in self._entries.items()
            if entry.expires_at is not None and entry.expires_at <= now
        ]
        for key in expired:
            del self._entries[key]
        if expired:
            logger.debug("Cache cleanup removed %d expired entries", len(expired))
        return {"deletedCount": len(expired)}

    def clear(self) -> None:
        self._entries.clear()
        self.hits = 0
        self.misses = 0

    def stats(self) -> dict[str, int]:
        return {"size": len(self._entries), "hits": self.hits, "misses": self.misses}

    def __len__(self) -> int:
        return len(self._entries)
