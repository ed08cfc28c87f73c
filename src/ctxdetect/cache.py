# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""Time-bounded memoization of classification results.

Key: the full URL joined with the first ``content_key_chars`` characters of the
page content.  Two contexts that differ only past that prefix share an entry.

Each stored entry gets its own eviction call (30s default) on the cache's
EvictionScheduler, which runs every eviction on one shared thread.  Expiry is
scheduled, not checked on read.  Eviction calls are tracked per key and
cancelled whenever their entry is dropped, so at most one is pending per live
entry.  An eviction that fires for an entry that was already replaced or
dropped does nothing.

Any rule-set mutation drops the whole cache.  A result computed while an
invalidation happened is handed back to the caller but never stored.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from .models import Context, Match
from .scheduler import EvictionScheduler

logger = logging.getLogger("ctxdetect.cache")

DEFAULT_TTL_SECONDS = 30.0
DEFAULT_CONTENT_KEY_CHARS = 100

Compute = Callable[[Context], tuple[Match, ...]]


def cache_key(url: str, content: str | None, content_key_chars: int = DEFAULT_CONTENT_KEY_CHARS) -> str:
    """Composite key: ``<url>:<content prefix>``."""
    prefix = content[:content_key_chars] if content else ""
    return f"{url}:{prefix}"


# ---------------------------------------------------------------------------
# Cache stats (observability)
# ---------------------------------------------------------------------------


@dataclass
class CacheStats:
    """Counters for cache behaviour."""

    hits: int = 0
    misses: int = 0
    ttl_expirations: int = 0
    invalidations: int = 0
    discarded: int = 0  # results computed across an invalidation, not stored

    @property
    def hit_rate(self) -> float:
        total = self.hits + self.misses
        return self.hits / total if total > 0 else 0.0


@dataclass(slots=True)
class _Entry:
    matches: tuple[Match, ...]
    eviction: Any


# ---------------------------------------------------------------------------
# ResultCache
# ---------------------------------------------------------------------------


class ResultCache:
    """Memoizes ``compute(context)`` per cache key for ``ttl`` seconds."""

    def __init__(
        self,
        compute: Compute,
        *,
        ttl: float = DEFAULT_TTL_SECONDS,
        content_key_chars: int = DEFAULT_CONTENT_KEY_CHARS,
        scheduler: EvictionScheduler | None = None,
    ) -> None:
        self._compute = compute
        self._ttl = ttl
        self._content_key_chars = content_key_chars
        self._owns_scheduler = scheduler is None
        self._scheduler = scheduler if scheduler is not None else EvictionScheduler()
        self._entries: dict[str, _Entry] = {}
        self._epoch = 0
        self._lock = threading.Lock()
        self._stats = CacheStats()

    @property
    def ttl(self) -> float:
        return self._ttl

    def key_for(self, context: Context) -> str:
        return cache_key(context.url, context.content, self._content_key_chars)

    # -- Lookup --

    def get_or_compute(self, context: Context) -> tuple[Match, ...]:
        """Return cached matches for *context*, evaluating on a miss."""
        key = self.key_for(context)
        with self._lock:
            entry = self._entries.get(key)
            if entry is not None:
                self._stats.hits += 1
                return entry.matches
            self._stats.misses += 1
            epoch = self._epoch

        # Evaluate outside the lock.
        matches = self._compute(context)

        with self._lock:
            if epoch != self._epoch:
                self._stats.discarded += 1
                logger.debug("Cache store skipped (invalidated during compute): %s", key)
                return matches
            existing = self._entries.get(key)
            if existing is not None:
                # Another caller stored the same key first; keep its eviction.
                return existing.matches
            entry = _Entry(matches=matches, eviction=None)
            entry.eviction = self._scheduler.call_later(self._ttl, self._expire, key, entry)
            self._entries[key] = entry

        logger.debug("Cache store: key=%s matches=%d size=%d", key, len(matches), len(self._entries))
        return matches

    def _expire(self, key: str, entry: _Entry) -> None:
        with self._lock:
            if self._entries.get(key) is not entry:
                return
            del self._entries[key]
            self._stats.ttl_expirations += 1
        logger.debug("Cache TTL expired: %s", key)

    # -- Invalidation --

    def invalidate_all(self) -> None:
        """Drop every entry and cancel their pending evictions."""
        with self._lock:
            entries = list(self._entries.values())
            self._entries.clear()
            self._epoch += 1
            self._stats.invalidations += 1
        for entry in entries:
            entry.eviction.cancel()
        logger.debug("Cache invalidate_all: dropped=%d", len(entries))

    def close(self) -> None:
        """Drop entries and stop an owned scheduler.  The cache stays usable."""
        self.invalidate_all()
        if self._owns_scheduler:
            self._scheduler.close()

    # -- Introspection --

    def __contains__(self, context: object) -> bool:
        if not isinstance(context, Context):
            return False
        with self._lock:
            return self.key_for(context) in self._entries

    @property
    def size(self) -> int:
        return len(self._entries)

    @property
    def stats(self) -> CacheStats:
        return self._stats
