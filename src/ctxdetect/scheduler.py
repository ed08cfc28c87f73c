# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""Deferred callbacks on one background thread.

The result cache schedules one eviction per stored entry.  All of them share
a single daemon worker that sleeps until the earliest deadline, so the thread
count stays at one however many entries are live.

- **Heap** ordered by (deadline, sequence); ties run in scheduling order.
- **Cancel** marks the call; the worker skips it.  Cancelled calls are
  compacted out once they make up most of the heap.
- **Lazy worker**: started on the first ``call_later`` and again after
  ``close()``, so a closed scheduler can be reused.
- **Clock**: ``time.monotonic()``.
"""

from __future__ import annotations

import heapq
import itertools
import logging
import threading
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

logger = logging.getLogger("ctxdetect.scheduler")

_COMPACT_MIN_SIZE = 64


@dataclass(order=True, slots=True)
class ScheduledCall:
    """Handle for a pending callback.  ``cancel()`` is idempotent."""

    when: float
    seq: int
    callback: Callable[..., Any] = field(compare=False)
    args: tuple[Any, ...] = field(default=(), compare=False)
    cancelled: bool = field(default=False, compare=False)
    _owner: EvictionScheduler | None = field(default=None, compare=False, repr=False)

    def cancel(self) -> None:
        if self.cancelled:
            return
        self.cancelled = True
        if self._owner is not None:
            self._owner._note_cancelled()


class EvictionScheduler:
    """Runs ``callback(*args)`` after a delay on a shared daemon thread."""

    def __init__(self, name: str = "ctxdetect-evictor") -> None:
        self._name = name
        self._heap: list[ScheduledCall] = []
        self._seq = itertools.count()
        self._cancelled = 0
        self._cond = threading.Condition()
        self._thread: threading.Thread | None = None
        self._stopping = False

    def call_later(self, delay: float, callback: Callable[..., Any], *args: Any) -> ScheduledCall:
        call = ScheduledCall(time.monotonic() + delay, next(self._seq), callback, args, _owner=self)
        with self._cond:
            heapq.heappush(self._heap, call)
            self._compact_locked()
            if self._thread is None:
                self._stopping = False
                self._thread = threading.Thread(target=self._run, name=self._name, daemon=True)
                self._thread.start()
            self._cond.notify()
        return call

    def _note_cancelled(self) -> None:
        with self._cond:
            self._cancelled += 1

    def _compact_locked(self) -> None:
        if len(self._heap) < _COMPACT_MIN_SIZE or self._cancelled * 2 < len(self._heap):
            return
        self._heap = [c for c in self._heap if not c.cancelled]
        heapq.heapify(self._heap)
        self._cancelled = 0

    def _run(self) -> None:
        while True:
            with self._cond:
                while True:
                    if self._stopping:
                        return
                    while self._heap and self._heap[0].cancelled:
                        heapq.heappop(self._heap)
                        self._cancelled = max(0, self._cancelled - 1)
                    if not self._heap:
                        self._cond.wait()
                        continue
                    delay = self._heap[0].when - time.monotonic()
                    if delay > 0:
                        self._cond.wait(delay)
                        continue
                    call = heapq.heappop(self._heap)
                    break
            try:
                call.callback(*call.args)
            except Exception:
                logger.exception("Scheduled callback failed: %r", call.callback)

    # -- Lifecycle --

    def close(self, timeout: float = 1.0) -> None:
        """Drop pending calls and stop the worker.  ``call_later`` restarts it."""
        with self._cond:
            thread = self._thread
            self._stopping = True
            for call in self._heap:
                call.cancelled = True
            self._heap.clear()
            self._cancelled = 0
            self._cond.notify_all()
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout)
        with self._cond:
            if self._thread is thread:
                self._thread = None

    # -- Introspection --

    @property
    def pending(self) -> int:
        """Calls scheduled and not cancelled."""
        with self._cond:
            return sum(1 for c in self._heap if not c.cancelled)

    @property
    def running(self) -> bool:
        thread = self._thread
        return thread is not None and thread.is_alive()
