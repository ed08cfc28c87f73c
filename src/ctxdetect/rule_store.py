# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""Rule store: built-in + custom rules, merged and ordered by priority.

Readers never lock.  Every mutation builds a new ordered tuple and swaps it in
under ``_lock``, so an evaluator holding a snapshot never sees a half-updated
rule set.  Subscribers (the result cache) are notified synchronously before
the mutating call returns.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Iterable

from .builtin_rules import BUILT_IN_RULES
from .models import Rule

logger = logging.getLogger("ctxdetect.rule_store")

InvalidationCallback = Callable[[], None]


def order_rules(rules: Iterable[Rule]) -> tuple[Rule, ...]:
    """Stable sort by descending priority (ties keep their input order)."""
    return tuple(sorted(rules, key=lambda r: -r.priority))


class RuleStore:
    """Holds the built-in and dynamically registered rules."""

    def __init__(self, builtin_rules: Iterable[Rule] = BUILT_IN_RULES) -> None:
        self._builtins: tuple[Rule, ...] = tuple(builtin_rules)
        self._customs: tuple[Rule, ...] = ()
        self._ordered: tuple[Rule, ...] = order_rules(self._builtins)
        self._generation = 0
        self._lock = threading.Lock()
        self._subscribers: list[InvalidationCallback] = []

    # -- Mutation --

    def add_rule(self, rule: Rule) -> None:
        """Register a custom rule after the existing ones."""
        with self._lock:
            self._swap(self._customs + (rule,))
        logger.debug("Rule added: client_id=%s priority=%d", rule.client_id, rule.priority)
        self._notify()

    def remove_rule(self, client_id: str) -> int:
        """Remove every custom rule for *client_id*.  Returns how many were removed.

        Built-in rules are not removable.  The cache is invalidated even when
        nothing matched.
        """
        with self._lock:
            kept = tuple(r for r in self._customs if r.client_id != client_id)
            removed = len(self._customs) - len(kept)
            self._swap(kept)
        logger.debug("Rule removed: client_id=%s count=%d", client_id, removed)
        self._notify()
        return removed

    def _swap(self, customs: tuple[Rule, ...]) -> None:
        # caller holds _lock; nothing is assigned if ordering raises
        ordered = order_rules(self._builtins + customs)
        self._customs = customs
        self._ordered = ordered
        self._generation += 1

    # -- Read --

    def all_rules(self) -> tuple[Rule, ...]:
        """Immutable snapshot in evaluation order."""
        return self._ordered

    def builtin_rules(self) -> tuple[Rule, ...]:
        return self._builtins

    def custom_rules(self) -> tuple[Rule, ...]:
        return self._customs

    @property
    def generation(self) -> int:
        """Incremented on every mutation."""
        return self._generation

    # -- Invalidation hooks --

    def subscribe(self, callback: InvalidationCallback) -> Callable[[], None]:
        """Call *callback* after every mutation.  Returns an unsubscribe function."""
        with self._lock:
            self._subscribers.append(callback)

        def unsubscribe() -> None:
            with self._lock:
                if callback in self._subscribers:
                    self._subscribers.remove(callback)

        return unsubscribe

    def _notify(self) -> None:
        with self._lock:
            subscribers = list(self._subscribers)
        for callback in subscribers:
            callback()
