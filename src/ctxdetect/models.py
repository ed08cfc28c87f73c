# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""Data model shared by the rule store, evaluator, cache and facade."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from enum import StrEnum


class Confidence(StrEnum):
    """Strength of the evidence behind a match."""

    HIGH = "high"  # URL pattern
    MEDIUM = "medium"  # domain keyword
    LOW = "low"  # page content keyword


def _as_tuple(values: Iterable[str] | None) -> tuple[str, ...]:
    if values is None:
        return ()
    if isinstance(values, str):
        return (values,)
    return tuple(values)


@dataclass(frozen=True, slots=True)
class Rule:
    """Signals that indicate a client integration is relevant to a page.

    Sequences are stored as tuples; lists passed by callers are converted so a
    registered rule can never change underneath the evaluator.
    """

    client_id: str
    patterns: tuple[str, ...] = ()
    domain_hints: tuple[str, ...] = ()
    content_hints: tuple[str, ...] = ()
    priority: int = 0

    def __post_init__(self) -> None:
        object.__setattr__(self, "patterns", _as_tuple(self.patterns))
        object.__setattr__(self, "domain_hints", _as_tuple(self.domain_hints))
        object.__setattr__(self, "content_hints", _as_tuple(self.content_hints))
        object.__setattr__(self, "priority", int(self.priority or 0))


@dataclass(frozen=True, slots=True)
class Context:
    """A classification query: the page URL plus an optional text snapshot."""

    url: str
    content: str | None = None


@dataclass(frozen=True, slots=True)
class Match:
    """One rule's positive classification result for a context."""

    client_id: str
    confidence: Confidence
    reason: str
    matched_pattern: str | None = None
    matched_hint: str | None = None


@dataclass(frozen=True, slots=True)
class Suggestion:
    """A match rendered for display to the user."""

    client_id: str
    display_text: str
    confidence: Confidence
