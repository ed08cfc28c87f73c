# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""ContextDetector: public query surface of the classification engine.

Wires RuleStore -> evaluator -> ResultCache and exposes classification,
per-client checks and display helpers.  The detector makes no assumption
about which integrations exist; consumers filter the match list for the
clients they have configured.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Mapping
from typing import Any

from .cache import ResultCache
from .config import DetectorConfig
from .logging_config import configure_from, set_engine_level
from .evaluator import evaluate
from .models import Confidence, Context, Match, Rule, Suggestion
from .rule_loader import load_rules, rule_from_mapping
from .rule_store import RuleStore
from .scheduler import EvictionScheduler

logger = logging.getLogger("ctxdetect.detector")


def display_text(match: Match) -> str:
    """Short user-facing phrasing for a match, by confidence tier."""
    if match.confidence == Confidence.HIGH:
        name = match.client_id[:1].upper() + match.client_id[1:]
        return f"Detected: on {name} page"
    if match.confidence == Confidence.MEDIUM:
        return f"Suggested: {match.matched_hint} detected in URL"
    if match.confidence == Confidence.LOW:
        return f"Suggested: {match.matched_hint} found in page content"
    return match.reason


class ContextDetector:
    """Classifies (URL, content) contexts against registered rules."""

    def __init__(
        self,
        rule_store: RuleStore | None = None,
        config: DetectorConfig | None = None,
        *,
        scheduler: EvictionScheduler | None = None,
    ) -> None:
        self._config = config or DetectorConfig()
        self._rules = rule_store if rule_store is not None else RuleStore()
        self._cache = ResultCache(
            self._evaluate,
            ttl=self._config.cache_ttl,
            content_key_chars=self._config.content_key_chars,
            scheduler=scheduler,
        )
        self._unsubscribe = self._rules.subscribe(self._cache.invalidate_all)

    @classmethod
    def from_config(cls, config: DetectorConfig, **kwargs: Any) -> ContextDetector:
        """Detector with cache settings from *config* and its rule file registered."""
        detector = cls(config=config, **kwargs)
        if config.rules_file is not None:
            for rule in load_rules(config.rules_file):
                detector.add_rule(rule)
        return detector

    def _evaluate(self, context: Context) -> tuple[Match, ...]:
        return evaluate(context, self._rules.all_rules())

    # -- Queries --

    def classify(self, url: str, content: str | None = None) -> tuple[Match, ...]:
        """All matches for the context, in rule evaluation order."""
        return self._cache.get_or_compute(Context(url=url, content=content))

    def suggested_clients(self, url: str, content: str | None = None) -> tuple[Match, ...]:
        """Same as :meth:`classify`; kept for callers of the older API."""
        return self.classify(url, content)

    def is_suggested(self, client_id: str, url: str, content: str | None = None) -> bool:
        return any(m.client_id == client_id for m in self.classify(url, content))

    def reason_for(self, client_id: str, url: str, content: str | None = None) -> str | None:
        """Reason of the first match for *client_id*, or None when it does not match."""
        return next((m.reason for m in self.classify(url, content) if m.client_id == client_id), None)

    def display_text(self, match: Match) -> str:
        return display_text(match)

    def suggestions(self, url: str, content: str | None = None) -> tuple[Suggestion, ...]:
        """Matches rendered for display, in the same order."""
        return tuple(
            Suggestion(client_id=m.client_id, display_text=display_text(m), confidence=m.confidence)
            for m in self.classify(url, content)
        )

    # -- Rules --

    def add_rule(self, rule: Rule | Mapping[str, Any]) -> Rule:
        """Register a custom rule (a Rule or a rule mapping).  Returns the stored Rule."""
        if not isinstance(rule, Rule):
            rule = rule_from_mapping(rule)
        self._rules.add_rule(rule)
        return rule

    def remove_rule(self, client_id: str) -> int:
        return self._rules.remove_rule(client_id)

    def all_rules(self) -> tuple[Rule, ...]:
        return self._rules.all_rules()

    @property
    def rule_store(self) -> RuleStore:
        return self._rules

    # -- Cache --

    def clear_cache(self) -> None:
        self._cache.invalidate_all()

    @property
    def cache(self) -> ResultCache:
        return self._cache

    def close(self) -> None:
        """Detach from the rule store and cancel pending evictions."""
        self._unsubscribe()
        self._cache.close()


# ---------------------------------------------------------------------------
# Shared instance
# ---------------------------------------------------------------------------

_default: ContextDetector | None = None
_default_lock = threading.Lock()


def get_detector() -> ContextDetector:
    """Process-wide detector built from ``CTXDETECT_*`` environment settings."""
    global _default
    with _default_lock:
        if _default is None:
            config = DetectorConfig.from_env()
            if config.configure_logging:
                configure_from(config)
            set_engine_level(config.log_level)
            _default = ContextDetector.from_config(config)
            logger.debug("Default detector created: rules=%d", len(_default.all_rules()))
        return _default


def reset_detector() -> None:
    """Drop the shared instance (tests, config reloads)."""
    global _default
    with _default_lock:
        if _default is not None:
            _default.close()
        _default = None
