# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""Tiered match evaluator.

For each rule, in the order given, three tiers are tried:

  1. URL patterns   -> ``high``    (first pattern that matches the whole URL)
  2. Domain hints   -> ``medium``  (first hint that is a substring of the hostname)
  3. Content hints  -> ``low``     (first hint found in the lowercased content)

The first tier that hits produces the rule's only match and the remaining
tiers are skipped.  Rules that hit nothing contribute nothing.  The output is
in rule order, not confidence order.
"""

from __future__ import annotations

from collections.abc import Iterable
from urllib.parse import urlsplit

from .models import Confidence, Context, Match, Rule
from .patterns import compile_pattern


def extract_domain(url: str) -> str:
    """Lowercase hostname of *url*, or ``""`` when it has none or cannot be parsed.

    Scheme-relative URLs (``//host/path``) have no scheme and yield ``""``.
    """
    try:
        parts = urlsplit(url)
        hostname = parts.hostname
    except ValueError:
        return ""
    if not parts.scheme:
        return ""
    return hostname.lower() if hostname else ""


def _first_hint(haystack: str, hints: Iterable[str]) -> str | None:
    for hint in hints:
        if hint and hint.lower() in haystack:
            return hint
    return None


def match_rule(rule: Rule, url: str, domain: str, content_lower: str | None) -> Match | None:
    """Return the single match *rule* produces for a context, or None."""
    for pattern in rule.patterns:
        if compile_pattern(pattern).match(url):
            return Match(
                client_id=rule.client_id,
                confidence=Confidence.HIGH,
                reason=f"URL matches pattern: {pattern}",
                matched_pattern=pattern,
            )

    if domain:
        hint = _first_hint(domain, rule.domain_hints)
        if hint is not None:
            return Match(
                client_id=rule.client_id,
                confidence=Confidence.MEDIUM,
                reason=f'Domain contains "{hint}"',
                matched_hint=hint,
            )

    if content_lower and rule.content_hints:
        hint = _first_hint(content_lower, rule.content_hints)
        if hint is not None:
            return Match(
                client_id=rule.client_id,
                confidence=Confidence.LOW,
                reason=f'Page content contains "{hint}"',
                matched_hint=hint,
            )

    return None


def evaluate(context: Context, rules: Iterable[Rule]) -> tuple[Match, ...]:
    """Classify *context* against *rules* (already in evaluation order)."""
    domain = extract_domain(context.url)
    content_lower = context.content.lower() if context.content else None
    matches: list[Match] = []
    for rule in rules:
        match = match_rule(rule, context.url, domain, content_lower)
        if match is not None:
            matches.append(match)
    return tuple(matches)
