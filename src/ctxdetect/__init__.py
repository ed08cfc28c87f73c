# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""ctxdetect: decide which client integration is relevant to a page.

Classifies a URL (optionally with page text) against registered rules:
- URL wildcard patterns  -> high confidence
- domain keywords        -> medium confidence
- page content keywords  -> low confidence
"""

from __future__ import annotations

from .builtin_rules import BUILT_IN_RULES
from .detector import ContextDetector, display_text, get_detector, reset_detector
from .errors import ConfigError, CtxDetectError, RuleValidationError
from .models import Confidence, Context, Match, Rule, Suggestion

__version__ = "0.1.0"

__all__ = [
    "BUILT_IN_RULES",
    "Confidence",
    "ConfigError",
    "Context",
    "ContextDetector",
    "CtxDetectError",
    "Match",
    "Rule",
    "RuleValidationError",
    "Suggestion",
    "display_text",
    "get_detector",
    "reset_detector",
]
