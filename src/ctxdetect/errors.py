# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""ctxdetect exception hierarchy.

All ctxdetect-specific errors inherit from CtxDetectError, allowing callers
to catch the base class for any configuration failure or specific subclasses
for targeted handling.  Classification itself never raises.
"""

from __future__ import annotations


class CtxDetectError(Exception):
    """Base exception for all ctxdetect errors."""


class ConfigError(CtxDetectError):
    """Invalid detector configuration (bad env value, out-of-range TTL)."""


class RuleValidationError(CtxDetectError):
    """A declared rule failed validation (rule file or rule mapping)."""

    def __init__(self, message: str, *, source: str = "") -> None:
        super().__init__(message)
        self.source = source
