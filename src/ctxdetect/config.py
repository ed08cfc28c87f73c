# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""Detector configuration.

Everything has a working default; the host application can override values
through ``CTXDETECT_*`` environment variables:

- ``CTXDETECT_CACHE_TTL``          seconds a result stays cached (default 30)
- ``CTXDETECT_CONTENT_KEY_CHARS``  content prefix length in the cache key (default 100)
- ``CTXDETECT_RULES_FILE``         YAML/JSON file with extra rules (optional)
- ``CTXDETECT_LOG_LEVEL``          level of the ``ctxdetect`` loggers (default INFO)
- ``CTXDETECT_LOG_JSON``           ``1``/``true`` for JSON log lines
- ``CTXDETECT_CONFIGURE_LOGGING``  ``1``/``true`` to let the shared detector install
                                   the structlog handler (off by default)
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

from .cache import DEFAULT_CONTENT_KEY_CHARS, DEFAULT_TTL_SECONDS
from .errors import ConfigError

_TRUTHY = frozenset({"1", "true", "yes", "on"})
_LOG_LEVELS = frozenset({"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"})


@dataclass(frozen=True, slots=True)
class DetectorConfig:
    """Immutable configuration for a ContextDetector."""

    cache_ttl: float = DEFAULT_TTL_SECONDS
    content_key_chars: int = DEFAULT_CONTENT_KEY_CHARS
    rules_file: Path | None = None
    log_level: str = "INFO"
    json_logs: bool = False
    configure_logging: bool = False

    def __post_init__(self) -> None:
        if self.cache_ttl <= 0:
            raise ConfigError(f"cache_ttl must be > 0, got {self.cache_ttl}")
        if self.content_key_chars < 0:
            raise ConfigError(f"content_key_chars must be >= 0, got {self.content_key_chars}")
        if self.log_level.upper() not in _LOG_LEVELS:
            raise ConfigError(f"log_level must be one of {sorted(_LOG_LEVELS)}, got {self.log_level!r}")

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> DetectorConfig:
        """Build a config from ``CTXDETECT_*`` variables (``os.environ`` by default)."""
        env = os.environ if environ is None else environ

        raw_ttl = env.get("CTXDETECT_CACHE_TTL", "").strip()
        raw_chars = env.get("CTXDETECT_CONTENT_KEY_CHARS", "").strip()
        raw_rules = env.get("CTXDETECT_RULES_FILE", "").strip()
        raw_level = env.get("CTXDETECT_LOG_LEVEL", "").strip()
        raw_json = env.get("CTXDETECT_LOG_JSON", "").strip().lower()
        raw_configure = env.get("CTXDETECT_CONFIGURE_LOGGING", "").strip().lower()

        try:
            ttl = float(raw_ttl) if raw_ttl else DEFAULT_TTL_SECONDS
        except ValueError:
            raise ConfigError(f"CTXDETECT_CACHE_TTL must be a number, got {raw_ttl!r}") from None
        try:
            chars = int(raw_chars) if raw_chars else DEFAULT_CONTENT_KEY_CHARS
        except ValueError:
            raise ConfigError(f"CTXDETECT_CONTENT_KEY_CHARS must be an integer, got {raw_chars!r}") from None

        return cls(
            cache_ttl=ttl,
            content_key_chars=chars,
            rules_file=Path(raw_rules) if raw_rules else None,
            log_level=raw_level.upper() or "INFO",
            json_logs=raw_json in _TRUTHY,
            configure_logging=raw_configure in _TRUTHY,
        )
