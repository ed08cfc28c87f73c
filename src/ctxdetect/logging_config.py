# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""Logging setup for the ``ctxdetect`` logger tree.

Engine modules log through plain ``logging.getLogger("ctxdetect.<module>")``
and never configure handlers themselves.  A host that embeds the detector has
two knobs:

- :func:`set_engine_level` only adjusts the ``ctxdetect`` logger, leaving the
  host's handlers alone.  ``get_detector()`` applies ``CTXDETECT_LOG_LEVEL``
  this way.
- :func:`configure` installs a structlog-rendered stderr handler on the root
  logger (console or JSON).  ``get_detector()`` calls :func:`configure_from`
  when ``CTXDETECT_CONFIGURE_LOGGING`` is set.

Every record from the ``ctxdetect`` tree gets a ``component`` key (``cache``,
``rule_store``, ...) so JSON lines can be filtered per engine part.

Leaf module: no other ctxdetect imports at module level.
"""

from __future__ import annotations

import logging
import sys
from typing import TYPE_CHECKING, Any

import structlog

if TYPE_CHECKING:
    from .config import DetectorConfig

ENGINE_LOGGER = "ctxdetect"


def add_component(_logger: Any, _method: str, event_dict: dict[str, Any]) -> dict[str, Any]:
    """structlog processor: ``ctxdetect.cache`` -> ``component="cache"``."""
    name = event_dict.get("logger", "")
    if isinstance(name, str) and name.startswith(ENGINE_LOGGER + "."):
        event_dict.setdefault("component", name[len(ENGINE_LOGGER) + 1 :])
    return event_dict


_SHARED_PROCESSORS: list = [
    structlog.contextvars.merge_contextvars,
    structlog.stdlib.add_logger_name,
    add_component,
    structlog.stdlib.add_log_level,
    structlog.processors.TimeStamper(fmt="iso"),
    structlog.processors.format_exc_info,
]


def _level_number(level: str) -> int:
    value = logging.getLevelName(level.upper())
    return value if isinstance(value, int) else logging.INFO


def set_engine_level(level: str) -> None:
    """Set the ``ctxdetect`` logger level; unknown names mean INFO."""
    logging.getLogger(ENGINE_LOGGER).setLevel(_level_number(level))


def configure(*, json_output: bool = False, level: str = "INFO") -> None:
    """Route all stdlib logging to stderr through structlog.

    Args:
        json_output: JSON lines instead of console output.
        level: Root logger level.  The ``ctxdetect`` logger is reset to
            inherit it.
    """
    structlog.configure(
        processors=[
            *_SHARED_PROCESSORS,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    renderer = structlog.processors.JSONRenderer() if json_output else structlog.dev.ConsoleRenderer(colors=False)
    formatter = structlog.stdlib.ProcessorFormatter(
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            renderer,
        ],
        foreign_pre_chain=_SHARED_PROCESSORS,
    )

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(formatter)

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(_level_number(level))
    logging.getLogger(ENGINE_LOGGER).setLevel(logging.NOTSET)


def configure_from(config: DetectorConfig) -> None:
    """Apply ``json_logs`` and ``log_level`` from a DetectorConfig."""
    configure(json_output=config.json_logs, level=config.log_level)
