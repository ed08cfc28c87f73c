# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""Declarative rule definitions (mappings, YAML or JSON files).

Rule files are read once at startup and never written back.  Accepted shapes::

    rules:
      - client_id: acme
        patterns: ["*://*.acme.dev/*"]
        domain_hints: [acme]
        content_hints: [Acme]
        priority: 5

or a bare top-level list of rule mappings.  camelCase keys (``clientId``,
``domainHints``, ``contentHints``) are accepted as aliases.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .errors import RuleValidationError
from .models import Rule

logger = logging.getLogger("ctxdetect.rule_loader")


class RuleSpec(BaseModel):
    """Validated form of a user-declared rule."""

    model_config = ConfigDict(populate_by_name=True, extra="forbid")

    client_id: str = Field(min_length=1, alias="clientId", description="Integration identifier")
    patterns: list[str] = Field(default_factory=list, description="URL wildcard patterns, tried in order")
    domain_hints: list[str] = Field(default_factory=list, alias="domainHints")
    content_hints: list[str] = Field(default_factory=list, alias="contentHints")
    priority: int | None = Field(0, description="Higher is evaluated first; null means 0")

    def to_rule(self) -> Rule:
        return Rule(
            client_id=self.client_id,
            patterns=tuple(self.patterns),
            domain_hints=tuple(self.domain_hints),
            content_hints=tuple(self.content_hints),
            priority=self.priority or 0,
        )


def rule_from_mapping(data: Mapping[str, Any], *, source: str = "") -> Rule:
    """Validate one rule mapping and return the immutable Rule."""
    try:
        return RuleSpec.model_validate(dict(data)).to_rule()
    except ValidationError as e:
        raise RuleValidationError(f"Invalid rule {source or data!r}: {e}", source=source) from e


def parse_rules(data: Any, *, source: str = "") -> list[Rule]:
    """Turn decoded rule-file content into Rules, preserving declaration order."""
    if data is None:
        return []
    if isinstance(data, Mapping):
        data = data.get("rules", [])
    if not isinstance(data, list):
        raise RuleValidationError(
            f"Rule file must contain a list of rules or a 'rules' list, got {type(data).__name__}",
            source=source,
        )

    rules: list[Rule] = []
    for index, item in enumerate(data):
        where = f"{source}[{index}]" if source else f"[{index}]"
        if not isinstance(item, Mapping):
            raise RuleValidationError(f"Rule {where} must be a mapping", source=source)
        rules.append(rule_from_mapping(item, source=where))
    return rules


def load_rules(path: str | Path) -> list[Rule]:
    """Read rules from a ``.json`` file or a YAML file (any other suffix)."""
    path = Path(path)
    text = path.read_text(encoding="utf-8")
    try:
        if path.suffix.lower() == ".json":
            data = json.loads(text)
        else:
            data = yaml.safe_load(text)
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        raise RuleValidationError(f"Cannot parse rule file {path}: {e}", source=str(path)) from e

    rules = parse_rules(data, source=str(path))
    logger.info("Loaded %d rule(s) from %s", len(rules), path)
    return rules
