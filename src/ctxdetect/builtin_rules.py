# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""Built-in rules for common SaaS integrations.

Fixed at import time and never removable.  All share priority 10, so their
relative order here is their evaluation order among equals.  The browser
client is always on and is handled outside the classifier.
"""

from __future__ import annotations

from .models import Rule

BUILTIN_PRIORITY = 10

BUILT_IN_RULES: tuple[Rule, ...] = (
    Rule(
        client_id="jira",
        patterns=(
            "*://*.atlassian.net/browse/*",
            "*://*.atlassian.net/jira/*",
            "*://jira.*/*",
            "*://*.jira.com/*",
        ),
        domain_hints=("jira", "atlassian"),
        content_hints=("JIRA", "issue", "sprint", "backlog"),
        priority=BUILTIN_PRIORITY,
    ),
    Rule(
        client_id="confluence",
        patterns=(
            "*://*.atlassian.net/wiki/*",
            "*://confluence.*/*",
            "*://*.confluence.com/*",
        ),
        domain_hints=("confluence", "wiki"),
        content_hints=("Confluence", "space", "page tree"),
        priority=BUILTIN_PRIORITY,
    ),
    Rule(
        client_id="github",
        patterns=("*://github.com/*", "*://gist.github.com/*", "*://*.github.io/*"),
        domain_hints=("github",),
        content_hints=("GitHub", "repository", "pull request", "commit"),
        priority=BUILTIN_PRIORITY,
    ),
    Rule(
        client_id="gitlab",
        patterns=("*://gitlab.com/*", "*://*.gitlab.com/*"),
        domain_hints=("gitlab",),
        content_hints=("GitLab", "merge request"),
        priority=BUILTIN_PRIORITY,
    ),
    Rule(
        client_id="slack",
        patterns=("*://*.slack.com/*", "*://app.slack.com/*"),
        domain_hints=("slack",),
        content_hints=("Slack", "channel", "workspace"),
        priority=BUILTIN_PRIORITY,
    ),
    Rule(
        client_id="notion",
        patterns=("*://www.notion.so/*", "*://notion.so/*"),
        domain_hints=("notion",),
        content_hints=("Notion",),
        priority=BUILTIN_PRIORITY,
    ),
    Rule(
        client_id="linear",
        patterns=("*://linear.app/*",),
        domain_hints=("linear",),
        content_hints=("Linear", "issue", "project"),
        priority=BUILTIN_PRIORITY,
    ),
    Rule(
        client_id="figma",
        patterns=("*://www.figma.com/*", "*://figma.com/*"),
        domain_hints=("figma",),
        content_hints=("Figma", "design", "prototype"),
        priority=BUILTIN_PRIORITY,
    ),
    Rule(
        client_id="pinterest",
        patterns=("*://www.pinterest.com/*", "*://pinterest.com/*", "*://*.pinterest.com/*"),
        domain_hints=("pinterest",),
        content_hints=("Pinterest", "pin", "board"),
        priority=BUILTIN_PRIORITY,
    ),
)
