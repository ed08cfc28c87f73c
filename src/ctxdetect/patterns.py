# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""Wildcard URL pattern compiler.

Patterns are shell-style: ``*`` matches any run of characters (including
none), everything else is literal and compared case-insensitively.  The
compiled regex is anchored to the whole URL, so ``*://github.com/*`` does not
match ``https://evil.example/?github.com/``.

Any string is a valid pattern.  ``""`` matches only the empty URL and ``"*"``
matches everything.
"""

from __future__ import annotations

import re
from functools import lru_cache

_WILDCARD = "*"


@lru_cache(maxsize=1024)
def compile_pattern(pattern: str) -> re.Pattern[str]:
    """Compile a wildcard *pattern* into a case-insensitive, fully anchored regex."""
    body = ".*".join(re.escape(part) for part in pattern.split(_WILDCARD))
    return re.compile(rf"\A{body}\Z", re.IGNORECASE | re.DOTALL)


def pattern_matches(pattern: str, url: str) -> bool:
    """True when *url* matches the wildcard *pattern* end to end."""
    return compile_pattern(pattern).match(url) is not None
