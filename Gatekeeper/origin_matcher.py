"""
ORIGIN MATCHER
==============
Exact and wildcard matching of Origin values against domain patterns.
"""

# FLOW:
# - normalize_origin() strips the scheme and one trailing slash.
# - is_allowed() walks the patterns in order and stops at the first match.
# HOW:
# - "*.example.com" matches any host with at least one label before
#   ".example.com", never the apex itself. Comparison is case-sensitive.

from __future__ import annotations

import re
from typing import Iterable

_SCHEMES = ("http://", "https://")
WILDCARD_PREFIX = "*."


def normalize_origin(value: str) -> str:
    for scheme in _SCHEMES:
        if value.startswith(scheme):
            value = value[len(scheme):]
            break
    if value.endswith("/"):
        value = value[:-1]
    return value


def parse_patterns(blob: str | None) -> list[str]:
    """Split a newline-separated allow-list into trimmed, non-blank patterns."""
    if not blob:
        return []
    return [line.strip() for line in blob.splitlines() if line.strip()]


def _wildcard_match(origin: str, pattern: str) -> bool:
    suffix = pattern[len(WILDCARD_PREFIX):]
    return re.fullmatch(r".+\." + re.escape(suffix), origin) is not None


def match_pattern(origin: str, pattern: str) -> bool:
    """Match an already normalized origin against one raw pattern."""
    pattern = pattern.strip()
    if not pattern:
        return False
    pattern = normalize_origin(pattern)
    if origin == pattern:
        return True
    if pattern.startswith(WILDCARD_PREFIX):
        return _wildcard_match(origin, pattern)
    return False


def is_allowed(origin: str, patterns: Iterable[str]) -> bool:
    normalized = normalize_origin(origin)
    return any(match_pattern(normalized, pattern) for pattern in patterns)
