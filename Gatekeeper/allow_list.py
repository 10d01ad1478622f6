"""
ALLOW LIST
==========
Snapshot provider for the configured origin allow-list.
"""

# FLOW:
# - The admin form writes a newline-separated blob with update().
# - The gate reads it once per request with snapshot().
# HOW:
# - A lock guards the blob; parsing happens on every read, nothing is cached.

from __future__ import annotations

import threading
from typing import Callable, Iterable, Sequence

from Gatekeeper.origin_matcher import parse_patterns

AllowListProvider = Callable[[], Sequence[str]]


class AllowListStore:
    def __init__(self, blob: str = ""):
        self._lock = threading.Lock()
        self._blob = blob or ""

    @classmethod
    def from_patterns(cls, patterns: Iterable[str]) -> "AllowListStore":
        return cls("\n".join(patterns))

    def raw(self) -> str:
        with self._lock:
            return self._blob

    def update(self, blob: str | None) -> tuple[str, ...]:
        """Replace the stored blob and return the parsed result."""
        blob = (blob or "").replace("\r\n", "\n")
        with self._lock:
            self._blob = blob
        return tuple(parse_patterns(blob))

    def snapshot(self) -> tuple[str, ...]:
        return tuple(parse_patterns(self.raw()))

    def __call__(self) -> tuple[str, ...]:
        return self.snapshot()
