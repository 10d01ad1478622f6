"""
GATE METRICS
============
Prometheus-backed counters for gate decisions.
"""

from __future__ import annotations

import os
from typing import Dict

from prometheus_client import Counter, Gauge


_DECISIONS = None
_PATTERNS = None


def _enabled() -> bool:
    return os.getenv("PROMETHEUS_ENABLED", "true").lower() == "true"


def _init_metrics() -> None:
    global _DECISIONS, _PATTERNS
    if _DECISIONS or not _enabled():
        return
    _DECISIONS = Counter(
        "gate_decisions_total",
        "Count of origin gate decisions",
        ["decision"],
    )
    _PATTERNS = Gauge(
        "gate_allow_list_patterns",
        "Number of patterns in the current allow-list",
    )


def increment_decision(kind: str, amount: int = 1) -> None:
    _init_metrics()
    if not _DECISIONS:
        return
    _DECISIONS.labels(decision=kind).inc(amount)


def set_allow_list_size(size: int) -> None:
    _init_metrics()
    if not _PATTERNS:
        return
    _PATTERNS.set(size)


def get_decision_metrics_snapshot(kinds: list[str]) -> Dict[str, Dict[str, int]]:
    """Current counter values per decision kind, zero when metrics are off."""
    _init_metrics()
    return {
        kind: {"events": int(_DECISIONS.labels(decision=kind)._value.get()) if _DECISIONS else 0}
        for kind in kinds
    }


def get_allow_list_size() -> int:
    _init_metrics()
    if not _PATTERNS:
        return 0
    return int(_PATTERNS._value.get())
