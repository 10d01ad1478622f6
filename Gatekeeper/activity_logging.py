"""
GATE ACTIVITY LOGGING
=====================
Structured logging of gate decisions.

FLOW:
- OriginGateMiddleware calls log_decision() for every non pass-through outcome.
- Admin allow-list edits are logged on the "gate.admin" logger.

HOW:
- Writes key=value lines to <GATE_LOG_DIR>/gate.log.
"""

from __future__ import annotations

import logging
import os
from logging.handlers import RotatingFileHandler

from Gatekeeper.decisions import Decision
from Gatekeeper.gate_config import GATE_SETTINGS


def get_logger(name: str = "gate.activity") -> logging.Logger:
    # the file handler lives on the "gate" parent; children propagate to it
    parent = logging.getLogger("gate")
    if not parent.handlers:
        log_dir = GATE_SETTINGS.get("GATE_LOG_DIR") or "logs"
        os.makedirs(log_dir, exist_ok=True)
        handler = RotatingFileHandler(os.path.join(log_dir, "gate.log"), maxBytes=2_000_000, backupCount=3)
        formatter = logging.Formatter("%(asctime)s %(name)s %(levelname)s %(message)s")
        handler.setFormatter(formatter)
        parent.setLevel(logging.INFO)
        parent.addHandler(handler)
    return logging.getLogger(name)


def log_decision(logger: logging.Logger, request, decision: Decision) -> None:
    level = logging.WARNING if decision.terminal and decision.status_code == 403 else logging.INFO
    logger.log(
        level,
        "decision=%s method=%s path=%s origin=%s status=%s ip=%s",
        decision.kind,
        request.method,
        request.url.path,
        request.headers.get("origin", ""),
        decision.status_code or "",
        request.client.host if request.client else "unknown",
    )
