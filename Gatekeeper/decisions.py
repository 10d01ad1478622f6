"""
GATE DECISIONS
==============
Decision objects produced per request and the errors behind rejections.
"""

# FLOW:
# - Gatekeeper stages return one of the decision types below.
# - Rejections carry a GateError that renders the structured 403 body.
# HOW:
# - Body shape: {"code", "message", "data": {"status", ...}}.

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


class GateError(Exception):
    """Base error with an HTTP status code and a structured body."""

    status_code = 403
    code = "rest_forbidden"

    def __init__(
        self,
        detail: str,
        *,
        status_code: int | None = None,
        code: str | None = None,
        data: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(detail)
        self.detail = detail
        if status_code is not None:
            self.status_code = status_code
        if code is not None:
            self.code = code
        self.data = data or {}

    def to_body(self) -> dict[str, Any]:
        return error_body(self.code, self.detail, self.status_code, **self.data)


class DirectAccessBlocked(GateError):
    pass


class OriginForbidden(GateError):
    def __init__(self, origin: str, detail: str = "Origin not allowed.") -> None:
        super().__init__(detail, data={"origin": origin})
        self.origin = origin


class CapabilityRequired(GateError):
    pass


def error_body(code: str, message: str, status: int, **data: Any) -> dict[str, Any]:
    return {"code": code, "message": message, "data": {"status": status, **data}}


@dataclass(frozen=True)
class Decision:
    kind = "decision"
    terminal = False

    @property
    def status_code(self) -> int | None:
        return None


@dataclass(frozen=True)
class Blocked(Decision):
    reason: str
    kind = "blocked"
    terminal = True

    @property
    def status_code(self) -> int:
        return 403

    def error(self) -> GateError:
        return DirectAccessBlocked(self.reason)


@dataclass(frozen=True)
class PreflightAccepted(Decision):
    headers: dict[str, str] = field(default_factory=dict)
    kind = "preflight"
    terminal = True

    @property
    def status_code(self) -> int:
        return 200


@dataclass(frozen=True)
class Allowed(Decision):
    origin: str
    headers: dict[str, str] = field(default_factory=dict)
    kind = "allowed"


@dataclass(frozen=True)
class Forbidden(Decision):
    origin: str
    kind = "forbidden"
    terminal = True

    @property
    def status_code(self) -> int:
        return 403

    def error(self) -> GateError:
        return OriginForbidden(self.origin)


@dataclass(frozen=True)
class PassedThrough(Decision):
    kind = "pass"
