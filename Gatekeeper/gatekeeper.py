"""
REQUEST GATEKEEPER
==================
Ordered stage pipeline that turns a request into a gate decision.
"""

# FLOW:
# - AuthGuard blocks originless access to the API namespace.
# - PreflightStage answers OPTIONS with the fixed preflight headers.
# - OriginValidationStage allows or forbids requests carrying an Origin.
# - PassThrough lets originless, non-API requests continue untouched.
# HOW:
# - The first stage returning a decision wins. The allow-list provider is
#   read once per decision and the snapshot is handed to every stage.

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Sequence

from Gatekeeper.allow_list import AllowListProvider
from Gatekeeper.decisions import (
    Allowed,
    Blocked,
    Decision,
    Forbidden,
    PassedThrough,
    PreflightAccepted,
)
from Gatekeeper.origin_matcher import is_allowed

DEFAULT_API_NAMESPACE = "/wp-json"
DEFAULT_ALLOW_METHODS = ("GET", "POST", "OPTIONS")
DEFAULT_ALLOW_HEADERS = ("Authorization", "Content-Type", "X-Requested-With")
DEFAULT_MAX_AGE = 86400
DIRECT_ACCESS_MESSAGE = "Direct access not allowed."


@dataclass(frozen=True)
class RequestDescriptor:
    method: str
    target: str
    origin: Optional[str] = None
    already_decided: bool = False

    @property
    def has_origin(self) -> bool:
        return bool(self.origin)


@dataclass(frozen=True)
class CorsPolicy:
    allow_methods: Sequence[str] = DEFAULT_ALLOW_METHODS
    allow_headers: Sequence[str] = DEFAULT_ALLOW_HEADERS
    max_age: int = DEFAULT_MAX_AGE

    @classmethod
    def from_settings(cls, settings: dict) -> "CorsPolicy":
        return cls(
            allow_methods=tuple(settings.get("CORS_ALLOW_METHODS", DEFAULT_ALLOW_METHODS)),
            allow_headers=tuple(settings.get("CORS_ALLOW_HEADERS", DEFAULT_ALLOW_HEADERS)),
            max_age=int(settings.get("CORS_MAX_AGE", DEFAULT_MAX_AGE)),
        )

    def preflight_headers(self) -> dict[str, str]:
        return {
            "Access-Control-Allow-Methods": ", ".join(self.allow_methods),
            "Access-Control-Allow-Headers": ", ".join(self.allow_headers),
            "Access-Control-Max-Age": str(self.max_age),
        }

    def origin_headers(self, origin: str) -> dict[str, str]:
        return {
            "Access-Control-Allow-Origin": origin,
            "Access-Control-Allow-Methods": ", ".join(self.allow_methods),
            "Access-Control-Allow-Headers": ", ".join(self.allow_headers),
            "Access-Control-Allow-Credentials": "true",
            "Vary": "Origin",
        }


class Stage:
    name = "stage"

    def evaluate(
        self, request: RequestDescriptor, patterns: Sequence[str], policy: CorsPolicy
    ) -> Optional[Decision]:
        raise NotImplementedError


class AuthGuard(Stage):
    """Reject originless requests whose target mentions the API namespace."""

    name = "auth-guard"

    def __init__(self, namespace: str = DEFAULT_API_NAMESPACE):
        self.namespace = namespace

    def evaluate(self, request, patterns, policy):
        # an earlier authentication result stands
        if request.already_decided:
            return None
        if self.namespace and self.namespace in request.target and not request.has_origin:
            return Blocked(DIRECT_ACCESS_MESSAGE)
        return None


class PreflightStage(Stage):
    name = "preflight"

    def evaluate(self, request, patterns, policy):
        if request.method.upper() == "OPTIONS":
            return PreflightAccepted(headers=policy.preflight_headers())
        return None


class OriginValidationStage(Stage):
    name = "origin-validation"

    def evaluate(self, request, patterns, policy):
        if not request.has_origin:
            return None
        if is_allowed(request.origin, patterns):
            return Allowed(request.origin, headers=policy.origin_headers(request.origin))
        return Forbidden(request.origin)


class PassThrough(Stage):
    name = "pass-through"

    def evaluate(self, request, patterns, policy):
        return PassedThrough()


def default_stages(namespace: str = DEFAULT_API_NAMESPACE) -> list[Stage]:
    return [AuthGuard(namespace), PreflightStage(), OriginValidationStage(), PassThrough()]


DEFAULT_STAGES = tuple(default_stages())


class Gatekeeper:
    def __init__(
        self,
        stages: Sequence[Stage] | None = None,
        policy: CorsPolicy | None = None,
    ):
        self.stages = tuple(stages) if stages is not None else DEFAULT_STAGES
        self.policy = policy or CorsPolicy()

    @classmethod
    def from_settings(cls, settings: dict) -> "Gatekeeper":
        namespace = settings.get("API_NAMESPACE", DEFAULT_API_NAMESPACE)
        return cls(default_stages(namespace), CorsPolicy.from_settings(settings))

    def evaluate(
        self, request: RequestDescriptor, patterns: Sequence[str], skip: Sequence[str] = ()
    ) -> Decision:
        for stage in self.stages:
            if stage.name in skip:
                continue
            decision = stage.evaluate(request, patterns, self.policy)
            if decision is not None:
                return decision
        return PassedThrough()

    def decide(
        self, request: RequestDescriptor, allow_list: AllowListProvider, skip: Sequence[str] = ()
    ) -> Decision:
        """Decide one request against a single read of the allow-list.

        Stages named in ``skip`` are left out for this decision only.
        """
        patterns = tuple(allow_list())
        return self.evaluate(request, patterns, skip)
