"""
CORS SECURITY
=============
Origin allow-list gate for API hardening.
"""

# FLOW:
# - add_origin_gate(app, allow_list) registers the gate once at startup.
# - Each request is turned into a RequestDescriptor and decided.
# - Exempt prefixes (the admin area) skip preflight and origin validation
#   but still pass the discovery guard.
# WHY:
# - Keeps anonymous tooling out of the API namespace and limits which
#   web origins may call it.
# HOW:
# - Rejections become structured 403s, preflights end with headers only,
#   allowed origins get CORS headers on the downstream response.

from __future__ import annotations

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import JSONResponse, Response

from Gatekeeper.activity_logging import get_logger, log_decision
from Gatekeeper.allow_list import AllowListProvider
from Gatekeeper.decisions import Allowed, Blocked, Forbidden, PassedThrough, PreflightAccepted
from Gatekeeper.gatekeeper import Gatekeeper, RequestDescriptor
from Gatekeeper.metrics import increment_decision

# Upstream middleware sets this scope key once authentication has decided.
ALREADY_DECIDED_KEY = "gate.already_decided"

# Exempt areas still pass the discovery guard.
EXEMPT_SKIPPED_STAGES = ("preflight", "origin-validation")


def clean_prefixes(prefixes: list[str] | None) -> list[str]:
    """Drop blank prefixes; "" or "/" would otherwise cover every path."""
    return [p.rstrip("/") for p in prefixes or [] if p.strip("/")]


def under_prefix(path: str, prefixes: list[str]) -> bool:
    return any(path == p or path.startswith(p + "/") for p in prefixes)


def describe_request(request) -> RequestDescriptor:
    raw_path = request.scope.get("raw_path")
    target = raw_path.decode("latin-1") if raw_path else request.url.path
    query = request.scope.get("query_string", b"")
    if query:
        target = f"{target}?{query.decode('latin-1')}"
    return RequestDescriptor(
        method=request.method,
        target=target,
        origin=request.headers.get("origin") or None,
        already_decided=bool(request.scope.get(ALREADY_DECIDED_KEY)),
    )


def _merge_vary(response: Response, value: str) -> None:
    existing = response.headers.get("vary")
    if not existing:
        response.headers["Vary"] = value
        return
    parts = [part.strip() for part in existing.split(",")]
    if value.lower() not in {part.lower() for part in parts}:
        response.headers["Vary"] = f"{existing}, {value}"


class OriginGateMiddleware(BaseHTTPMiddleware):
    def __init__(
        self,
        app,
        allow_list: AllowListProvider,
        gatekeeper: Gatekeeper | None = None,
        enabled: bool = True,
        exempt_paths: list[str] | None = None,
    ):
        super().__init__(app)
        self.allow_list = allow_list
        self.gatekeeper = gatekeeper or Gatekeeper()
        self.enabled = enabled
        self.exempt_paths = clean_prefixes(exempt_paths)
        self.logger = get_logger()

    async def dispatch(self, request, call_next):
        if not self.enabled:
            return await call_next(request)
        skip = EXEMPT_SKIPPED_STAGES if under_prefix(request.url.path, self.exempt_paths) else ()
        decision = self.gatekeeper.decide(describe_request(request), self.allow_list, skip)
        increment_decision(decision.kind)
        if not isinstance(decision, PassedThrough):
            log_decision(self.logger, request, decision)

        if isinstance(decision, (Blocked, Forbidden)):
            error = decision.error()
            return JSONResponse(error.to_body(), status_code=error.status_code)

        if isinstance(decision, PreflightAccepted):
            return Response(status_code=decision.status_code, headers=decision.headers)

        response = await call_next(request)
        if isinstance(decision, Allowed):
            for name, value in decision.headers.items():
                if name == "Vary":
                    _merge_vary(response, value)
                else:
                    response.headers[name] = value
        return response


def add_origin_gate(app, allow_list: AllowListProvider, gatekeeper: Gatekeeper | None = None, **options):
    app.add_middleware(OriginGateMiddleware, allow_list=allow_list, gatekeeper=gatekeeper, **options)
