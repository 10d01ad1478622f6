"""
CSRF PROTECTION
===============
Anti-forgery token middleware for the allow-list admin form.

FLOW:
- Generate token on session (or reuse the csrf_token cookie).
- Validate token on state-changing requests under the protected prefixes.
- Set csrf_token cookie for form injection.

HOW:
- Verifies header/form token matches the session token. Urlencoded and
  multipart forms are both read.
"""

from __future__ import annotations

import secrets
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import JSONResponse

from Gatekeeper.cors_security import clean_prefixes, under_prefix
from Gatekeeper.decisions import error_body


SAFE_METHODS = {"GET", "HEAD", "OPTIONS", "TRACE"}
FORM_CONTENT_TYPES = ("application/x-www-form-urlencoded", "multipart/form-data")


def _reject(message: str) -> JSONResponse:
    return JSONResponse(error_body("rest_cookie_invalid_nonce", message, 403), status_code=403)


class CSRFMiddleware(BaseHTTPMiddleware):
    def __init__(
        self,
        app,
        cookie_name: str = "csrf_token",
        enabled: bool = True,
        protected_paths: list[str] | None = None,
    ):
        super().__init__(app)
        self.cookie_name = cookie_name
        self.enabled = enabled
        self.protected_paths = clean_prefixes(protected_paths) or ["/admin"]

    def _protects(self, path: str) -> bool:
        return under_prefix(path, self.protected_paths)

    async def dispatch(self, request, call_next):
        if not self.enabled or not self._protects(request.url.path):
            return await call_next(request)

        session = request.scope.get("session", {})
        token = session.get("_csrf") or request.cookies.get(self.cookie_name)
        if not token:
            token = secrets.token_urlsafe(32)
        session["_csrf"] = token
        request.scope["session"] = session
        request.state.csrf_token = token

        if request.method not in SAFE_METHODS:
            form = None
            if request.headers.get("content-type", "").startswith(FORM_CONTENT_TYPES):
                # cache the body so the route can parse the form again
                await request.body()
                form = await request.form()

            header_token = request.headers.get("x-csrf-token")
            form_token = form.get("csrf_token") if form else None
            if not header_token and not form_token:
                return _reject("CSRF token missing")
            if not secrets.compare_digest(str(header_token or form_token), token):
                return _reject("CSRF token invalid")

        response = await call_next(request)
        response.set_cookie(self.cookie_name, token, httponly=False, samesite="lax")
        return response
