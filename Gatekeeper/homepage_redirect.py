"""
HOMEPAGE REDIRECT
=================
Send visitors of the bare site root to the public frontend.
"""

# FLOW:
# - GET/HEAD "/" answers 302 to the configured URL.
# HOW:
# - Disabled when no target URL is configured. API and admin paths never
#   equal "/", so they are untouched.

from __future__ import annotations

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import RedirectResponse


class HomepageRedirectMiddleware(BaseHTTPMiddleware):
    def __init__(self, app, target_url: str = ""):
        super().__init__(app)
        self.target_url = target_url

    async def dispatch(self, request, call_next):
        if self.target_url and request.method in {"GET", "HEAD"} and request.url.path == "/":
            return RedirectResponse(url=self.target_url, status_code=302)
        return await call_next(request)
