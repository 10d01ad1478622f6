"""
ERROR HANDLING
==============
Render gate errors as structured JSON and mask unexpected failures.
"""

# FLOW:
# - register_error_handlers(app) installs handlers at startup.
# HOW:
# - GateError -> {"code", "message", "data": {"status", ...}}.
# - Anything else -> generic 500 without internal details.

from __future__ import annotations

import logging

from fastapi import Request
from fastapi.responses import JSONResponse

from Gatekeeper.decisions import GateError, error_body

logger = logging.getLogger("gate.errors")


def register_error_handlers(app):
    @app.exception_handler(GateError)
    async def gate_error_handler(request: Request, exc: GateError):
        return JSONResponse(exc.to_body(), status_code=exc.status_code)

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse(
            error_body("internal_error", "An error occurred", 500),
            status_code=500,
        )
