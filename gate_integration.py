"""
GATE INTEGRATION MODULE
=======================
Centralized wiring of the gatekeeper modules into a FastAPI application.

MODULES INTEGRATED:
1. gate_config - Central gate configuration
2. origin_matcher - Exact and wildcard origin matching
3. allow_list - Allow-list snapshot provider
4. gatekeeper - Ordered decision pipeline
5. cors_security - Origin gate middleware
6. csrf_protection - Anti-forgery tokens for the admin form
7. homepage_redirect - Site root redirect
8. error_handling - Structured error bodies
9. activity_logging / metrics - Decision logs and counters
"""

from __future__ import annotations

import logging
from typing import Optional

from Gatekeeper.allow_list import AllowListStore
from Gatekeeper.cors_security import OriginGateMiddleware
from Gatekeeper.csrf_protection import CSRFMiddleware
from Gatekeeper.error_handling import register_error_handlers
from Gatekeeper.gate_config import GATE_SETTINGS, feature_enabled
from Gatekeeper.gatekeeper import Gatekeeper
from Gatekeeper.homepage_redirect import HomepageRedirectMiddleware
from Gatekeeper.metrics import set_allow_list_size


class GateIntegration:
    """
    Owns the allow-list store and the gatekeeper for one application and
    registers the middlewares in the order requests should meet them.
    """

    def __init__(self, app=None, settings: Optional[dict] = None, store: Optional[AllowListStore] = None):
        self.app = app
        self.settings = dict(GATE_SETTINGS if settings is None else settings)
        self.store = store or AllowListStore.from_patterns(self.settings.get("CORS_ALLOWED_DOMAINS", []))
        self.gatekeeper = Gatekeeper.from_settings(self.settings)
        self.logger = logging.getLogger("gate")

    def apply_middlewares(self, app) -> None:
        """Apply gate middlewares; the last one added runs first."""
        admin_prefix = self.settings.get("ADMIN_PREFIX", "/admin")
        enable_csrf = bool(self.settings.get("CSRF_ENABLED", True))

        # 3. CSRF for the admin form, closest to the routes
        if enable_csrf:
            app.add_middleware(CSRFMiddleware, protected_paths=[admin_prefix])
        else:
            self.logger.warning("CSRF protection disabled for %s", admin_prefix)

        # 2. Origin gate; the admin area skips origin checks but keeps the guard
        app.add_middleware(
            OriginGateMiddleware,
            allow_list=self.store,
            gatekeeper=self.gatekeeper,
            enabled=feature_enabled("origin-gate", True),
            exempt_paths=[admin_prefix],
        )

        # 1. Homepage redirect, before anything else
        redirect_url = self.settings.get("HOMEPAGE_REDIRECT_URL", "")
        if redirect_url:
            app.add_middleware(HomepageRedirectMiddleware, target_url=redirect_url)

        set_allow_list_size(len(self.store.snapshot()))
        self.logger.info(
            "Gate configured: namespace=%s patterns=%d csrf=%s redirect=%s",
            self.settings.get("API_NAMESPACE"),
            len(self.store.snapshot()),
            enable_csrf,
            redirect_url or "-",
        )


def apply_gate_to_app(app, settings: Optional[dict] = None, store: Optional[AllowListStore] = None) -> GateIntegration:
    """
    Apply the gate to a FastAPI app instance.

    Usage:
        from fastapi import FastAPI
        from gate_integration import apply_gate_to_app

        app = FastAPI()
        gate = apply_gate_to_app(app)
    """
    gate = GateIntegration(app, settings=settings, store=store)
    gate.apply_middlewares(app)
    register_error_handlers(app)
    app.state.gate = gate
    return gate
