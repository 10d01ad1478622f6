from fastapi import Depends, Form, Request
from fastapi.responses import HTMLResponse, RedirectResponse

from Gatekeeper.activity_logging import get_logger
from Gatekeeper.allow_list import AllowListStore
from Gatekeeper.metrics import set_allow_list_size
from .app_context import templates, get_allow_list_store, can_manage_options


def register_admin_routes(app):

    @app.get("/admin/cors-origins", response_class=HTMLResponse)
    async def cors_origins_page(
        request: Request,
        role: str = Depends(can_manage_options),
        store: AllowListStore = Depends(get_allow_list_store),
    ):
        return templates.TemplateResponse(
            request,
            "admin_cors_origins.html",
            {
                "domains": store.raw(),
                "patterns": store.snapshot(),
                "csrf_token": getattr(request.state, "csrf_token", ""),
                "saved": request.query_params.get("saved") == "1",
            },
        )

    @app.post("/admin/cors-origins")
    async def save_cors_origins(
        request: Request,
        domains: str = Form(""),
        role: str = Depends(can_manage_options),
        store: AllowListStore = Depends(get_allow_list_store),
    ):
        patterns = store.update(domains)
        set_allow_list_size(len(patterns))
        get_logger("gate.admin").info(
            "allow-list updated role=%s patterns=%d ip=%s",
            role,
            len(patterns),
            request.client.host if request.client else "unknown",
        )
        return RedirectResponse("/admin/cors-origins?saved=1", status_code=303)
