from fastapi import FastAPI, Request

from gate_integration import apply_gate_to_app
from .admin_routes import register_admin_routes


def create_app(settings: dict | None = None, store=None) -> FastAPI:
    app = FastAPI(title="Origin Gatekeeper")
    gate = apply_gate_to_app(app, settings=settings, store=store)
    namespace = gate.settings.get("API_NAMESPACE", "/wp-json")

    @app.get(namespace + "/wp/v2/posts")
    async def list_posts():
        return [{"id": 1, "title": "Hello world"}]

    @app.post(namespace + "/wp/v2/posts")
    async def create_post(request: Request):
        payload = await request.json()
        return {"id": 2, "title": payload.get("title", "")}

    @app.get("/")
    async def home():
        return {"status": "ok"}

    @app.get("/health")
    async def health():
        return {"status": "ok"}

    register_admin_routes(app)
    return app


app = create_app()
