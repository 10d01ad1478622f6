from pathlib import Path

from fastapi import Request
from fastapi.templating import Jinja2Templates

from Gatekeeper.allow_list import AllowListStore
from Gatekeeper.decisions import CapabilityRequired

templates = Jinja2Templates(directory=str(Path(__file__).resolve().parent / "templates"))

ROLE_CAPABILITIES = {
    "admin": {"manage_options", "read"},
    "editor": {"read"},
}


def get_allow_list_store(request: Request) -> AllowListStore:
    return request.app.state.gate.store


def get_session_role(request: Request) -> str | None:
    # sessions are populated by the host's auth layer
    session = request.scope.get("session") or {}
    return session.get("role")


def require_capability(capability: str):
    def checker(request: Request) -> str:
        role = get_session_role(request)
        if capability not in ROLE_CAPABILITIES.get(role or "", set()):
            raise CapabilityRequired("Sorry, you are not allowed to manage allowed origins.")
        return role
    return checker


can_manage_options = require_capability("manage_options")
