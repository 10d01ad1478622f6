"""
GATE CONFIG
===========
Centralized gatekeeper settings loaded from environment.
"""

# FLOW:
# - Read env vars once and expose GATE_SETTINGS.
# WHY:
# - Keeps namespace, header and allow-list tuning per environment.
# HOW:
# - Loads the active .env file, then reads env vars into a dict.

from __future__ import annotations

import os
import logging
import dotenv


def get_bool(name: str, default: bool = False) -> bool:
    return os.getenv(name, str(default)).lower() == "true"


def get_int(name: str, default: int) -> int:
    try:
        return int(os.getenv(name, str(default)))
    except ValueError:
        return default


def get_list(name: str, default: list[str]) -> list[str]:
    raw = os.getenv(name)
    if not raw:
        return default
    return [item.strip() for item in raw.split(",") if item.strip()]


def get_str(name: str, default: str = "") -> str:
    return os.getenv(name, default).strip()


def feature_enabled(name: str, default: bool = True) -> bool:
    """Toggle lookup: feature "origin-gate" reads FEATURE_ORIGIN_GATE."""
    key = "FEATURE_" + name.upper().replace("-", "_")
    return get_bool(key, default)


def _env_name() -> str:
    env = os.getenv("APP_ENV", "").strip().lower()
    if env in {"prod", "production"}:
        return ".env.production"
    return ".env.localhost"


def _env_path() -> str:
    root = os.path.dirname(os.path.dirname(__file__))
    return os.path.join(root, _env_name())


dotenv.load_dotenv(_env_path())

if os.getenv("APP_ENV_LOG", "false").lower() == "true":
    logging.getLogger("gate.env").info("Active env file: %s", _env_path())


def load_settings() -> dict:
    """Build a fresh settings dict from the current environment."""
    return {
        "API_NAMESPACE": get_str("API_NAMESPACE", "/wp-json"),
        "CORS_ALLOWED_DOMAINS": get_list("CORS_ALLOWED_DOMAINS", []),
        "CORS_ALLOW_METHODS": get_list("CORS_ALLOW_METHODS", ["GET", "POST", "OPTIONS"]),
        "CORS_ALLOW_HEADERS": get_list(
            "CORS_ALLOW_HEADERS", ["Authorization", "Content-Type", "X-Requested-With"]
        ),
        "CORS_MAX_AGE": get_int("CORS_MAX_AGE", 86400),
        "HOMEPAGE_REDIRECT_URL": get_str("HOMEPAGE_REDIRECT_URL", ""),
        "ADMIN_PREFIX": get_str("ADMIN_PREFIX", "/admin"),
        "CSRF_ENABLED": get_bool("CSRF_ENABLED", True),
        "GATE_LOG_DIR": get_str("GATE_LOG_DIR", "logs"),
    }


GATE_SETTINGS = load_settings()
