import os
import tempfile

# must be set before Gatekeeper.gate_config is imported
os.environ.setdefault("GATE_LOG_DIR", tempfile.mkdtemp(prefix="gate-logs-"))
os.environ.setdefault("HOMEPAGE_REDIRECT_URL", "")

import pytest
from fastapi.testclient import TestClient

from Gatekeeper.allow_list import AllowListStore
from Gatekeeper.gate_config import load_settings


@pytest.fixture
def patterns():
    return ["example.com", "*.example.com", "good.com"]


@pytest.fixture
def store(patterns):
    return AllowListStore.from_patterns(patterns)


@pytest.fixture
def settings():
    return load_settings()


@pytest.fixture
def app(settings, store):
    from app.main import create_app

    return create_app(settings=settings, store=store)


@pytest.fixture
def client(app):
    return TestClient(app)
