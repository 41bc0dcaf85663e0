from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from blocksapi.application import create_app
from blocksapi.config import DEFAULT_CATALOG_FILE, Settings
from blocksapi.storage import InMemoryPlatform, load_catalog


@pytest.fixture()
def settings() -> Settings:
    return Settings(catalog_file=None)


@pytest.fixture()
def sample_platform(settings: Settings) -> InMemoryPlatform:
    return load_catalog(settings, DEFAULT_CATALOG_FILE)


@pytest.fixture()
def client(settings: Settings, sample_platform: InMemoryPlatform):
    app = create_app(settings, sample_platform)
    with TestClient(app) as c:
        yield c


@pytest.fixture()
def editor_headers() -> dict:
    return {"X-Session-Token": "demo-editor"}


@pytest.fixture()
def customer_headers() -> dict:
    return {"X-Session-Token": "demo-customer"}
