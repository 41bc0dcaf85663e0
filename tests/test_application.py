from __future__ import annotations

from fastapi.testclient import TestClient

import blocksapi.application as application
from blocksapi.config import Settings


def test_health_check(client):
    response = client.get("/")

    assert response.status_code == 200
    assert response.json()["status"] == "ok"


def test_building_the_app_leaves_logging_alone(monkeypatch, settings: Settings, sample_platform):
    calls = []
    monkeypatch.setattr(application, "setup_logging", calls.append)

    with TestClient(application.create_app(settings, sample_platform)):
        pass

    assert calls == []


def test_logging_is_configured_on_startup(monkeypatch, sample_platform):
    calls = []
    monkeypatch.setattr(application, "setup_logging", calls.append)
    settings = Settings(catalog_file=None, log_level="DEBUG")

    app = application.create_app(settings, sample_platform, configure_logging=True)
    assert calls == []

    with TestClient(app):
        assert calls == ["DEBUG"]
