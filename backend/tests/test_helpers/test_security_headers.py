"""Tests for the security headers middleware."""

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from helpers.security_headers import API_CSP, DOCS_CSP, SecurityHeadersMiddleware


@pytest.fixture
def app_client():
    app = FastAPI()
    app.add_middleware(SecurityHeadersMiddleware)

    @app.get("/api/ping")
    def ping():
        return {"ok": True}

    @app.get("/api/cached")
    def cached():
        from fastapi.responses import JSONResponse

        return JSONResponse({"ok": True}, headers={"Cache-Control": "max-age=60"})

    return TestClient(app)


def test_api_responses_are_hardened(app_client):
    response = app_client.get("/api/ping")

    assert response.headers["X-Content-Type-Options"] == "nosniff"
    assert response.headers["X-Frame-Options"] == "DENY"
    assert response.headers["Content-Security-Policy"] == API_CSP
    assert response.headers["Cache-Control"] == "no-store, max-age=0"
    assert "Strict-Transport-Security" not in response.headers


def test_docs_get_relaxed_policy(app_client):
    response = app_client.get("/docs")

    assert response.headers["Content-Security-Policy"] == DOCS_CSP


def test_existing_cache_control_is_kept(app_client):
    response = app_client.get("/api/cached")

    assert response.headers["Cache-Control"] == "max-age=60"


def test_hsts_in_production(app_client, monkeypatch):
    from models.config import settings

    monkeypatch.setattr(settings, "ENVIRONMENT", "production")

    response = app_client.get("/api/ping")

    assert response.headers["Strict-Transport-Security"].startswith("max-age=")
