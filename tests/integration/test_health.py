"""Integration tests for GET /health against a stubbed MongoDB handle."""

from contextlib import asynccontextmanager
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from errors import register_error_handlers
from routes.health_routes import router as health_router


@pytest.fixture
def fake_db():
    db = MagicMock()
    db.client.admin.command = AsyncMock(return_value={"ok": 1})
    return db


@pytest.fixture
def health_client(fake_db):
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        app.state.db = fake_db
        yield

    app = FastAPI(lifespan=lifespan)
    register_error_handlers(app)
    app.include_router(health_router)
    with TestClient(app) as c:
        yield c


def test_healthy(health_client, fake_db):
    resp = health_client.get("/health")
    assert resp.status_code == 200
    assert resp.json() == {"status": "healthy", "checks": {"mongodb": "ok"}}
    fake_db.client.admin.command.assert_awaited_once_with("ping")


def test_unhealthy_when_ping_fails(health_client, fake_db):
    fake_db.client.admin.command.side_effect = ConnectionError("connection refused")
    resp = health_client.get("/health")
    assert resp.status_code == 503
    assert resp.json() == {"status": "unhealthy", "checks": {"mongodb": "error"}}
