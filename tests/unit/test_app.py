"""Unit tests for the application factory and its wiring helpers."""

import asyncio
from unittest.mock import MagicMock

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from app import create_app, sweep_expired_otps, wire_services
from config import OtpSettings
from infrastructure.otp_store import InMemoryOtpStore
from services.auth_service import AuthService
from services.employee_service import EmployeeService
from services.otp_service import OtpService
from services.profile_service import ProfileService


class TestCreateApp:
    def test_routes_registered(self, settings):
        app = create_app(settings)
        paths = {route.path for route in app.routes}
        for expected in (
            "/health",
            "/api/auth/login",
            "/api/auth/request-otp",
            "/api/auth/verify-otp-change-password",
            "/api/employees",
            "/api/employees/all",
            "/api/employees/stats/overview",
            "/api/employees/search/query",
            "/api/employees/{employee_id}",
            "/api/employees/{employee_id}/reset-password",
            "/api/profile",
            "/api/profile/upload-photo",
            "/api/profile/delete-photo",
            "/api/profile/profiles",
            "/api/profile/employee/{employee_id}",
            "/api/profile/employee/{employee_id}/upload-photo",
            "/api/profile/employee/{employee_id}/delete-photo",
            "/uploads",
        ):
            assert expected in paths

    def test_upload_dir_created(self, settings, tmp_path):
        create_app(settings)
        assert (tmp_path / "uploads").is_dir()

    def test_static_mount_and_request_id(self, settings):
        # No lifespan: only the static mount and middleware are exercised
        client = TestClient(create_app(settings))
        resp = client.get("/uploads/profile-photos/missing.png", headers={"X-Request-ID": "req-1"})
        assert resp.status_code == 404
        assert resp.headers["X-Request-ID"] == "req-1"

    def test_request_id_generated(self, settings):
        client = TestClient(create_app(settings))
        resp = client.get("/uploads/nothing.png")
        assert resp.headers["X-Request-ID"]


class TestWireServices:
    def test_builds_service_graph(self, settings, staff_repo, email_provider, photo_storage):
        app = FastAPI()
        store = InMemoryOtpStore()
        wire_services(
            app,
            settings,
            staff=staff_repo,
            email_provider=email_provider,
            storage=photo_storage,
            otp_store=store,
        )
        assert isinstance(app.state.auth_service, AuthService)
        assert isinstance(app.state.otp_service, OtpService)
        assert isinstance(app.state.employee_service, EmployeeService)
        assert isinstance(app.state.profile_service, ProfileService)
        assert app.state.otp_store is store
        assert app.state.settings is settings

    def test_default_store(self, settings, staff_repo, email_provider, photo_storage):
        settings = settings.model_copy(update={"otp": OtpSettings(otp_ttl_seconds=120)})
        app = FastAPI()
        wire_services(
            app, settings, staff=staff_repo, email_provider=email_provider, storage=photo_storage
        )
        assert isinstance(app.state.otp_store, InMemoryOtpStore)


class TestSweepExpiredOtps:
    async def test_runs_until_cancelled(self):
        otp_service = MagicMock()
        task = asyncio.create_task(sweep_expired_otps(otp_service, 0.01))
        await asyncio.sleep(0.05)
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task
        assert otp_service.purge_expired.call_count >= 1

    async def test_survives_errors(self):
        otp_service = MagicMock()
        otp_service.purge_expired.side_effect = RuntimeError("boom")
        task = asyncio.create_task(sweep_expired_otps(otp_service, 0.01))
        await asyncio.sleep(0.05)
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task
        assert otp_service.purge_expired.call_count >= 2
