"""
FastAPI application factory.
create_app() is the single entry point for building the app.

wire_services() puts the repository-backed services on app.state; the
lifespan calls it with the real MongoDB / Resend / disk collaborators and the
test suite calls it with in-memory fakes.
"""

from __future__ import annotations

import asyncio
import contextlib
import os
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

import sentry_sdk
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from pymongo.asynchronous.mongo_client import AsyncMongoClient

from config import AppSettings
from errors import register_error_handlers
from infrastructure.email.protocol import EmailProvider
from infrastructure.email.resend import RESEND_API_URL, ResendEmailProvider
from infrastructure.http_client import HttpClient
from infrastructure.otp_store import InMemoryOtpStore
from infrastructure.storage.local import LocalPhotoStorage
from infrastructure.storage.protocol import PhotoStorage
from middleware.request_logging import RequestLoggingMiddleware
from repositories.staff_repository import STAFF_COLLECTION, StaffRepository
from routes.auth_routes import router as auth_router
from routes.employee_routes import router as employee_router
from routes.health_routes import router as health_router
from routes.profile_routes import router as profile_router
from services.auth_service import AuthService
from services.employee_service import EmployeeService
from services.otp_service import OtpService
from services.profile_service import ProfileService
from services.token_service import TokenService
from shared.logging import get_logger, setup_logging

log = get_logger(__name__)


def wire_services(
    app: FastAPI,
    settings: AppSettings,
    *,
    staff: StaffRepository,
    email_provider: EmailProvider,
    storage: PhotoStorage,
    otp_store: Optional[InMemoryOtpStore] = None,
) -> None:
    """Build the service graph and store it on app.state."""
    otp_store = otp_store if otp_store is not None else InMemoryOtpStore()
    tokens = TokenService(settings.jwt)

    app.state.settings = settings
    app.state.staff_repository = staff
    app.state.otp_store = otp_store
    app.state.token_service = tokens
    app.state.auth_service = AuthService(staff, tokens)
    app.state.otp_service = OtpService(
        staff, otp_store, email_provider, ttl_seconds=settings.otp.otp_ttl_seconds
    )
    app.state.employee_service = EmployeeService(staff, storage)
    app.state.profile_service = ProfileService(
        staff, storage, max_photo_bytes=settings.upload.max_photo_bytes
    )


async def sweep_expired_otps(otp_service: OtpService, interval_seconds: float) -> None:
    """Periodically drop expired OTP records. Runs until cancelled."""
    while True:
        await asyncio.sleep(interval_seconds)
        try:
            otp_service.purge_expired()
        except Exception as e:
            log.error("otp_sweep_failed", error=str(e), exc_info=e)


def create_app(settings: Optional[AppSettings] = None) -> FastAPI:
    """Create and return a fully configured FastAPI application."""
    if settings is None:
        settings = AppSettings()

    setup_logging(
        log_level=settings.logging.log_level,
        log_format=settings.logging.log_format,
        env=settings.env,
    )

    # Initialise Sentry before anything else so it captures startup errors
    if settings.sentry.sentry_dsn:
        sentry_sdk.init(
            dsn=settings.sentry.sentry_dsn,
            environment=settings.env,
            send_default_pii=settings.sentry.sentry_send_pii,
            traces_sample_rate=settings.sentry.sentry_traces_sample_rate,
            profiles_sample_rate=settings.sentry.sentry_profile_sample_rate,
        )

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        # ── Startup ──────────────────────────────────────────────────────────
        mongo_client: AsyncMongoClient = AsyncMongoClient(settings.db.mongodb_uri)
        app.state.mongo_client = mongo_client
        app.state.db = mongo_client[settings.db.db_name]

        staff = StaffRepository(app.state.db[STAFF_COLLECTION])
        await staff.ensure_indexes()

        email_http = HttpClient(
            base_url=RESEND_API_URL, timeout=settings.email.email_timeout_seconds
        )
        email_provider = ResendEmailProvider(
            settings.email,
            email_http,
            otp_ttl_minutes=max(1, settings.otp.otp_ttl_seconds // 60),
        )
        wire_services(
            app,
            settings,
            staff=staff,
            email_provider=email_provider,
            storage=LocalPhotoStorage(settings.upload.upload_dir),
        )

        sweeper: Optional[asyncio.Task] = None
        if settings.otp.otp_sweep_interval_seconds > 0:
            sweeper = asyncio.create_task(
                sweep_expired_otps(
                    app.state.otp_service, settings.otp.otp_sweep_interval_seconds
                )
            )
        log.info("app_started", env=settings.env, db=settings.db.db_name)

        yield

        # ── Shutdown ─────────────────────────────────────────────────────────
        if sweeper is not None:
            sweeper.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await sweeper
        app.state.otp_store.clear()
        await email_http.aclose()
        await mongo_client.close()
        log.info("app_stopped")

    app = FastAPI(
        title=settings.app_name,
        version="1.0.0",
        docs_url=settings.docs_url,
        redoc_url=None,
        lifespan=lifespan,
    )

    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_error_handlers(app)
    app.include_router(health_router)
    app.include_router(auth_router)
    app.include_router(employee_router)
    app.include_router(profile_router)

    # StaticFiles checks the directory exists at mount time
    os.makedirs(settings.upload.upload_dir, exist_ok=True)
    app.mount("/uploads", StaticFiles(directory=settings.upload.upload_dir), name="uploads")

    return app
