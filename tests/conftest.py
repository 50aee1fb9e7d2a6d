"""
Shared fixtures: in-memory collaborators and a test app wired like the real one.

FakeStaffRepository keeps documents in their on-disk (aliased) shape so the
services see exactly what pymongo would hand back. No network or database
connection is ever opened.
"""

from __future__ import annotations

import os
from contextlib import asynccontextmanager
from typing import Any, Optional

import pytest
from bson import ObjectId
from fastapi import FastAPI
from fastapi.testclient import TestClient

from app import wire_services
from config import AppSettings, DatabaseSettings, JWTSettings, UploadSettings
from errors import ConflictError, register_error_handlers
from infrastructure.otp_store import InMemoryOtpStore
from middleware.request_logging import RequestLoggingMiddleware
from repositories.staff_repository import SEARCH_FIELDS
from routes.auth_routes import router as auth_router
from routes.employee_routes import router as employee_router
from routes.health_routes import router as health_router
from routes.profile_routes import router as profile_router
from schemas.models.staff import AuthenticatedUser, StaffDoc
from seed import build_seed_documents
from shared.datetime_utils import utc_now

TEST_JWT_SECRET = "test-secret-key-that-is-long-enough-for-hs256"


# ---------------------------------------------------------------------------
# Fakes
# ---------------------------------------------------------------------------


def _oid(value: Any) -> Optional[ObjectId]:
    if isinstance(value, ObjectId):
        return value
    if isinstance(value, str) and ObjectId.is_valid(value):
        return ObjectId(value)
    return None


class FakeStaffRepository:
    """In-memory StaffRepository with the same method surface."""

    def __init__(self) -> None:
        self.docs: dict[ObjectId, dict] = {}

    def add(self, staff: StaffDoc) -> StaffDoc:
        doc = staff.to_mongo()
        doc["_id"] = doc.get("_id") or ObjectId()
        now = utc_now()
        doc["createdAt"] = doc.get("createdAt") or now
        doc["updatedAt"] = now
        self.docs[doc["_id"]] = doc
        return StaffDoc.from_mongo(dict(doc))

    def raw(self, employee_id: str) -> dict:
        return next(d for d in self.docs.values() if d["employee_id"] == employee_id)

    @staticmethod
    def _public(doc: dict) -> StaffDoc:
        return StaffDoc.from_mongo({k: v for k, v in doc.items() if k != "password"})

    def _find(self, **query: Any) -> Optional[dict]:
        for doc in self.docs.values():
            if all(doc.get(k) == v for k, v in query.items()):
                return doc
        return None

    async def ensure_indexes(self) -> None:
        return None

    async def find_by_id(self, staff_id: Any) -> Optional[StaffDoc]:
        doc = self.docs.get(_oid(staff_id))
        return StaffDoc.from_mongo(dict(doc)) if doc else None

    async def find_by_employee_id(self, employee_id: str) -> Optional[StaffDoc]:
        doc = self._find(employee_id=employee_id)
        return StaffDoc.from_mongo(dict(doc)) if doc else None

    async def find_by_email(self, email: str) -> Optional[StaffDoc]:
        doc = self._find(email=email)
        return StaffDoc.from_mongo(dict(doc)) if doc else None

    async def find_identity(self, staff_id: Any) -> Optional[AuthenticatedUser]:
        staff = await self.find_by_id(staff_id)
        return AuthenticatedUser.from_doc(staff) if staff else None

    async def email_taken(self, email: str, exclude_id: Any = None) -> bool:
        excluded = _oid(exclude_id)
        return any(d["email"] == email and d["_id"] != excluded for d in self.docs.values())

    async def employee_id_taken(self, employee_id: str) -> bool:
        return self._find(employee_id=employee_id) is not None

    async def list_all(self) -> list[StaffDoc]:
        return [self._public(d) for d in self.docs.values()]

    async def search(self, query: str) -> list[StaffDoc]:
        needle = query.lower()
        return [
            self._public(d)
            for d in self.docs.values()
            if any(needle in str(d.get(f) or "").lower() for f in SEARCH_FIELDS)
        ]

    async def insert(self, staff: StaffDoc) -> StaffDoc:
        if await self.employee_id_taken(staff.employee_id):
            raise ConflictError("Employee ID already exists", field="employee_id")
        if await self.email_taken(staff.email):
            raise ConflictError("Email already exists", field="email")
        return self.add(staff)

    async def update_fields(self, staff_id: Any, fields: dict[str, Any]) -> Optional[StaffDoc]:
        doc = self.docs.get(_oid(staff_id))
        if doc is None:
            return None
        if "email" in fields and await self.email_taken(fields["email"], exclude_id=doc["_id"]):
            raise ConflictError("Email already exists", field="email")
        doc.update(fields)
        doc["updatedAt"] = utc_now()
        return self._public(doc)

    async def update_password_hash(self, staff_id: Any, password_hash: str) -> Optional[StaffDoc]:
        doc = self.docs.get(_oid(staff_id))
        if doc is None:
            return None
        doc["password"] = password_hash
        return self._public(doc)

    async def update_password_hash_by_email(self, email: str, password_hash: str) -> bool:
        doc = self._find(email=email)
        if doc is None:
            return False
        doc["password"] = password_hash
        return True

    async def set_photo(self, staff_id: Any, photo_path: Optional[str]) -> bool:
        doc = self.docs.get(_oid(staff_id))
        if doc is None:
            return False
        doc["photo"] = photo_path
        return True

    async def delete(self, staff_id: Any) -> bool:
        return self.docs.pop(_oid(staff_id), None) is not None

    async def delete_all(self) -> int:
        count = len(self.docs)
        self.docs.clear()
        return count

    async def count_by_role(self, role: str) -> int:
        return sum(1 for d in self.docs.values() if d.get("role") == role)

    async def department_breakdown(self) -> list[dict[str, Any]]:
        counts: dict[Optional[str], int] = {}
        for doc in self.docs.values():
            counts[doc.get("department")] = counts.get(doc.get("department"), 0) + 1
        return [{"_id": dept, "count": n} for dept, n in counts.items()]


class RecordingEmailProvider:
    """EmailProvider that records every message; ``fail=True`` simulates an outage."""

    def __init__(self, fail: bool = False) -> None:
        self.fail = fail
        self.sent: list[tuple[str, Optional[str], str]] = []

    async def send_password_reset_otp(
        self, email: str, user_name: Optional[str], otp_code: str
    ) -> bool:
        self.sent.append((email, user_name, otp_code))
        return not self.fail

    def last_code(self, email: str) -> Optional[str]:
        for to, _, code in reversed(self.sent):
            if to == email:
                return code
        return None


class FakePhotoStorage:
    def __init__(self) -> None:
        self.files: dict[str, bytes] = {}
        self.deleted: list[str] = []
        self._counter = 0

    async def save(self, owner_id: str, original_filename: str, data: bytes) -> str:
        self._counter += 1
        ext = os.path.splitext(original_filename)[1].lower()
        path = f"/uploads/profile-photos/profile_{owner_id}_{self._counter}{ext}"
        self.files[path] = data
        return path

    async def delete(self, public_path: str) -> bool:
        self.deleted.append(public_path)
        return self.files.pop(public_path, None) is not None


# ---------------------------------------------------------------------------
# App builders
# ---------------------------------------------------------------------------


def make_settings(upload_dir: str = "uploads", **overrides: Any) -> AppSettings:
    return AppSettings(
        db=DatabaseSettings(MONGODB_URI="mongodb://localhost:27017/"),
        jwt=JWTSettings(jwt_secret=TEST_JWT_SECRET),
        upload=UploadSettings(upload_dir=upload_dir),
        **overrides,
    )


def build_test_app(
    settings: AppSettings,
    *,
    staff: FakeStaffRepository,
    email_provider: RecordingEmailProvider,
    storage: FakePhotoStorage,
    otp_store: Optional[InMemoryOtpStore] = None,
) -> FastAPI:
    """Minimal app whose lifespan wires the real services onto in-memory fakes."""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        wire_services(
            app,
            settings,
            staff=staff,
            email_provider=email_provider,
            storage=storage,
            otp_store=otp_store,
        )
        yield

    app = FastAPI(lifespan=lifespan)
    app.add_middleware(RequestLoggingMiddleware)
    register_error_handlers(app)
    for router in (health_router, auth_router, employee_router, profile_router):
        app.include_router(router)
    return app


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def ignore_dotenv(monkeypatch):
    """Settings come from monkeypatch.setenv() and explicit kwargs only, never a local .env."""
    import pydantic_settings.sources.providers.dotenv as dotenv_source

    monkeypatch.setattr(dotenv_source, "dotenv_values", lambda *args, **kwargs: {})


@pytest.fixture
def settings(tmp_path) -> AppSettings:
    return make_settings(str(tmp_path / "uploads"))


@pytest.fixture
def staff_repo() -> FakeStaffRepository:
    return FakeStaffRepository()


@pytest.fixture
def seeded_repo(staff_repo) -> FakeStaffRepository:
    """Repository holding the two default accounts from seed.py."""
    for doc in build_seed_documents():
        staff_repo.add(doc)
    return staff_repo


@pytest.fixture
def email_provider() -> RecordingEmailProvider:
    return RecordingEmailProvider()


@pytest.fixture
def photo_storage() -> FakePhotoStorage:
    return FakePhotoStorage()


@pytest.fixture
def otp_store() -> InMemoryOtpStore:
    return InMemoryOtpStore()


@pytest.fixture
def client(settings, seeded_repo, email_provider, photo_storage, otp_store):
    app = build_test_app(
        settings,
        staff=seeded_repo,
        email_provider=email_provider,
        storage=photo_storage,
        otp_store=otp_store,
    )
    with TestClient(app) as c:
        yield c


@pytest.fixture
def login_as(client):
    """Return a helper that logs in and returns Authorization headers."""

    def _login(employee_id: str, password: str) -> dict[str, str]:
        resp = client.post(
            "/api/auth/login", json={"employee_id": employee_id, "password": password}
        )
        assert resp.status_code == 200, resp.text
        return {"Authorization": f"Bearer {resp.json()['token']}"}

    return _login


@pytest.fixture
def admin_headers(login_as) -> dict[str, str]:
    return login_as("Admin1122", "1122")


@pytest.fixture
def employee_headers(login_as) -> dict[str, str]:
    return login_as("ISARED025014", "1234")
