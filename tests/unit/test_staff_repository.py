"""Unit tests for StaffRepository against a mocked AsyncCollection."""

from unittest.mock import AsyncMock, MagicMock

import pytest
from bson import ObjectId
from pymongo import ReturnDocument
from pymongo.errors import DuplicateKeyError

from errors import ConflictError
from repositories.staff_repository import (
    IDENTITY_PROJECTION,
    NO_PASSWORD_PROJECTION,
    StaffRepository,
)
from schemas.models.staff import AuthenticatedUser, StaffDoc

OID = ObjectId("65f0a1b2c3d4e5f6a7b8c9d0")


def _doc(**overrides) -> dict:
    doc = {
        "_id": OID,
        "employee_id": "ISARED025014",
        "name": "Shashi",
        "email": "employee@example.com",
        "password": "$argon2id$hash",
        "role": "employee",
        "currentAddress": "Pune",
    }
    doc.update(overrides)
    return doc


def _cursor(docs):
    cursor = MagicMock()
    cursor.to_list = AsyncMock(return_value=docs)
    return cursor


@pytest.fixture
def col():
    return MagicMock()


@pytest.fixture
def repo(col):
    return StaffRepository(col)


class TestLookups:
    async def test_find_by_id(self, repo, col):
        col.find_one = AsyncMock(return_value=_doc())
        staff = await repo.find_by_id(str(OID))
        col.find_one.assert_awaited_once_with({"_id": OID})
        assert isinstance(staff, StaffDoc)
        assert staff.password_hash == "$argon2id$hash"
        assert staff.current_address == "Pune"

    async def test_find_by_id_invalid_is_none(self, repo, col):
        col.find_one = AsyncMock()
        assert await repo.find_by_id("nope") is None
        col.find_one.assert_not_called()

    async def test_find_by_employee_id_missing(self, repo, col):
        col.find_one = AsyncMock(return_value=None)
        assert await repo.find_by_employee_id("ghost") is None
        col.find_one.assert_awaited_once_with({"employee_id": "ghost"})

    async def test_find_identity_uses_projection(self, repo, col):
        col.find_one = AsyncMock(
            return_value={k: v for k, v in _doc().items() if k in IDENTITY_PROJECTION}
        )
        user = await repo.find_identity(OID)
        col.find_one.assert_awaited_once_with({"_id": OID}, IDENTITY_PROJECTION)
        assert isinstance(user, AuthenticatedUser)
        assert user.id == str(OID)
        assert "password" not in IDENTITY_PROJECTION

    async def test_email_taken_excludes_self(self, repo, col):
        col.find_one = AsyncMock(return_value=None)
        assert await repo.email_taken("x@example.com", exclude_id=str(OID)) is False
        col.find_one.assert_awaited_once_with(
            {"email": "x@example.com", "_id": {"$ne": OID}}, {"_id": 1}
        )

    async def test_list_all_hides_password(self, repo, col):
        col.find = MagicMock(return_value=_cursor([_doc(password=None)]))
        result = await repo.list_all()
        col.find.assert_called_once_with({}, NO_PASSWORD_PROJECTION)
        assert [s.employee_id for s in result] == ["ISARED025014"]

    async def test_search_escapes_regex(self, repo, col):
        col.find = MagicMock(return_value=_cursor([]))
        await repo.search("a.b(")
        query = col.find.call_args.args[0]
        assert {"name": {"$regex": r"a\.b\(", "$options": "i"}} in query["$or"]
        assert len(query["$or"]) == 5


class TestWrites:
    async def test_insert_sets_timestamps(self, repo, col):
        col.insert_one = AsyncMock(return_value=MagicMock(inserted_id=OID))
        staff = StaffDoc(employee_id="E1", name="N", email="n@example.com", password_hash="h")
        created = await repo.insert(staff)
        doc = col.insert_one.call_args.args[0]
        assert doc["password"] == "h"
        assert "_id" not in doc or doc["_id"] == OID
        assert doc["createdAt"] is not None and doc["updatedAt"] is not None
        assert created.id == OID

    @pytest.mark.parametrize(
        "key_pattern, message",
        [
            ({"employee_id": 1}, "Employee ID already exists"),
            ({"email": 1}, "Email already exists"),
        ],
    )
    async def test_insert_duplicate(self, repo, col, key_pattern, message):
        col.insert_one = AsyncMock(
            side_effect=DuplicateKeyError("dup", 11000, {"keyPattern": key_pattern})
        )
        with pytest.raises(ConflictError) as exc:
            await repo.insert(StaffDoc(employee_id="E1", name="N", email="n@example.com"))
        assert exc.value.message == message

    async def test_update_fields(self, repo, col):
        col.find_one_and_update = AsyncMock(return_value=_doc(name="New", password=None))
        staff = await repo.update_fields(str(OID), {"name": "New"})
        args, kwargs = col.find_one_and_update.call_args
        assert args[0] == {"_id": OID}
        assert args[1]["$set"]["name"] == "New"
        assert "updatedAt" in args[1]["$set"]
        assert kwargs["return_document"] is ReturnDocument.AFTER
        assert staff.name == "New"

    async def test_update_fields_missing(self, repo, col):
        col.find_one_and_update = AsyncMock(return_value=None)
        assert await repo.update_fields(str(OID), {"name": "New"}) is None

    async def test_update_password_by_email(self, repo, col):
        col.update_one = AsyncMock(return_value=MagicMock(matched_count=1))
        assert await repo.update_password_hash_by_email("employee@example.com", "h2") is True
        args = col.update_one.call_args.args
        assert args[0] == {"email": "employee@example.com"}
        assert args[1]["$set"]["password"] == "h2"

    async def test_update_password_by_email_no_match(self, repo, col):
        col.update_one = AsyncMock(return_value=MagicMock(matched_count=0))
        assert await repo.update_password_hash_by_email("nobody@x.com", "h2") is False

    async def test_delete(self, repo, col):
        col.delete_one = AsyncMock(return_value=MagicMock(deleted_count=1))
        assert await repo.delete(str(OID)) is True
        assert await repo.delete("bad-id") is False


class TestStatistics:
    async def test_count_by_role(self, repo, col):
        col.count_documents = AsyncMock(return_value=3)
        assert await repo.count_by_role("employee") == 3
        col.count_documents.assert_awaited_once_with({"role": "employee"})

    async def test_department_breakdown(self, repo, col):
        col.aggregate = AsyncMock(return_value=_cursor([{"_id": "IT", "count": 2}]))
        assert await repo.department_breakdown() == [{"_id": "IT", "count": 2}]

    async def test_ensure_indexes(self, repo, col):
        col.create_index = AsyncMock()
        await repo.ensure_indexes()
        unique = [c for c in col.create_index.call_args_list if c.kwargs.get("unique")]
        assert len(unique) == 2
