"""
Staff repository — the only code that talks to the `staff` collection.

Wraps a pymongo AsyncCollection. Lookups return StaffDoc (or None); invalid
ObjectId strings are treated as "not found" rather than raised. Password
hashes are written through update_password_hash*/insert and never returned
by find_identity(), which is what the auth gate uses.

Duplicate employee_id / email inserts surface as ConflictError; every other
driver error propagates to the global handler.
"""

from __future__ import annotations

import re
from typing import Any, Optional

from bson import ObjectId
from pymongo import ASCENDING, ReturnDocument
from pymongo.asynchronous.collection import AsyncCollection
from pymongo.errors import DuplicateKeyError

from errors import ConflictError
from schemas.models.staff import AuthenticatedUser, StaffDoc
from shared.datetime_utils import utc_now
from shared.logging import get_logger

log = get_logger(__name__)

STAFF_COLLECTION = "staff"

IDENTITY_PROJECTION = {"_id": 1, "employee_id": 1, "name": 1, "email": 1, "role": 1}
NO_PASSWORD_PROJECTION = {"password": 0}

SEARCH_FIELDS = ("name", "employee_id", "email", "department", "position")


def _to_object_id(staff_id: Any) -> Optional[ObjectId]:
    if isinstance(staff_id, ObjectId):
        return staff_id
    if isinstance(staff_id, str) and ObjectId.is_valid(staff_id):
        return ObjectId(staff_id)
    return None


def _duplicate_field(error: DuplicateKeyError) -> str:
    key_pattern = (error.details or {}).get("keyPattern") or {}
    if "employee_id" in key_pattern:
        return "employee_id"
    if "email" in key_pattern:
        return "email"
    return "employee_id" if "employee_id" in str(error) else "email"


class StaffRepository:
    def __init__(self, collection: AsyncCollection) -> None:
        self._col = collection

    async def ensure_indexes(self) -> None:
        await self._col.create_index([("employee_id", ASCENDING)], unique=True)
        await self._col.create_index([("email", ASCENDING)], unique=True)
        await self._col.create_index([("department", ASCENDING)])

    # ── Lookups ──────────────────────────────────────────────────────────────

    async def find_by_id(self, staff_id: Any) -> Optional[StaffDoc]:
        oid = _to_object_id(staff_id)
        if oid is None:
            return None
        return StaffDoc.from_mongo(await self._col.find_one({"_id": oid}))

    async def find_by_employee_id(self, employee_id: str) -> Optional[StaffDoc]:
        return StaffDoc.from_mongo(await self._col.find_one({"employee_id": employee_id}))

    async def find_by_email(self, email: str) -> Optional[StaffDoc]:
        return StaffDoc.from_mongo(await self._col.find_one({"email": email}))

    async def find_identity(self, staff_id: Any) -> Optional[AuthenticatedUser]:
        """Load only the non-sensitive identity fields for *staff_id*."""
        oid = _to_object_id(staff_id)
        if oid is None:
            return None
        doc = await self._col.find_one({"_id": oid}, IDENTITY_PROJECTION)
        if doc is None:
            return None
        return AuthenticatedUser.from_doc(StaffDoc.from_mongo(doc))

    async def email_taken(self, email: str, exclude_id: Any = None) -> bool:
        query: dict[str, Any] = {"email": email}
        oid = _to_object_id(exclude_id)
        if oid is not None:
            query["_id"] = {"$ne": oid}
        return await self._col.find_one(query, {"_id": 1}) is not None

    async def employee_id_taken(self, employee_id: str) -> bool:
        return await self._col.find_one({"employee_id": employee_id}, {"_id": 1}) is not None

    async def list_all(self) -> list[StaffDoc]:
        cursor = self._col.find({}, NO_PASSWORD_PROJECTION)
        return [StaffDoc.from_mongo(doc) for doc in await cursor.to_list(length=None)]

    async def search(self, query: str) -> list[StaffDoc]:
        """Case-insensitive substring match over the searchable text fields."""
        pattern = {"$regex": re.escape(query), "$options": "i"}
        cursor = self._col.find(
            {"$or": [{field: pattern} for field in SEARCH_FIELDS]},
            NO_PASSWORD_PROJECTION,
        )
        return [StaffDoc.from_mongo(doc) for doc in await cursor.to_list(length=None)]

    # ── Writes ───────────────────────────────────────────────────────────────

    async def insert(self, staff: StaffDoc) -> StaffDoc:
        now = utc_now()
        doc = staff.to_mongo()
        doc["createdAt"] = now
        doc["updatedAt"] = now
        try:
            result = await self._col.insert_one(doc)
        except DuplicateKeyError as e:
            field = _duplicate_field(e)
            log.warning("staff_insert_conflict", field=field)
            raise ConflictError(
                "Employee ID already exists" if field == "employee_id" else "Email already exists",
                field=field,
            ) from e
        doc["_id"] = result.inserted_id
        return StaffDoc.from_mongo(doc)

    async def update_fields(self, staff_id: Any, fields: dict[str, Any]) -> Optional[StaffDoc]:
        """Apply a ``$set`` of on-disk field names; returns the updated document."""
        oid = _to_object_id(staff_id)
        if oid is None:
            return None
        try:
            doc = await self._col.find_one_and_update(
                {"_id": oid},
                {"$set": {**fields, "updatedAt": utc_now()}},
                projection=NO_PASSWORD_PROJECTION,
                return_document=ReturnDocument.AFTER,
            )
        except DuplicateKeyError as e:
            raise ConflictError("Email already exists", field=_duplicate_field(e)) from e
        return StaffDoc.from_mongo(doc)

    async def update_password_hash(self, staff_id: Any, password_hash: str) -> Optional[StaffDoc]:
        oid = _to_object_id(staff_id)
        if oid is None:
            return None
        doc = await self._col.find_one_and_update(
            {"_id": oid},
            {"$set": {"password": password_hash, "updatedAt": utc_now()}},
            projection=NO_PASSWORD_PROJECTION,
            return_document=ReturnDocument.AFTER,
        )
        return StaffDoc.from_mongo(doc)

    async def update_password_hash_by_email(self, email: str, password_hash: str) -> bool:
        result = await self._col.update_one(
            {"email": email},
            {"$set": {"password": password_hash, "updatedAt": utc_now()}},
        )
        return result.matched_count > 0

    async def set_photo(self, staff_id: Any, photo_path: Optional[str]) -> bool:
        oid = _to_object_id(staff_id)
        if oid is None:
            return False
        result = await self._col.update_one(
            {"_id": oid}, {"$set": {"photo": photo_path, "updatedAt": utc_now()}}
        )
        return result.matched_count > 0

    async def delete(self, staff_id: Any) -> bool:
        oid = _to_object_id(staff_id)
        if oid is None:
            return False
        result = await self._col.delete_one({"_id": oid})
        return result.deleted_count > 0

    async def delete_all(self) -> int:
        result = await self._col.delete_many({})
        return result.deleted_count

    # ── Statistics ───────────────────────────────────────────────────────────

    async def count_by_role(self, role: str) -> int:
        return await self._col.count_documents({"role": role})

    async def department_breakdown(self) -> list[dict[str, Any]]:
        cursor = await self._col.aggregate(
            [{"$group": {"_id": "$department", "count": {"$sum": 1}}}]
        )
        return await cursor.to_list(length=None)
