"""
Reset the staff collection to the two default accounts.

    python seed.py

Admin:    Admin1122    / 1122  (admin@example.com)
Employee: ISARED025014 / 1234  (employee@example.com)
"""

from __future__ import annotations

import asyncio
from typing import Any

from pymongo.asynchronous.mongo_client import AsyncMongoClient

from config import AppSettings
from repositories.staff_repository import STAFF_COLLECTION, StaffRepository
from schemas.models.staff import ROLE_ADMIN, ROLE_EMPLOYEE, StaffDoc
from shared.crypto import hash_password
from shared.logging import get_logger, setup_logging

log = get_logger(__name__)

DEFAULT_STAFF: list[dict[str, Any]] = [
    {
        "employee_id": "Admin1122",
        "name": "Aditya (Admin)",
        "email": "admin@example.com",
        "phone": "9999999999",
        "password": "1122",
        "role": ROLE_ADMIN,
        "position": "HR Manager",
        "leave_quota": 30,
    },
    {
        "employee_id": "ISARED025014",
        "name": "Shashi",
        "email": "employee@example.com",
        "phone": "8888888888",
        "password": "1234",
        "role": ROLE_EMPLOYEE,
        "position": "Software Engineer",
        "leave_quota": 12,
    },
]


def build_seed_documents(entries: list[dict[str, Any]] = DEFAULT_STAFF) -> list[StaffDoc]:
    """Turn the plain-text seed entries into StaffDoc objects with hashed passwords."""
    docs = []
    for entry in entries:
        fields = dict(entry)
        password = fields.pop("password")
        docs.append(StaffDoc(password_hash=hash_password(password), **fields))
    return docs


async def seed(repo: StaffRepository) -> list[StaffDoc]:
    removed = await repo.delete_all()
    log.info("seed_collection_cleared", removed=removed)
    await repo.ensure_indexes()
    inserted = [await repo.insert(doc) for doc in build_seed_documents()]
    log.info("seed_inserted", employee_ids=[doc.employee_id for doc in inserted])
    return inserted


async def main() -> None:
    settings = AppSettings()
    setup_logging(settings.logging.log_level, settings.logging.log_format, settings.env)

    client: AsyncMongoClient = AsyncMongoClient(settings.db.mongodb_uri)
    try:
        repo = StaffRepository(client[settings.db.db_name][STAFF_COLLECTION])
        await seed(repo)
    finally:
        await client.close()


if __name__ == "__main__":
    asyncio.run(main())
