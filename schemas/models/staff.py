"""
Staff document model.

Maps to the `staff` MongoDB collection. Field aliases are the on-disk names
used by the existing data (``password`` holds the argon2 hash, addresses are
camelCase, timestamps are ``createdAt`` / ``updatedAt``).

employee_id and email are unique (see StaffRepository.ensure_indexes).
"""

from __future__ import annotations

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from schemas.models.base import MongoBaseModel

ROLE_ADMIN = "admin"
ROLE_EMPLOYEE = "employee"

Role = Literal["admin", "employee"]


class StaffDoc(MongoBaseModel):
    """Document model for the `staff` collection."""

    employee_id: str
    name: str
    email: str
    phone: Optional[str] = None
    password_hash: Optional[str] = Field(default=None, alias="password")
    role: Role = ROLE_EMPLOYEE
    position: Optional[str] = ""
    photo: Optional[str] = None
    dob: Optional[datetime] = None
    current_address: Optional[str] = Field(default="", alias="currentAddress")
    permanent_address: Optional[str] = Field(default="", alias="permanentAddress")
    department: Optional[str] = "IT"
    leave_quota: Optional[int] = 12
    aadhar: Optional[str] = None
    created_at: Optional[datetime] = Field(default=None, alias="createdAt")
    updated_at: Optional[datetime] = Field(default=None, alias="updatedAt")

    @property
    def is_admin(self) -> bool:
        return self.role == ROLE_ADMIN


class AuthenticatedUser(BaseModel):
    """Read-only identity attached to a request once its bearer token is accepted.

    Derived from StaffDoc per request and never persisted.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    employee_id: str
    name: str
    email: str
    role: Role

    @property
    def is_admin(self) -> bool:
        return self.role == ROLE_ADMIN

    @classmethod
    def from_doc(cls, staff: StaffDoc) -> "AuthenticatedUser":
        return cls(
            id=str(staff.id),
            employee_id=staff.employee_id,
            name=staff.name,
            email=staff.email,
            role=staff.role,
        )
