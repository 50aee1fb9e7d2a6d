"""
Response DTOs for authentication endpoints.

LoginUser      — user summary embedded in LoginResponse
LoginResponse  — POST /api/auth/login  (200)
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from schemas.models.staff import Role, StaffDoc


class LoginUser(BaseModel):
    """Minimal user summary returned on login. Never includes the password hash."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    employee_id: str
    name: str
    role: Role

    @classmethod
    def from_doc(cls, staff: StaffDoc) -> "LoginUser":
        return cls(
            id=str(staff.id),
            employee_id=staff.employee_id,
            name=staff.name,
            role=staff.role,
        )


class LoginResponse(BaseModel):
    """Response body for POST /api/auth/login (200)."""

    model_config = ConfigDict(populate_by_name=True)

    message: str = "Login successful"
    token: str
    user: LoginUser
    client_ip: str = Field(default="", alias="clientIP")
