"""
Request DTOs for the admin employee endpoints.

CreateEmployeeRequest         — POST /api/employees
UpdateEmployeeRequest         — PUT  /api/employees/{id}
ResetEmployeePasswordRequest  — PUT  /api/employees/{id}/reset-password

Update DTOs are partial: only fields present in the JSON body are applied
(see ``model_dump(exclude_unset=True)`` in EmployeeService).
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from schemas.models.staff import Role


class CreateEmployeeRequest(BaseModel):
    """Request body for POST /api/employees."""

    model_config = ConfigDict(populate_by_name=True)

    employee_id: str = Field(min_length=1)
    name: str = Field(min_length=1)
    email: str = Field(min_length=1)
    password: str = Field(min_length=1)
    phone: Optional[str] = None
    role: Optional[Role] = None
    department: Optional[str] = None
    position: Optional[str] = None
    current_address: Optional[str] = Field(default=None, alias="currentAddress")
    permanent_address: Optional[str] = Field(default=None, alias="permanentAddress")
    aadhar: Optional[str] = None
    leave_quota: Optional[int] = Field(default=None, ge=0)
    # YYYY-MM-DD
    dob: Optional[str] = None


class UpdateEmployeeRequest(BaseModel):
    """Request body for PUT /api/employees/{id}. ``dob: ""`` clears the date."""

    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True)

    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    role: Optional[Role] = None
    department: Optional[str] = None
    position: Optional[str] = None
    current_address: Optional[str] = Field(default=None, alias="currentAddress")
    permanent_address: Optional[str] = Field(default=None, alias="permanentAddress")
    aadhar: Optional[str] = None
    leave_quota: Optional[int] = Field(default=None, ge=0)
    dob: Optional[str] = None


class ResetEmployeePasswordRequest(BaseModel):
    """Request body for PUT /api/employees/{id}/reset-password."""

    model_config = ConfigDict(populate_by_name=True)

    new_password: str = Field(default="", alias="newPassword")
