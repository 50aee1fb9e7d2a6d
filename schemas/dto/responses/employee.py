"""
Response DTOs for the admin employee endpoints.

EmployeeResponse         — full record minus the password hash
EmployeeSummary          — short shape returned after creation
EmployeeCreatedResponse  — POST /api/employees (201)
EmployeeUpdatedResponse  — PUT  /api/employees/{id}
PasswordResetResponse    — PUT  /api/employees/{id}/reset-password
EmployeeStatsResponse    — GET  /api/employees/stats/overview
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from schemas.models.staff import Role, StaffDoc


class EmployeeResponse(BaseModel):
    """Staff record as returned to admins; ``photo`` is an absolute URL."""

    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(alias="_id")
    employee_id: str
    name: str
    email: str
    phone: Optional[str] = None
    role: Role
    department: Optional[str] = None
    position: Optional[str] = None
    photo: Optional[str] = None
    dob: Optional[datetime] = None
    current_address: Optional[str] = Field(default=None, alias="currentAddress")
    permanent_address: Optional[str] = Field(default=None, alias="permanentAddress")
    leave_quota: Optional[int] = None
    aadhar: Optional[str] = None
    created_at: Optional[datetime] = Field(default=None, alias="createdAt")
    updated_at: Optional[datetime] = Field(default=None, alias="updatedAt")

    @classmethod
    def from_doc(cls, staff: StaffDoc, photo_url: Optional[str]) -> "EmployeeResponse":
        return cls(
            id=str(staff.id),
            employee_id=staff.employee_id,
            name=staff.name,
            email=staff.email,
            phone=staff.phone,
            role=staff.role,
            department=staff.department,
            position=staff.position,
            photo=photo_url,
            dob=staff.dob,
            current_address=staff.current_address,
            permanent_address=staff.permanent_address,
            leave_quota=staff.leave_quota,
            aadhar=staff.aadhar,
            created_at=staff.created_at,
            updated_at=staff.updated_at,
        )


class EmployeeSummary(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(alias="_id")
    employee_id: str
    name: str
    email: str
    role: Role
    department: Optional[str] = None
    position: Optional[str] = None
    dob: Optional[datetime] = None

    @classmethod
    def from_doc(cls, staff: StaffDoc) -> "EmployeeSummary":
        return cls(
            id=str(staff.id),
            employee_id=staff.employee_id,
            name=staff.name,
            email=staff.email,
            role=staff.role,
            department=staff.department,
            position=staff.position,
            dob=staff.dob,
        )


class EmployeeCreatedResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    message: str = "Employee added successfully"
    employee: EmployeeSummary


class EmployeeUpdatedResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    message: str = "Employee updated successfully"
    employee: EmployeeResponse


class PasswordResetEmployee(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(alias="_id")
    employee_id: str
    name: str
    email: str


class PasswordResetResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    message: str = "Password reset successfully"
    employee: PasswordResetEmployee


class DepartmentCount(BaseModel):
    """One row of the per-department breakdown (``_id`` is the department name)."""

    model_config = ConfigDict(populate_by_name=True)

    department: Optional[str] = Field(default=None, alias="_id")
    count: int


class EmployeeStatsResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    total_employees: int = Field(alias="totalEmployees")
    total_admins: int = Field(alias="totalAdmins")
    total_staff: int = Field(alias="totalStaff")
    departments: list[DepartmentCount]
