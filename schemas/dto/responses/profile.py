"""
Response DTOs for profile endpoints.

ProfileResponse         — GET /api/profile, and the admin profile views
ProfileUpdatedResponse  — PUT /api/profile
PhotoUploadedResponse   — POST .../upload-photo
EmployeeProfileUpdatedResponse — PUT /api/profile/employee/{id}
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from schemas.models.staff import Role, StaffDoc


class ProfileResponse(BaseModel):
    """Profile fields visible to the owner and to admins; ``photo`` is absolute."""

    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(alias="_id")
    employee_id: str
    name: str
    email: str
    phone: Optional[str] = None
    photo: Optional[str] = None
    role: Role
    department: Optional[str] = None
    position: Optional[str] = None
    current_address: Optional[str] = Field(default=None, alias="currentAddress")
    permanent_address: Optional[str] = Field(default=None, alias="permanentAddress")
    leave_quota: Optional[int] = None
    # Only shown to admins
    aadhar: Optional[str] = None

    @classmethod
    def from_doc(
        cls, staff: StaffDoc, photo_url: Optional[str], *, include_aadhar: bool = False
    ) -> "ProfileResponse":
        return cls(
            id=str(staff.id),
            employee_id=staff.employee_id,
            name=staff.name,
            email=staff.email,
            phone=staff.phone,
            photo=photo_url,
            role=staff.role,
            department=staff.department,
            position=staff.position,
            current_address=staff.current_address,
            permanent_address=staff.permanent_address,
            leave_quota=staff.leave_quota,
            aadhar=staff.aadhar if include_aadhar else None,
        )


class ProfileUpdatedResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    message: str = "Profile updated successfully"
    user: ProfileResponse


class PhotoUploadedResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    message: str = "Photo uploaded successfully"
    photo: str


class EmployeeProfileUpdatedResponse(BaseModel):
    """PUT /api/profile/employee/{id}."""

    model_config = ConfigDict(populate_by_name=True)

    message: str = "Employee updated successfully"
    employee: ProfileResponse
