"""
Request DTOs for profile endpoints.

UpdateProfileRequest       — PUT /api/profile
AdminUpdateProfileRequest  — PUT /api/profile/employee/{id}
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class UpdateProfileRequest(BaseModel):
    """Request body for PUT /api/profile. Only ``name`` is required."""

    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True)

    name: str = Field(default="")
    phone: Optional[str] = None
    current_address: Optional[str] = Field(default=None, alias="currentAddress")
    permanent_address: Optional[str] = Field(default=None, alias="permanentAddress")


class AdminUpdateProfileRequest(BaseModel):
    """Request body for PUT /api/profile/employee/{id} (partial)."""

    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True)

    name: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    department: Optional[str] = None
    position: Optional[str] = None
    current_address: Optional[str] = Field(default=None, alias="currentAddress")
    permanent_address: Optional[str] = Field(default=None, alias="permanentAddress")
    aadhar: Optional[str] = None
