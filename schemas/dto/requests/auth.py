"""
Request DTOs for authentication endpoints.

LoginRequest        — POST /api/auth/login
RequestOtpRequest   — POST /api/auth/request-otp
VerifyOtpRequest    — POST /api/auth/verify-otp-change-password
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator


class LoginRequest(BaseModel):
    """Request body for POST /api/auth/login."""

    model_config = ConfigDict(populate_by_name=True)

    employee_id: str = Field(min_length=1)
    password: str = Field(min_length=1)


class _EmailRequest(BaseModel):
    """Base for bodies keyed by email; surrounding whitespace is dropped from the email only."""

    model_config = ConfigDict(populate_by_name=True)

    email: str = Field(min_length=1)

    @field_validator("email", mode="before")
    @classmethod
    def strip_email(cls, v):
        return v.strip() if isinstance(v, str) else v


class RequestOtpRequest(_EmailRequest):
    """Request body for POST /api/auth/request-otp."""


class VerifyOtpRequest(_EmailRequest):
    """Request body for POST /api/auth/verify-otp-change-password.

    ``otp`` is the 6-digit code emailed by /request-otp.
    """

    otp: str = Field(min_length=1)
    new_password: str = Field(min_length=1, alias="newPassword")
