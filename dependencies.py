"""
FastAPI dependency providers.

Services are built once in the app lifespan and stored on app.state; the
providers here only hand them out. get_current_user is the bearer-token gate
and require_admin stacks the role gate on top of it.
"""

from __future__ import annotations

from typing import Optional

from fastapi import Depends, Header, Request

from schemas.models.staff import AuthenticatedUser
from services.auth_service import AuthService, ensure_admin
from services.employee_service import EmployeeService
from services.otp_service import OtpService
from services.profile_service import ProfileService


def get_auth_service(request: Request) -> AuthService:
    return request.app.state.auth_service


def get_otp_service(request: Request) -> OtpService:
    return request.app.state.otp_service


def get_employee_service(request: Request) -> EmployeeService:
    return request.app.state.employee_service


def get_profile_service(request: Request) -> ProfileService:
    return request.app.state.profile_service


async def get_current_user(
    authorization: Optional[str] = Header(default=None),
    auth: AuthService = Depends(get_auth_service),
) -> AuthenticatedUser:
    """Resolve the bearer token to an identity or fail with 401/403/500."""
    return await auth.authenticate_bearer(authorization)


async def require_admin(
    user: AuthenticatedUser = Depends(get_current_user),
) -> AuthenticatedUser:
    return ensure_admin(user)
