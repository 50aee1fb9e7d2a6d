"""
Authentication endpoints (public).

POST /api/auth/login                       — employee_id + password → bearer token
POST /api/auth/request-otp                 — email a password-reset code
POST /api/auth/verify-otp-change-password  — consume the code, set a new password
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request

from dependencies import get_auth_service, get_otp_service
from schemas.dto.requests.auth import LoginRequest, RequestOtpRequest, VerifyOtpRequest
from schemas.dto.responses.auth import LoginResponse, LoginUser
from schemas.dto.responses.common import MessageResponse
from services.auth_service import AuthService
from services.otp_service import OtpService
from shared.request_utils import get_client_ip

router = APIRouter(prefix="/api/auth", tags=["auth"])


@router.post("/login", response_model=LoginResponse)
async def login(
    body: LoginRequest,
    request: Request,
    auth: AuthService = Depends(get_auth_service),
) -> LoginResponse:
    result = await auth.login(body.employee_id, body.password)
    return LoginResponse(
        token=result.token,
        user=LoginUser.from_doc(result.staff),
        client_ip=get_client_ip(request),
    )


@router.post("/request-otp", response_model=MessageResponse)
async def request_otp(
    body: RequestOtpRequest,
    otp: OtpService = Depends(get_otp_service),
) -> MessageResponse:
    await otp.issue(body.email)
    return MessageResponse(message="OTP sent to your email")


@router.post("/verify-otp-change-password", response_model=MessageResponse)
async def verify_otp_change_password(
    body: VerifyOtpRequest,
    otp: OtpService = Depends(get_otp_service),
) -> MessageResponse:
    await otp.verify_and_consume(body.email, body.otp, body.new_password)
    return MessageResponse(message="Password changed successfully")
