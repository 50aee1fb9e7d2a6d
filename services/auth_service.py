"""
Login and the bearer-token auth gate.

authenticate_bearer() is the request-level gate, run as a FastAPI dependency
(see dependencies.get_current_user). Its steps are terminal on failure:

1. header missing / not ``Bearer <token>``   → AuthenticationError (401)
2. token rejected by TokenService            → ForbiddenError (403)
3. subject no longer in the staff collection → AuthenticationError (401)
4. otherwise                                 → AuthenticatedUser

Anything unexpected (e.g. Mongo unreachable) becomes InternalError (500);
the gate never lets a request through on error.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from errors import (
    AppError,
    AuthenticationError,
    ForbiddenError,
    IncorrectPasswordError,
    InternalError,
    UserNotFoundError,
)
from repositories.staff_repository import StaffRepository
from schemas.models.staff import AuthenticatedUser, StaffDoc
from services.token_service import TokenError, TokenService
from shared.crypto import verify_password
from shared.logging import get_logger

log = get_logger(__name__)

BEARER_PREFIX = "Bearer "


@dataclass(frozen=True)
class LoginResult:
    token: str
    staff: StaffDoc


def extract_bearer_token(authorization: Optional[str]) -> Optional[str]:
    """Return the token from an ``Authorization: Bearer <token>`` header, else None."""
    if not authorization or not authorization.startswith(BEARER_PREFIX):
        return None
    token = authorization[len(BEARER_PREFIX):].strip()
    return token or None


class AuthService:
    def __init__(self, staff: StaffRepository, tokens: TokenService) -> None:
        self._staff = staff
        self._tokens = tokens

    async def login(self, employee_id: str, password: str) -> LoginResult:
        staff = await self._staff.find_by_employee_id(employee_id)
        if staff is None:
            log.warning("login_failed", reason="user_not_found")
            raise UserNotFoundError("User not found")

        if not staff.password_hash or not verify_password(password, staff.password_hash):
            log.warning("login_failed", reason="incorrect_password", staff_id=str(staff.id))
            raise IncorrectPasswordError("Incorrect password")

        token = self._tokens.issue(str(staff.id), staff.employee_id, staff.role)
        log.info("login_success", staff_id=str(staff.id), role=staff.role)
        return LoginResult(token=token, staff=staff)

    async def authenticate_bearer(self, authorization: Optional[str]) -> AuthenticatedUser:
        token = extract_bearer_token(authorization)
        if token is None:
            raise AuthenticationError("Unauthorized: Token missing")

        try:
            claims = self._tokens.verify(token)
            user = await self._staff.find_identity(claims.subject_id)
        except TokenError as e:
            log.warning("token_rejected", reason=e.reason, error=str(e))
            raise ForbiddenError("Invalid or expired token") from e
        except AppError:
            raise
        except Exception as e:
            log.error(
                "auth_gate_error",
                error=str(e),
                error_type=type(e).__name__,
                exc_info=e,
            )
            raise InternalError("Authentication failed") from e

        if user is None:
            log.warning("token_subject_missing", staff_id=claims.subject_id)
            raise AuthenticationError("Unauthorized: User not found")
        return user


def ensure_admin(user: AuthenticatedUser) -> AuthenticatedUser:
    """Role gate: only admins pass. Callers must already hold an AuthenticatedUser."""
    if not user.is_admin:
        log.warning("admin_access_denied", staff_id=user.id, role=user.role)
        raise ForbiddenError("Access denied. Admin only.")
    return user
