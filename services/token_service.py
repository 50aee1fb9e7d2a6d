"""
Bearer token issuance and verification (PyJWT).

Tokens carry ``sub`` (staff id), ``employee_id``, ``role``, ``iat`` and
``exp`` plus the configured issuer/audience. Signing uses RS256 when a key pair
is configured, HS256 with JWT_SECRET otherwise. There is no revocation list:
a token stays valid until ``exp``.

verify() raises a TokenError subclass so callers can log *why* a token was
rejected; what they tell the client is the same for every subclass.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Callable

import jwt

from config import JWTSettings
from schemas.models.staff import ROLE_ADMIN, ROLE_EMPLOYEE
from shared.datetime_utils import utc_now

_VALID_ROLES = {ROLE_ADMIN, ROLE_EMPLOYEE}


class TokenError(Exception):
    reason: str = "invalid"


class InvalidSignatureTokenError(TokenError):
    reason = "invalid_signature"


class ExpiredTokenError(TokenError):
    reason = "expired"


class MalformedTokenError(TokenError):
    reason = "malformed"


@dataclass(frozen=True)
class TokenClaims:
    subject_id: str
    employee_id: str
    role: str
    issued_at: datetime
    expires_at: datetime


def _load_keys(settings: JWTSettings) -> tuple[str | bytes, str | bytes]:
    if settings.use_rs256:
        # Keys provided via env often carry literal \n sequences
        private_key = settings.jwt_private_key.replace("\\n", "\n").encode("utf-8")
        public_key = settings.jwt_public_key.replace("\\n", "\n").encode("utf-8")
        return private_key, public_key
    if not settings.jwt_secret:
        raise RuntimeError("JWT_SECRET must be set when RS256 keys are not provided")
    return settings.jwt_secret, settings.jwt_secret


class TokenService:
    def __init__(
        self, settings: JWTSettings, clock: Callable[[], datetime] = utc_now
    ) -> None:
        self._settings = settings
        self._clock = clock
        self._algorithm = settings.algorithm
        self._signing_key, self._verifying_key = _load_keys(settings)
        self._ttl = timedelta(seconds=settings.access_token_ttl_seconds)

    @property
    def ttl(self) -> timedelta:
        return self._ttl

    def issue(self, subject_id: str, employee_id: str, role: str) -> str:
        """Sign a token for the given identity, valid for the configured TTL."""
        now = self._clock()
        claims = {
            "iss": self._settings.jwt_issuer,
            "aud": self._settings.jwt_audience,
            "sub": str(subject_id),
            "employee_id": employee_id,
            "role": role,
            "iat": int(now.timestamp()),
            "exp": int((now + self._ttl).timestamp()),
        }
        return jwt.encode(claims, self._signing_key, algorithm=self._algorithm)

    def verify(self, token: str) -> TokenClaims:
        """Decode and validate *token*.

        Raises:
            InvalidSignatureTokenError: signature does not match.
            ExpiredTokenError: current time is at or past ``exp``.
            MalformedTokenError: anything else (unparseable, wrong issuer or
                audience, missing or ill-typed claims).
        """
        try:
            claims = jwt.decode(
                token,
                self._verifying_key,
                algorithms=[self._algorithm],
                audience=self._settings.jwt_audience,
                issuer=self._settings.jwt_issuer,
                # exp is checked against the injected clock below
                options={
                    "require": ["exp", "iat", "sub"],
                    "verify_exp": False,
                    "verify_iat": False,
                },
            )
        except jwt.InvalidSignatureError as e:
            raise InvalidSignatureTokenError(str(e)) from e
        except jwt.InvalidTokenError as e:
            raise MalformedTokenError(str(e)) from e

        issued_at = claims["iat"]
        expires_at = claims["exp"]
        for value in (issued_at, expires_at):
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise MalformedTokenError("iat/exp must be numeric")
        expires = datetime.fromtimestamp(expires_at, tz=timezone.utc)
        if self._clock() >= expires:
            raise ExpiredTokenError("token expired")

        employee_id = claims.get("employee_id")
        role = claims.get("role")
        if not isinstance(employee_id, str) or not employee_id:
            raise MalformedTokenError("employee_id claim missing")
        if role not in _VALID_ROLES:
            raise MalformedTokenError("role claim missing or unknown")

        return TokenClaims(
            subject_id=claims["sub"],
            employee_id=employee_id,
            role=role,
            issued_at=datetime.fromtimestamp(issued_at, tz=timezone.utc),
            expires_at=expires,
        )
