"""
OTP password reset.

issue() creates (or replaces) the 5-minute code for an email and hands it to
the email provider. verify_and_consume() burns a matching live code and writes
the new password hash.

The consume step is a single remove-if-match on InMemoryOtpStore, so two
concurrent verifies of the same code cannot both succeed. The record is
consumed before the password write: a failed write leaves the code spent and
the user must request a new one.
"""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Callable

from errors import DependencyUnavailableError, InvalidOtpError, NotFoundError
from infrastructure.email.protocol import EmailProvider
from infrastructure.otp_store import ConsumeResult, InMemoryOtpStore, OtpRecord
from repositories.staff_repository import StaffRepository
from shared.crypto import hash_otp, hash_password
from shared.datetime_utils import utc_now
from shared.generators import generate_otp_code
from shared.logging import get_logger

log = get_logger(__name__)

OTP_TTL_SECONDS = 300


class OtpService:
    def __init__(
        self,
        staff: StaffRepository,
        store: InMemoryOtpStore,
        email_provider: EmailProvider,
        ttl_seconds: int = OTP_TTL_SECONDS,
        clock: Callable[[], datetime] = utc_now,
        code_generator: Callable[[], str] = generate_otp_code,
    ) -> None:
        self._staff = staff
        self._store = store
        self._email = email_provider
        self._ttl = timedelta(seconds=ttl_seconds)
        self._clock = clock
        self._generate = code_generator

    async def issue(self, email: str) -> None:
        """Send a fresh code to *email*.

        Raises:
            NotFoundError: no staff member owns *email*.
            DependencyUnavailableError: the email provider did not accept the message.
        """
        staff = await self._staff.find_by_email(email)
        if staff is None:
            log.warning("otp_request_failed", reason="email_not_found")
            raise NotFoundError("User not found")

        code = self._generate()
        expires_at = self._clock() + self._ttl
        self._store.put(OtpRecord(email=email, code_hash=hash_otp(code), expires_at=expires_at))

        if not await self._email.send_password_reset_otp(email, staff.name, code):
            log.error("otp_delivery_failed", staff_id=str(staff.id))
            raise DependencyUnavailableError("Email service unavailable. Please try again.")

        log.info("otp_issued", staff_id=str(staff.id), expires_at=expires_at.isoformat())

    async def verify_and_consume(self, email: str, code: str, new_password: str) -> None:
        """Consume *code* for *email* and set *new_password*.

        Any non-empty password is accepted; the admin reset route is the one with a
        minimum length.

        Raises:
            InvalidOtpError: no record, wrong code, or expired code.
        """
        result = self._store.consume_if_match(email, hash_otp(code), self._clock())
        if result is not ConsumeResult.CONSUMED:
            log.warning("otp_verification_failed", reason=result.value)
            raise InvalidOtpError("Invalid or expired OTP")

        updated = await self._staff.update_password_hash_by_email(
            email, hash_password(new_password)
        )
        if not updated:
            # Account deleted between issue and verify
            log.warning("otp_verification_failed", reason="account_missing")
            raise InvalidOtpError("Invalid or expired OTP")

        log.info("password_reset_via_otp")

    def purge_expired(self) -> int:
        removed = self._store.purge_expired(self._clock())
        if removed:
            log.debug("otp_records_purged", count=removed)
        return removed
