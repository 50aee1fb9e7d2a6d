"""EmailProvider protocol — services depend on this, not the concrete implementation."""

from typing import Optional, Protocol


class EmailProvider(Protocol):
    async def send_password_reset_otp(
        self, email: str, user_name: Optional[str], otp_code: str
    ) -> bool:
        """Deliver *otp_code* to *email*. ``False`` means delivery failed."""
        ...
