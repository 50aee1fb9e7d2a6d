"""Resend implementation of EmailProvider.

Calls the Resend transactional email REST API (``POST /emails``) through
HttpClient and renders the message body from a Jinja2 template.
Every failure mode (missing API key, template error, non-2xx response,
transport error) is logged and reported as ``False``; callers decide how
to surface it.
"""

import os
from typing import Optional

from jinja2 import Environment, FileSystemLoader, TemplateError, select_autoescape

from config import EmailSettings
from infrastructure.http_client import HttpClient
from shared.logging import get_logger

log = get_logger(__name__)

RESEND_API_URL = "https://api.resend.com"
_DEFAULT_TEMPLATE_DIR = os.path.join(
    os.path.dirname(os.path.dirname(os.path.dirname(__file__))),
    "templates",
    "emails",
)


class ResendEmailProvider:
    def __init__(
        self,
        settings: EmailSettings,
        http_client: HttpClient,
        otp_ttl_minutes: int = 5,
        template_dir: str = _DEFAULT_TEMPLATE_DIR,
    ) -> None:
        self._settings = settings
        self._http = http_client
        self._otp_ttl_minutes = otp_ttl_minutes
        self._jinja = Environment(
            loader=FileSystemLoader(template_dir),
            autoescape=select_autoescape(["html", "xml"]),
        )

    async def _send(
        self, to_email: str, subject: str, html_body: str, text_body: str
    ) -> bool:
        if not self._settings.resend_api_key:
            log.error("email_send_failed", reason="api_key_not_configured")
            return False

        payload = {
            "from": f"{self._settings.resend_from_name} <{self._settings.resend_from_email}>",
            "to": [to_email],
            "subject": subject,
            "html": html_body,
            "text": text_body,
        }
        headers = {"Authorization": f"Bearer {self._settings.resend_api_key}"}

        try:
            response = await self._http.post("/emails", json=payload, headers=headers)
        except Exception as e:
            log.error(
                "email_send_error",
                to_email=to_email,
                subject=subject,
                error=str(e),
                error_type=type(e).__name__,
            )
            return False

        if response.status_code in (200, 201, 202):
            log.info("email_sent_success", to_email=to_email, subject=subject)
            return True
        log.error(
            "email_send_failed",
            to_email=to_email,
            subject=subject,
            status_code=response.status_code,
            response=response.text[:200],
        )
        return False

    async def send_password_reset_otp(
        self, email: str, user_name: Optional[str], otp_code: str
    ) -> bool:
        subject = "Your OTP for Password Reset"
        try:
            template = self._jinja.get_template("password_reset.html")
            html_body = template.render(
                otp_code=otp_code,
                user_name=user_name,
                ttl_minutes=self._otp_ttl_minutes,
            )
        except TemplateError as e:
            log.error("email_render_failed", template="password_reset.html", error=str(e))
            return False
        text_body = (
            f"Password Reset OTP\n\n"
            f"Hello{f' {user_name}' if user_name else ''},\n\n"
            f"Your OTP is: {otp_code}\n\n"
            f"This OTP will expire in {self._otp_ttl_minutes} minutes."
        )
        return await self._send(email, subject, html_body, text_body)
