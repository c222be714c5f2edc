"""
Email delivery for verification and password reset links, via SendGrid.

Delivery is best effort. Every send returns a ``DeliveryResult`` carrying the
link that was (or would have been) mailed, so callers can hand it to the user
directly when the mail did not go out.
"""
import html
import logging
from dataclasses import dataclass
from typing import Optional
from urllib.parse import urlencode

import sendgrid
from sendgrid.helpers.mail import Mail, Email, To, Content

from wagehire.core import config

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DeliveryResult:
    delivered: bool
    fallback_url: str
    reason: Optional[str] = None


def build_link(base_url: str, path: str, token: str) -> str:
    return f"{base_url.rstrip('/')}/{path}?{urlencode({'token': token})}"


def _verification_html(name: str, url: str) -> str:
    return f"""
        <div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">
            <h2 style="color: #333;">Welcome to Wagehire, {html.escape(name)}!</h2>
            <p>Please verify your email address to start managing your interview journey.</p>
            <p><a href="{url}">Verify Email Address</a></p>
            <p>If the link doesn't work, copy and paste this URL into your browser:</p>
            <p>{url}</p>
            <p>This link expires in {config.EMAIL_VERIFICATION_EXPIRE_HOURS} hours.</p>
            <p>Best regards,<br>The Wagehire Team</p>
        </div>
    """


def _password_reset_html(name: str, url: str) -> str:
    return f"""
        <div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">
            <p>Hello {html.escape(name)},</p>
            <p>We received a request to reset your Wagehire password.</p>
            <p><a href="{url}">Reset Password</a></p>
            <p>If the link doesn't work, copy and paste this URL into your browser:</p>
            <p>{url}</p>
            <p>This link expires in {config.PASSWORD_RESET_EXPIRE_HOURS} hour(s). If you didn't ask for a reset,
            ignore this email and your password stays unchanged.</p>
            <p>Best regards,<br>The Wagehire Team</p>
        </div>
    """


class EmailService:
    def __init__(self, api_key: Optional[str] = None, from_email: Optional[str] = None):
        self.api_key = api_key
        self.from_email = from_email or config.EMAIL_FROM
        self.sg = sendgrid.SendGridAPIClient(api_key=api_key) if api_key else None

    @property
    def configured(self) -> bool:
        return self.sg is not None

    def send_email(self, to_email: str, subject: str, html_content: str) -> int:
        mail = Mail(Email(self.from_email, "Wagehire"), To(to_email), subject, Content("text/html", html_content))
        response = self.sg.client.mail.send.post(request_body=mail.get())
        return response.status_code

    def _deliver(self, to_email: str, subject: str, html_content: str, url: str) -> DeliveryResult:
        if not self.configured:
            logger.info(f"Email not configured, returning manual link for {to_email}")
            return DeliveryResult(delivered=False, fallback_url=url, reason="email_not_configured")

        try:
            status_code = self.send_email(to_email, subject, html_content)
        except Exception as e:
            logger.error(f"Email sending failed: to={to_email}, error={e}")
            return DeliveryResult(delivered=False, fallback_url=url, reason="email_send_failed")

        if status_code >= 300:
            logger.error(f"Email rejected by provider: to={to_email}, status={status_code}")
            return DeliveryResult(delivered=False, fallback_url=url, reason="email_send_failed")

        logger.info(f"Email sent: to={to_email}, subject={subject!r}")
        return DeliveryResult(delivered=True, fallback_url=url)

    def send_verification(self, to_email: str, name: str, token: str, base_url: str) -> DeliveryResult:
        url = build_link(base_url, "verify-email", token)
        return self._deliver(to_email, "Verify Your Email - Wagehire", _verification_html(name, url), url)

    def send_password_reset(self, to_email: str, name: str, token: str, base_url: str) -> DeliveryResult:
        url = build_link(base_url, "reset-password", token)
        return self._deliver(to_email, "Reset Your Password - Wagehire", _password_reset_html(name, url), url)


# Singleton, built on first use
_email_service_instance = None


def get_email_service() -> EmailService:
    global _email_service_instance
    if _email_service_instance is None:
        _email_service_instance = EmailService(api_key=config.SENDGRID_API_KEY)
    return _email_service_instance
