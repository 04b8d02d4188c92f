"""
Email sender that writes messages to the log instead of delivering them.

Stands in until an SMTP or provider-backed sender is wired up. Links point
at FRONTEND_URL so the flow can be followed end to end in development.
"""

import logging

from src.app.services.email_sender import EmailSender

logger = logging.getLogger(__name__)


class LoggingEmailSender(EmailSender):
    def __init__(self, frontend_url: str):
        self.frontend_url = frontend_url.rstrip("/")

    async def send_verification_email(self, to: str, user_name: str, token: str) -> None:
        logger.info(
            "Verification email for %s (%s): %s/verify-email?token=%s",
            user_name,
            to,
            self.frontend_url,
            token,
        )

    async def send_password_reset_email(self, to: str, user_name: str, token: str) -> None:
        logger.info(
            "Password reset email for %s (%s): %s/reset-password?token=%s",
            user_name,
            to,
            self.frontend_url,
            token,
        )

    async def send_password_changed_email(self, to: str, user_name: str) -> None:
        logger.info("Password changed notice for %s (%s)", user_name, to)
