"""
Email service
Delivers contact form messages over SMTP
"""

import logging
from email.mime.text import MIMEText

import aiosmtplib

from app.core.config import settings

logger = logging.getLogger(__name__)


class EmailService:
    @staticmethod
    def is_configured() -> bool:
        """Check if email service is configured"""
        return bool(settings.SMTP_HOST)

    async def send_email(self, to_email: str, subject: str, body: str, reply_to: str = None) -> bool:
        """
        Send a plain-text email

        Returns:
            True when the message was handed to the SMTP server (or logged, when
            SMTP is not configured), False when delivery failed
        """
        if not self.is_configured():
            logger.warning(
                "Email service not configured, message logged only",
                extra={"to": to_email, "subject": subject},
            )
            return True

        message = MIMEText(body, "plain", "utf-8")
        message["From"] = settings.EMAIL_FROM
        message["To"] = to_email
        message["Subject"] = subject
        if reply_to:
            message["Reply-To"] = reply_to

        try:
            await aiosmtplib.send(
                message,
                hostname=settings.SMTP_HOST,
                port=settings.SMTP_PORT,
                username=settings.SMTP_USER,
                password=settings.SMTP_PASSWORD,
                start_tls=settings.SMTP_PORT == 587,
                timeout=settings.SMTP_TIMEOUT,
            )
        except (aiosmtplib.SMTPException, OSError) as e:
            logger.error(f"[Email/SMTP] Failed to send email to {to_email}: {e}")
            return False

        logger.info(f"[Email/SMTP] Successfully sent email to {to_email}: {subject}")
        return True

    async def send_contact_message(self, nom: str, email: str, message: str) -> bool:
        """Forward a contact form submission to the contact inbox, reply-to the sender"""
        subject = f"Contact - {nom}"
        body = f"De : {nom} <{email}>\n\n{message}"
        return await self.send_email(settings.CONTACT_INBOX, subject, body, reply_to=email)


email_service = EmailService()
