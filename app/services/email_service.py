"""
Email delivery for Blogsphere.

Sends over SMTP when configured; otherwise the dispatch is only logged
and reported as not sent.

IMPORTANT: Never log OTP values or sensitive data.
"""

import asyncio
import logging
import smtplib
import ssl
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from typing import Optional

from app.core.config import get_settings

logger = logging.getLogger(__name__)
settings = get_settings()


class EmailService:
    """SMTP email service."""

    def __init__(self):
        self.smtp_host = settings.smtp_host
        self.smtp_port = settings.smtp_port
        self.smtp_user = settings.smtp_user
        self.smtp_password = settings.smtp_password
        self.smtp_from_email = settings.smtp_from_email
        self.smtp_from_name = settings.smtp_from_name
        self.smtp_use_tls = settings.smtp_use_tls

        self.is_configured = bool(
            self.smtp_host and
            self.smtp_port and
            self.smtp_user and
            self.smtp_password
        )

        if self.is_configured:
            logger.info(f"Email service configured with SMTP: {self.smtp_host}:{self.smtp_port}")
        else:
            logger.warning("Email service not configured - emails will only be logged")

    async def send_email(
        self,
        to_email: str,
        subject: str,
        html_body: str,
        text_body: Optional[str] = None,
    ) -> bool:
        """
        Send an email asynchronously.

        Returns:
            True only if the SMTP server accepted the message
        """
        if not self.is_configured:
            logger.info(f"[EMAIL NOT SENT] To: {to_email}, Subject: {subject}")
            return False

        try:
            # Run SMTP send in thread pool to avoid blocking
            return await asyncio.to_thread(
                self._send_smtp,
                to_email,
                subject,
                html_body,
                text_body,
            )
        except Exception as e:
            logger.error(f"Failed to send email to {to_email}: {e}")
            return False

    def _send_smtp(
        self,
        to_email: str,
        subject: str,
        html_body: str,
        text_body: Optional[str] = None,
    ) -> bool:
        """Send email via SMTP (synchronous)."""
        msg = MIMEMultipart("alternative")
        msg["Subject"] = subject
        msg["From"] = f"{self.smtp_from_name} <{self.smtp_from_email}>"
        msg["To"] = to_email

        if text_body:
            msg.attach(MIMEText(text_body, "plain"))
        msg.attach(MIMEText(html_body, "html"))

        try:
            context = ssl.create_default_context()
            if self.smtp_use_tls:
                with smtplib.SMTP(self.smtp_host, self.smtp_port) as server:
                    server.starttls(context=context)
                    server.login(self.smtp_user, self.smtp_password)
                    server.sendmail(self.smtp_from_email, to_email, msg.as_string())
            else:
                # SSL connection (port 465)
                with smtplib.SMTP_SSL(self.smtp_host, self.smtp_port, context=context) as server:
                    server.login(self.smtp_user, self.smtp_password)
                    server.sendmail(self.smtp_from_email, to_email, msg.as_string())

            logger.info(f"Email sent successfully to {to_email}")
            return True

        except smtplib.SMTPAuthenticationError:
            logger.error("SMTP authentication failed - check credentials")
            return False
        except smtplib.SMTPException as e:
            logger.error(f"SMTP error: {e}")
            return False
        except OSError as e:
            logger.error(f"Email send error: {e}")
            return False

    async def send_otp(
        self,
        to_email: str,
        username: str,
        otp: str,
        expiry_minutes: Optional[int] = None,
    ) -> bool:
        """
        Send the signup verification code.

        Args:
            to_email: Recipient address
            username: Account username, used in the greeting
            otp: The code (in the email only, NOT logged)

        Returns:
            True if sent successfully
        """
        if not to_email or not username or not otp:
            logger.warning("OTP email skipped: recipient, username or code missing")
            return False

        expiry_minutes = expiry_minutes or settings.otp_expire_minutes
        subject = "Your OTP Code for Verification"

        html_body = f"""
<!DOCTYPE html>
<html>
<head>
    <meta charset="utf-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
</head>
<body style="font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, Arial, sans-serif; line-height: 1.6; color: #333; max-width: 600px; margin: 0 auto; padding: 20px;">
    <h1 style="margin: 0 0 20px 0; font-size: 24px;">{self.smtp_from_name}</h1>

    <p style="font-size: 16px;">Hi {username},</p>

    <p style="font-size: 16px;">Use the code below to verify your account:</p>

    <div style="background: #f8f9fa; border: 2px dashed #444; border-radius: 8px; padding: 20px; text-align: center; margin: 25px 0;">
        <p style="font-size: 36px; font-weight: bold; margin: 0; letter-spacing: 8px;">{otp}</p>
    </div>

    <p style="font-size: 14px; color: #666;">
        <strong>This code will expire in {expiry_minutes} minutes.</strong>
    </p>

    <p style="font-size: 12px; color: #999;">
        If you didn't create an account, you can ignore this email.
    </p>
</body>
</html>
"""

        text_body = f"""
Hi {username},

Use the code below to verify your account:

{otp}

This code will expire in {expiry_minutes} minutes.

If you didn't create an account, you can ignore this email.
"""

        # IMPORTANT: We do NOT log the OTP value
        logger.info(f"Sending OTP email to {to_email}")

        return await self.send_email(
            to_email=to_email,
            subject=subject,
            html_body=html_body,
            text_body=text_body,
        )


# Singleton instance
_email_service: Optional[EmailService] = None


def get_email_service() -> EmailService:
    """Get or create the email service singleton."""
    global _email_service
    if _email_service is None:
        _email_service = EmailService()
    return _email_service
