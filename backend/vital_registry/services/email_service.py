"""
Email Service for the Vital Records Registry
============================================
Notification sink for account emails:
- Email verification on signup
- Password reset links

Supports both SMTP and SendGrid. Delivery problems are logged and reported
as ``False``; callers never see an exception from a failed send.
"""

import asyncio
import html
from datetime import datetime
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from typing import Optional

import aiosmtplib
from sendgrid import SendGridAPIClient
from sendgrid.helpers.mail import Mail, Email, To, Content

from vital_registry.core.config import settings
from vital_registry.core.logging_config import logger


class EmailService:
    """Async email service using SMTP or SendGrid"""

    def __init__(self):
        self.smtp_host = settings.SMTP_HOST
        self.smtp_port = settings.SMTP_PORT
        self.smtp_user = settings.SMTP_USER
        self.smtp_password = settings.SMTP_PASSWORD
        self.from_email = settings.EMAIL_FROM
        self.from_name = settings.EMAIL_FROM_NAME
        self.sendgrid_api_key = settings.SENDGRID_API_KEY
        self.use_sendgrid = settings.USE_SENDGRID and bool(self.sendgrid_api_key)

    @property
    def is_configured(self) -> bool:
        """Check if email service is properly configured"""
        if self.use_sendgrid:
            return bool(self.sendgrid_api_key)
        return bool(self.smtp_user and self.smtp_password)

    async def send_email(
        self,
        to_email: str,
        subject: str,
        html_content: str,
        text_content: Optional[str] = None
    ) -> bool:
        """
        Send an email asynchronously.

        Returns True if successful, False otherwise.
        """
        if not self.is_configured:
            logger.warning(f"[Email] Email service not configured, skipping '{subject}' to {to_email}")
            return False

        if self.use_sendgrid:
            return await self._send_via_sendgrid(to_email, subject, html_content, text_content)
        return await self._send_via_smtp(to_email, subject, html_content, text_content)

    async def _send_via_sendgrid(
        self,
        to_email: str,
        subject: str,
        html_content: str,
        text_content: Optional[str] = None
    ) -> bool:
        """Send email via SendGrid API"""
        try:
            message = Mail(
                from_email=Email(self.from_email, self.from_name),
                to_emails=To(to_email),
                subject=subject,
                html_content=Content("text/html", html_content)
            )

            if text_content:
                message.add_content(Content("text/plain", text_content))

            sg = SendGridAPIClient(self.sendgrid_api_key)
            # SendGrid client is synchronous
            loop = asyncio.get_running_loop()
            response = await loop.run_in_executor(None, sg.send, message)

            if response.status_code in (200, 201, 202):
                logger.info(f"[Email/SendGrid] Sent '{subject}' to {to_email}")
                return True

            logger.error(f"[Email/SendGrid] Failed with status {response.status_code}: {response.body}")
            return False

        except Exception as e:
            logger.error(f"[Email/SendGrid] Failed to send email to {to_email}: {e}")
            return False

    async def _send_via_smtp(
        self,
        to_email: str,
        subject: str,
        html_content: str,
        text_content: Optional[str] = None
    ) -> bool:
        """Send email via SMTP"""
        try:
            message = MIMEMultipart("alternative")
            message["From"] = f"{self.from_name} <{self.from_email}>"
            message["To"] = to_email
            message["Subject"] = subject

            # Plain text first so clients prefer the HTML part
            if text_content:
                message.attach(MIMEText(text_content, "plain"))
            message.attach(MIMEText(html_content, "html"))

            await aiosmtplib.send(
                message,
                hostname=self.smtp_host,
                port=self.smtp_port,
                username=self.smtp_user,
                password=self.smtp_password,
                start_tls=True
            )

            logger.info(f"[Email/SMTP] Sent '{subject}' to {to_email}")
            return True

        except Exception as e:
            logger.error(f"[Email/SMTP] Failed to send email to {to_email}: {e}")
            return False

    def _wrap_html(self, heading: str, body: str) -> str:
        return f"""
        <!DOCTYPE html>
        <html>
        <body style="font-family: Arial, sans-serif; line-height: 1.6; color: #333;">
            <div style="max-width: 600px; margin: 0 auto; padding: 20px;">
                <h2>{heading}</h2>
                {body}
                <p style="font-size: 12px; color: #6b7280; margin-top: 30px;">
                    &copy; {datetime.utcnow().year} {self.from_name}
                </p>
            </div>
        </body>
        </html>
        """

    async def send_verification_email(
        self,
        to_email: str,
        user_name: Optional[str],
        verification_token: str
    ) -> bool:
        """Send email verification link to new user"""
        link = settings.get_verification_url(verification_token)
        hours = settings.VERIFICATION_TOKEN_TTL_HOURS

        html_content = self._wrap_html(
            "Verify your email",
            f"""
            <p>Hi {html.escape(user_name or 'there')},</p>
            <p>Click <a href="{link}">here</a> to verify your email address.</p>
            <p style="font-size: 14px; color: #6b7280;">This link will expire in {hours} hours.</p>
            """,
        )
        text_content = f"Verify your email address: {link}\nThis link will expire in {hours} hours."

        return await self.send_email(to_email, "Verify your email", html_content, text_content)

    async def send_password_reset_email(
        self,
        to_email: str,
        user_name: Optional[str],
        reset_token: str
    ) -> bool:
        """Send password reset link"""
        link = settings.get_password_reset_url(reset_token)
        minutes = settings.RESET_TOKEN_TTL_MINUTES

        html_content = self._wrap_html(
            "Reset your password",
            f"""
            <p>Hi {html.escape(user_name or 'there')},</p>
            <p>Click <a href="{link}">here</a> to reset your password.</p>
            <p style="font-size: 14px; color: #6b7280;">
                This link will expire in {minutes} minutes. If you didn't request a reset, ignore this email.
            </p>
            """,
        )
        text_content = f"Reset your password: {link}\nThis link will expire in {minutes} minutes."

        return await self.send_email(to_email, "Reset your password", html_content, text_content)


email_service = EmailService()
