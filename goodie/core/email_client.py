# goodie/core/email_client.py
"""
Email client utilities for the Goodie backend.

Responsibilities:
  - Read SMTP configuration from Settings.
  - Send plain-text + HTML messages (send_email).
  - Format and send the password reset message.
  - Support both TLS (STARTTLS) and SSL connections.

Typical .env configuration (Gmail example with App Password):

    SMTP_HOST=smtp.gmail.com
    SMTP_PORT=465
    SMTP_USERNAME=shop@example.com
    SMTP_PASSWORD=<app password>
    SMTP_FROM_EMAIL=shop@example.com
    SMTP_FROM_NAME=Goodie
    SMTP_USE_TLS=false
    SMTP_USE_SSL=true
"""
from __future__ import annotations

import smtplib
from email.message import EmailMessage
from functools import lru_cache

from goodie.core.config import Settings, get_settings

SMTP_TIMEOUT_SECONDS = 30


class EmailClient:
    def __init__(self, settings: Settings):
        self.settings = settings

    def _create_smtp_client(self) -> smtplib.SMTP:
        """
        Create and return an SMTP client configured for TLS or SSL.

        Priority:
          - If SMTP_USE_SSL is True → use smtplib.SMTP_SSL (e.g., Gmail on 465).
          - Else → use smtplib.SMTP + optional STARTTLS if SMTP_USE_TLS is True.
        """
        s = self.settings
        if not s.SMTP_HOST:
            raise RuntimeError("SMTP_HOST is not configured. Please set it in .env.")

        if s.SMTP_USE_SSL:
            server: smtplib.SMTP = smtplib.SMTP_SSL(s.SMTP_HOST, s.SMTP_PORT, timeout=SMTP_TIMEOUT_SECONDS)
        else:
            server = smtplib.SMTP(s.SMTP_HOST, s.SMTP_PORT, timeout=SMTP_TIMEOUT_SECONDS)
            if s.SMTP_USE_TLS:
                server.starttls()

        return server

    def send_email(
        self,
        to_email: str,
        subject: str,
        text_body: str,
        html_body: str | None = None,
    ) -> None:
        """
        Send an email to a single recipient.

        Raises
        ------
        RuntimeError:
            If required SMTP configuration is missing.
        smtplib.SMTPException:
            If the underlying SMTP connection or send fails.
        """
        s = self.settings
        if not (s.SMTP_HOST and s.SMTP_USERNAME and s.SMTP_PASSWORD):
            raise RuntimeError(
                "SMTP is not configured correctly. "
                "Please set SMTP_HOST, SMTP_USERNAME, and SMTP_PASSWORD in .env."
            )

        msg = EmailMessage()
        from_email = s.SMTP_FROM_EMAIL or s.SMTP_USERNAME
        msg["From"] = f"{s.SMTP_FROM_NAME} <{from_email}>"
        msg["To"] = to_email
        msg["Subject"] = subject

        msg.set_content(text_body)
        if html_body:
            msg.add_alternative(html_body, subtype="html")

        server = self._create_smtp_client()
        try:
            server.login(s.SMTP_USERNAME, s.SMTP_PASSWORD)
            server.send_message(msg)
        finally:
            try:
                server.quit()
            except smtplib.SMTPException:
                # Connection is being torn down anyway.
                pass

    def send_password_reset_email(self, to_email: str, reset_link: str) -> None:
        text_body = (
            "We received a request to reset your Goodie password.\n\n"
            f"Open this link to choose a new password:\n{reset_link}\n\n"
            "The link expires in 1 hour. If you did not ask for a reset, "
            "you can ignore this email."
        )
        html_body = f"""
            <h1>Password Reset Request</h1>
            <p>Click the button below to choose a new password:</p>
            <a href="{reset_link}" style="background-color: #4F46E5; color: white; padding: 12px 20px; text-decoration: none; border-radius: 5px; display: inline-block;">
              Reset Password
            </a>
            <p>This link will expire in 1 hour.</p>
            <p>If you did not request a password reset, please ignore this email.</p>
        """
        self.send_email(
            to_email=to_email,
            subject="Reset your Goodie password",
            text_body=text_body,
            html_body=html_body,
        )


@lru_cache
def get_email_client() -> EmailClient:
    return EmailClient(get_settings())
