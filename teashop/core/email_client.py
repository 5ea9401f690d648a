# teashop/core/email_client.py
"""
Email client utilities for the tea shop backend.

Responsibilities:
  - Read SMTP configuration from settings (EMAIL_* env vars).
  - Provide send_email(...) plus the verification-code message.
  - Support both TLS (STARTTLS) and SSL connections.

Typical .env configuration (Gmail example with App Password):

    EMAIL_HOST=smtp.gmail.com
    EMAIL_PORT=465
    EMAIL_USER=shop@gmail.com
    EMAIL_PASS=<app password>
    EMAIL_FROM_NAME=Tea Shop
    EMAIL_USE_TLS=false
    EMAIL_USE_SSL=true
"""
from __future__ import annotations

import smtplib
from email.message import EmailMessage

from teashop.core.config import get_settings


def _create_smtp_client() -> smtplib.SMTP:
    """
    Create and return an SMTP client configured for TLS or SSL.

    Priority:
      - If EMAIL_USE_SSL is True → use smtplib.SMTP_SSL (e.g., Gmail on 465).
      - Else → use smtplib.SMTP + optional STARTTLS if EMAIL_USE_TLS is True.
    """
    settings = get_settings()
    if not settings.EMAIL_HOST:
        raise RuntimeError("EMAIL_HOST is not configured. Please set it in .env.")

    if settings.EMAIL_USE_SSL:
        server: smtplib.SMTP = smtplib.SMTP_SSL(
            settings.EMAIL_HOST, settings.EMAIL_PORT, timeout=30
        )
    else:
        server = smtplib.SMTP(settings.EMAIL_HOST, settings.EMAIL_PORT, timeout=30)
        if settings.EMAIL_USE_TLS:
            server.starttls()

    return server


def send_email(
    to_email: str,
    subject: str,
    text_body: str,
    html_body: str | None = None,
) -> None:
    """
    Send an email to a single recipient.

    Parameters
    ----------
    to_email:
        Recipient email address.
    subject:
        Email subject line.
    text_body:
        Plain-text body (fallback for clients without HTML support).
    html_body:
        Optional HTML body; sent as an alternative part.

    Raises
    ------
    RuntimeError:
        If required SMTP configuration is missing.
    smtplib.SMTPException / OSError:
        If the underlying SMTP connection or send fails.
    """
    settings = get_settings()
    if not (settings.EMAIL_HOST and settings.EMAIL_USER and settings.EMAIL_PASS):
        raise RuntimeError(
            "SMTP is not configured correctly. "
            "Please set EMAIL_HOST, EMAIL_USER, and EMAIL_PASS in .env."
        )

    msg = EmailMessage()
    msg["From"] = f"{settings.EMAIL_FROM_NAME} <{settings.EMAIL_USER}>"
    msg["To"] = to_email
    msg["Subject"] = subject

    msg.set_content(text_body)
    if html_body:
        msg.add_alternative(html_body, subtype="html")

    server = _create_smtp_client()
    try:
        server.login(settings.EMAIL_USER, settings.EMAIL_PASS)
        server.send_message(msg)
    finally:
        try:
            server.quit()
        except smtplib.SMTPException:
            # Connection is being torn down anyway.
            pass


def send_verification_code(to_email: str, code: str, ttl_minutes: int) -> None:
    """Email a one-time login code."""
    text_body = (
        f"Your login code is {code}.\n\n"
        f"It is valid for {ttl_minutes} minutes. Do not share it with anyone.\n"
        "If you did not request this code, you can ignore this email."
    )
    html_body = f"""
<div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">
  <h2 style="color: #333; text-align: center;">Login code</h2>
  <p style="font-size: 16px; color: #666;">Your login code is:</p>
  <p style="text-align: center; font-size: 32px; font-weight: bold;
            color: #007bff; letter-spacing: 5px;">{code}</p>
  <p style="font-size: 14px; color: #666;">
    This code is valid for {ttl_minutes} minutes. Do not share it with anyone.
  </p>
  <p style="font-size: 12px; color: #999; text-align: center;">
    This message was sent automatically, please do not reply.
  </p>
</div>
"""
    send_email(
        to_email=to_email,
        subject="Your login code",
        text_body=text_body,
        html_body=html_body,
    )
