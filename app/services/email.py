"""Email delivery over SMTP with a logged simulation fallback for local setups."""

import asyncio
import logging
import smtplib
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText

from app.config import settings

logger = logging.getLogger(__name__)

HTML_TEMPLATE_BASE = """
<!DOCTYPE html>
<html>
<head>
    <meta charset="utf-8">
    <style>
        body { font-family: Arial, sans-serif; background-color: #f8f9fa; color: #333; margin: 0; padding: 0; }
        .container { max-width: 600px; margin: 40px auto; background: #ffffff; border-radius: 8px; overflow: hidden; box-shadow: 0 2px 4px rgba(0,0,0,0.1); }
        .header { padding: 30px 40px 0; text-align: center; }
        .header h1 { color: #4F46E5; margin: 0; font-size: 24px; }
        .content { padding: 30px 40px; line-height: 1.6; }
        .button-wrap { text-align: center; margin: 30px 0; }
        .btn { display: inline-block; background: #4F46E5; color: #ffffff; text-decoration: none; padding: 14px 28px; border-radius: 6px; font-weight: bold; }
        .link { color: #666; word-break: break-all; background-color: #f5f5f5; padding: 12px; border-radius: 4px; font-size: 14px; }
        .footer { padding: 20px; text-align: center; color: #666; font-size: 12px; }
    </style>
</head>
<body>
    <div class="container">
        <div class="header">
            <h1>{title}</h1>
        </div>
        <div class="content">
            {body}
        </div>
        <div class="footer">
            <p>This is an automated email, please do not reply.</p>
        </div>
    </div>
</body>
</html>
"""


def _send_email_sync(recipient_email: str, subject: str, html_body: str) -> None:
    """Send the email, or log a simulated send when SMTP is not configured."""
    if not settings.SMTP_USERNAME or not settings.SMTP_PASSWORD:
        logger.info("Simulated email to %s: %s\n%s", recipient_email, subject, html_body)
        return

    msg = MIMEMultipart("alternative")
    msg["Subject"] = subject
    msg["From"] = f"{settings.APP_NAME} <{settings.MAIL_FROM}>"
    msg["To"] = recipient_email
    msg.attach(MIMEText(html_body, "html"))

    with smtplib.SMTP(settings.SMTP_SERVER, settings.SMTP_PORT) as server:
        server.starttls()
        server.login(settings.SMTP_USERNAME, settings.SMTP_PASSWORD)
        server.send_message(msg)
    logger.info("Email sent to %s", recipient_email)


async def send_email(recipient_email: str, subject: str, html_body: str) -> bool:
    """
    Best-effort delivery: failures are logged and reported as ``False``,
    never raised to the caller.
    """
    try:
        # smtplib blocks; keep it off the event loop.
        await asyncio.to_thread(_send_email_sync, recipient_email, subject, html_body)
        return True
    except (smtplib.SMTPException, OSError):
        logger.exception("Failed to send email to %s", recipient_email)
        return False


def verification_email_html(token: str) -> str:
    verification_url = f"{settings.APP_BASE_URL}/auth/verify-email?token={token}"
    body = f"""
    <p>Thank you for signing up. To complete your registration and access all features,
    please verify your email address by clicking the button below:</p>
    <div class="button-wrap">
        <a href="{verification_url}" class="btn">Verify Email Address</a>
    </div>
    <p>Or copy and paste this link in your browser:</p>
    <p class="link">{verification_url}</p>
    <p><strong>Important:</strong> This verification link will expire in
    {settings.VERIFICATION_TOKEN_HOURS} hours.</p>
    <p>If you didn't create an account, you can safely ignore this email.</p>
    """
    return (
        HTML_TEMPLATE_BASE
        .replace("{title}", f"Welcome to {settings.APP_NAME}!")
        .replace("{body}", body)
    )


async def send_verification_email(recipient_email: str, token: str) -> bool:
    """Email the verification link for ``token``."""
    return await send_email(recipient_email, "Verify your email address", verification_email_html(token))
