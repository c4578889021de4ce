import ssl
from email.mime.text import MIMEText
from email.mime.multipart import MIMEMultipart
import logging

import aiosmtplib

from leasehub.core.config import settings

logger = logging.getLogger(__name__)


def mail_enabled() -> bool:
    return bool(settings.MAIL_SERVER and settings.MAIL_SERVER.strip())


def _tls_options(port: int) -> dict:
    # Port 465 is implicit TLS; anything else upgrades with STARTTLS
    if port == 465:
        return {"use_tls": True, "tls_context": ssl.create_default_context()}
    return {"start_tls": True}


def _build_message(to_email: str, subject: str, body: str, is_html: bool, text_body: str | None) -> MIMEMultipart:
    message = MIMEMultipart("alternative")
    message["From"] = f"{settings.MAIL_FROM_NAME} <{settings.MAIL_FROM}>"
    message["To"] = to_email
    message["Subject"] = subject
    if text_body:
        message.attach(MIMEText(text_body, "plain"))
    message.attach(MIMEText(body, "html" if is_html else "plain"))
    return message


async def send_email(
    to_email: str,
    subject: str,
    body: str,
    is_html: bool = False,
    text_body: str | None = None,
) -> bool:
    """
    Send an email asynchronously.

    Args:
        to_email: Recipient email address
        subject: Email subject
        body: Email body content
        is_html: Whether the body is HTML format
        text_body: Optional plain-text alternative sent alongside an HTML body

    Returns:
        True if email sent successfully, False otherwise
    """
    if not mail_enabled():
        logger.info("Mail server not configured; skipping email to %s", to_email)
        return False

    message = _build_message(to_email, subject, body, is_html, text_body)
    try:
        await aiosmtplib.send(
            message,
            hostname=settings.MAIL_SERVER,
            port=settings.MAIL_PORT,
            username=settings.MAIL_USERNAME or None,
            password=settings.MAIL_PASSWORD or None,
            **_tls_options(settings.MAIL_PORT),
        )
    except (aiosmtplib.SMTPException, OSError) as e:
        logger.error("Failed to send email to %s: %s", to_email, e, exc_info=True)
        return False

    logger.info("Email sent successfully to %s", to_email)
    return True


async def send_welcome_email(to_email: str, to_name: str) -> bool:
    """Send the welcome email to a newly registered user."""
    subject = f"Welcome to {settings.MAIL_FROM_NAME}!"
    dashboard_url = f"{settings.APP_URL}/dashboard"
    list_vehicle_url = f"{settings.APP_URL}/dashboard/list-vehicle"

    html_body = f"""
<html>
  <body>
    <h2>Welcome to {settings.MAIL_FROM_NAME}, {to_name}!</h2>
    <p>We're thrilled to have you on board.</p>
    <p>You can start by browsing available vehicles or listing your own:</p>
    <ul>
      <li><a href="{dashboard_url}">Explore the Dashboard</a></li>
      <li><a href="{list_vehicle_url}">List Your Vehicle</a></li>
    </ul>
    <p>Happy Leasing!</p>
    <p>The {settings.MAIL_FROM_NAME} Team</p>
    <hr>
    <p><small>If you did not sign up for {settings.MAIL_FROM_NAME}, please ignore this email.</small></p>
  </body>
</html>
"""

    text_body = f"""
Welcome to {settings.MAIL_FROM_NAME}, {to_name}!
We're thrilled to have you on board.
Explore the dashboard: {dashboard_url}
The {settings.MAIL_FROM_NAME} Team
"""

    return await send_email(
        to_email=to_email,
        subject=subject,
        body=html_body,
        is_html=True,
        text_body=text_body,
    )
