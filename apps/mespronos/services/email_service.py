"""
Email service using SendGrid for sending notifications.
"""

import os
import logging
from typing import Optional
from sqlalchemy.ext.asyncio import AsyncSession
from sendgrid import SendGridAPIClient
from sendgrid.helpers.mail import Mail, Email, To, Content, Header
from dotenv import load_dotenv
from mespronos.services import settings_service

# Load environment variables
load_dotenv()

logger = logging.getLogger(__name__)


# SendGrid Configuration
SENDGRID_API_KEY = os.getenv("SENDGRID_API_KEY")
SENDGRID_FROM_EMAIL = os.getenv("SENDGRID_FROM_EMAIL", "noreply@mespronos.net")
ENABLE_EMAIL = settings_service.get_bool_env("ENABLE_EMAIL", default=True)


async def is_enabled(session: Optional[AsyncSession] = None) -> bool:
    """
    Check if email is enabled, checking database first.

    Args:
        session: Optional database session for checking database settings

    Returns:
        True if email is enabled, False otherwise
    """
    try:
        return await settings_service.get_bool_setting(
            session, "enable_email", env_var="ENABLE_EMAIL", default=True, fallback_to_cache=True
        )
    except Exception as e:
        logger.warning(f"Error getting ENABLE_EMAIL from settings, using default: {e}")
        return ENABLE_EMAIL


async def send_email(
    to_email: str,
    subject: str,
    body: str,
    locale: Optional[str] = None,
    session: Optional[AsyncSession] = None,
) -> bool:
    """
    Send a plain-text email via SendGrid.

    Args:
        to_email: Recipient address
        subject: Email subject
        body: Rendered plain-text body
        locale: Recipient language code, sent as Content-Language
        session: Optional database session for checking database settings

    Returns:
        bool: True if the message was accepted (or email is disabled), False otherwise
    """
    # Check if email is disabled (database setting first, then env var)
    enable_email = await is_enabled(session)
    if not enable_email:
        logger.info(f"Email sending is disabled. Email to {to_email} skipped.")
        return True

    # If SendGrid is not configured, log warning and return True (don't fail the caller)
    if not SENDGRID_API_KEY:
        logger.warning("SENDGRID_API_KEY not configured. Email skipped.")
        return True

    try:
        message = Mail(
            from_email=Email(SENDGRID_FROM_EMAIL),
            to_emails=To(to_email),
            subject=subject,
            plain_text_content=Content("text/plain", body),
        )
        if locale:
            message.header = Header("Content-Language", locale)

        sg = SendGridAPIClient(SENDGRID_API_KEY)
        response = sg.send(message)

        if response.status_code >= 200 and response.status_code < 300:
            logger.info(f"Email sent successfully to {to_email}")
            return True
        else:
            logger.error(f"SendGrid returned status {response.status_code}: {response.body}")
            return False

    except Exception as e:
        logger.error(f"Failed to send email to {to_email}: {str(e)}")
        return False
