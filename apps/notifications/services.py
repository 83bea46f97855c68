"""Notification services for sending emails."""

from __future__ import annotations

import logging
from smtplib import SMTPException

from django.conf import settings  # type: ignore
from django.core.mail import send_mail  # type: ignore
from django.utils.html import strip_tags  # type: ignore

logger = logging.getLogger(__name__)


def send_email_notification(
    recipient_email: str,
    subject: str,
    message: str,
    *,
    html_message: str | None = None,
) -> bool:
    """
    Send one transactional email.

    Args:
        recipient_email: address of the recipient
        subject: subject line
        message: plain-text body
        html_message: optional HTML body; the text body is derived from it

    Returns:
        bool: True if the email was handed to the mail backend
    """
    if html_message:
        message = strip_tags(html_message)
    try:
        send_mail(
            subject=subject,
            message=message,
            from_email=settings.DEFAULT_FROM_EMAIL,
            recipient_list=[recipient_email],
            html_message=html_message,
            fail_silently=False,
        )
    except (SMTPException, OSError) as exc:
        logger.error(f"Failed to send email to {recipient_email}: {exc}", exc_info=True)
        return False

    logger.info(f"Email sent successfully to {recipient_email}: {subject}")
    return True
