"""
Email delivery through the Brevo transactional API.

send_email raises on failure; the notify_* helpers are meant to run as
background tasks and only log failures so a submission never fails because
of email.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional

import httpx

import config
from email_templates import (
    configuration_check_template,
    order_notification_template,
    request_notification_subject,
    request_notification_template,
)

logger = logging.getLogger(__name__)

BREVO_API_URL = "https://api.brevo.com/v3/smtp/email"


class EmailError(Exception):
    """Base class for email delivery failures"""


class EmailNotConfiguredError(EmailError):
    pass


class EmailDeliveryError(EmailError):
    pass


def send_email(to: str, subject: str, html: str) -> Dict[str, Any]:
    """Send a single HTML email. Returns the Brevo response body (contains messageId)."""
    if not config.BREVO_API_KEY:
        logger.error("BREVO_API_KEY is not configured")
        raise EmailNotConfiguredError("Email service not configured")

    payload = {
        "sender": {"name": config.PHARMACY_NAME, "email": config.MAIL_FROM},
        "to": [{"email": to}],
        "subject": subject,
        "htmlContent": html,
    }

    try:
        response = httpx.post(
            BREVO_API_URL,
            json=payload,
            headers={"api-key": config.BREVO_API_KEY, "Content-Type": "application/json"},
            timeout=15.0,
        )
    except httpx.HTTPError as e:
        raise EmailDeliveryError(f"Brevo request failed: {e}") from e

    if response.is_error:
        try:
            message = response.json().get("message") or response.reason_phrase
        except ValueError:
            message = response.reason_phrase
        raise EmailDeliveryError(f"Brevo API error: {message}")

    result = response.json() if response.content else {}
    logger.info(f"✅ Email sent to {to}: {result.get('messageId', '-')}")
    return result


def notify_new_request(request: Dict[str, Any]) -> None:
    try:
        send_email(
            to=config.ADMIN_EMAIL,
            subject=request_notification_subject(request),
            html=request_notification_template(
                request, config.PHARMACY_NAME, dashboard_url=f"{config.PUBLIC_BASE_URL}/admin"
            ),
        )
    except Exception as e:
        logger.error(f"❌ Failed to send email notification for request {request.get('id')}: {e}")


def notify_new_order(order: Dict[str, Any]) -> None:
    try:
        send_email(
            to=config.ADMIN_EMAIL,
            subject=f"New order from {order.get('fullName', 'website')}",
            html=order_notification_template(order, config.PHARMACY_NAME),
        )
    except Exception as e:
        logger.error(f"❌ Failed to send email notification for order {order.get('id')}: {e}")


def send_configuration_check(to: Optional[str] = None) -> Dict[str, Any]:
    recipient = to or config.ADMIN_EMAIL
    return send_email(
        to=recipient,
        subject=f"Test Email from {config.PHARMACY_NAME}",
        html=configuration_check_template(
            config.MAIL_FROM, recipient, config.PHARMACY_NAME, datetime.now(timezone.utc)
        ),
    )
