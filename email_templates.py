"""
HTML email templates for admin notifications
"""

from datetime import datetime
from html import escape
from typing import Any, Dict, Optional

import config
from formatting import (
    format_clock,
    format_long_date,
    format_phone_international,
    parse_datetime,
    service_display_name,
    to_local,
)

THEME = {
    "primary": "#0A438C",
    "secondary": "#0A7BB2",
    "text": "#1e293b",
    "muted": "#64748b",
    "border": "#e2e8f0",
    "panel": "#f1f5f9",
}

STATUS_COLORS = {
    "pending": "#F59E0B",
    "in-progress": "#3B82F6",
    "completed": "#10B981",
}


def _when(value: Any, stored: bool = False) -> str:
    parsed = parse_datetime(value)
    if parsed is None:
        return "Not specified"
    if stored:
        parsed = to_local(parsed, config.PHARMACY_TIMEZONE)
    return f"{format_long_date(parsed)} {format_clock(parsed)}"


def _field(label: str, value: str) -> str:
    return f"""
      <div style="margin-bottom: 16px;">
        <p style="color: {THEME['muted']}; margin: 0 0 6px 0; font-size: 12px; font-weight: 600; text-transform: uppercase; letter-spacing: 0.5px;">{label}</p>
        <p style="color: {THEME['text']}; margin: 0; font-size: 14px; font-weight: 500;">{value}</p>
      </div>"""


def _panel(label: str, body: str) -> str:
    return f"""
      <div style="margin-bottom: 16px;">
        <p style="color: {THEME['muted']}; margin: 0 0 8px 0; font-size: 12px; font-weight: 600; text-transform: uppercase; letter-spacing: 0.5px;">{label}</p>
        <div style="background: {THEME['panel']}; border-radius: 8px; padding: 16px; color: {THEME['text']}; font-size: 14px; line-height: 1.5;">{body}</div>
      </div>"""


def _layout(title: str, icon: str, content: str, pharmacy_name: str, dashboard_url: Optional[str]) -> str:
    button = ""
    if dashboard_url:
        button = f"""
      <div style="text-align: center; margin: 24px 0;">
        <a href="{escape(dashboard_url)}" style="display: inline-block; background: {THEME['primary']}; color: #ffffff; padding: 14px 28px; text-decoration: none; border-radius: 12px; font-weight: 600; font-size: 16px;">View in Admin Dashboard</a>
      </div>"""

    return f"""<!DOCTYPE html>
<html lang="en">
<head>
  <meta charset="UTF-8">
  <meta name="viewport" content="width=device-width, initial-scale=1.0">
  <title>{title} - {escape(pharmacy_name)}</title>
</head>
<body style="margin: 0; padding: 0; background-color: #f8fafc; font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, Arial, sans-serif;">
  <div style="max-width: 600px; margin: 0 auto; background-color: #ffffff;">
    <div style="background: linear-gradient(135deg, {THEME['primary']} 0%, {THEME['secondary']} 100%); padding: 32px 24px; text-align: center;">
      <span style="font-size: 32px;">{icon}</span>
      <h1 style="color: #ffffff; margin: 8px 0 0 0; font-size: 26px; font-weight: 700;">{title}</h1>
      <p style="color: rgba(255, 255, 255, 0.9); margin: 8px 0 0 0; font-size: 15px;">{escape(pharmacy_name)} - Professional Healthcare Services</p>
    </div>
    <div style="padding: 32px 24px;">
      {content}
      {button}
      <div style="border-top: 1px solid {THEME['border']}; padding-top: 24px; text-align: center;">
        <p style="color: {THEME['muted']}; margin: 0 0 8px 0; font-size: 14px; font-weight: 500;">{escape(pharmacy_name)}</p>
        <p style="color: #94a3b8; margin: 0; font-size: 11px;">This is an automated notification. Please do not reply to this email.</p>
      </div>
    </div>
  </div>
</body>
</html>"""


def request_notification_subject(request: Dict[str, Any]) -> str:
    return f"New {'Refill' if request.get('type') == 'refill' else 'Consultation'} Request"


def request_notification_template(
    request: Dict[str, Any], pharmacy_name: str, dashboard_url: Optional[str] = None
) -> str:
    is_refill = request.get("type") == "refill"
    title = "New Refill Request" if is_refill else "New Consultation Request"
    status = request.get("status", "pending")
    status_color = STATUS_COLORS.get(status, THEME["muted"])

    info = (
        _field("Request ID", escape(str(request.get("id", ""))))
        + _field("Phone Number", escape(format_phone_international(request.get("phone", ""))))
        + _field("Submitted", _when(request.get("createdAt"), stored=True))
        + _field("Status", f'<span style="color: {status_color};">{escape(status)}</span>')
    )

    if is_refill:
        prescriptions = [rx.strip() for rx in request.get("prescriptions") or [] if rx and rx.strip()]
        rx_list = "".join(f"<div>💊 {escape(rx)}</div>" for rx in prescriptions) or "No prescriptions specified."
        details = (
            _panel("Prescriptions", rx_list)
            + _field("Delivery Type", escape((request.get("deliveryType") or "Not specified").capitalize()))
            + _field("Estimated Time", escape(request.get("estimatedTime") or "Not specified"))
        )
        if request.get("name"):
            details = _field("Patient Name", escape(request["name"])) + details
        if (request.get("comments") or "").strip():
            details += _panel("Comments", escape(request["comments"]))
    else:
        details = (
            _panel("Requested Service", f"🩺 {escape(service_display_name(request.get('service')))}")
            + _field("Preferred Date &amp; Time", _when(request.get("preferredDateTime")))
        )
        if (request.get("additionalNote") or "").strip():
            details += _panel("Additional Notes", escape(request["additionalNote"]))

    heading = "Prescription Details" if is_refill else "Consultation Details"
    content = f"""
      <h2 style="color: {THEME['text']}; font-size: 20px;">Request Information</h2>
      {info}
      <h2 style="color: {THEME['text']}; font-size: 18px;">{heading}</h2>
      {details}"""

    return _layout(title, "💊" if is_refill else "🩺", content, pharmacy_name, dashboard_url)


def order_notification_template(order: Dict[str, Any], pharmacy_name: str) -> str:
    content = (
        _field("Full Name", escape(order.get("fullName") or ""))
        + _field("Email", escape(order.get("email") or ""))
        + _field("Phone", escape(format_phone_international(order.get("phone") or "") or "-"))
        + _field("Address", escape(order.get("address") or "-"))
        + _field("Prescription", escape(order.get("prescription") or "-"))
        + _field("Submitted", _when(order.get("createdAt"), stored=True))
    )
    if order.get("message"):
        content += _panel("Message", escape(order["message"]))
    return _layout("New Order", "📦", content, pharmacy_name, None)


def configuration_check_template(sender: str, recipient: str, pharmacy_name: str, sent_at: datetime) -> str:
    content = f"""
      <h2 style="color: {THEME['primary']};">Email Configuration Test</h2>
      <p>This is a test email to verify that the Brevo email integration is working correctly.</p>
      {_field("From", escape(sender))}
      {_field("To", escape(recipient))}
      {_field("Timestamp", _when(sent_at, stored=True))}"""
    return _layout("Email Configuration Test", "✉️", content, pharmacy_name, None)
