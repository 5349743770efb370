"""Display helpers shared by the email templates, fax documents and backups."""

import re
from datetime import datetime, timezone
from typing import Any, Optional
from zoneinfo import ZoneInfo

SERVICE_DISPLAY_NAMES = {
    "uti": "Testing and Treatment for UTI",
    "strep": "Testing and Treatment for Strep A",
    "travel": "Traveller's Health",
    "sinus": "Sinus Infection",
    "allergies": "Allergies Treatment",
    "diabetes": "Diabetes Management",
    "contraception": "Emergency Contraceptive Pill and Regular Contraception",
    "hair-lice": "Hair Lice Treatment",
    "heartburn": "Heartburn Treatment",
    "malaria": "Mountain Sickness and Malaria",
    "pregnancy": "Pregnancy Care",
    "shingles": "Shingles Treatment",
    "throat": "Throat Infection",
    "tick": "Tick Bite Treatment",
    "travellers-diarrhea": "Traveller's Diarrhea",
    "smoking": "Smoking Cessation",
}


def digits_only(value: str) -> str:
    return re.sub(r"\D", "", value or "")


def service_display_name(service: Optional[str]) -> str:
    if not service:
        return "Not specified"
    return SERVICE_DISPLAY_NAMES.get(service, service)


def format_phone_display(phone: str) -> str:
    """(450) 638-5760 for 10-digit numbers, anything else unchanged."""
    digits = digits_only(phone)
    if len(digits) == 10:
        return f"({digits[:3]}) {digits[3:6]}-{digits[6:]}"
    return phone


def format_phone_international(phone: str) -> str:
    """+1 (450) 638-5760 for 10-digit numbers, anything else unchanged."""
    digits = digits_only(phone)
    if len(digits) == 10:
        return f"+1 {format_phone_display(digits)}"
    return phone


def parse_datetime(value: Any) -> Optional[datetime]:
    """Accept datetimes, ISO strings and extended-JSON {"$date": ...}; None when unparseable."""
    if isinstance(value, datetime):
        return value
    if isinstance(value, dict) and "$date" in value:
        value = value["$date"]
    if isinstance(value, str) and value:
        try:
            return datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            return None
    return None


def format_long_date(value: datetime) -> str:
    # Monday, January 5, 2026
    return f"{value:%A}, {value:%B} {value.day}, {value.year}"


def format_clock(value: datetime) -> str:
    # 9:30 AM
    hour = value.hour % 12 or 12
    suffix = "AM" if value.hour < 12 else "PM"
    return f"{hour}:{value.minute:02d} {suffix}"


def to_local(value: datetime, tz_name: str) -> datetime:
    """Convert a stored timestamp (naive values are UTC, as pymongo returns them) to local time."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(ZoneInfo(tz_name))
