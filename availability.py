"""
Business-hours calendar for consultation bookings.

Hours: Monday-Friday 9:00-20:00, Saturday 9:30-14:00, closed Sunday.
All functions take the current time explicitly; the routes pass the pharmacy's
local time.
"""

from datetime import date, datetime, time, timedelta
from typing import Dict, List, Optional, Tuple

from formatting import format_clock, format_long_date

SATURDAY = 5
SUNDAY = 6

LEAD_TIME = timedelta(hours=4)
SLOT_LENGTH = timedelta(hours=1)


def business_hours(day: date) -> Optional[Tuple[time, time]]:
    """(opening, closing) for a day, or None when closed."""
    weekday = day.weekday()
    if weekday == SUNDAY:
        return None
    if weekday == SATURDAY:
        return time(9, 30), time(14, 0)
    return time(9, 0), time(20, 0)


def next_business_opening(now: datetime) -> datetime:
    """Opening time of the first business day after now's date."""
    day = now.date() + timedelta(days=1)
    while business_hours(day) is None:
        day += timedelta(days=1)
    opening, _ = business_hours(day)
    return datetime.combine(day, opening, tzinfo=now.tzinfo)


def generate_time_slots(start: datetime) -> List[Dict[str, str]]:
    """Hourly slots from start until closing time on start's day."""
    hours = business_hours(start.date())
    if hours is None:
        return []
    opening, closing = hours
    close_at = datetime.combine(start.date(), closing, tzinfo=start.tzinfo)

    current = start.replace(second=0, microsecond=0)
    # seconds are dropped; the Saturday 9:30 opening is kept as a slot
    if current.minute and current.time() != opening:
        current = current.replace(minute=0) + timedelta(hours=1)

    slots = []
    while current < close_at:
        label = format_clock(current)
        slots.append({"value": label, "label": label, "date": current.date().isoformat()})
        current += SLOT_LENGTH
    return slots


def get_available_times(now: datetime) -> List[Dict[str, str]]:
    """
    Bookable consultation slots.

    During business hours the first slot is at least four hours out; when that
    runs past closing, or when the pharmacy is closed, booking starts at the
    next business day's opening.
    """
    hours = business_hours(now.date())
    if hours is None:
        return generate_time_slots(next_business_opening(now))

    opening, closing = hours
    if not (opening <= now.time() < closing):
        return generate_time_slots(next_business_opening(now))

    earliest = now + LEAD_TIME
    close_at = datetime.combine(now.date(), closing, tzinfo=now.tzinfo)
    if earliest >= close_at:
        return generate_time_slots(next_business_opening(now))

    # rounding up to the hour can land on closing time
    return generate_time_slots(earliest) or generate_time_slots(next_business_opening(now))


def get_available_dates(today: date, days: int = 30) -> List[Dict[str, object]]:
    """The next `days` calendar days (today included), Sundays excluded."""
    dates = []
    for offset in range(days):
        day = today + timedelta(days=offset)
        if day.weekday() == SUNDAY:
            continue
        dates.append(
            {
                "value": day.isoformat(),
                "label": format_long_date(day),
                "isSaturday": day.weekday() == SATURDAY,
            }
        )
    return dates
