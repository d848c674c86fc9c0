"""Store contact helpers: WhatsApp deep links and business hours."""
from __future__ import annotations

import re
from datetime import datetime, time
from urllib.parse import quote
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from storefront.core.config import BusinessHours, DaySchedule
from storefront.core.constants import DEFAULT_WHATSAPP_MESSAGE
from storefront.logging_config import logger

# Display order starts on Monday; dayOfWeek follows 0 = Sunday
DAYS_OF_WEEK: list[tuple[int, str]] = [
    (1, "Lunes"),
    (2, "Martes"),
    (3, "Miércoles"),
    (4, "Jueves"),
    (5, "Viernes"),
    (6, "Sábado"),
    (0, "Domingo"),
]

CLOSED_LABEL = "Cerrado"

_NON_DIAL_CHARS = re.compile(r"[^0-9+]")


def whatsapp_url(phone: str | None, message: str | None = None) -> str | None:
    """Build a ``wa.me`` link, or None when the store has no number."""
    if not phone:
        return None
    clean_phone = _NON_DIAL_CHARS.sub("", phone)
    if not clean_phone:
        return None
    text = quote(message or DEFAULT_WHATSAPP_MESSAGE, safe="")
    return f"https://wa.me/{clean_phone}?text={text}"


def _parse_time(value: str) -> time:
    hours, _, minutes = value.strip().partition(":")
    return time(int(hours), int(minutes or 0))


def format_time(value: str) -> str:
    """``"09:30" -> "9:30"``."""
    parsed = _parse_time(value)
    return f"{parsed.hour}:{parsed.minute:02d}"


def _schedule_for(hours: BusinessHours, day_of_week: int) -> DaySchedule | None:
    for day in hours.schedule:
        if day.day_of_week == day_of_week:
            return day
    return None


def format_schedule(hours: BusinessHours | None) -> list[tuple[str, str]]:
    """Rows of ``(day label, shifts text)`` from Monday to Sunday."""
    if not hours or not hours.enabled or not hours.schedule:
        return []

    rows = []
    for day_value, label in DAYS_OF_WEEK:
        day = _schedule_for(hours, day_value)
        if day and day.is_open and day.shifts:
            text = ", ".join(
                f"{format_time(shift.open)} - {format_time(shift.close)}" for shift in day.shifts
            )
        else:
            text = CLOSED_LABEL
        rows.append((label, text))
    return rows


def _localize(hours: BusinessHours, when: datetime) -> datetime:
    if not hours.timezone or when.tzinfo is None:
        return when
    try:
        return when.astimezone(ZoneInfo(hours.timezone))
    except ZoneInfoNotFoundError:
        logger.warning("Unknown business hours timezone %s", hours.timezone)
        return when


def is_open_at(hours: BusinessHours | None, when: datetime) -> bool | None:
    """Whether the store is open at ``when``; None if it publishes no hours.

    A shift whose close time is not after its open time runs past midnight.
    """
    if not hours or not hours.enabled or not hours.schedule:
        return None

    local = _localize(hours, when)
    now = local.time()
    # Python: Monday == 0; schedule: Sunday == 0
    today = (local.weekday() + 1) % 7
    yesterday = (today - 1) % 7

    day = _schedule_for(hours, today)
    if day and day.is_open:
        for shift in day.shifts:
            opens, closes = _parse_time(shift.open), _parse_time(shift.close)
            if opens < closes:
                if opens <= now < closes:
                    return True
            elif now >= opens:
                return True

    previous = _schedule_for(hours, yesterday)
    if previous and previous.is_open:
        for shift in previous.shifts:
            opens, closes = _parse_time(shift.open), _parse_time(shift.close)
            if closes <= opens and now < closes:
                return True

    return False
