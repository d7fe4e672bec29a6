"""Display formatting for events: dates, times and event-type labels."""
from typing import Any, Optional

from domain.constants import (DURATION_DISPLAY, EVENT_TYPE_ALIASES,
                              EVENT_TYPE_DISPLAY, EVENT_TYPE_ICONS,
                              SKILL_LEVEL_DISPLAY)
from domain.models import parse_datetime


def format_event_date(value: Any) -> str:
    """'Saturday, March 9, 2024'; unparsable input is returned as text."""
    if not value:
        return ''
    moment = parse_datetime(value)
    if moment is None:
        return str(value)
    return f"{moment:%A}, {moment:%B} {moment.day}, {moment.year}"


def format_event_time(value: Any) -> str:
    """'9:30 AM'"""
    if not value:
        return ''
    moment = parse_datetime(value)
    if moment is None:
        return str(value)
    hour = moment.hour % 12 or 12
    return f"{hour}:{moment:%M} {'AM' if moment.hour < 12 else 'PM'}"


def event_type_display(event_type: Optional[str]) -> str:
    if not event_type:
        return ''
    key = EVENT_TYPE_ALIASES.get(event_type, event_type)
    return EVENT_TYPE_DISPLAY.get(key, event_type.replace('_', ' ').title())


def event_type_icon(event_type: Optional[str]) -> str:
    key = EVENT_TYPE_ALIASES.get(event_type, event_type)
    return EVENT_TYPE_ICONS.get(key, EVENT_TYPE_ICONS['OTHER'])


def skill_level_display(skill_level: Optional[str]) -> str:
    return SKILL_LEVEL_DISPLAY.get(skill_level, skill_level or '')


def duration_display(duration: Optional[str]) -> str:
    return DURATION_DISPLAY.get(duration, duration or '')
