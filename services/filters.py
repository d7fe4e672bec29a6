"""Client-side filtering for the events and organizations pages.

The backend list endpoints return everything; narrowing by the sidebar
checkboxes happens here. Within one option group the selections are OR-ed,
the groups themselves are AND-ed, and an empty group means "no restriction".
Records with missing or unparsable fields never raise, they just fail the
options that need those fields.
"""
from __future__ import annotations

import calendar
import datetime as dt
import math
from dataclasses import dataclass, field, replace
from typing import Any, Dict, Iterable, List, Optional, Sequence, Union

from domain.constants import (COUNTRY_ALIASES, DATE_UPDATED_OPTIONS,
                              DURATION_DISPLAY, EVENT_FILTER_LOCATIONS,
                              EVENTS_PER_PAGE, ORGANIZATION_SIZES,
                              SKILL_LEVEL_DISPLAY)
from domain.models import parse_datetime
from utils.formatting import event_type_display

VIRTUAL_LOCATION = "Virtual/Remote"
OTHER_LOCATION = "Other"

# duration option label -> (backend category, hour range); upper None = unbounded
_DURATION_RULES = {
    DURATION_DISPLAY["SHORT"]: ("SHORT", (1, 3)),
    DURATION_DISPLAY["MEDIUM"]: ("MEDIUM", (3, 5)),
    DURATION_DISPLAY["FULL_DAY"]: ("FULL_DAY", (5, 8)),
    DURATION_DISPLAY["MULTI_DAY"]: ("MULTI_DAY", (8, None)),
    DURATION_DISPLAY["WEEKLY_COMMITMENT"]: ("WEEKLY_COMMITMENT", None),
    DURATION_DISPLAY["MONTHLY_COMMITMENT"]: ("MONTHLY_COMMITMENT", None),
    DURATION_DISPLAY["ONGOING_LONG_TERM"]: ("ONGOING_LONG_TERM", None),
}

_SKILL_BY_LABEL = {label: enum for enum, label in SKILL_LEVEL_DISPLAY.items()}

# time option -> [start hour, end hour)
_TIME_WINDOWS = {
    "Morning (6AM-12PM)": (6, 12),
    "Afternoon (12PM-6PM)": (12, 18),
    "Evening (6PM-10PM)": (18, 22),
}


def _text(value: Any) -> str:
    if value is None:
        return ''
    if isinstance(value, (list, tuple, set)):
        return ' '.join(str(v) for v in value)
    return str(value)


def _contains(haystack: Any, needle: str) -> bool:
    return needle.lower() in _text(haystack).lower()


# --- criteria ---

@dataclass
class EventFilterCriteria:
    search_term: str = ''
    location_search: str = ''
    event_types: List[str] = field(default_factory=list)
    locations: List[str] = field(default_factory=list)
    dates: List[str] = field(default_factory=list)
    times: List[str] = field(default_factory=list)
    durations: List[str] = field(default_factory=list)
    skill_levels: List[str] = field(default_factory=list)
    custom_start: Optional[dt.date] = None
    custom_end: Optional[dt.date] = None

    def has_active_filters(self) -> bool:
        return bool(self.search_term.strip() or self.location_search.strip()
                    or self.event_types or self.locations or self.dates
                    or self.times or self.durations or self.skill_levels)

    def toggle(self, group: str, value: str) -> 'EventFilterCriteria':
        """Return a copy with ``value`` added to / removed from ``group``."""
        current = list(getattr(self, group))
        if value in current:
            current.remove(value)
        else:
            current.append(value)
        return replace(self, **{group: current})

    def cleared(self) -> 'EventFilterCriteria':
        return EventFilterCriteria()


@dataclass
class OrganizationFilterCriteria:
    search_term: str = ''
    categories: List[str] = field(default_factory=list)
    locations: List[str] = field(default_factory=list)
    date_updated: List[str] = field(default_factory=list)
    sizes: List[str] = field(default_factory=list)

    def has_active_filters(self) -> bool:
        return bool(self.search_term.strip() or self.categories or self.locations
                    or self.date_updated or self.sizes)

    def toggle(self, group: str, value: str) -> 'OrganizationFilterCriteria':
        current = list(getattr(self, group))
        if value in current:
            current.remove(value)
        else:
            current.append(value)
        return replace(self, **{group: current})

    def cleared(self) -> 'OrganizationFilterCriteria':
        return OrganizationFilterCriteria()


# --- date helpers ---

def add_months(moment: dt.datetime, months: int) -> dt.datetime:
    """Calendar month arithmetic, clamping the day (Jan 31 + 1 -> Feb 28/29)."""
    month_index = moment.month - 1 + months
    year = moment.year + month_index // 12
    month = month_index % 12 + 1
    day = min(moment.day, calendar.monthrange(year, month)[1])
    return moment.replace(year=year, month=month, day=day)


def weekend_range(today: dt.date, weeks_ahead: int = 0):
    """(first, last) day of the upcoming weekend; on a Sunday only today is left."""
    if today.weekday() == 6:
        if not weeks_ahead:
            return today, today
        first = today + dt.timedelta(days=6, weeks=weeks_ahead - 1)
    else:
        first = today + dt.timedelta(days=5 - today.weekday(), weeks=weeks_ahead)
    return first, first + dt.timedelta(days=1)


def _matches_date_option(option: str, start: dt.datetime, now: dt.datetime,
                         criteria: EventFilterCriteria) -> bool:
    today = now.date()
    day = start.date()
    if option == "Today":
        return day == today
    if option == "Tomorrow":
        return day == today + dt.timedelta(days=1)
    if option == "This Week":
        return now <= start <= now + dt.timedelta(days=7)
    if option == "Next Week":
        return now + dt.timedelta(days=7) <= start <= now + dt.timedelta(days=14)
    if option == "This Weekend":
        first, last = weekend_range(today)
        return first <= day <= last
    if option == "Next Weekend":
        first, last = weekend_range(today, weeks_ahead=1)
        return first <= day <= last
    if option == "This Month":
        return (start.year, start.month) == (now.year, now.month)
    if option == "Next Month":
        following = add_months(now.replace(day=1), 1)
        return (start.year, start.month) == (following.year, following.month)
    if option == "Next 3 Months":
        return now <= start <= add_months(now, 3)
    if option == "Custom Date Range":
        if criteria.custom_start and day < criteria.custom_start:
            return False
        if criteria.custom_end and day > criteria.custom_end:
            return False
        return True
    return False


# --- per-group predicates ---

def _matches_search(event: Dict[str, Any], term: str) -> bool:
    term = term.strip()
    if not term:
        return True
    fields = (event.get('title'), event.get('description'), event.get('eventType'),
              event_type_display(event.get('eventType')), event.get('organizationName'))
    return any(_contains(f, term) for f in fields)


def _matches_location_search(event: Dict[str, Any], term: str) -> bool:
    term = term.strip()
    if not term:
        return True
    return any(_contains(event.get(k), term) for k in ('location', 'city', 'state', 'zipCode'))


def _matches_event_type(event: Dict[str, Any], selection: str) -> bool:
    if _contains(event_type_display(event.get('eventType')), selection):
        return True
    if _contains(event.get('title'), selection):
        return True
    categories = event.get('categories') or []
    if isinstance(categories, str):
        categories = [c.strip() for c in categories.split(',')]
    return any(str(c).lower() == selection.lower() for c in categories)


def _matches_concrete_location(event: Dict[str, Any], selection: str) -> bool:
    if _contains(event.get('location'), selection):
        return True
    city = selection.split(',')[0].strip().lower()
    return bool(city) and _text(event.get('city')).strip().lower() == city


def _matches_location(event: Dict[str, Any], selection: str) -> bool:
    if selection == VIRTUAL_LOCATION:
        return bool(event.get('isVirtual'))
    if selection == OTHER_LOCATION:
        if event.get('isVirtual'):
            return False
        listed = (loc for loc in EVENT_FILTER_LOCATIONS if loc not in (VIRTUAL_LOCATION, OTHER_LOCATION))
        return not any(_matches_concrete_location(event, loc) for loc in listed)
    return _matches_concrete_location(event, selection)


def _matches_time(event: Dict[str, Any], start: Optional[dt.datetime], option: str) -> bool:
    if option == "Flexible Timing":
        return bool(event.get('hasFlexibleTiming'))
    if start is None:
        return False
    if option in _TIME_WINDOWS:
        low, high = _TIME_WINDOWS[option]
        return low <= start.hour < high
    if option == "Weekdays Only":
        return start.weekday() < 5
    if option == "Weekends Only":
        return start.weekday() >= 5
    return False


def event_hours(event: Dict[str, Any]) -> Optional[float]:
    value = event.get('estimatedHours') or event.get('duration')
    try:
        return float(value) if value is not None else None
    except (TypeError, ValueError):
        return None


def _matches_duration(event: Dict[str, Any], option: str) -> bool:
    rule = _DURATION_RULES.get(option)
    if rule is None:
        return False
    category, hour_range = rule
    hours = event_hours(event)
    if hour_range is not None and hours is not None:
        low, high = hour_range
        if high is None:
            return hours > low
        if category == "FULL_DAY":
            return low <= hours <= high
        return low <= hours < high
    return event.get('durationCategory') == category


def _matches_skill(event: Dict[str, Any], option: str) -> bool:
    wanted = _SKILL_BY_LABEL.get(option, option)
    actual = event.get('skillLevelRequired') or event.get('skillLevel')
    if actual and (actual == wanted or actual == option):
        return True
    return _contains(event.get('requirements'), option)


def _any(options: Sequence[str], predicate) -> bool:
    return not options or any(predicate(o) for o in options)


def event_matches(event: Dict[str, Any], criteria: EventFilterCriteria, now: dt.datetime) -> bool:
    if not _matches_search(event, criteria.search_term):
        return False
    if not _matches_location_search(event, criteria.location_search):
        return False
    if not _any(criteria.event_types, lambda o: _matches_event_type(event, o)):
        return False
    if not _any(criteria.locations, lambda o: _matches_location(event, o)):
        return False
    start = parse_datetime(event.get('startDate'))
    if criteria.dates:
        if start is None or not any(_matches_date_option(o, start, now, criteria) for o in criteria.dates):
            return False
    if not _any(criteria.times, lambda o: _matches_time(event, start, o)):
        return False
    if not _any(criteria.durations, lambda o: _matches_duration(event, o)):
        return False
    return _any(criteria.skill_levels, lambda o: _matches_skill(event, o))


def filter_events(events: Iterable[Dict[str, Any]], criteria: Optional[EventFilterCriteria] = None,
                  now: Optional[dt.datetime] = None) -> List[Dict[str, Any]]:
    events = [e for e in (events or []) if isinstance(e, dict)]
    if criteria is None or not (criteria.has_active_filters() or criteria.custom_start or criteria.custom_end):
        return events
    now = now or dt.datetime.now()
    return [e for e in events if event_matches(e, criteria, now)]


# --- card display helpers ---

def format_short_date(moment: dt.datetime) -> str:
    return f"{moment:%b} {moment.day}"


def date_badge(start: Any, now: Optional[dt.datetime] = None) -> str:
    moment = parse_datetime(start)
    if moment is None:
        return ''
    now = now or dt.datetime.now()
    diff_days = (moment.date() - now.date()).days
    if diff_days < 0:
        return format_short_date(moment)
    if diff_days == 0:
        return "Today"
    if diff_days == 1:
        return "Tomorrow"
    weekend = moment.weekday() >= 5
    if diff_days <= 7:
        return "This Weekend" if weekend else "This Week"
    if diff_days <= 14:
        return "Next Weekend" if weekend else "Next Week"
    if diff_days <= 30:
        return "This Month"
    return format_short_date(moment)


def duration_text(event: Dict[str, Any]) -> str:
    hours = event_hours(event) or 0
    if 1 <= hours <= 2:
        return "1-2 Hours"
    if 2 < hours <= 4:
        return "3-4 Hours"
    if 4 < hours <= 8:
        return "Full Day"
    if hours > 8:
        return "Multi-Day"
    return "Flexible"


def skill_level_text(event: Dict[str, Any]) -> str:
    level = event.get('skillLevelRequired') or event.get('skillLevel')
    if not level:
        return "All Levels"
    level = str(level).replace('_', ' ').lower()
    if "no experience" in level or "beginner" in level:
        return "Beginner"
    if "some experience" in level or "intermediate" in level:
        return "Intermediate"
    if "experienced" in level or "advanced" in level:
        return "Advanced"
    if "specialized" in level or "expert" in level:
        return "Expert"
    return "All Levels"


def event_status(event: Dict[str, Any], now: Optional[dt.datetime] = None) -> str:
    now = now or dt.datetime.now()
    end = parse_datetime(event.get('endDate'))
    start = parse_datetime(event.get('startDate'))
    if end is not None and end < now:
        return "Completed"
    if start is not None and start > now:
        return "Upcoming"
    return "In Progress"


def spots_remaining(event: Dict[str, Any]) -> int:
    maximum = event.get('maxVolunteers') or 0
    current = event.get('currentVolunteers') or 0
    return max(0, maximum - current)


# --- pagination ---

def total_pages(count: int, per_page: int = EVENTS_PER_PAGE) -> int:
    return max(1, math.ceil(count / per_page)) if per_page > 0 else 1


def paginate(items: Sequence[Any], page: int, per_page: int = EVENTS_PER_PAGE) -> List[Any]:
    """1-based page slice; out-of-range pages are clamped."""
    page = min(max(page, 1), total_pages(len(items), per_page))
    start = (page - 1) * per_page
    return list(items[start:start + per_page])


def page_numbers(current: int, total: int, delta: int = 2) -> List[Union[int, str]]:
    """Page links with ellipses, e.g. ``[1, '...', 4, 5, 6, 7, 8, '...', 20]``."""
    if total <= 1:
        return [1]
    window = list(range(max(2, current - delta), min(total - 1, current + delta) + 1))
    pages: List[Union[int, str]] = [1]
    if window and window[0] > 2:
        pages.append('...')
    pages.extend(window)
    if window and window[-1] < total - 1:
        pages.append('...')
    pages.append(total)
    return pages


# --- organizations ---

def _org_categories(org: Dict[str, Any]) -> List[str]:
    values = []
    for key in ('primaryCategory', 'categories', 'categoryList'):
        value = org.get(key)
        if isinstance(value, str):
            values.extend(v.strip() for v in value.split(','))
        elif isinstance(value, (list, tuple)):
            values.extend(str(v).strip() for v in value)
    return [v.lower() for v in values if v]


def _matches_country(org: Dict[str, Any], selection: str) -> bool:
    country = _text(org.get('country')).strip().lower()
    if not country:
        return False
    aliases = COUNTRY_ALIASES.get(selection, {selection.lower()})
    return country in aliases or country == selection.lower()


def _matches_updated(org: Dict[str, Any], option: str, now: dt.datetime) -> bool:
    hours = DATE_UPDATED_OPTIONS.get(option)
    stamp = parse_datetime(org.get('updatedAt') or org.get('createdAt'))
    if hours is None or stamp is None:
        return False
    return now - stamp <= dt.timedelta(hours=hours)


def _matches_size(org: Dict[str, Any], option: str) -> bool:
    bounds = ORGANIZATION_SIZES.get(option)
    try:
        count = int(org.get('employeeCount'))
    except (TypeError, ValueError):
        return False
    if bounds is None:
        return False
    low, high = bounds
    return count >= low and (high is None or count <= high)


def organization_matches(org: Dict[str, Any], criteria: OrganizationFilterCriteria,
                         now: dt.datetime) -> bool:
    term = criteria.search_term.strip()
    if term:
        keys = ('organizationName', 'name', 'description', 'missionStatement',
                'primaryCategory', 'city', 'state', 'country')
        if not any(_contains(org.get(k), term) for k in keys):
            return False
    if criteria.categories:
        have = _org_categories(org)
        if not any(c.lower() in have for c in criteria.categories):
            return False
    if not _any(criteria.locations, lambda o: _matches_country(org, o)):
        return False
    if not _any(criteria.date_updated, lambda o: _matches_updated(org, o, now)):
        return False
    return _any(criteria.sizes, lambda o: _matches_size(org, o))


def filter_organizations(organizations: Iterable[Dict[str, Any]],
                         criteria: Optional[OrganizationFilterCriteria] = None,
                         now: Optional[dt.datetime] = None) -> List[Dict[str, Any]]:
    organizations = [o for o in (organizations or []) if isinstance(o, dict)]
    if criteria is None or not criteria.has_active_filters():
        return organizations
    now = now or dt.datetime.now()
    return [o for o in organizations if organization_matches(o, criteria, now)]
