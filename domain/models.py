from dataclasses import dataclass, field, fields
from typing import List, Dict, Optional, Any
import datetime as _dt
import re

# Fractional seconds of any width; older fromisoformat only takes 3 or 6 digits.
_FRACTION = re.compile(r"\.(\d+)")


def parse_datetime(value: Any) -> Optional[_dt.datetime]:
    """Parse a backend timestamp (ISO string, epoch millis or datetime).

    Aware values are normalised to UTC and made naive: backend LocalDateTime
    fields carry no zone, so all comparisons happen on naive datetimes.
    Returns None for anything unparsable.
    """
    if value is None or value == '':
        return None
    if isinstance(value, _dt.datetime):
        dt_value = value
    elif isinstance(value, _dt.date):
        return _dt.datetime(value.year, value.month, value.day)
    elif isinstance(value, (int, float)):
        try:
            dt_value = _dt.datetime.fromtimestamp(
                value / 1000, tz=_dt.timezone.utc)
        except (OverflowError, OSError, ValueError):
            return None
    elif isinstance(value, str):
        text = value.strip().replace('Z', '+00:00')
        text = _FRACTION.sub(lambda m: '.' + m.group(1)[:6].ljust(6, '0'), text, count=1)
        try:
            dt_value = _dt.datetime.fromisoformat(text)
        except ValueError:
            return None
    elif isinstance(value, list) and len(value) >= 3:
        # Jackson without JavaTimeModule serialises LocalDateTime as [y, m, d, h, mi, s]
        try:
            dt_value = _dt.datetime(*[int(v) for v in value[:6]])
        except (TypeError, ValueError):
            return None
    else:
        return None
    if dt_value.tzinfo is not None:
        dt_value = dt_value.astimezone(_dt.timezone.utc).replace(tzinfo=None)
    return dt_value


def _from_dict(cls, d: Dict[str, Any]):
    """Build a dataclass from a JSON dict, dropping unknown keys."""
    allowed = {f.name for f in fields(cls)}
    return cls(**{k: v for k, v in (d or {}).items() if k in allowed})


@dataclass
class User:
    email: str
    userType: str  # VOLUNTEER | ORGANIZATION
    id: Optional[int] = None
    userId: Optional[int] = None
    firstName: Optional[str] = None
    lastName: Optional[str] = None
    organizationName: Optional[str] = None
    profileComplete: Optional[bool] = None

    @property
    def is_organization(self) -> bool:
        return self.userType == 'ORGANIZATION'


def user_from_dict(d: Dict[str, Any]) -> User:
    data = dict(d or {})
    data.setdefault('email', '')
    data.setdefault('userType', 'VOLUNTEER')
    return _from_dict(User, data)


@dataclass
class VolunteerProfile:
    firstName: str = ''
    lastName: str = ''
    bio: str = ''
    location: str = ''
    phoneNumber: str = ''
    skills: str = ''
    interests: str = ''
    availabilityPreference: str = 'flexible'
    profileImageUrl: Optional[str] = None
    totalVolunteerHours: int = 0
    eventsParticipated: int = 0
    rating: float = 0


@dataclass
class OrganizationProfile:
    organizationName: str = ''
    id: Optional[int] = None
    description: str = ''
    missionStatement: str = ''
    website: str = ''
    city: str = ''
    state: str = ''
    country: str = ''
    primaryCategory: str = ''
    categories: str = ''
    organizationType: str = ''
    employeeCount: Optional[int] = None
    isVerified: bool = False
    verificationLevel: Optional[str] = None
    totalEventsHosted: int = 0
    totalVolunteersServed: int = 0
    createdAt: Optional[str] = None
    updatedAt: Optional[str] = None


@dataclass
class Event:
    title: str
    id: Optional[int] = None
    organizationId: Optional[int] = None
    organizationName: Optional[str] = None
    description: str = ''
    eventType: Optional[str] = None
    skillLevelRequired: str = 'NO_EXPERIENCE_REQUIRED'
    durationCategory: Optional[str] = None
    startDate: Optional[str] = None
    endDate: Optional[str] = None
    location: str = ''
    address: str = ''
    city: str = ''
    state: str = ''
    zipCode: str = ''
    isVirtual: bool = False
    virtualMeetingLink: str = ''
    hasFlexibleTiming: bool = False
    isWeekdaysOnly: bool = False
    isWeekendsOnly: bool = False
    isRecurring: bool = False
    recurrencePattern: str = ''
    maxVolunteers: Optional[int] = None
    currentVolunteers: int = 0
    estimatedHours: Optional[int] = None
    requirements: str = ''
    contactEmail: str = ''
    contactPhone: str = ''
    imageUrl: str = ''
    status: str = 'DRAFT'
    createdAt: Optional[str] = None
    extra: Dict[str, Any] = field(default_factory=dict)

    @property
    def start(self) -> Optional[_dt.datetime]:
        return parse_datetime(self.startDate)

    @property
    def end(self) -> Optional[_dt.datetime]:
        return parse_datetime(self.endDate)


def volunteer_profile_from_dict(d: Dict[str, Any]) -> VolunteerProfile:
    return _from_dict(VolunteerProfile, d)


def organization_from_dict(d: Dict[str, Any]) -> OrganizationProfile:
    data = dict(d or {})
    data.setdefault('organizationName', data.get('name') or '')
    return _from_dict(OrganizationProfile, data)


def event_from_dict(d: Dict[str, Any]) -> Event:
    """Safe conversion keeping unknown keys under ``extra``."""
    data = dict(d or {})
    data.setdefault('title', '')
    known = {f.name for f in fields(Event)}
    extra = {k: v for k, v in data.items() if k not in known}
    event = _from_dict(Event, data)
    event.extra = extra
    return event
