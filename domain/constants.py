"""
This module contains centralized constants used throughout the application,
ensuring a single source of truth for backend enums, filter options and
runtime configuration.
"""

# Runtime configuration is read from the environment once at import time.
import os

API_BASE_URL = os.environ.get(
    "VOLUNTEERSYNC_API_URL", "http://localhost:8080/api").rstrip("/")
REQUEST_TIMEOUT = float(os.environ.get("VOLUNTEERSYNC_TIMEOUT", "15"))
SEARCH_CACHE_TTL = float(os.environ.get("VOLUNTEERSYNC_CACHE_TTL", "60"))
SEARCH_DEBOUNCE_SECONDS = float(
    os.environ.get("VOLUNTEERSYNC_DEBOUNCE", "0.3"))
SEARCH_CACHE_MAX_SIZE = int(os.environ.get("VOLUNTEERSYNC_CACHE_SIZE", "100"))
REMEMBER_SESSION = os.environ.get(
    "VOLUNTEERSYNC_REMEMBER_SESSION", "").lower() in {"1", "true", "yes"}
LOG_LEVEL = os.environ.get("VOLUNTEERSYNC_LOG_LEVEL", "INFO").upper()

USER_TYPES = ["VOLUNTEER", "ORGANIZATION"]

# Backend EventType enum -> display name
EVENT_TYPE_DISPLAY = {
    "COMMUNITY_CLEANUP": "Community Cleanup",
    "FOOD_SERVICE": "Food Service",
    "TUTORING_EDUCATION": "Tutoring & Education",
    "ANIMAL_CARE": "Animal Care",
    "ENVIRONMENTAL_CONSERVATION": "Environmental Conservation",
    "SENIOR_SUPPORT": "Senior Support",
    "YOUTH_MENTORING": "Youth Mentoring",
    "HEALTHCARE_SUPPORT": "Healthcare Support",
    "DISASTER_RELIEF": "Disaster Relief",
    "ARTS_CULTURE": "Arts & Culture",
    "SPORTS_RECREATION": "Sports & Recreation",
    "FUNDRAISING": "Fundraising",
    "ADMINISTRATIVE_SUPPORT": "Administrative Support",
    "CONSTRUCTION_BUILDING": "Construction & Building",
    "TECHNOLOGY_SUPPORT": "Technology Support",
    "EVENT_PLANNING": "Event Planning",
    "ADVOCACY_AWARENESS": "Advocacy & Awareness",
    "RESEARCH_DATA": "Research & Data",
    "TRANSPORTATION": "Transportation",
    "GARDENING": "Gardening",
    "CRISIS_SUPPORT": "Crisis Support",
    "FESTIVAL_FAIR": "Festival & Fair",
    "WORKSHOP_TRAINING": "Workshop & Training",
    "BLOOD_DRIVE": "Blood Drive",
    "OTHER": "Other",
}

# Legacy enum names some older records still carry.
EVENT_TYPE_ALIASES = {
    "TECHNOLOGY_DIGITAL": "TECHNOLOGY_SUPPORT",
    "COMMUNITY_BUILDING": "CONSTRUCTION_BUILDING",
}

EVENT_TYPE_ICONS = {
    "COMMUNITY_CLEANUP": "🧹",
    "FOOD_SERVICE": "🍽️",
    "TUTORING_EDUCATION": "📚",
    "ANIMAL_CARE": "🐾",
    "ENVIRONMENTAL_CONSERVATION": "🌱",
    "SENIOR_SUPPORT": "👴",
    "YOUTH_MENTORING": "👥",
    "HEALTHCARE_SUPPORT": "🏥",
    "DISASTER_RELIEF": "🚑",
    "ARTS_CULTURE": "🎨",
    "SPORTS_RECREATION": "⚽",
    "FUNDRAISING": "💰",
    "ADMINISTRATIVE_SUPPORT": "📁",
    "CONSTRUCTION_BUILDING": "🔨",
    "TECHNOLOGY_SUPPORT": "💻",
    "EVENT_PLANNING": "📅",
    "ADVOCACY_AWARENESS": "📢",
    "RESEARCH_DATA": "📊",
    "TRANSPORTATION": "🚗",
    "GARDENING": "🌻",
    "CRISIS_SUPPORT": "🆘",
    "FESTIVAL_FAIR": "🎪",
    "WORKSHOP_TRAINING": "🎓",
    "BLOOD_DRIVE": "🩸",
    "OTHER": "📋",
}

EVENT_TYPES = list(EVENT_TYPE_DISPLAY.keys())

# Backend SkillLevel enum -> display name
SKILL_LEVEL_DISPLAY = {
    "NO_EXPERIENCE_REQUIRED": "No Experience Required",
    "BEGINNER_FRIENDLY": "Beginner Friendly",
    "SOME_EXPERIENCE_PREFERRED": "Some Experience Preferred",
    "EXPERIENCED_VOLUNTEERS": "Experienced Volunteers",
    "SPECIALIZED_SKILLS_REQUIRED": "Specialized Skills Required",
    "TRAINING_PROVIDED": "Training Provided",
}
SKILL_LEVELS = list(SKILL_LEVEL_DISPLAY.keys())

# Backend EventDuration enum -> display name
DURATION_DISPLAY = {
    "SHORT": "1-2 Hours",
    "MEDIUM": "3-4 Hours",
    "FULL_DAY": "5-8 Hours (Full Day)",
    "MULTI_DAY": "Multi-Day Event",
    "WEEKLY_COMMITMENT": "Weekly Commitment",
    "MONTHLY_COMMITMENT": "Monthly Commitment",
    "ONGOING_LONG_TERM": "Ongoing/Long-term",
}
DURATION_CATEGORIES = list(DURATION_DISPLAY.keys())

EVENT_STATUSES = ["DRAFT", "ACTIVE", "FULL", "CANCELLED", "COMPLETED"]

# --- Event page filter options ---
EVENT_FILTER_TYPES = [
    EVENT_TYPE_DISPLAY[k] for k in EVENT_TYPES if k != "OTHER"]

EVENT_FILTER_LOCATIONS = [
    "Virtual/Remote",
    "New York, NY", "Los Angeles, CA", "Chicago, IL",
    "Toronto, ON", "Vancouver, BC", "Montreal, QC",
    "London, UK", "Manchester, UK", "Edinburgh, UK",
    "Sydney, NSW", "Melbourne, VIC", "Brisbane, QLD",
    "Berlin, Germany", "Munich, Germany", "Hamburg, Germany",
    "Paris, France", "Lyon, France", "Marseille, France",
    "Amsterdam, Netherlands", "Rotterdam, Netherlands", "The Hague, Netherlands",
    "Stockholm, Sweden", "Gothenburg, Sweden", "Malmö, Sweden",
    "Copenhagen, Denmark", "Aarhus, Denmark", "Odense, Denmark",
    "Dublin, Ireland", "Cork, Ireland", "Galway, Ireland",
    "Zurich, Switzerland", "Geneva, Switzerland", "Basel, Switzerland",
    "Other",
]

DATE_OPTIONS = [
    "Today", "Tomorrow", "This Week", "Next Week", "This Weekend",
    "Next Weekend", "This Month", "Next Month", "Next 3 Months",
    "Custom Date Range",
]

TIME_OPTIONS = [
    "Morning (6AM-12PM)", "Afternoon (12PM-6PM)", "Evening (6PM-10PM)",
    "Weekdays Only", "Weekends Only", "Flexible Timing",
]

DURATION_OPTIONS = list(DURATION_DISPLAY.values())

SKILL_LEVEL_OPTIONS = list(SKILL_LEVEL_DISPLAY.values())

EVENTS_PER_PAGE = 20

# --- Organization page filter options ---
ORGANIZATION_CATEGORIES = [
    "Education", "Environment", "Healthcare", "Animal Welfare", "Community Service",
    "Human Services", "Arts & Culture", "Youth Development", "Senior Services",
    "Hunger & Homelessness", "Disaster Relief", "International", "Sports & Recreation",
    "Mental Health", "Veterans", "Women's Issues", "Children & Families",
    "Disability Services", "Religious", "Political", "LGBTQ+", "Technology",
    "Research & Advocacy", "Public Safety",
]

ORGANIZATION_LOCATIONS = [
    "United States", "Canada", "United Kingdom", "Australia", "Germany",
    "France", "Netherlands", "Sweden", "Denmark", "Ireland", "Switzerland",
]

# Country spellings the backend may return for a filter location.
COUNTRY_ALIASES = {
    "United States": {"united states", "usa", "us", "united states of america"},
    "United Kingdom": {"united kingdom", "uk", "great britain", "england", "scotland", "wales"},
}

# label -> max age in hours
DATE_UPDATED_OPTIONS = {
    "Last 24 hours": 24,
    "Last 3 days": 72,
    "Last 7 days": 168,
    "Last 14 days": 336,
    "Last 30 days": 720,
}

# label -> inclusive employee-count range (upper None = unbounded)
ORGANIZATION_SIZES = {
    "Small (1-50)": (1, 50),
    "Medium (51-200)": (51, 200),
    "Large (201-1000)": (201, 1000),
    "Enterprise (1000+)": (1001, None),
}

# --- Settings defaults ---
DEFAULT_NOTIFICATION_SETTINGS = {
    "emailNotifications": True,
    "pushNotifications": True,
    "eventReminders": True,
    "organizationUpdates": True,
    "connectionRequests": True,
    "weeklyDigest": False,
    "marketingEmails": False,
}

DEFAULT_PRIVACY_SETTINGS = {
    "profileVisibility": "public",
    "showEmail": False,
    "showPhone": False,
    "showLocation": True,
    "allowMessaging": True,
    "showActivity": True,
    "searchable": True,
}

PROFILE_VISIBILITY_OPTIONS = ["public", "volunteers_only", "private"]

AVAILABILITY_OPTIONS = ["flexible", "weekdays", "weekends", "evenings", "mornings"]

MIN_PASSWORD_LENGTH = 8
