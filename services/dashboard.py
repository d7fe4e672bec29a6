"""Dashboard aggregation.

The dashboard is assembled from several independent endpoints. Each one is
best-effort: a failure is logged and the section keeps its default, so one
broken endpoint never blanks the whole page.
"""
from __future__ import annotations

import datetime as dt
import logging
from typing import Any, Callable, Dict, List

from domain.models import parse_datetime
from services.api import (ApiClient, ApiError, ValidationError, as_list,
                          error_message, fail, ok, unwrap)

logger = logging.getLogger(__name__)

STATS_ENDPOINTS = {
    'VOLUNTEER': '/volunteer-profiles/me/stats',
    'ORGANIZATION': '/organization-profiles/me/stats',
}


def _event_date(item: Dict[str, Any]):
    return parse_datetime(item.get('eventDate') or item.get('startDate'))


class DashboardService:
    def __init__(self, client: ApiClient, now: Callable[[], dt.datetime] = dt.datetime.now):
        self.client = client
        self.session = client.session
        self._now = now

    def _fetch(self, path: str):
        """GET ``path``; returns None (and logs) on failure."""
        try:
            return unwrap(self.client.get(path))
        except ApiError as e:
            logger.warning("Dashboard section %s unavailable: %s", path, e)
            return None

    def _fetch_list(self, path: str) -> List[Dict[str, Any]]:
        body = self._fetch(path)
        return as_list(body)

    def _volunteer_data(self, user: Dict[str, Any]) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            'user': user,
            'userType': 'VOLUNTEER',
            'profile': None,
            'stats': {'hoursCompleted': 0, 'eventsAttended': 0, 'upcomingEvents': 0,
                      'connections': 0, 'rating': 0},
            'events': [],
            'applications': [],
            'badges': [],
            'recentActivity': [],
            'error': None,
        }
        profile = self._fetch('/volunteer-profiles/me')
        if isinstance(profile, dict):
            data['profile'] = profile
            data['stats'].update(hoursCompleted=profile.get('totalVolunteerHours') or 0,
                                 eventsAttended=profile.get('eventsParticipated') or 0,
                                 rating=profile.get('rating') or 0)
        else:
            data['error'] = 'Failed to load profile data'

        stats = self._fetch('/volunteer-profiles/me/stats')
        if isinstance(stats, dict):
            data['stats'].update(stats)

        data['applications'] = self._fetch_list('/applications/volunteer/me')
        now = self._now()
        upcoming = []
        for app in data['applications']:
            when = _event_date(app.get('event') or {})
            if app.get('status') == 'APPROVED' and when is not None and when > now:
                upcoming.append(app)
        data['stats']['upcomingEvents'] = len(upcoming)

        data['badges'] = self._fetch_list('/volunteer-profiles/me/badges')
        data['recentActivity'] = self._fetch_list('/volunteer-profiles/me/activity')
        return data

    def _organization_data(self, user: Dict[str, Any]) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            'user': user,
            'userType': 'ORGANIZATION',
            'profile': None,
            'stats': {'activeEvents': 0, 'totalVolunteers': 0, 'pendingApplications': 0,
                      'eventsThisMonth': 0, 'totalEvents': 0, 'profileViews': 0},
            'events': [],
            'applications': [],
            'volunteers': [],
            'error': None,
        }
        profile = self._fetch('/organization-profiles/me')
        if isinstance(profile, dict):
            data['profile'] = profile
        else:
            data['error'] = 'Failed to load profile data'

        now = self._now()
        events = self._fetch_list('/events/organization/me')
        data['events'] = events
        stats = data['stats']
        stats['totalEvents'] = len(events)
        stats['activeEvents'] = sum(
            1 for e in events
            if e.get('status') == 'ACTIVE' and (_event_date(e) or dt.datetime.min) > now)
        stats['eventsThisMonth'] = sum(
            1 for e in events
            if _event_date(e) and (_event_date(e).year, _event_date(e).month) == (now.year, now.month))

        data['applications'] = self._fetch_list('/applications/organization/me')
        stats['pendingApplications'] = sum(1 for a in data['applications'] if a.get('status') == 'PENDING')

        data['volunteers'] = self._fetch_list('/volunteer-management/volunteers')
        stats['totalVolunteers'] = len(data['volunteers'])

        remote_stats = self._fetch('/organization-profiles/me/stats')
        if isinstance(remote_stats, dict):
            stats.update(remote_stats)
        return data

    def get_dashboard_data(self) -> Dict[str, Any]:
        user = self.session.user
        if not user:
            return fail('User not logged in')
        user_type = user.get('userType')
        if user_type == 'VOLUNTEER':
            return ok(self._volunteer_data(user))
        if user_type == 'ORGANIZATION':
            return ok(self._organization_data(user))
        return fail(f'Invalid user type: {user_type}')

    def get_quick_stats(self) -> Dict[str, Any]:
        user = self.session.user
        if not user:
            return fail('User not logged in')
        try:
            endpoint = STATS_ENDPOINTS.get(user.get('userType'))
            if endpoint is None:
                raise ValidationError('Invalid user type')
            return ok(unwrap(self.client.get(endpoint)))
        except (ApiError, ValidationError) as e:
            return fail(error_message(e, 'Failed to load statistics'))

    def refresh_dashboard_data(self) -> Dict[str, Any]:
        return self.get_dashboard_data()
