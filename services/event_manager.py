"""Event management for organization accounts: create, edit, status changes.

Every call returns a result dict (see `services.api.ok` / `fail`) so the
create-event and dashboard pages can show the outcome without try/except.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from domain.constants import DURATION_CATEGORIES, EVENT_TYPES, SKILL_LEVELS
from services.api import (ApiClient, ApiError, ValidationError, error_message,
                          fail, ok)
from services.auth import AuthService, user_id

logger = logging.getLogger(__name__)

# payload key -> default when the form leaves it empty
_OPTIONAL_TEXT = ['location', 'address', 'city', 'state', 'zipCode', 'requirements',
                  'contactPhone', 'imageUrl', 'virtualMeetingLink', 'timeOfDay',
                  'recurrencePattern']
_FLAGS = ['isVirtual', 'isRecurring', 'hasFlexibleTiming', 'isWeekdaysOnly', 'isWeekendsOnly']


def validate_event(data: Dict[str, Any]):
    for key in ('title', 'description', 'startDate'):
        if not data.get(key) or not str(data[key]).strip():
            raise ValidationError(f"{key} is required")
    checks = (
        ('eventType', EVENT_TYPES, 'event type'),
        ('skillLevelRequired', SKILL_LEVELS, 'skill level'),
        ('durationCategory', DURATION_CATEGORIES, 'duration category'),
    )
    for key, allowed, label in checks:
        value = data.get(key)
        if value and value not in allowed:
            raise ValidationError(
                f"Invalid {label}: {value}. Must be one of: {', '.join(allowed)}")


def build_event_payload(data: Dict[str, Any], user: Dict[str, Any]) -> Dict[str, Any]:
    payload = {
        'title': data['title'],
        'description': data['description'],
        'eventType': data.get('eventType'),
        'skillLevelRequired': data.get('skillLevelRequired') or 'NO_EXPERIENCE_REQUIRED',
        'durationCategory': data.get('durationCategory') or 'SHORT',
        'startDate': data['startDate'],
        'endDate': data.get('endDate'),
        'maxVolunteers': data.get('maxVolunteers') or None,
        'estimatedHours': data.get('estimatedHours') or None,
        'contactEmail': data.get('contactEmail') or user.get('email'),
    }
    for key in _OPTIONAL_TEXT:
        payload[key] = data.get(key) or ''
    for key in _FLAGS:
        payload[key] = bool(data.get(key))
    return payload


class EventManagerService:
    def __init__(self, client: ApiClient, auth: Optional[AuthService] = None):
        self.client = client
        self.auth = auth or AuthService(client)

    def _call(self, default_error: str, success_message: str, func, *args, **kwargs) -> Dict[str, Any]:
        try:
            data = func(*args, **kwargs)
        except (ApiError, ValidationError) as e:
            logger.warning("%s: %s", default_error, e)
            result = fail(error_message(e, default_error))
            if isinstance(e, ApiError) and e.payload is not None:
                result['error'] = e.payload
            return result
        return ok(data, success_message)

    def create_event(self, event_data: Dict[str, Any]) -> Dict[str, Any]:
        def create():
            user = self.auth.require_user()
            validate_event(event_data)
            return self.client.post('/events', json=build_event_payload(event_data, user))
        return self._call('Failed to create event', 'Event created successfully', create)

    def get_all_events(self) -> Dict[str, Any]:
        return self._call('Failed to fetch events', 'Events fetched successfully',
                          self.client.get, '/events')

    def get_event_by_id(self, event_id) -> Dict[str, Any]:
        return self._call('Failed to fetch event', 'Event fetched successfully',
                          self.client.get, f'/events/{event_id}')

    def get_events_by_organization(self, organization_id=None) -> Dict[str, Any]:
        def fetch():
            user = self.auth.require_user()
            org_id = organization_id
            if org_id is None and user.get('userType') == 'ORGANIZATION':
                org_id = user_id(user)
            if org_id is None:
                raise ValidationError('Organization ID required')
            return self.client.get(f'/events/organization/{org_id}')
        return self._call('Failed to fetch organization events',
                          'Organization events fetched successfully', fetch)

    def _as_organization(self, action: str, method: str, path: str, **kwargs):
        def call():
            self.auth.ensure_valid_token()
            user = self.auth.current_user()
            if not user or user.get('userType') != 'ORGANIZATION':
                raise ValidationError(f"Only organizations can {action}")
            return self.client.request(method, path, **kwargs)
        return call

    def update_event(self, event_id, event_data: Dict[str, Any]) -> Dict[str, Any]:
        return self._call('Failed to update event', 'Event updated successfully',
                          self._as_organization('update events', 'PUT', f'/events/{event_id}',
                                                json=event_data))

    def delete_event(self, event_id) -> Dict[str, Any]:
        result = self._call('Failed to delete event', 'Event deleted successfully',
                            self._as_organization('delete events', 'DELETE', f'/events/{event_id}'))
        if result['success']:
            result['data'] = None
        return result

    def search_events(self, filters: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        filters = filters or {}
        params = {key: filters.get(key) for key in
                  ('searchTerm', 'eventType', 'location', 'skillLevel', 'isVirtual',
                   'startDate', 'endDate')}
        return self._call('Failed to search events', 'Events search completed successfully',
                          self.client.get, '/events/search', params=params)

    def get_upcoming_events(self, limit: int = 10) -> Dict[str, Any]:
        return self._call('Failed to fetch upcoming events', 'Upcoming events fetched successfully',
                          self.client.get, '/events/upcoming', params={'limit': limit})

    def get_event_stats(self, event_id) -> Dict[str, Any]:
        def fetch():
            self.auth.ensure_valid_token()
            return self.client.get(f'/events/{event_id}/stats')
        return self._call('Failed to fetch event stats', 'Event stats fetched successfully', fetch)

    def update_event_status(self, event_id, status: str) -> Dict[str, Any]:
        return self._call('Failed to update event status', 'Event status updated successfully',
                          self._as_organization('update event status', 'PATCH',
                                                f'/events/{event_id}/status',
                                                json={'status': status}))

    def publish_event(self, event_id) -> Dict[str, Any]:
        return self.update_event_status(event_id, 'ACTIVE')

    def cancel_event(self, event_id) -> Dict[str, Any]:
        return self.update_event_status(event_id, 'CANCELLED')

    def complete_event(self, event_id) -> Dict[str, Any]:
        return self.update_event_status(event_id, 'COMPLETED')
