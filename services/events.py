"""Event discovery: browsing, searching and the "events from new organizations" feeds.

Single-endpoint lookups raise `ApiError`. The feed methods are strategy
chains: each strategy is tried in order and failures are logged and skipped,
so a half-deployed backend still yields something to show.
"""
from __future__ import annotations

import datetime as dt
import logging
from typing import Any, Callable, Dict, List, Optional

from domain.constants import (EVENT_TYPE_DISPLAY, SEARCH_CACHE_MAX_SIZE,
                              SEARCH_CACHE_TTL, SKILL_LEVEL_DISPLAY)
from domain.models import parse_datetime
from services.api import (ApiClient, ApiError, NotFoundError, ValidationError,
                          as_list, cache_buster, no_cache_headers)
from services.search_cache import CachedSearch

logger = logging.getLogger(__name__)

FALLBACK_LIST_ENDPOINTS = ['/events/active', '/events/upcoming', '/events/featured']


def _empty_search_request(**overrides) -> Dict[str, Any]:
    request = {'searchTerm': '', 'eventType': '', 'location': '', 'skillLevel': ''}
    request.update(overrides)
    return request


def _location_text(city: Optional[str], state: Optional[str]) -> str:
    if city and state:
        return f"{city}, {state}"
    return city or state or ''


def _start_key(event: Dict[str, Any], field: str = 'startDate') -> dt.datetime:
    value = parse_datetime(event.get(field) or event.get('startDate') or event.get('eventDate'))
    return value or dt.datetime.max


def _org_id(org: Dict[str, Any]):
    return org.get('id') or org.get('organizationId')


def _org_created(org: Dict[str, Any]):
    return org.get('createdDate') or org.get('createdAt') or org.get('registrationDate')


class FindEventService:
    def __init__(self, client: ApiClient, now: Callable[[], dt.datetime] = dt.datetime.now,
                 cache_ttl: float = SEARCH_CACHE_TTL):
        self.client = client
        self._now = now
        self.realtime = CachedSearch(self._realtime_fetch, cache_ttl, max_size=SEARCH_CACHE_MAX_SIZE)

    # --- basic lookups ---

    def find_all_events(self) -> List[Dict[str, Any]]:
        """All events; falls back through active/upcoming/featured and never raises."""
        try:
            return as_list(self.client.get('/events'))
        except ApiError as e:
            logger.warning("Primary events endpoint failed: %s", e)

        for endpoint in FALLBACK_LIST_ENDPOINTS:
            try:
                data = as_list(self.client.get(endpoint))
            except ApiError as e:
                logger.warning("Fallback %s failed: %s", endpoint, e)
                continue
            logger.info("Loaded events from fallback %s", endpoint)
            return data

        logger.warning("All event endpoints failed, returning empty list")
        return []

    def find_event_by_id(self, event_id) -> Dict[str, Any]:
        try:
            return self.client.get(f'/events/{event_id}')
        except NotFoundError as e:
            raise NotFoundError("Event not found", status_code=404) from e

    def find_all_events_with_pagination(self, page: int = 0, size: int = 10,
                                        sort_by: str = 'startDate', sort_direction: str = 'asc') -> Any:
        return self.client.post('/events/search', json=_empty_search_request(),
                                params={'page': page, 'size': size, 'sortBy': sort_by,
                                        'sortDirection': sort_direction})

    def find_events_by_title(self, title: str) -> List[Dict[str, Any]]:
        return as_list(self.client.get('/events/search/title', params={'q': title}))

    def find_events_by_type(self, event_type: str) -> List[Dict[str, Any]]:
        return as_list(self.client.get(f'/events/type/{event_type}'))

    def find_events_by_location(self, city: Optional[str] = None, state: Optional[str] = None) -> List[Dict[str, Any]]:
        location = _location_text(city, state)
        return as_list(self.client.get('/events/search/location', params={'q': location}))

    def find_upcoming_events(self) -> List[Dict[str, Any]]:
        return as_list(self.client.get('/events/upcoming'))

    def find_events_by_organization(self, organization_id) -> List[Dict[str, Any]]:
        return as_list(self.client.get(f'/events/organization/{organization_id}'))

    def find_events_by_skill_level(self, skill_level: str) -> List[Dict[str, Any]]:
        return as_list(self.client.get(f'/events/skill-level/{skill_level}'))

    def find_virtual_events(self) -> List[Dict[str, Any]]:
        return as_list(self.client.get('/events/virtual'))

    def find_events_by_date_range(self, start_date: Optional[str] = None,
                                  end_date: Optional[str] = None) -> List[Dict[str, Any]]:
        return as_list(self.client.get('/events/date-range',
                                       params={'startDate': start_date, 'endDate': end_date}))

    def search_events(self, filters: Optional[Dict[str, Any]] = None) -> Any:
        filters = filters or {}
        search_request = _empty_search_request(
            searchTerm=filters.get('title') or '',
            eventType=filters.get('eventType') or '',
            location=filters.get('location') or '',
            skillLevel=filters.get('skillLevel') or '',
            isVirtual=filters.get('isVirtual'),
            startDate=filters.get('startDate'),
            endDate=filters.get('endDate'),
        )
        return self.client.post('/events/search', json=search_request)

    def find_events_sorted_by_date(self) -> List[Dict[str, Any]]:
        return sorted(self.find_all_events(), key=_start_key)

    def find_featured_events(self) -> List[Dict[str, Any]]:
        try:
            return as_list(self.client.get('/events/featured'))
        except ApiError as e:
            if e.status_code is None:
                raise
            logger.info("Featured endpoint unavailable (%s), using upcoming", e.status_code)
            return self.find_upcoming_events()

    # --- events from newly created organizations ---

    def _recent_organizations(self, days: int) -> List[Dict[str, Any]]:
        return as_list(self.client.get('/organization-profiles/recently-created',
                                       params={'days': days}))

    def _annotated_org_events(self, org: Dict[str, Any], with_age: bool = False) -> List[Dict[str, Any]]:
        try:
            org_events = self.find_events_by_organization(_org_id(org))
        except ApiError as e:
            logger.warning("Events for organization %s unavailable: %s", _org_id(org), e)
            return []
        info = {
            'id': _org_id(org),
            'name': org.get('organizationName') or org.get('name'),
            'isNew': True,
            'createdDate': _org_created(org),
        }
        if with_age:
            created = parse_datetime(_org_created(org))
            info['daysSinceCreated'] = (self._now() - created).days if created else None
        return [{**event, 'organizationInfo': info} for event in org_events]

    def find_events_from_new_organizations(self, days: int = 30, limit: int = 50) -> List[Dict[str, Any]]:
        try:
            return as_list(self.client.get('/events/from-new-organizations',
                                           params={'days': days, 'limit': limit}))[:limit]
        except ApiError as e:
            logger.warning("Dedicated new-organization events endpoint failed: %s", e)

        try:
            new_orgs = self._recent_organizations(days)
        except ApiError as e:
            logger.warning("Recently created organizations unavailable: %s", e)
        else:
            events = [ev for org in new_orgs for ev in self._annotated_org_events(org)]
            return sorted(events, key=_start_key)[:limit]

        try:
            created_after = (self._now() - dt.timedelta(days=days)).isoformat()
            body = self.client.post(
                '/events/search',
                json=_empty_search_request(organizationCreatedAfter=created_after),
                params={'page': 0, 'size': limit, 'sortBy': 'startDate', 'sortDirection': 'asc'})
            return as_list(body)
        except ApiError as e:
            logger.warning("Search by organization age failed: %s", e)

        return self.find_upcoming_events()[:limit]

    def find_recent_events_from_new_organizations(self, organization_age_days: int = 30,
                                                  event_age_days: int = 14, limit: int = 30,
                                                  event_type: str = '', location: str = '',
                                                  sort_by: str = 'startDate',
                                                  sort_direction: str = 'asc') -> List[Dict[str, Any]]:
        params = {
            'orgAgeDays': organization_age_days,
            'eventAgeDays': event_age_days,
            'limit': limit,
            'sortBy': sort_by,
            'sortDirection': sort_direction,
            'eventType': event_type,
            'location': location,
        }
        try:
            return as_list(self.client.get('/events/recent-from-new-organizations', params=params))
        except ApiError as e:
            logger.warning("Dedicated recent-events endpoint failed: %s", e)

        event_cutoff = self._now() - dt.timedelta(days=event_age_days)
        try:
            new_orgs = self._recent_organizations(organization_age_days)
        except ApiError as e:
            logger.warning("Recently created organizations unavailable: %s", e)
            return self.find_events_from_new_organizations(organization_age_days, limit)

        events = []
        for org in new_orgs:
            for event in self._annotated_org_events(org, with_age=True):
                created = parse_datetime(event.get('createdDate') or event.get('createdAt')
                                         or event.get('publishedDate'))
                if created is not None and created >= event_cutoff:
                    events.append(event)

        if event_type:
            wanted = event_type.lower()
            events = [e for e in events
                      if (e.get('eventType') or e.get('type') or '').lower() == wanted]
        if location:
            needle = location.lower()
            events = [e for e in events
                      if any(needle in (e.get(f) or '').lower() for f in ('location', 'city', 'state'))]

        events.sort(key=lambda e: _start_key(e, sort_by), reverse=sort_direction == 'desc')
        return events[:limit]

    def refresh_events_from_new_organizations(self, organization_max_age: int = 7,
                                              limit: int = 50) -> List[Dict[str, Any]]:
        buster = cache_buster()
        attempts = [
            ('/events/from-new-organizations', {'days': organization_max_age, 'limit': limit}),
            ('/events/recent-from-new-organizations', {'orgAgeDays': organization_max_age, 'limit': limit}),
            ('/events/by-new-organizations', {'maxAge': organization_max_age, 'limit': limit}),
        ]
        for endpoint, params in attempts:
            try:
                return as_list(self.client.get(endpoint, params={**params, '_t': buster},
                                               headers=no_cache_headers()))
            except ApiError as e:
                logger.warning("Refresh via %s failed: %s", endpoint, e)
        return self.find_events_from_new_organizations(organization_max_age, limit)

    def find_events_from_newly_created_organization(self, organization_id,
                                                    time_window_hours: int = 24) -> List[Dict[str, Any]]:
        cutoff = self._now() - dt.timedelta(hours=time_window_hours)
        try:
            org_events = self.find_events_by_organization(organization_id)
        except ApiError as e:
            logger.warning("Organization events lookup failed: %s", e)
        else:
            recent = []
            for event in org_events:
                created = parse_datetime(event.get('createdDate') or event.get('createdAt')
                                         or event.get('publishedDate') or event.get('startDate'))
                if created is not None and created >= cutoff:
                    recent.append(event)
            return recent

        try:
            body = self.client.post(
                '/events/search', json=_empty_search_request(organizationId=organization_id),
                params={'page': 0, 'size': 50, 'sortBy': 'createdDate', 'sortDirection': 'desc'})
            return as_list(body)
        except ApiError as e:
            logger.warning("Search by organization id failed: %s", e)

        refreshed = self.refresh_events_from_new_organizations(1, 100)
        return [e for e in refreshed
                if e.get('organizationId') == organization_id
                or (e.get('organizationInfo') or {}).get('id') == organization_id]

    # --- search, applications, stats ---

    def event_types(self) -> List[str]:
        return list(EVENT_TYPE_DISPLAY.keys())

    def skill_levels(self) -> List[str]:
        return list(SKILL_LEVEL_DISPLAY.keys())

    def advanced_search(self, title: Optional[str] = None, event_type: Optional[str] = None,
                        location: Optional[str] = None, city: Optional[str] = None,
                        state: Optional[str] = None, skill_level: Optional[str] = None,
                        is_virtual: Optional[bool] = None, start_date: Optional[str] = None,
                        end_date: Optional[str] = None, organization_id=None,
                        sort_by: str = 'startDate', sort_direction: str = 'asc',
                        page: int = 0, size: int = 20) -> Any:
        search_request = _empty_search_request(
            searchTerm=title or '',
            eventType=event_type or '',
            location=location or _location_text(city, state),
            skillLevel=skill_level or '',
            isVirtual=is_virtual,
            startDate=start_date,
            endDate=end_date,
            organizationId=organization_id,
        )
        return self.client.post('/events/search', json=search_request,
                                params={'page': page, 'size': size, 'sortBy': sort_by,
                                        'sortDirection': sort_direction})

    def apply_to_event(self, event_id, message: str = '') -> Any:
        if event_id is None:
            raise ValidationError("An event is required to apply")
        return self.client.post('/applications', json={'eventId': event_id, 'message': message or ''})

    def register_for_event(self, event_id) -> Any:
        return self.client.post(f'/events/{event_id}/register')

    def unregister_from_event(self, event_id) -> Any:
        return self.client.delete(f'/events/{event_id}/register')

    def get_event_stats(self) -> Dict[str, Any]:
        upcoming = self.find_upcoming_events()
        featured = self.find_featured_events()
        virtual = self.find_virtual_events()
        return {
            'total': len(upcoming) + len(featured),
            'upcoming': len(upcoming),
            'featured': len(featured),
            'virtual': len(virtual),
            'lastUpdated': self._now().isoformat(),
        }

    def _realtime_fetch(self, force_refresh: bool = False, search_term: str = '',
                        event_type: str = '', location: str = '', skill_level: str = '',
                        limit: int = 100) -> List[Dict[str, Any]]:
        params = {
            'searchTerm': search_term,
            'eventType': event_type,
            'location': location,
            'skillLevel': skill_level,
            'limit': limit,
        }
        headers = None
        if force_refresh:
            params.update(forceRefresh=True, _t=cache_buster())
            headers = no_cache_headers()
        body = self.client.get('/events/search/realtime', params=params, headers=headers)
        if isinstance(body, dict) and body.get('error'):
            raise ApiError(f"Real-time search failed: {body['error']}", payload=body,
                           server_message=body['error'])
        return as_list(body)

    def realtime_search(self, search_term: str = '', event_type: str = '', location: str = '',
                        skill_level: str = '', limit: int = 100,
                        force_refresh: bool = False) -> List[Dict[str, Any]]:
        return self.realtime(force_refresh=force_refresh, search_term=search_term,
                             event_type=event_type, location=location,
                             skill_level=skill_level, limit=limit)
