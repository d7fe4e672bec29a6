"""Organization discovery, including finding an organization right after it was created.

The backend indexes new organizations asynchronously, so a freshly created
profile may not show up in searches for a few seconds. The
``find_newly_created_organization`` chain plus the retry helpers cover that
gap.
"""
from __future__ import annotations

import logging
import time
from typing import Any, Callable, Dict, List, Optional

from domain.constants import SEARCH_CACHE_MAX_SIZE, SEARCH_CACHE_TTL
from services.api import (ApiClient, ApiError, NotFoundError, as_list,
                          cache_buster, no_cache_headers)
from services.search_cache import CachedSearch
from utils.similarity import normalize_name, string_similarity

logger = logging.getLogger(__name__)

SIMILARITY_THRESHOLD = 0.8
MAX_BACKOFF_SECONDS = 8.0
BACKOFF_FACTOR = 1.3


def _name(org: Optional[Dict[str, Any]]) -> str:
    if not org:
        return ''
    return org.get('organizationName') or org.get('name') or ''


def _exact_match(orgs: List[Dict[str, Any]], name: str) -> Optional[Dict[str, Any]]:
    wanted = normalize_name(name)
    return next((o for o in orgs if normalize_name(_name(o)) == wanted), None)


def backoff_delay(attempt: int, base_delay: float) -> float:
    """Delay after the ``attempt``-th (1-based) miss."""
    return min(base_delay * BACKOFF_FACTOR ** (attempt - 1), MAX_BACKOFF_SECONDS)


class FindOrganizationService:
    def __init__(self, client: ApiClient, sleep: Callable[[float], None] = time.sleep,
                 cache_ttl: float = SEARCH_CACHE_TTL):
        self.client = client
        self._sleep = sleep
        self.realtime = CachedSearch(self._realtime_fetch, cache_ttl, max_size=SEARCH_CACHE_MAX_SIZE)

    # --- browse ---

    def find_all_organizations(self) -> List[Dict[str, Any]]:
        return as_list(self.client.get('/organizations'))

    def find_all_organizations_with_pagination(self, page: int = 0, size: int = 10,
                                               sort_by: str = 'organizationName',
                                               sort_direction: str = 'asc') -> Any:
        return self.client.get('/organizations/paginated',
                               params={'page': page, 'size': size, 'sortBy': sort_by,
                                       'sortDirection': sort_direction})

    def find_organization_by_id(self, organization_id) -> Optional[Dict[str, Any]]:
        try:
            return self.client.get(f'/organizations/{organization_id}')
        except NotFoundError:
            return None

    def find_organizations_by_name(self, name: str) -> List[Dict[str, Any]]:
        """Name search; falls back to the generic search and never raises."""
        if not name or not name.strip():
            return []
        try:
            return as_list(self.client.get('/organizations/search/name',
                                           params={'name': name.strip()}))
        except ApiError as e:
            logger.warning("Name search failed (%s), trying general search", e)
        try:
            return as_list(self.search_organizations(name=name))
        except ApiError as e:
            logger.warning("General search fallback failed: %s", e)
            return []

    def find_organizations_by_category(self, category: str) -> List[Dict[str, Any]]:
        return as_list(self.client.get('/organizations/search/category', params={'category': category}))

    def find_organizations_by_type(self, organization_type: str) -> List[Dict[str, Any]]:
        return as_list(self.client.get('/organizations/search/type', params={'type': organization_type}))

    def find_organizations_by_location(self, city: Optional[str] = None,
                                       state: Optional[str] = None) -> List[Dict[str, Any]]:
        return as_list(self.client.get('/organizations/search/location',
                                       params={'city': city, 'state': state}))

    def find_verified_organizations(self) -> List[Dict[str, Any]]:
        return as_list(self.client.get('/organizations/verified'))

    def find_organizations_by_employee_count(self, min_employees: Optional[int] = None,
                                             max_employees: Optional[int] = None) -> List[Dict[str, Any]]:
        return as_list(self.client.get('/organizations/search/employee-count',
                                       params={'minEmployees': min_employees,
                                               'maxEmployees': max_employees}))

    def search_organizations(self, **filters) -> Any:
        return self.client.get('/organizations/search', params=filters)

    def find_organizations_sorted_by_name(self) -> List[Dict[str, Any]]:
        return as_list(self.client.get('/organizations/sorted/name'))

    def find_newest_organizations(self, days: int = 30, limit: int = 20) -> List[Dict[str, Any]]:
        """Newest organizations via sorted -> recently-created -> verified; never raises."""
        attempts = [
            ('/organizations/sorted/newest', {'limit': limit}),
            ('/organizations/recently-created', {'days': days, 'limit': limit}),
            ('/organizations/verified', None),
        ]
        for endpoint, params in attempts:
            try:
                return as_list(self.client.get(endpoint, params=params))[:limit]
            except ApiError as e:
                logger.warning("%s failed: %s", endpoint, e)
        return []

    def find_most_active_organizations(self) -> List[Dict[str, Any]]:
        return as_list(self.client.get('/organizations/sorted/most-active'))

    def find_highest_impact_organizations(self) -> List[Dict[str, Any]]:
        return as_list(self.client.get('/organizations/sorted/highest-impact'))

    def find_non_profit_organizations(self) -> List[Dict[str, Any]]:
        return as_list(self.client.get('/organizations/non-profit'))

    def find_highly_verified_organizations(self) -> List[Dict[str, Any]]:
        return as_list(self.client.get('/organizations/highly-verified'))

    def find_international_organizations(self) -> List[Dict[str, Any]]:
        return as_list(self.client.get('/organizations/international'))

    def get_organization_stats(self) -> Dict[str, Any]:
        return self.client.get('/organizations/stats') or {}

    def check_organization_name_exists(self, name: str) -> bool:
        body = self.client.get('/organizations/exists', params={'name': name})
        return bool(isinstance(body, dict) and body.get('exists'))

    def advanced_search(self, name=None, category=None, type=None, city=None, state=None,
                        country=None, verified: Optional[bool] = None, verification_level=None,
                        min_employees: Optional[int] = None, max_employees: Optional[int] = None,
                        min_founded_year: Optional[int] = None, max_founded_year: Optional[int] = None,
                        language=None, sort_by: str = 'organizationName',
                        sort_direction: str = 'asc', page: int = 0, size: int = 20) -> Any:
        params = {
            'name': name,
            'category': category,
            'type': type,
            'city': city,
            'state': state,
            'country': country,
            'verified': verified,
            'verificationLevel': verification_level,
            'minEmployees': min_employees,
            'maxEmployees': max_employees,
            'minFoundedYear': min_founded_year,
            'maxFoundedYear': max_founded_year,
            'language': language,
            'sortBy': sort_by,
            'sortDirection': sort_direction,
            'page': page,
            'size': size,
        }
        return self.client.get('/organizations/advanced-search', params=params)

    def get_organization_categories(self) -> List[str]:
        return as_list(self.client.get('/organizations/categories'))

    def get_organization_types(self) -> List[str]:
        return as_list(self.client.get('/organizations/types'))

    def get_organization_locations(self) -> List[str]:
        return as_list(self.client.get('/organizations/locations'))

    # --- newly created organizations ---

    def find_recently_created_organizations(self, days: int = 7, limit: int = 50,
                                            category: str = '', verified: Optional[bool] = None) -> List[Dict[str, Any]]:
        try:
            return as_list(self.client.get('/organizations/recently-created',
                                           params={'days': days, 'limit': limit,
                                                   'category': category, 'verified': verified}))
        except ApiError as e:
            if e.status_code is None:
                raise
            logger.warning("recently-created failed (%s), falling back to all organizations", e)
        return self.find_all_organizations()[:limit]

    def find_recently_updated_organizations(self, days: int = 7, limit: int = 50) -> List[Dict[str, Any]]:
        try:
            return as_list(self.client.get('/organizations/recently-updated',
                                           params={'days': days, 'limit': limit}))
        except ApiError as e:
            if e.status_code is None:
                raise
            logger.warning("recently-updated failed: %s", e)
            return []

    def refresh_new_organizations(self, max_age_days: int = 1) -> List[Dict[str, Any]]:
        params = {'maxAgeMinutes': max_age_days * 24 * 60, '_t': cache_buster()}
        try:
            return as_list(self.client.get('/organizations/refresh', params=params,
                                           headers=no_cache_headers()))
        except ApiError as e:
            if e.status_code is None:
                raise
            logger.warning("Refresh endpoint failed (%s), using recently created", e)
        return self.find_recently_created_organizations(days=max_age_days)

    def find_specific_organization(self, organization_name: str,
                                   search_recent: bool = True) -> Optional[Dict[str, Any]]:
        """Exact lookup via ``/organizations/find``; any failure yields None."""
        if not organization_name or not organization_name.strip():
            return None
        try:
            return self.client.get('/organizations/find',
                                   params={'name': organization_name.strip(),
                                           'recent': search_recent})
        except ApiError as e:
            if not isinstance(e, NotFoundError):
                logger.warning("find endpoint failed: %s", e)
            return None

    def _strategies(self, organization_name: str):
        def recent_exact():
            recent = self.find_recently_created_organizations(days=1, limit=100)
            return _exact_match(recent, organization_name)

        def name_search():
            results = self.find_organizations_by_name(organization_name)
            if not results:
                return None
            return _exact_match(results, organization_name) or results[0]

        def refresh_and_find():
            self.refresh_new_organizations(1)
            return self.find_specific_organization(organization_name, True)

        return [
            ('Find Specific Organization', lambda: self.find_specific_organization(organization_name, True)),
            ('Recently Created Organizations', recent_exact),
            ('Search by Name', name_search),
            ('Refresh and Retry', refresh_and_find),
        ]

    def find_newly_created_organization(self, organization_name: str) -> Optional[Dict[str, Any]]:
        if not organization_name or not organization_name.strip():
            return None
        transport_error = None
        for label, strategy in self._strategies(organization_name):
            try:
                found = strategy()
            except ApiError as e:
                logger.warning("Strategy '%s' failed: %s", label, e)
                if e.status_code is None:
                    transport_error = e
                continue
            if found:
                logger.info("Found '%s' via %s", organization_name, label)
                return found
        # Unreachable backend is an error for the caller, not a miss.
        if transport_error is not None:
            raise transport_error
        return None

    def find_just_created_organization(self, organization_name: str, max_retries: int = 8,
                                       delay_seconds: float = 1.5) -> Optional[Dict[str, Any]]:
        """Poll until a just-created organization becomes searchable.

        After a miss the wait grows by 1.3x per attempt (capped at 8 s); after
        an error it is ``delay_seconds * attempt``.
        """
        if not organization_name or not organization_name.strip():
            return None
        for attempt in range(1, max_retries + 1):
            try:
                organization = self.find_newly_created_organization(organization_name)
            except ApiError as e:
                logger.warning("Attempt %d/%d errored: %s", attempt, max_retries, e)
                if attempt < max_retries:
                    self._sleep(delay_seconds * attempt)
                continue
            if organization:
                return organization
            if attempt < max_retries:
                self._sleep(backoff_delay(attempt, delay_seconds))
        logger.info("'%s' not found after %d attempts", organization_name, max_retries)
        return None

    def quick_search_retry(self, organization_name: str, max_attempts: int = 5,
                           delay_seconds: float = 2) -> Optional[Dict[str, Any]]:
        for i in range(max_attempts):
            results = self.find_organizations_by_name(organization_name)
            if results:
                return _exact_match(results, organization_name) or results[0]
            if i < max_attempts - 1:
                self._sleep(delay_seconds)
        return None

    def validate_search_result(self, result: Optional[Dict[str, Any]], expected_name: str) -> bool:
        result_name = normalize_name(_name(result))
        if not result_name:
            return False
        expected = normalize_name(expected_name)
        if result_name == expected:
            return True
        return string_similarity(result_name, expected) > SIMILARITY_THRESHOLD

    def debug_search_strategies(self, organization_name: str) -> List[Dict[str, Any]]:
        """Run every lookup strategy once and report what each returned."""
        report = []
        for label, strategy in self._strategies(organization_name):
            entry: Dict[str, Any] = {'strategy': label, 'found': False, 'result': None, 'error': None}
            try:
                result = strategy()
            except ApiError as e:
                entry['error'] = str(e)
            else:
                entry['found'] = bool(result)
                entry['result'] = result
            report.append(entry)
        return report

    # --- real-time search ---

    def _realtime_fetch(self, force_refresh: bool = False, name: str = '', category: str = '',
                        verified: Optional[bool] = None, limit: int = 100) -> List[Dict[str, Any]]:
        params: Dict[str, Any] = {'name': name, 'category': category,
                                  'verified': verified, 'limit': limit}
        headers = None
        if force_refresh:
            params.update(forceRefresh=True, _t=cache_buster())
            headers = no_cache_headers()
        return as_list(self.client.get('/organizations/search/realtime',
                                       params=params, headers=headers))

    def realtime_search(self, name: str = '', category: str = '', verified: Optional[bool] = None,
                        limit: int = 100, force_refresh: bool = False) -> List[Dict[str, Any]]:
        return self.realtime(force_refresh=force_refresh, name=name, category=category,
                             verified=verified, limit=limit)
