import datetime as dt

import pytest

from services.api import ApiError, NotFoundError, ValidationError
from services.events import FindEventService
from tests.conftest import sent_json

NOW = dt.datetime(2024, 3, 6, 12, 0)


@pytest.fixture
def events(client):
    return FindEventService(client, now=lambda: NOW)


def test_find_all_events_falls_back_to_upcoming(backend, events):
    backend.route("GET", "/events", status=500, body={})
    backend.route("GET", "/events/active", status=404, body={})
    backend.route("GET", "/events/upcoming", body=[{"id": 2}])

    assert events.find_all_events() == [{"id": 2}]
    assert [r.url.path for r in backend.requests] == [
        "/api/events", "/api/events/active", "/api/events/upcoming"]


def test_find_all_events_returns_empty_when_everything_fails(backend, events):
    assert events.find_all_events() == []


def test_find_event_by_id_not_found(backend, events):
    with pytest.raises(NotFoundError, match="Event not found"):
        events.find_event_by_id(99)


def test_find_events_by_location_joins_city_and_state(backend, events):
    backend.route("GET", "/events/search/location", body={"content": [{"id": 1}]})
    assert events.find_events_by_location("Austin", "TX") == [{"id": 1}]
    assert backend.requests[0].url.params["q"] == "Austin, TX"


def test_search_events_builds_search_request(backend, events):
    backend.route("POST", "/events/search", body={"content": []})
    events.search_events({"title": "beach", "isVirtual": True})
    body = sent_json(backend.requests[0])
    assert body["searchTerm"] == "beach"
    assert body["eventType"] == ""
    assert body["isVirtual"] is True


def test_featured_falls_back_to_upcoming_on_http_error(backend, events):
    backend.route("GET", "/events/featured", status=404, body={})
    backend.route("GET", "/events/upcoming", body=[{"id": 3}])
    assert events.find_featured_events() == [{"id": 3}]


def test_find_events_sorted_by_date(backend, events):
    backend.route("GET", "/events", body=[
        {"id": 1, "startDate": "2024-05-01T10:00:00"},
        {"id": 2},
        {"id": 3, "startDate": "2024-04-01T10:00:00"},
    ])
    assert [e["id"] for e in events.find_events_sorted_by_date()] == [3, 1, 2]


def test_events_from_new_organizations_dedicated_endpoint(backend, events):
    backend.route("GET", "/events/from-new-organizations", body=[{"id": i} for i in range(5)])
    assert len(events.find_events_from_new_organizations(days=7, limit=3)) == 3
    assert backend.requests[0].url.params["days"] == "7"


def test_events_from_new_organizations_walks_recent_organizations(backend, events):
    backend.route("GET", "/events/from-new-organizations", status=500, body={})
    backend.route("GET", "/organization-profiles/recently-created",
                  body=[{"id": 10, "organizationName": "Green Earth", "createdAt": "2024-03-01T00:00:00"}])
    backend.route("GET", "/events/organization/10", body=[
        {"id": 2, "startDate": "2024-04-02T09:00:00"},
        {"id": 1, "startDate": "2024-04-01T09:00:00"},
    ])

    result = events.find_events_from_new_organizations()

    assert [e["id"] for e in result] == [1, 2]
    assert result[0]["organizationInfo"] == {
        "id": 10, "name": "Green Earth", "isNew": True, "createdDate": "2024-03-01T00:00:00"}


def test_recent_events_filter_by_event_age_and_type(backend, events):
    backend.route("GET", "/events/recent-from-new-organizations", status=404, body={})
    backend.route("GET", "/organization-profiles/recently-created",
                  body=[{"id": 10, "createdAt": "2024-03-01T00:00:00"}])
    backend.route("GET", "/events/organization/10", body=[
        {"id": 1, "eventType": "ENVIRONMENTAL", "createdAt": "2024-03-05T00:00:00"},
        {"id": 2, "eventType": "ENVIRONMENTAL", "createdAt": "2024-01-01T00:00:00"},
        {"id": 3, "eventType": "EDUCATION", "createdAt": "2024-03-05T00:00:00"},
    ])

    result = events.find_recent_events_from_new_organizations(event_type="environmental")

    assert [e["id"] for e in result] == [1]
    assert result[0]["organizationInfo"]["daysSinceCreated"] == 5


def test_refresh_sends_cache_busting_request(backend, events):
    backend.route("GET", "/events/from-new-organizations", body=[{"id": 1}])
    assert events.refresh_events_from_new_organizations(7, 10) == [{"id": 1}]
    request = backend.requests[0]
    assert "_t" in request.url.params
    assert request.headers["Cache-Control"] == "no-cache"


def test_events_from_newly_created_organization_uses_time_window(backend, events):
    backend.route("GET", "/events/organization/10", body=[
        {"id": 1, "createdAt": "2024-03-06T08:00:00"},
        {"id": 2, "createdAt": "2024-03-04T08:00:00"},
    ])
    assert [e["id"] for e in events.find_events_from_newly_created_organization(10)] == [1]


def test_apply_to_event(backend, events):
    backend.route("POST", "/applications", status=201, body={"id": 77})
    assert events.apply_to_event(5, "Happy to help") == {"id": 77}
    assert sent_json(backend.requests[0]) == {"eventId": 5, "message": "Happy to help"}
    with pytest.raises(ValidationError):
        events.apply_to_event(None)


def test_register_and_unregister(backend, events):
    backend.route("POST", "/events/5/register", body={"registered": True})
    backend.route("DELETE", "/events/5/register", body={"registered": False})
    assert events.register_for_event(5) == {"registered": True}
    assert events.unregister_from_event(5) == {"registered": False}


def test_get_event_stats(backend, events):
    backend.route("GET", "/events/upcoming", body=[{"id": 1}, {"id": 2}])
    backend.route("GET", "/events/featured", body=[{"id": 1}])
    backend.route("GET", "/events/virtual", body=[])
    stats = events.get_event_stats()
    assert stats == {"total": 3, "upcoming": 2, "featured": 1, "virtual": 0,
                     "lastUpdated": NOW.isoformat()}


def test_realtime_search_is_cached(backend, events):
    backend.route("GET", "/events/search/realtime", body=[{"id": 1}])
    events.realtime_search("beach")
    events.realtime_search("Beach ")
    assert len(backend.requests) == 1

    events.realtime_search("beach", force_refresh=True)
    assert len(backend.requests) == 2
    assert backend.requests[1].url.params["forceRefresh"] == "true"


def test_realtime_search_error_body_raises(backend, events):
    backend.route("GET", "/events/search/realtime", body={"error": "index offline"})
    with pytest.raises(ApiError, match="index offline"):
        events.realtime_search("beach")
