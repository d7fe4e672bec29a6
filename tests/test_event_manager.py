import pytest

from services.api import ValidationError
from services.auth import AuthService
from services.event_manager import (EventManagerService, build_event_payload,
                                    validate_event)
from tests.conftest import sent_json

EVENT = {
    "title": "Beach cleanup",
    "description": "Bring gloves",
    "startDate": "2024-04-01T09:00:00",
    "eventType": "COMMUNITY_CLEANUP",
}


@pytest.fixture
def manager(client):
    return EventManagerService(client, AuthService(client))


def test_validate_event_required_fields():
    with pytest.raises(ValidationError, match="title is required"):
        validate_event(dict(EVENT, title="  "))


def test_validate_event_rejects_unknown_enum():
    with pytest.raises(ValidationError, match="Invalid event type: PARTY. Must be one of: "):
        validate_event(dict(EVENT, eventType="PARTY"))


def test_build_event_payload_defaults():
    payload = build_event_payload(EVENT, {"email": "org@example.com"})
    assert payload["skillLevelRequired"] == "NO_EXPERIENCE_REQUIRED"
    assert payload["durationCategory"] == "SHORT"
    assert payload["contactEmail"] == "org@example.com"
    assert payload["city"] == ""
    assert payload["isVirtual"] is False
    assert payload["maxVolunteers"] is None


def test_create_event_posts_payload(backend, manager, organization):
    backend.route("POST", "/events", status=201, body={"id": 9})
    result = manager.create_event(dict(EVENT, isVirtual=1))
    assert result == {"success": True, "data": {"id": 9}, "message": "Event created successfully"}
    body = sent_json(backend.requests[0])
    assert body["isVirtual"] is True
    assert body["title"] == "Beach cleanup"


def test_create_event_requires_login(backend, manager):
    result = manager.create_event(EVENT)
    assert not result["success"]
    assert result["message"] == "Not logged in"
    assert backend.requests == []


def test_create_event_surfaces_server_error(backend, manager, organization):
    backend.route("POST", "/events", status=400, body={"message": "Start date must be in the future"})
    result = manager.create_event(EVENT)
    assert result["message"] == "Start date must be in the future"
    assert result["error"] == {"message": "Start date must be in the future"}


def test_get_events_by_organization_defaults_to_own_id(backend, manager, organization):
    backend.route("GET", "/events/organization/42", body=[{"id": 1}])
    assert manager.get_events_by_organization()["data"] == [{"id": 1}]


def test_get_events_by_organization_needs_id_for_volunteers(manager, volunteer):
    assert manager.get_events_by_organization()["message"] == "Organization ID required"


def test_volunteer_cannot_update_event(backend, manager, volunteer):
    result = manager.update_event(1, {"title": "x"})
    assert result["message"] == "Only organizations can update events"
    assert backend.requests == []


def test_delete_event_clears_data(backend, manager, organization):
    backend.route("DELETE", "/events/3", body={"deleted": True})
    result = manager.delete_event(3)
    assert result["success"]
    assert result["data"] is None


def test_status_shortcuts_patch_status(backend, manager, organization):
    backend.route("PATCH", "/events/3/status", body={"id": 3})
    assert manager.publish_event(3)["success"]
    manager.cancel_event(3)
    manager.complete_event(3)
    assert [sent_json(r)["status"] for r in backend.requests] == ["ACTIVE", "CANCELLED", "COMPLETED"]


def test_search_events_uses_query_params(backend, manager):
    backend.route("GET", "/events/search", body=[])
    manager.search_events({"searchTerm": "beach", "isVirtual": False})
    assert dict(backend.requests[0].url.params) == {"searchTerm": "beach", "isVirtual": "false"}


def test_get_upcoming_events_failure(backend, manager):
    backend.route("GET", "/events/upcoming", status=500, body={})
    result = manager.get_upcoming_events()
    assert result["message"] == "Failed to fetch upcoming events"
