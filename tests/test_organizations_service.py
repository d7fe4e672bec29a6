import httpx
import pytest

from services.api import ApiClient, ApiError
from services.organizations import (FindOrganizationService, backoff_delay)
from tests.conftest import BASE_URL

GREEN = {"id": 10, "organizationName": "Green Earth"}


@pytest.fixture
def sleeps():
    return []


@pytest.fixture
def orgs(client, sleeps):
    return FindOrganizationService(client, sleep=sleeps.append)


def test_find_organization_by_id_missing_returns_none(backend, orgs):
    assert orgs.find_organization_by_id(5) is None
    backend.route("GET", "/organizations/10", body=GREEN)
    assert orgs.find_organization_by_id(10) == GREEN


def test_find_by_name_blank_makes_no_request(backend, orgs):
    assert orgs.find_organizations_by_name("   ") == []
    assert backend.requests == []


def test_find_by_name_falls_back_to_general_search(backend, orgs):
    backend.route("GET", "/organizations/search/name", status=500, body={})
    backend.route("GET", "/organizations/search", body={"content": [GREEN]})
    assert orgs.find_organizations_by_name("Green") == [GREEN]
    assert backend.requests[1].url.params["name"] == "Green"


def test_find_newest_organizations_fallback_chain(backend, orgs):
    backend.route("GET", "/organizations/sorted/newest", status=500, body={})
    backend.route("GET", "/organizations/recently-created", status=404, body={})
    backend.route("GET", "/organizations/verified", body=[{"id": i} for i in range(30)])
    assert len(orgs.find_newest_organizations(limit=5)) == 5


def test_find_newest_organizations_all_failing(orgs):
    assert orgs.find_newest_organizations() == []


def test_check_name_exists(backend, orgs):
    backend.route("GET", "/organizations/exists", body={"exists": True})
    assert orgs.check_organization_name_exists("Green Earth")


def test_advanced_search_drops_empty_params(backend, orgs):
    backend.route("GET", "/organizations/advanced-search", body={"content": []})
    orgs.advanced_search(name="Green", verified=True)
    params = dict(backend.requests[0].url.params)
    assert params["name"] == "Green"
    assert params["verified"] == "true"
    assert "city" not in params


def test_recently_created_falls_back_to_all_on_http_error(backend, orgs):
    backend.route("GET", "/organizations/recently-created", status=500, body={})
    backend.route("GET", "/organizations", body=[{"id": 1}, {"id": 2}, {"id": 3}])
    assert orgs.find_recently_created_organizations(limit=2) == [{"id": 1}, {"id": 2}]


def test_recently_updated_returns_empty_on_http_error(backend, orgs):
    backend.route("GET", "/organizations/recently-updated", status=500, body={})
    assert orgs.find_recently_updated_organizations() == []


def test_refresh_new_organizations_uses_minutes_and_cache_buster(backend, orgs):
    backend.route("GET", "/organizations/refresh", body=[GREEN])
    assert orgs.refresh_new_organizations(2) == [GREEN]
    request = backend.requests[0]
    assert request.url.params["maxAgeMinutes"] == "2880"
    assert "_t" in request.url.params
    assert request.headers["Pragma"] == "no-cache"


def test_newly_created_prefers_exact_match_in_recent_list(backend, orgs):
    backend.route("GET", "/organizations/recently-created",
                  body=[{"id": 1, "organizationName": "Green Earth Society"},
                        {"id": 10, "organizationName": "green earth "}])
    assert orgs.find_newly_created_organization("Green Earth")["id"] == 10


def test_newly_created_blank_name(orgs):
    assert orgs.find_newly_created_organization("") is None


def test_just_created_backs_off_between_misses(orgs, sleeps):
    assert orgs.find_just_created_organization("Green Earth", max_retries=4, delay_seconds=1.0) is None
    assert sleeps == pytest.approx([1.0, 1.3, 1.69])


def test_just_created_backs_off_linearly_when_backend_unreachable(session, sleeps):
    def broken(request):
        raise httpx.ConnectError("refused", request=request)

    client = ApiClient(base_url=BASE_URL, session=session, transport=httpx.MockTransport(broken))
    orgs = FindOrganizationService(client, sleep=sleeps.append)
    with pytest.raises(ApiError):
        orgs.find_newly_created_organization("Green Earth")
    assert orgs.find_just_created_organization("Green Earth", max_retries=3, delay_seconds=1.0) is None
    assert sleeps == [1.0, 2.0]


def test_just_created_returns_once_indexed(backend, orgs, sleeps):
    backend.route("GET", "/organizations/refresh", body=[])
    for _ in range(3):
        backend.route("GET", "/organizations/find", status=404, body={})
    backend.route("GET", "/organizations/find", body=GREEN)

    assert orgs.find_just_created_organization("Green Earth", delay_seconds=1.0) == GREEN
    assert sleeps == [1.0]


def test_backoff_delay_is_capped():
    assert backoff_delay(1, 1.5) == 1.5
    assert backoff_delay(20, 1.5) == 8.0


def test_quick_search_retry(backend, orgs, sleeps):
    backend.route("GET", "/organizations/search/name", body=[])
    backend.route("GET", "/organizations/search/name", body=[GREEN])
    assert orgs.quick_search_retry("Green Earth", max_attempts=3, delay_seconds=2) == GREEN
    assert sleeps == [2]


def test_validate_search_result(orgs):
    assert orgs.validate_search_result(GREEN, " green earth")
    assert orgs.validate_search_result({"name": "Green Earths"}, "Green Earth")
    assert not orgs.validate_search_result({"name": "Blue Ocean"}, "Green Earth")
    assert not orgs.validate_search_result(None, "Green Earth")


def test_debug_search_strategies_reports_each_strategy(backend, orgs):
    backend.route("GET", "/organizations/search/name", body=[GREEN])
    report = orgs.debug_search_strategies("Green Earth")
    assert [r["strategy"] for r in report] == [
        "Find Specific Organization", "Recently Created Organizations",
        "Search by Name", "Refresh and Retry"]
    assert report[2]["found"] and report[2]["result"] == GREEN
    # recently-created and its fallback are both unrouted
    assert report[1]["error"]


def test_realtime_search_caches_and_serves_stale(backend, orgs):
    backend.route("GET", "/organizations/search/realtime", body=[GREEN])
    backend.route("GET", "/organizations/search/realtime", status=503, body={})

    assert orgs.realtime_search("green") == [GREEN]
    assert orgs.realtime_search("green", force_refresh=True) == [GREEN]
    assert isinstance(orgs.realtime.last_error, ApiError)
