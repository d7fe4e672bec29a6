import pytest

from services.follows import AUTH_REQUIRED, NOT_FOLLOWING, UNKNOWN, FollowService

FOLLOW = "/volunteer-profiles/me/follow/10"


@pytest.fixture
def follows(client):
    return FollowService(client)


def test_follow_organization(backend, follows, volunteer):
    backend.route("POST", FOLLOW, body={"message": "Now following"})
    result = follows.follow_organization(10)
    assert result["success"]
    assert result["message"] == "Now following"
    assert result["isFollowing"] is True


def test_unfollow_success(backend, follows, volunteer):
    backend.route("DELETE", FOLLOW, body={"isFollowing": False, "remainingFollowedCount": 2})
    result = follows.unfollow_organization(10)
    assert result["success"]
    assert result["remainingFollowedCount"] == 2
    assert result["organizationId"] == 10


@pytest.mark.parametrize("status, body, kind", [
    (400, {"message": "Not following"}, NOT_FOLLOWING),
    (500, {}, UNKNOWN),
])
def test_unfollow_error_types(backend, follows, volunteer, status, body, kind):
    backend.route("DELETE", FOLLOW, status=status, body=body)
    result = follows.unfollow_organization(10)
    assert not result["success"]
    assert result["errorType"] == kind


def test_unfollow_with_expired_session(backend, follows, volunteer):
    backend.route("DELETE", FOLLOW, status=401, body={})
    result = follows.unfollow_organization(10)
    assert result["errorType"] == AUTH_REQUIRED
    assert result["message"] == "Authentication required. Please log in again."


def test_unfollow_many(backend, follows, volunteer):
    backend.route("DELETE", FOLLOW, body={})
    result = follows.unfollow_many([10, 11])
    assert result["unfollowedCount"] == 1
    assert result["failedCount"] == 1
    assert result["success"]
    assert follows.unfollow_many([])["message"] == "No organization IDs provided"


def test_follow_status_defaults_to_not_following(follows, volunteer):
    result = follows.follow_status(10)
    assert not result["success"]
    assert result["isFollowing"] is False


def test_toggle_follow(backend, follows, volunteer):
    backend.route("PUT", FOLLOW, body={"isFollowing": True, "organizationId": 10})
    assert follows.toggle_follow(10)["isFollowing"] is True


def test_follower_count(backend, follows):
    backend.route("GET", "/volunteer-profiles/organization/10/follower-count", body={"followerCount": 5})
    assert follows.follower_count(10)["followerCount"] == 5
    assert follows.follower_count(11)["followerCount"] == 0


def test_list_endpoints_fall_back_to_empty_lists(backend, follows, volunteer):
    backend.route("GET", "/volunteer-profiles/me/recommended-organizations", body=[{"id": 3}])
    assert follows.recommended_organizations(limit=5)["data"] == [{"id": 3}]
    assert backend.requests[0].url.params["limit"] == "5"
    assert follows.followed_organizations() == {
        "success": False, "message": "No route for GET /volunteer-profiles/me/followed-organizations", "data": []}
