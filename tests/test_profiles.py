import pytest

from services.api import ValidationError
from services.profiles import (ProfileService, check_profile_completeness,
                               format_profile_data, join_list, split_list,
                               validate_profile_setup)
from tests.conftest import sent_json


@pytest.fixture
def profiles(client):
    return ProfileService(client)


def test_split_and_join_list():
    assert split_list(" a, b ,,c ") == ["a", "b", "c"]
    assert split_list(["x", None, " "]) == ["x"]
    assert split_list(None) == []
    assert join_list(["a", "b"]) == "a,b"
    assert join_list(None) == ""


def test_format_volunteer_profile():
    payload = format_profile_data({"firstName": "Ada", "interests": ["Animals", "Education"],
                                   "phone": "555"}, "VOLUNTEER")
    assert payload["interests"] == "Animals,Education"
    assert payload["phoneNumber"] == "555"
    assert payload["availability"] == "flexible"
    assert "organizationName" not in payload


def test_format_organization_profile():
    payload = format_profile_data({"organizationName": "Green Earth", "bio": "We plant trees",
                                   "primaryCategory": "Environment", "employeeCount": "12"},
                                  "ORGANIZATION")
    assert payload["description"] == "We plant trees"
    assert payload["categories"] == "Environment"
    assert payload["employeeCount"] == 12
    assert payload["verificationLevel"] == "Unverified"


def test_check_profile_completeness():
    assert not check_profile_completeness(None, "VOLUNTEER")
    assert check_profile_completeness({"profileComplete": True}, "VOLUNTEER")
    volunteer = {"firstName": "A", "lastName": "B", "bio": "x", "location": "y", "interests": "z"}
    assert check_profile_completeness(volunteer, "VOLUNTEER")
    assert not check_profile_completeness(dict(volunteer, interests=""), "VOLUNTEER")


@pytest.mark.parametrize("form, user_type, message", [
    ({}, "VOLUNTEER", "Please tell us about yourself"),
    ({"bio": "x"}, "VOLUNTEER", "Please provide your location"),
    ({"bio": "x", "location": "y", "firstName": "A", "lastName": "B"}, "VOLUNTEER",
     "Please select at least one interest or cause"),
    ({"bio": "x", "location": "y", "organizationName": "O"}, "ORGANIZATION",
     "Please specify your organization focus areas"),
])
def test_validate_profile_setup(form, user_type, message):
    with pytest.raises(ValidationError, match=message):
        validate_profile_setup(form, user_type)


def test_requires_login(profiles):
    assert profiles.fetch_my_profile()["message"] == "User not logged in"


def test_create_or_update_profile_puts_me_and_updates_session(backend, profiles, volunteer, session):
    backend.route("PUT", "/volunteer-profiles/me", body={"id": 7})
    result = profiles.create_or_update_profile({"firstName": "Ada", "lastName": "L", "bio": "hi",
                                                "location": "London", "interests": ["Animals"]})
    assert result["success"]
    assert result["message"] == "Profile saved successfully"
    assert sent_json(backend.requests[0])["profileComplete"] is True
    assert session.user["bio"] == "hi"


def test_create_profile_posts_to_type_endpoint(backend, profiles, organization, session):
    backend.route("POST", "/organization-profiles", status=201, body={"id": 1})
    result = profiles.create_profile({"organizationName": "Green Earth", "city": "Oslo"})
    assert result["success"]
    assert session.user["profileComplete"] is True


def test_update_profile_merges_cached_user(backend, profiles, volunteer):
    backend.route("PUT", "/volunteer-profiles/me", body={})
    profiles.update_profile({"bio": "new bio"})
    body = sent_json(backend.requests[0])
    assert body["firstName"] == "Ada"
    assert body["bio"] == "new bio"


def test_get_profile_data_for_other_user_tries_organization_second(backend, profiles, volunteer):
    backend.route("GET", "/organization-profiles/99", body={"organizationName": "Green Earth"})
    result = profiles.get_profile_data(99)
    assert result["success"]
    assert result["userType"] == "ORGANIZATION"
    assert [r.url.path for r in backend.requests] == [
        "/api/volunteer-profiles/99", "/api/organization-profiles/99"]


def test_upload_profile_image_multipart(backend, profiles, volunteer, session):
    backend.route("POST", "/upload/profile-image", body={"imageUrl": "http://cdn/img.png"})
    result = profiles.upload_profile_image("me.png", b"\x89PNG", content_type="image/png")
    assert result["imageUrl"] == "http://cdn/img.png"
    assert session.user["profileImageUrl"] == "http://cdn/img.png"
    request = backend.requests[0]
    assert request.headers["Content-Type"].startswith("multipart/form-data")
    assert b'name="type"' in request.content
    assert b'filename="me.png"' in request.content


def test_upload_without_content_fails_fast(backend, profiles, volunteer):
    assert profiles.upload_profile_image("x.png", b"")["message"] == "No image file provided"
    assert backend.requests == []


def test_delete_profile_clears_session(backend, profiles, volunteer, session):
    backend.route("DELETE", "/volunteer-profiles/me", status=204, body=None)
    assert profiles.delete_profile()["success"]
    assert session.user is None


def test_add_interest_skips_duplicates(backend, profiles, session):
    session.save("tok", {"id": 7, "userType": "VOLUNTEER", "interests": "Animals"})
    backend.route("PUT", "/volunteer-profiles/me", body={})
    profiles.add_interest("Animals")
    profiles.add_interest("Education")
    assert sent_json(backend.requests[0])["interests"] == "Animals"
    assert sent_json(backend.requests[1])["interests"] == "Animals,Education"
