import pytest

from domain.constants import DEFAULT_NOTIFICATION_SETTINGS, DEFAULT_PRIVACY_SETTINGS
from services.account_settings import AccountSettingsService
from tests.conftest import sent_json


@pytest.fixture
def settings(client):
    return AccountSettingsService(client)


def test_change_password_checks_before_request(backend, settings):
    assert settings.change_password("old", "newpass123", "other")["message"] == "New passwords do not match"
    assert settings.change_password("old", "short", "short")["message"] == \
        "Password must be at least 8 characters long"
    assert backend.requests == []


def test_change_password_success(backend, settings, volunteer):
    backend.route("PUT", "/auth/change-password", body={"success": True})
    result = settings.change_password("oldpass12", "newpass123", "newpass123")
    assert result == {"success": True, "data": None, "message": "Password updated successfully"}
    assert sent_json(backend.requests[0]) == {"currentPassword": "oldpass12", "newPassword": "newpass123"}


def test_change_password_wrong_current(backend, settings, volunteer):
    backend.route("PUT", "/auth/change-password", status=400, body={"message": "Current password is incorrect"})
    assert settings.change_password("bad", "newpass123", "newpass123")["message"] == \
        "Current password is incorrect"


def test_notification_settings_merge_over_defaults(backend, settings):
    backend.route("GET", "/users/notification-settings", body={"eventReminders": False})
    result = settings.fetch_notification_settings()
    assert result["success"]
    assert result["data"] == {**DEFAULT_NOTIFICATION_SETTINGS, "eventReminders": False}


def test_privacy_settings_default_on_failure(backend, settings):
    backend.route("GET", "/users/privacy-settings", status=500, body={})
    result = settings.fetch_privacy_settings()
    assert not result["success"]
    assert result["data"] == DEFAULT_PRIVACY_SETTINGS


def test_update_profile_settings_updates_cached_user(backend, settings, volunteer, session):
    backend.route("PUT", "/volunteer-profiles/me", body={"ok": True})
    result = settings.update_profile_settings({"firstName": "Ada", "bio": "Engineer"})
    assert result["success"]
    assert result["user"]["bio"] == "Engineer"
    assert session.user["bio"] == "Engineer"


def test_update_profile_settings_requires_login(settings):
    assert settings.update_profile_settings({})["message"] == "User not logged in"


def test_delete_account_sends_body_and_clears_session(backend, settings, volunteer, session):
    backend.route("DELETE", "/users/account", body={"success": True})
    assert settings.delete_account("secret", "moving")["success"]
    assert sent_json(backend.requests[0]) == {"password": "secret", "reason": "moving"}
    assert session.token is None


def test_delete_account_failure_keeps_session(backend, settings, volunteer, session):
    backend.route("DELETE", "/users/account", status=403, body={"message": "Wrong password"})
    assert settings.delete_account("bad")["message"] == "Wrong password"
    assert session.token == "volunteer-token"


def test_session_management(backend, settings, volunteer):
    backend.route("GET", "/auth/sessions", body=[{"id": "s1", "current": True}])
    backend.route("DELETE", "/auth/sessions/s2", body={})
    backend.route("DELETE", "/auth/sessions/others", body={})
    assert settings.fetch_active_sessions()["data"] == [{"id": "s1", "current": True}]
    assert settings.terminate_session("s2")["message"] == "Session terminated successfully"
    assert settings.terminate_all_other_sessions()["success"]


def test_two_factor(backend, settings, volunteer):
    backend.route("POST", "/auth/2fa/enable", body={"qrCode": "data:..."})
    backend.route("POST", "/auth/2fa/disable", body={})
    assert settings.enable_two_factor()["data"] == {"qrCode": "data:..."}
    settings.disable_two_factor("pw")
    assert sent_json(backend.requests[1]) == {"password": "pw"}
