"""Account settings: profile, password, 2FA, notifications, privacy, sessions."""
from __future__ import annotations

import logging
from typing import Any, Dict

from domain.constants import (DEFAULT_NOTIFICATION_SETTINGS,
                              DEFAULT_PRIVACY_SETTINGS, MIN_PASSWORD_LENGTH)
from services.api import (ApiClient, ApiError, ValidationError, error_message,
                          fail, ok)
from services.profiles import PROFILE_ENDPOINTS, format_profile_data

logger = logging.getLogger(__name__)


def default_notification_settings() -> Dict[str, Any]:
    return dict(DEFAULT_NOTIFICATION_SETTINGS)


def default_privacy_settings() -> Dict[str, Any]:
    return dict(DEFAULT_PRIVACY_SETTINGS)


class AccountSettingsService:
    def __init__(self, client: ApiClient):
        self.client = client
        self.session = client.session

    def _run(self, default_error: str, func, success_message=None) -> Dict[str, Any]:
        try:
            data = func()
        except (ApiError, ValidationError) as e:
            logger.warning("%s: %s", default_error, e)
            return fail(error_message(e, default_error))
        return ok(data, success_message)

    def _profile_base(self) -> str:
        user = self.session.user
        if not user:
            raise ValidationError('User not logged in')
        base = PROFILE_ENDPOINTS.get(user.get('userType'))
        if base is None:
            raise ValidationError('Invalid user type')
        return base

    # --- profile ---

    def fetch_user_settings(self) -> Dict[str, Any]:
        return self._run('Failed to fetch settings',
                         lambda: self.client.get(f'{self._profile_base()}/me'))

    def update_profile_settings(self, profile_data: Dict[str, Any]) -> Dict[str, Any]:
        def update():
            base = self._profile_base()
            payload = format_profile_data(profile_data, self.session.user['userType'])
            body = self.client.put(f'{base}/me', json=payload)
            self.session.update_user(payload)
            return body
        result = self._run('Failed to update profile', update, 'Profile updated successfully')
        if result['success']:
            result['user'] = self.session.user
        return result

    # --- security ---

    def change_password(self, current_password: str, new_password: str,
                        confirm_password: str) -> Dict[str, Any]:
        if new_password != confirm_password:
            return fail('New passwords do not match')
        if len(new_password or '') < MIN_PASSWORD_LENGTH:
            return fail(f'Password must be at least {MIN_PASSWORD_LENGTH} characters long')
        result = self._run('Failed to change password',
                           lambda: self.client.put('/auth/change-password',
                                                   json={'currentPassword': current_password,
                                                         'newPassword': new_password}),
                           'Password updated successfully')
        result['data'] = None
        return result

    def enable_two_factor(self) -> Dict[str, Any]:
        return self._run('Failed to enable two-factor authentication',
                         lambda: self.client.post('/auth/2fa/enable'),
                         'Two-factor authentication setup initiated')

    def disable_two_factor(self, password: str) -> Dict[str, Any]:
        return self._run('Failed to disable two-factor authentication',
                         lambda: self.client.post('/auth/2fa/disable', json={'password': password}),
                         'Two-factor authentication disabled')

    # --- notifications & privacy ---

    def fetch_notification_settings(self) -> Dict[str, Any]:
        """Saved settings, or the defaults (with ``success=False``) when unavailable."""
        result = self._run('Failed to fetch notification settings',
                           lambda: self.client.get('/users/notification-settings'))
        if not result['success'] or not isinstance(result['data'], dict):
            result['data'] = default_notification_settings()
        else:
            result['data'] = {**default_notification_settings(), **result['data']}
        return result

    def update_notification_settings(self, settings: Dict[str, Any]) -> Dict[str, Any]:
        return self._run('Failed to update notification settings',
                         lambda: self.client.put('/users/notification-settings', json=settings),
                         'Notification settings updated successfully')

    def fetch_privacy_settings(self) -> Dict[str, Any]:
        result = self._run('Failed to fetch privacy settings',
                           lambda: self.client.get('/users/privacy-settings'))
        if not result['success'] or not isinstance(result['data'], dict):
            result['data'] = default_privacy_settings()
        else:
            result['data'] = {**default_privacy_settings(), **result['data']}
        return result

    def update_privacy_settings(self, settings: Dict[str, Any]) -> Dict[str, Any]:
        return self._run('Failed to update privacy settings',
                         lambda: self.client.put('/users/privacy-settings', json=settings),
                         'Privacy settings updated successfully')

    # --- data & account ---

    def request_data_export(self) -> Dict[str, Any]:
        return self._run('Failed to request data export',
                         lambda: self.client.post('/users/export-data'),
                         'Data export requested successfully. You will receive an email when ready.')

    def delete_account(self, password: str, reason: str = '') -> Dict[str, Any]:
        result = self._run('Failed to delete account',
                           lambda: self.client.request('DELETE', '/users/account',
                                                       json={'password': password, 'reason': reason}),
                           'Account deleted successfully')
        if result['success']:
            self.session.clear()
        return result

    # --- sessions ---

    def fetch_active_sessions(self) -> Dict[str, Any]:
        return self._run('Failed to fetch sessions', lambda: self.client.get('/auth/sessions'))

    def terminate_session(self, session_id) -> Dict[str, Any]:
        return self._run('Failed to terminate session',
                         lambda: self.client.delete(f'/auth/sessions/{session_id}'),
                         'Session terminated successfully')

    def terminate_all_other_sessions(self) -> Dict[str, Any]:
        return self._run('Failed to terminate sessions',
                         lambda: self.client.delete('/auth/sessions/others'),
                         'All other sessions terminated successfully')
