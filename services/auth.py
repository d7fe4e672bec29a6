"""Authentication: registration, login, current-user lookups and logout.

Login/registration calls return result dicts (``{'success': bool, ...}``) so
views can show the outcome directly; token handling helpers raise.
"""
from __future__ import annotations

import logging
import re
from typing import Any, Dict, Optional

from domain.constants import MIN_PASSWORD_LENGTH, USER_TYPES
from services.api import (ApiClient, ApiError, AuthenticationError,
                          ValidationError, fail, ok, unwrap)
from services.session import token_expired

logger = logging.getLogger(__name__)

EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


def validate_registration(data: Dict[str, Any]):
    """Raise ValidationError for registration input the backend would reject."""
    email = (data.get('email') or '').strip()
    if not EMAIL_RE.match(email):
        raise ValidationError("Please enter a valid email address")
    password = data.get('password') or ''
    if len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationError(
            f"Password must be at least {MIN_PASSWORD_LENGTH} characters long")
    if password != (data.get('confirmPassword') or ''):
        raise ValidationError("Passwords do not match")
    user_type = data.get('userType')
    if user_type not in USER_TYPES:
        raise ValidationError("Please choose Volunteer or Organization")
    if user_type == 'VOLUNTEER':
        if not (data.get('firstName') or '').strip() or not (data.get('lastName') or '').strip():
            raise ValidationError("Please provide your first and last name")
    elif not (data.get('organizationName') or '').strip():
        raise ValidationError("Please provide your organization name")


class AuthService:
    def __init__(self, client: ApiClient):
        self.client = client
        self.session = client.session

    def _store_login(self, body: Any) -> bool:
        if not isinstance(body, dict) or not body.get('token'):
            return False
        self.session.save(body['token'], body.get('user') or body)
        return True

    def _login_call(self, path: str, payload: Dict[str, Any], default_error: str) -> Dict[str, Any]:
        try:
            body = self.client.post(path, json=payload, retry_auth=False)
        except ApiError as e:
            logger.warning("%s failed: %s", path, e)
            return fail(e.server_message or default_error)
        if self._store_login(body):
            return ok(body)
        return fail(default_error)

    def register_user(self, user_data: Dict[str, Any]) -> Dict[str, Any]:
        try:
            validate_registration(user_data)
        except ValidationError as e:
            return fail(str(e))

        payload = {
            'email': user_data['email'].strip(),
            'password': user_data['password'],
            'confirmPassword': user_data['confirmPassword'],
            'userType': user_data['userType'],
        }
        if user_data['userType'] == 'VOLUNTEER':
            payload['firstName'] = user_data['firstName'].strip()
            payload['lastName'] = user_data['lastName'].strip()
        else:
            payload['organizationName'] = user_data['organizationName'].strip()
        return self._login_call('/auth/register', payload, 'Registration failed')

    def register_with_google(self, google_token: str, user_type: str) -> Dict[str, Any]:
        return self._login_call('/auth/google', {'googleToken': google_token, 'userType': user_type},
                                'Google registration failed')

    def login_user(self, email: str, password: str) -> Dict[str, Any]:
        if not email or not password:
            return fail("Email and password are required")
        return self._login_call('/auth/login', {'email': email.strip(), 'password': password},
                                'Login failed')

    def login_with_google(self, google_token: str) -> Dict[str, Any]:
        # The backend keeps the stored type for existing accounts.
        return self._login_call('/auth/google', {'googleToken': google_token, 'userType': 'VOLUNTEER'},
                                'Google login failed')

    def get_user_profile(self) -> Dict[str, Any]:
        """Fetch ``/auth/me`` and refresh the cached user."""
        if not self.session.token:
            return fail('No token found')
        try:
            body = self.client.get('/auth/me')
        except ApiError as e:
            return fail(e.server_message or e.message or 'Network error')
        if isinstance(body, dict) and body.get('success') and body.get('data'):
            user = unwrap(body)
            self.session.save(None, user)
            return ok(user)
        message = body.get('message') if isinstance(body, dict) else None
        return fail(message or 'Failed to get user profile')

    def ensure_valid_token(self) -> str:
        token = self.session.token
        if not token:
            raise AuthenticationError("Not logged in", status_code=401)
        if token_expired(token):
            logger.info("Token expired, refreshing")
            if not self.client.refresh_token():
                self.logout()
                raise AuthenticationError(
                    "Session expired. Please log in again.", status_code=401)
        return self.session.token

    def require_user(self, user_type: Optional[str] = None) -> Dict[str, Any]:
        """Return the logged-in user, optionally enforcing an account type."""
        self.ensure_valid_token()
        user = self.current_user()
        if not user:
            raise AuthenticationError("User not authenticated", status_code=401)
        if user_type and user.get('userType') != user_type:
            raise ValidationError(
                f"This action requires a {user_type.lower()} account")
        return user

    def get_token(self) -> Optional[str]:
        return self.session.token

    def current_user(self) -> Optional[Dict[str, Any]]:
        return self.session.user

    def is_logged_in(self) -> bool:
        return self.session.is_logged_in()

    def logout(self):
        self.session.clear()


def user_id(user: Optional[Dict[str, Any]]):
    if not user:
        return None
    return user.get('userId') or user.get('id')


def display_name(user: Optional[Dict[str, Any]]) -> str:
    if not user:
        return 'User'
    if user.get('userType') == 'ORGANIZATION' and user.get('organizationName'):
        return user['organizationName']
    if user.get('userType') == 'VOLUNTEER' and user.get('firstName') and user.get('lastName'):
        return f"{user['firstName']} {user['lastName']}"
    return user.get('email') or 'User'


def welcome_name(user: Optional[Dict[str, Any]]) -> str:
    if not user:
        return 'User'
    if user.get('userType') == 'ORGANIZATION' and user.get('organizationName'):
        return user['organizationName']
    if user.get('userType') == 'VOLUNTEER' and user.get('firstName'):
        return user['firstName']
    email = user.get('email') or ''
    return email.split('@')[0] or 'User'


def is_profile_complete(user: Optional[Dict[str, Any]]) -> bool:
    """Quick completeness check on the cached user record."""
    if not user:
        return False
    if user.get('profileComplete') is not None:
        return bool(user['profileComplete'])
    if user.get('userType') == 'VOLUNTEER':
        return bool(user.get('firstName') and user.get('lastName') and user.get('bio'))
    if user.get('userType') == 'ORGANIZATION':
        return bool(user.get('organizationName') and user.get('description'))
    return False
