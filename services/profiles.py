"""Volunteer and organization profiles: setup, edit, images and stats.

The backend keeps list-like fields (skills, interests, categories, ...) as
comma-separated strings; `format_profile_data` normalises whatever the form
produced into that shape before anything is sent.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from services.api import (ApiClient, ApiError, ValidationError, error_message,
                          fail, ok)

logger = logging.getLogger(__name__)

PROFILE_ENDPOINTS = {
    'VOLUNTEER': '/volunteer-profiles',
    'ORGANIZATION': '/organization-profiles',
}


def split_list(value: Any) -> List[str]:
    if isinstance(value, (list, tuple)):
        return [str(v).strip() for v in value if v is not None and str(v).strip()]
    if isinstance(value, str):
        return [item.strip() for item in value.split(',') if item.strip()]
    return []


def join_list(value: Any) -> str:
    if value is None:
        return ''
    if isinstance(value, (list, tuple, str)):
        return ','.join(split_list(value))
    return str(value)


def _string(value: Any) -> str:
    if value is None:
        return ''
    if isinstance(value, (list, tuple)):
        return join_list(value)
    return str(value)


def _number(value: Any):
    if value is None or value == '':
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return int(number) if number.is_integer() else number


def format_profile_data(profile_data: Dict[str, Any], user_type: Optional[str]) -> Dict[str, Any]:
    """Shape form data into the profile payload the backend expects for ``user_type``."""
    data = profile_data or {}
    base = {
        'bio': _string(data.get('bio')),
        'location': _string(data.get('location')),
        'phoneNumber': _string(data.get('phoneNumber') or data.get('phone')),
        'skills': join_list(data.get('skills')),
        'interests': join_list(data.get('interests')),
        'profileComplete': bool(data.get('profileComplete')),
    }
    if user_type == 'VOLUNTEER':
        return {
            **base,
            'firstName': _string(data.get('firstName')),
            'lastName': _string(data.get('lastName')),
            'availability': _string(data.get('availability') or 'flexible'),
            'profileImageUrl': data.get('profileImageUrl') or None,
        }
    if user_type == 'ORGANIZATION':
        return {
            **base,
            'organizationName': _string(data.get('organizationName')),
            'description': _string(data.get('description') or data.get('bio')),
            'missionStatement': _string(data.get('missionStatement')),
            'website': _string(data.get('website')),
            'address': _string(data.get('address')),
            'city': _string(data.get('city')),
            'state': _string(data.get('state')),
            'country': _string(data.get('country')),
            'zipCode': _string(data.get('zipCode')),
            'organizationType': _string(data.get('organizationType')),
            'organizationSize': _string(data.get('organizationSize')),
            'primaryCategory': _string(data.get('primaryCategory')),
            'categories': join_list(data.get('categories') or data.get('primaryCategory')),
            'causes': join_list(data.get('causes')),
            'services': join_list(data.get('services')),
            'ein': _string(data.get('ein')),
            'employeeCount': _number(data.get('employeeCount')),
            'foundedYear': _number(data.get('foundedYear')),
            'languagesSupported': join_list(data.get('languagesSupported')),
            'taxExemptStatus': _string(data.get('taxExemptStatus')),
            'verificationLevel': data.get('verificationLevel') or 'Unverified',
            'isVerified': bool(data.get('isVerified')),
            'profileImageUrl': data.get('profileImageUrl') or None,
            'coverImageUrl': data.get('coverImageUrl') or None,
        }
    return base


def check_profile_completeness(profile: Optional[Dict[str, Any]], user_type: Optional[str]) -> bool:
    if not profile:
        return False
    if profile.get('profileComplete') is not None:
        return bool(profile['profileComplete'])
    if user_type == 'VOLUNTEER':
        return all(profile.get(k) for k in ('firstName', 'lastName', 'bio', 'location', 'interests'))
    if user_type == 'ORGANIZATION':
        return bool(profile.get('organizationName')
                    and (profile.get('description') or profile.get('bio'))
                    and profile.get('city') and profile.get('country')
                    and (profile.get('primaryCategory') or profile.get('categories')))
    return False


def validate_profile_setup(form: Dict[str, Any], user_type: Optional[str]):
    """Raise ValidationError with the first problem in a profile setup form."""
    if not _string(form.get('bio')).strip():
        raise ValidationError("Please tell us about yourself")
    if not _string(form.get('location')).strip():
        raise ValidationError("Please provide your location")
    if user_type == 'VOLUNTEER':
        if not _string(form.get('firstName')).strip():
            raise ValidationError("Please provide your first name")
        if not _string(form.get('lastName')).strip():
            raise ValidationError("Please provide your last name")
        if not split_list(form.get('interests')):
            raise ValidationError("Please select at least one interest or cause")
    elif user_type == 'ORGANIZATION':
        if not _string(form.get('organizationName')).strip():
            raise ValidationError("Please provide your organization name")
        if not split_list(form.get('categories')):
            raise ValidationError("Please specify your organization focus areas")


class ProfileService:
    def __init__(self, client: ApiClient):
        self.client = client
        self.session = client.session

    def _user_and_base(self):
        user = self.session.user
        if not user:
            raise ValidationError('User not logged in')
        base = PROFILE_ENDPOINTS.get(user.get('userType'))
        if base is None:
            raise ValidationError(f"Invalid user type: {user.get('userType')}")
        return user, base

    def _result(self, default_error: str, func) -> Dict[str, Any]:
        try:
            return func()
        except (ApiError, ValidationError) as e:
            logger.warning("%s: %s", default_error, e)
            return fail(error_message(e, default_error))

    def create_profile(self, profile_data: Dict[str, Any]) -> Dict[str, Any]:
        """First-time profile creation (``POST``); marks the cached user complete."""
        def create():
            user, base = self._user_and_base()
            payload = format_profile_data({**profile_data, 'profileComplete': True}, user['userType'])
            body = self.client.post(base, json=payload)
            updated = self.session.update_user({**payload, 'profileComplete': True})
            return {**ok(body, 'Profile created successfully'), 'user': updated}
        return self._result('Failed to create profile', create)

    def create_or_update_profile(self, profile_data: Dict[str, Any]) -> Dict[str, Any]:
        """Save via ``PUT .../me``; used by the setup page, which may be re-submitted."""
        def save():
            user, base = self._user_and_base()
            complete = profile_data.get('profileComplete') is not False
            payload = format_profile_data({**profile_data, 'profileComplete': complete},
                                          user['userType'])
            body = self.client.put(f'{base}/me', json=payload)
            updated = self.session.update_user(payload)
            return {**ok(body, 'Profile saved successfully'), 'user': updated}
        return self._result('Failed to save profile', save)

    def update_profile(self, updated_data: Dict[str, Any]) -> Dict[str, Any]:
        def update():
            user, base = self._user_and_base()
            merged = {**user, **updated_data}
            payload = format_profile_data(merged, user['userType'])
            body = self.client.put(f'{base}/me', json=payload)
            updated = self.session.update_user(payload)
            return {**ok(body, 'Profile updated successfully'), 'user': updated}
        return self._result('Failed to update profile', update)

    def fetch_my_profile(self) -> Dict[str, Any]:
        def fetch():
            _, base = self._user_and_base()
            body = self.client.get(f'{base}/me')
            updated = self.session.update_user(body) if isinstance(body, dict) else self.session.user
            return {**ok(body), 'user': updated}
        return self._result('Failed to fetch profile', fetch)

    def fetch_public_profile(self, user_id, user_type: str) -> Dict[str, Any]:
        def fetch():
            base = PROFILE_ENDPOINTS.get(user_type)
            if base is None:
                raise ValidationError(f"Invalid user type: {user_type}")
            return ok(self.client.get(f'{base}/{user_id}'))
        return self._result('Failed to fetch profile', fetch)

    def get_profile_data(self, user_id=None) -> Dict[str, Any]:
        """Own profile when ``user_id`` is empty or ours; otherwise try volunteer then organization."""
        user = self.session.user
        if not user:
            return fail('User not logged in')
        own_ids = {str(user.get('id')), str(user.get('userId'))}
        if user_id is None or str(user_id) in own_ids:
            result = self.fetch_my_profile()
        else:
            result = self.fetch_public_profile(user_id, 'VOLUNTEER')
            if not result['success']:
                result = self.fetch_public_profile(user_id, 'ORGANIZATION')
        if not result['success']:
            return result
        data = result['data'] or {}
        user_type = data.get('userType') or ('ORGANIZATION' if data.get('organizationName') else 'VOLUNTEER')
        result['userType'] = user_type
        return result

    def upload_profile_image(self, filename: str, content: bytes, image_type: str = 'profile',
                             content_type: str = 'application/octet-stream') -> Dict[str, Any]:
        def upload():
            if not content:
                raise ValidationError('No image file provided')
            self._user_and_base()
            body = self.client.post('/upload/profile-image',
                                    files={'image': (filename, content, content_type)},
                                    data={'type': image_type})
            image_url = body.get('imageUrl') if isinstance(body, dict) else None
            field = 'coverImageUrl' if image_type == 'cover' else 'profileImageUrl'
            updated = self.session.update_user({field: image_url})
            return {**ok(body, 'Image uploaded successfully'), 'imageUrl': image_url, 'user': updated}
        return self._result('Failed to upload image', upload)

    def fetch_profile_stats(self) -> Dict[str, Any]:
        def fetch():
            _, base = self._user_and_base()
            return ok(self.client.get(f'{base}/me/stats'))
        return self._result('Failed to fetch statistics', fetch)

    def delete_profile(self) -> Dict[str, Any]:
        def delete():
            _, base = self._user_and_base()
            self.client.delete(f'{base}/me')
            self.session.clear()
            return ok(None, 'Profile deleted successfully')
        return self._result('Failed to delete profile', delete)

    def _append_to(self, key: str, value: str, default_error: str) -> Dict[str, Any]:
        user = self.session.user
        if not user:
            return fail('User not logged in')
        items = split_list(user.get(key))
        value = (value or '').strip()
        if value and value not in items:
            items.append(value)
        result = self.update_profile({key: join_list(items)})
        if not result['success'] and not result.get('message'):
            result['message'] = default_error
        return result

    def add_interest(self, interest: str) -> Dict[str, Any]:
        return self._append_to('interests', interest, 'Failed to add interest')

    def add_skill(self, skill: str) -> Dict[str, Any]:
        return self._append_to('skills', skill, 'Failed to add skill')
