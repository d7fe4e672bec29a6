"""Volunteers following organizations, plus follower counts and recommendations."""
from __future__ import annotations

from typing import Any, Dict, Iterable

from services.api import (ApiClient, ApiError, AuthenticationError,
                          error_message, fail, ok)

NOT_FOLLOWING = 'NOT_FOLLOWING'
AUTH_REQUIRED = 'AUTH_REQUIRED'
UNKNOWN = 'UNKNOWN'


def _body(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


class FollowService:
    def __init__(self, client: ApiClient):
        self.client = client

    def _follow_path(self, organization_id) -> str:
        return f'/volunteer-profiles/me/follow/{organization_id}'

    def follow_organization(self, organization_id) -> Dict[str, Any]:
        try:
            body = _body(self.client.post(self._follow_path(organization_id)))
        except ApiError as e:
            return {**fail(error_message(e, 'Failed to follow organization')),
                    'organizationId': organization_id}
        return {**ok(body, body.get('message') or 'Successfully followed organization'),
                'organizationId': organization_id, 'isFollowing': True}

    def unfollow_organization(self, organization_id) -> Dict[str, Any]:
        try:
            body = _body(self.client.delete(self._follow_path(organization_id)))
        except ApiError as e:
            if e.status_code == 400:
                message, kind = e.server_message or 'You are not currently following this organization', NOT_FOLLOWING
            elif isinstance(e, AuthenticationError):
                message, kind = 'Authentication required. Please log in again.', AUTH_REQUIRED
            else:
                message, kind = error_message(e, 'Failed to unfollow organization'), UNKNOWN
            result = fail(message)
            result.update(organizationId=organization_id, isFollowing=False, errorType=kind)
            return result
        result = ok(body, body.get('message') or 'Successfully unfollowed organization')
        result.update(organizationId=body.get('organizationId') or organization_id,
                      isFollowing=bool(body.get('isFollowing')),
                      remainingFollowedCount=body.get('remainingFollowedCount'))
        return result

    def toggle_follow(self, organization_id) -> Dict[str, Any]:
        try:
            body = _body(self.client.put(self._follow_path(organization_id)))
        except ApiError as e:
            return {**fail(error_message(e, 'Failed to toggle follow status')),
                    'organizationId': organization_id}
        result = ok(body, body.get('message') or 'Successfully updated follow status')
        result.update(isFollowing=bool(body.get('isFollowing')),
                      organizationId=body.get('organizationId') or organization_id)
        return result

    def follow_status(self, organization_id) -> Dict[str, Any]:
        try:
            body = _body(self.client.get(f'{self._follow_path(organization_id)}/status'))
        except ApiError as e:
            result = fail(error_message(e, 'Failed to check follow status'))
            result.update(isFollowing=False, organizationId=organization_id)
            return result
        result = ok(body)
        result.update(isFollowing=bool(body.get('isFollowing')),
                      organizationId=body.get('organizationId') or organization_id)
        return result

    def unfollow_many(self, organization_ids: Iterable) -> Dict[str, Any]:
        ids = list(organization_ids or [])
        if not ids:
            return {**fail('No organization IDs provided'), 'unfollowedCount': 0, 'failedCount': 0}
        results = [self.unfollow_organization(org_id) for org_id in ids]
        succeeded = sum(1 for r in results if r['success'])
        failed = len(ids) - succeeded
        return {
            'success': succeeded > 0,
            'unfollowedCount': succeeded,
            'failedCount': failed,
            'totalProcessed': len(ids),
            'results': results,
            'message': f'Successfully unfollowed {succeeded} organization(s). {failed} failed.',
        }

    def followed_organizations(self) -> Dict[str, Any]:
        """IDs of the organizations the current volunteer follows."""
        try:
            return ok(self.client.get('/volunteer-profiles/me/followed-organizations') or [])
        except ApiError as e:
            return {**fail(error_message(e, 'Failed to get followed organization IDs')), 'data': []}

    def followed_organization_details(self) -> Dict[str, Any]:
        try:
            return ok(self.client.get('/volunteer-profiles/me/followed-organizations-details') or [])
        except ApiError as e:
            return {**fail(error_message(e, 'Failed to get followed organizations details')), 'data': []}

    def organization_followers(self, organization_id, limit: int = 10) -> Dict[str, Any]:
        try:
            return ok(self.client.get(f'/volunteer-profiles/organization/{organization_id}/followers',
                                      params={'limit': limit}))
        except ApiError as e:
            return fail(error_message(e, 'Failed to get organization followers'))

    def follower_count(self, organization_id) -> Dict[str, Any]:
        try:
            body = _body(self.client.get(
                f'/volunteer-profiles/organization/{organization_id}/follower-count'))
        except ApiError as e:
            result = fail(error_message(e, 'Failed to get organization follower count'))
            result.update(followerCount=0, organizationId=organization_id)
            return result
        result = ok(body)
        result.update(followerCount=body.get('followerCount') or 0,
                      organizationId=body.get('organizationId') or organization_id)
        return result

    def recommended_organizations(self, limit: int = 10) -> Dict[str, Any]:
        try:
            return ok(self.client.get('/volunteer-profiles/me/recommended-organizations',
                                      params={'limit': limit}) or [])
        except ApiError as e:
            return {**fail(error_message(e, 'Failed to get recommended organizations')), 'data': []}
