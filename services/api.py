"""HTTP access to the VolunteerSync REST backend.

Every service talks to the backend through one `ApiClient`. The client adds
JSON and bearer-token headers, maps non-2xx responses onto the `ApiError`
hierarchy and replays a request once after refreshing an expired token.

Usage:
    client = ApiClient(session=SessionStore())
    events = client.get("/events")
"""
from __future__ import annotations

import logging
import time
from typing import Any, Callable, Dict, List, Optional

import httpx

from domain.constants import API_BASE_URL, REQUEST_TIMEOUT
from services.session import SessionStore

logger = logging.getLogger(__name__)

# Content-Type is left to httpx: JSON bodies and multipart uploads set their own.
DEFAULT_HEADERS = {
    'Accept': 'application/json',
}


class ApiError(Exception):
    """A failed backend call.

    ``status_code`` is None for transport failures (backend unreachable,
    timeout). ``server_message`` holds the backend's own ``message``/``error``
    field when the body carried one.
    """

    def __init__(self, message: str, status_code: Optional[int] = None,
                 payload: Any = None, server_message: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.payload = payload
        self.server_message = server_message


class NotFoundError(ApiError):
    pass


class AuthenticationError(ApiError):
    pass


class ValidationError(ValueError):
    """Input rejected on the client before any request is sent."""


def _server_message(payload: Any) -> Optional[str]:
    if isinstance(payload, dict):
        for key in ('message', 'error'):
            value = payload.get(key)
            if isinstance(value, str) and value.strip():
                return value
    return None


def _clean_params(params: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    if not params:
        return None
    cleaned = {}
    for key, value in params.items():
        if value is None or value == '':
            continue
        if isinstance(value, bool):
            value = 'true' if value else 'false'
        cleaned[key] = value
    return cleaned


class ApiClient:
    def __init__(self, base_url: str = API_BASE_URL, session: Optional[SessionStore] = None,
                 timeout: float = REQUEST_TIMEOUT, transport: Optional[httpx.BaseTransport] = None):
        self.base_url = base_url.rstrip('/')
        self.session = session if session is not None else SessionStore()
        self._http = httpx.Client(
            base_url=self.base_url + '/',
            timeout=timeout,
            transport=transport,
            headers=DEFAULT_HEADERS,
        )

    def close(self):
        self._http.close()

    def _send(self, method: str, path: str, params=None, json=None,
              headers=None, files=None, data=None) -> httpx.Response:
        request_headers = dict(headers or {})
        token = self.session.token
        if token and 'Authorization' not in request_headers:
            request_headers['Authorization'] = f"Bearer {token}"
        url = path.lstrip('/')
        logger.debug("%s %s params=%s", method, url, params)
        try:
            return self._http.request(
                method,
                url,
                params=_clean_params(params),
                json=json,
                files=files,
                data=data,
                headers=request_headers,
            )
        except httpx.TransportError as e:
            logger.warning("%s %s failed: %s", method, url, e)
            raise ApiError(f"Network error: {e}") from e

    def request(self, method: str, path: str, *, params: Optional[Dict[str, Any]] = None,
                json: Any = None, headers: Optional[Dict[str, str]] = None,
                files: Any = None, data: Any = None, retry_auth: bool = True) -> Any:
        response = self._send(method, path, params, json, headers, files, data)
        if response.status_code == 401 and retry_auth and self.session.token:
            logger.info("401 from %s, attempting token refresh", path)
            if self.refresh_token():
                response = self._send(method, path, params, json, headers, files, data)
            else:
                self.session.clear()
                raise AuthenticationError(
                    "Session expired. Please log in again.", status_code=401)
        return self._handle(response)

    def _handle(self, response: httpx.Response) -> Any:
        payload: Any = None
        if response.content:
            try:
                payload = response.json()
            except ValueError:
                payload = response.text
        if response.is_success:
            return payload

        server_message = _server_message(payload)
        message = server_message or f"HTTP {response.status_code}: {response.reason_phrase}"
        logger.warning("%s %s -> %s", response.request.method,
                       response.request.url, message)
        error_cls = ApiError
        if response.status_code == 404:
            error_cls = NotFoundError
        elif response.status_code == 401:
            error_cls = AuthenticationError
        raise error_cls(message, status_code=response.status_code,
                        payload=payload, server_message=server_message)

    def refresh_token(self) -> bool:
        """Exchange the current token for a fresh one via ``POST /auth/refresh``."""
        try:
            body = self.request('POST', '/auth/refresh', retry_auth=False)
        except ApiError as e:
            logger.warning("Token refresh failed: %s", e)
            return False
        data = unwrap(body)
        token = data.get('token') if isinstance(data, dict) else None
        if not token:
            return False
        self.session.set_token(token)
        return True

    def get(self, path: str, **kwargs) -> Any:
        return self.request('GET', path, **kwargs)

    def post(self, path: str, **kwargs) -> Any:
        return self.request('POST', path, **kwargs)

    def put(self, path: str, **kwargs) -> Any:
        return self.request('PUT', path, **kwargs)

    def patch(self, path: str, **kwargs) -> Any:
        return self.request('PATCH', path, **kwargs)

    def delete(self, path: str, **kwargs) -> Any:
        return self.request('DELETE', path, **kwargs)


def unwrap(body: Any) -> Any:
    """Strip the backend's ``{success, message, data}`` envelope if present."""
    if isinstance(body, dict) and 'data' in body and ('success' in body or 'message' in body):
        return body['data']
    return body


def as_list(body: Any) -> List[Any]:
    """Coerce a list-ish response (bare list, page ``content`` or ``data``) to a list."""
    if isinstance(body, list):
        return body
    if isinstance(body, dict):
        for key in ('content', 'data'):
            if isinstance(body.get(key), list):
                return body[key]
    return []


def no_cache_headers() -> Dict[str, str]:
    return {'Cache-Control': 'no-cache', 'Pragma': 'no-cache'}


def cache_buster(clock: Callable[[], float] = time.time) -> int:
    return int(clock() * 1000)


def ok(data: Any = None, message: Optional[str] = None) -> Dict[str, Any]:
    result: Dict[str, Any] = {'success': True, 'data': data}
    if message:
        result['message'] = message
    return result


def fail(message: str, error: Any = None) -> Dict[str, Any]:
    result: Dict[str, Any] = {'success': False, 'message': message, 'data': None}
    if error is not None:
        result['error'] = error
    return result


def error_message(exc: Exception, default: str) -> str:
    """Pick the message a view should show for ``exc``."""
    if isinstance(exc, ApiError):
        if exc.server_message:
            return exc.server_message
        if exc.status_code is None or isinstance(exc, AuthenticationError):
            return exc.message
        return default
    return str(exc) or default
