"""Client-side session: the auth token and the cached user record.

`SessionStore` keeps both values in any mutable mapping. Inside the app the
mapping is ``st.session_state`` so every browser tab gets its own login;
tests and scripts use a plain dict. `FileSessionStore` mirrors the values to
``data/session.json`` so a login survives a restart.
"""
from __future__ import annotations

import base64
import json
import time
from typing import Any, Dict, MutableMapping, Optional

from services import persistence

TOKEN_KEY = 'authToken'
USER_KEY = 'user'

# Tokens expiring within this many seconds are treated as already expired.
EXPIRY_SKEW_SECONDS = 30


class SessionStore:
    def __init__(self, backend: Optional[MutableMapping[str, Any]] = None):
        self._backend = backend if backend is not None else {}

    @property
    def token(self) -> Optional[str]:
        return self._backend.get(TOKEN_KEY)

    @property
    def user(self) -> Optional[Dict[str, Any]]:
        return self._backend.get(USER_KEY)

    def save(self, token: Optional[str], user: Optional[Dict[str, Any]]):
        if token:
            self._backend[TOKEN_KEY] = token
        if user is not None:
            self._backend[USER_KEY] = dict(user)

    def set_token(self, token: str):
        self._backend[TOKEN_KEY] = token

    def update_user(self, updates: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """Merge ``updates`` into the cached user; no-op when logged out."""
        current = self.user
        if current is None:
            return None
        merged = {**current, **updates}
        self._backend[USER_KEY] = merged
        return merged

    def clear(self):
        for key in (TOKEN_KEY, USER_KEY):
            if key in self._backend:
                del self._backend[key]

    def is_logged_in(self) -> bool:
        return self.token is not None


class FileSessionStore(SessionStore):
    """Session store that persists through services.persistence."""

    def __init__(self, key: str = 'session'):
        self._key = key
        super().__init__(persistence.load_document(key) or {})

    def _flush(self):
        if self._backend:
            persistence.atomic_write(self._key, dict(self._backend))
        else:
            persistence.remove(self._key)

    def save(self, token, user):
        super().save(token, user)
        self._flush()

    def set_token(self, token):
        super().set_token(token)
        self._flush()

    def update_user(self, updates):
        merged = super().update_user(updates)
        self._flush()
        return merged

    def clear(self):
        super().clear()
        self._flush()


def decode_token_claims(token: str) -> Optional[Dict[str, Any]]:
    """Decode a JWT payload without verifying the signature."""
    parts = (token or '').split('.')
    if len(parts) != 3:
        return None
    payload = parts[1] + '=' * (-len(parts[1]) % 4)
    try:
        claims = json.loads(base64.urlsafe_b64decode(payload.encode('ascii')))
    except (ValueError, UnicodeDecodeError):
        return None
    return claims if isinstance(claims, dict) else None


def token_expired(token: Optional[str], now: Optional[float] = None) -> bool:
    """True when the token's ``exp`` claim is (nearly) in the past.

    A missing token is expired; a token without a readable ``exp`` is not,
    the backend stays the authority for those.
    """
    if not token:
        return True
    claims = decode_token_claims(token)
    if not claims or 'exp' not in claims:
        return False
    try:
        exp = float(claims['exp'])
    except (TypeError, ValueError):
        return False
    current = time.time() if now is None else now
    return exp - EXPIRY_SKEW_SECONDS <= current
