import time

import pytest

from services import persistence
from services.session import (FileSessionStore, SessionStore,
                              decode_token_claims, token_expired)
from tests.conftest import make_token


def test_store_save_update_and_clear():
    backing = {}
    store = SessionStore(backing)
    assert not store.is_logged_in()

    store.save("tok", {"id": 1, "firstName": "Ada"})
    assert backing["authToken"] == "tok"
    assert store.update_user({"bio": "hi"}) == {"id": 1, "firstName": "Ada", "bio": "hi"}

    store.clear()
    assert backing == {}
    assert store.update_user({"bio": "x"}) is None


def test_save_without_token_keeps_existing_token():
    store = SessionStore()
    store.save("tok", {"id": 1})
    store.save(None, {"id": 1, "email": "a@b.c"})
    assert store.token == "tok"
    assert store.user["email"] == "a@b.c"


def test_file_store_survives_reload(tmp_path, monkeypatch):
    monkeypatch.setattr(persistence, "DATA_DIR", str(tmp_path))

    store = FileSessionStore()
    store.save("tok", {"id": 3})
    assert (tmp_path / "session.json").exists()

    reloaded = FileSessionStore()
    assert reloaded.token == "tok"
    assert reloaded.user == {"id": 3}

    reloaded.clear()
    assert not (tmp_path / "session.json").exists()
    assert FileSessionStore().token is None


def test_failed_write_leaves_no_temp_file(tmp_path, monkeypatch):
    monkeypatch.setattr(persistence, "DATA_DIR", str(tmp_path))
    persistence.atomic_write("session", {"token": "old"})

    with pytest.raises(TypeError):
        persistence.atomic_write("session", {"token": object()})
    assert sorted(p.name for p in tmp_path.iterdir()) == ["session.json"]
    assert persistence.load_document("session") == {"token": "old"}


def test_decode_token_claims():
    token = make_token({"sub": "ada", "exp": 100})
    assert decode_token_claims(token) == {"sub": "ada", "exp": 100}
    assert decode_token_claims("not-a-jwt") is None
    assert decode_token_claims("a.!!!.c") is None


def test_token_expired_uses_skew():
    now = time.time()
    assert token_expired(None)
    assert token_expired(make_token({"exp": now - 10}), now=now)
    assert token_expired(make_token({"exp": now + 10}), now=now)
    assert not token_expired(make_token({"exp": now + 3600}), now=now)
    # No exp claim: the backend decides.
    assert not token_expired(make_token({"sub": "ada"}), now=now)
