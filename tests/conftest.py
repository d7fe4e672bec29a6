import base64
import json

import httpx
import pandas  # noqa: F401  # load before tests patch sys.modules; numpy cannot be re-imported
import pytest

from services.api import ApiClient
from services.session import SessionStore

BASE_URL = "http://backend.test/api"


class FakeBackend:
    """In-memory REST backend for httpx.MockTransport.

    Routes map ``(method, path)`` to ``(status, body)``, a callable taking the
    request, or a list of those consumed one per call (the last one repeats).
    Unrouted requests get a 404.
    """

    def __init__(self):
        self.routes = {}
        self.requests = []

    def route(self, method, path, status=200, body=None, handler=None):
        spec = handler if handler is not None else (status, body)
        self.routes.setdefault((method, path), []).append(spec)

    def calls(self, method=None, path=None):
        return [r for r in self.requests
                if (method is None or r.method == method)
                and (path is None or self._path(r) == path)]

    @staticmethod
    def _path(request):
        return request.url.path[len("/api"):]

    def __call__(self, request):
        self.requests.append(request)
        specs = self.routes.get((request.method, self._path(request)))
        if not specs:
            return httpx.Response(404, json={"message": f"No route for {request.method} {self._path(request)}"})
        spec = specs.pop(0) if len(specs) > 1 else specs[0]
        if callable(spec):
            return spec(request)
        status, body = spec
        if isinstance(body, str):
            return httpx.Response(status, text=body)
        return httpx.Response(status, json=body)


def sent_json(request):
    return json.loads(request.content) if request.content else None


def make_token(claims):
    def part(obj):
        raw = json.dumps(obj).encode()
        return base64.urlsafe_b64encode(raw).rstrip(b"=").decode()
    return f"{part({'alg': 'HS256'})}.{part(claims)}.signature"


@pytest.fixture
def backend():
    return FakeBackend()


@pytest.fixture
def session():
    return SessionStore()


@pytest.fixture
def client(backend, session):
    api = ApiClient(base_url=BASE_URL, session=session, transport=httpx.MockTransport(backend))
    yield api
    api.close()


@pytest.fixture
def volunteer(session):
    user = {"id": 7, "userId": 7, "email": "vol@example.com", "userType": "VOLUNTEER",
            "firstName": "Ada", "lastName": "Lovelace"}
    session.save("volunteer-token", user)
    return user


@pytest.fixture
def organization(session):
    user = {"id": 42, "userId": 42, "email": "org@example.com", "userType": "ORGANIZATION",
            "organizationName": "Green Earth"}
    session.save("org-token", user)
    return user
