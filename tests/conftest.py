from typing import Callable, Dict, List, Tuple, Union
import httpx
import pytest
from fastapi.testclient import TestClient

from main import app
from couture.api_client import BackendClient, get_api
from couture.auth import SESSION_COOKIE_NAME, create_session_token
from couture.schemas import User

BACKEND_URL = "http://backend.test/api"

Handler = Union[dict, list, None, Callable[[httpx.Request], httpx.Response]]


class FakeBackend:
    """Backend REST simulé: réponses déclarées par (méthode, chemin), appels enregistrés"""

    def __init__(self):
        self.routes: Dict[Tuple[str, str], Tuple[int, Handler]] = {}
        self.calls: List[httpx.Request] = []

    def on(self, method: str, path: str, payload: Handler = None, status: int = 200):
        self.routes[(method.upper(), path)] = (status, payload)

    def count(self, method: str, path: str) -> int:
        return sum(1 for r in self.calls if r.method == method.upper() and self._path(r) == path)

    def last(self, method: str, path: str) -> httpx.Request:
        matching = [r for r in self.calls if r.method == method.upper() and self._path(r) == path]
        assert matching, f"aucun appel {method} {path}"
        return matching[-1]

    @staticmethod
    def _path(request: httpx.Request) -> str:
        path = request.url.path
        return path[len("/api"):] if path.startswith("/api") else path

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.calls.append(request)
        key = (request.method, self._path(request))
        if key not in self.routes:
            return httpx.Response(404, json={"message": "Ressource introuvable"})
        status, payload = self.routes[key]
        if callable(payload):
            return payload(request)
        return httpx.Response(status, json=payload)


@pytest.fixture
def backend():
    return FakeBackend()

@pytest.fixture
def api(backend):
    return BackendClient(base_url=BACKEND_URL, transport=httpx.MockTransport(backend.handler))

@pytest.fixture
def client(api):
    app.dependency_overrides[get_api] = lambda: api
    test_client = TestClient(app)
    yield test_client
    app.dependency_overrides.clear()

def make_user(**overrides) -> User:
    data = {"id": 1, "name": "Awa Diop", "userName": "awa", "email": "awa@atelier.sn", "role": "User"}
    data.update(overrides)
    return User(**data)

@pytest.fixture
def logged_client(client):
    client.cookies.set(SESSION_COOKIE_NAME, create_session_token(make_user()))
    return client

@pytest.fixture
def admin_client(client):
    client.cookies.set(SESSION_COOKIE_NAME, create_session_token(make_user(id=7, role="Admin")))
    return client
