import os

# Set testing environment variable before the app is imported
os.environ["TESTING"] = "1"

import datetime as dt
import json

import httpx
import pytest
from fastapi.testclient import TestClient

from cabinet.api.deps import get_clock
from cabinet.core.cache import get_redis
from cabinet.core.http import BackendClient, get_backend
from cabinet.core.security import Session, UserRole, create_session_token
from cabinet.main import app

BASE_URL = "http://backend.test"
NOW = dt.datetime(2025, 10, 1, 9, 0)

DOCTOR_ID = "64b7f0c2a1b2c3d4e5f60001"
SECRETARY_ID = "64b7f0c2a1b2c3d4e5f60002"
PATIENT_ID = "64b7f0c2a1b2c3d4e5f60003"
USER_IDS = {
    UserRole.DOCTOR: DOCTOR_ID,
    UserRole.SECRETARY: SECRETARY_ID,
    UserRole.PATIENT: PATIENT_ID,
}


class FakeBackend:
    """Routes (method, path) to canned responses and records every request.

    A route registered with several responses serves them in order and then
    keeps repeating the last one.
    """

    def __init__(self):
        self.routes = {}
        self.requests = []

    def add(self, method, path, *responses, status_code=200):
        if not responses:
            responses = (None,)
        self.routes[(method.upper(), path)] = [
            r if isinstance(r, (httpx.Response, Exception)) else (status_code, r)
            for r in responses
        ]

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        queue = self.routes.get((request.method, request.url.path))
        if queue is None:
            return httpx.Response(404, json={"message": f"No route for {request.method} {request.url.path}"})
        response = queue.pop(0) if len(queue) > 1 else queue[0]
        if isinstance(response, Exception):
            raise response
        if isinstance(response, httpx.Response):
            return response
        status_code, body = response
        if body is None:
            return httpx.Response(status_code)
        return httpx.Response(status_code, json=body)

    def client(self) -> BackendClient:
        return BackendClient(BASE_URL, transport=httpx.MockTransport(self.handler))

    def calls(self, method=None, path=None):
        return [
            r for r in self.requests
            if (method is None or r.method == method) and (path is None or r.url.path == path)
        ]

    @staticmethod
    def body(request: httpx.Request):
        return json.loads(request.content) if request.content else None


class FakeRedis:
    def __init__(self):
        self.store = {}

    def get(self, key):
        return self.store.get(key)

    def setex(self, key, ttl, value):
        self.store[key] = str(value)

    def incr(self, key):
        self.store[key] = str(int(self.store.get(key, 0)) + 1)
        return int(self.store[key])


def make_session(role: UserRole, backend_token: str = "backend-token") -> Session:
    return Session(user_id=USER_IDS[role], role=role, backend_token=backend_token, jti=f"jti-{role.value}")


def auth_headers(role: UserRole, backend_token: str = "backend-token") -> dict:
    token = create_session_token(USER_IDS[role], role, backend_token)
    return {"Authorization": f"Bearer {token.access_token}"}


def raw_appointment(
    rdv_id,
    date="2025-10-01",
    heure="10:00",
    statut="en_attente",
    medecin_id=DOCTOR_ID,
    patient_id=PATIENT_ID,
):
    """A populated appointment as the doctor and patient endpoints return it."""
    return {
        "_id": rdv_id,
        "date": f"{date}T00:00:00.000Z",
        "heure": heure,
        "statut": statut,
        "medecinId": {"_id": medecin_id, "nom": "Ben Ali", "prenom": "Sami", "specialite": "Cardiologue"},
        "patientId": {"_id": patient_id, "nom": "Trabelsi", "prenom": "Amel"},
    }


def flat_appointment(rdv_id, date="2025-10-01", heure="10:00", statut="en_attente", medecin_id=DOCTOR_ID):
    """An appointment as the secretary listing returns it."""
    return {
        "id": rdv_id,
        "patientNom": "Trabelsi",
        "patientPrenom": "Amel",
        "patientId": PATIENT_ID,
        "medecinId": medecin_id,
        "medecin": "Sami Ben Ali",
        "date": date,
        "heure": heure,
        "statut": statut,
    }


@pytest.fixture
def backend():
    return FakeBackend()


@pytest.fixture
def fake_redis():
    return FakeRedis()


@pytest.fixture
def client(backend, fake_redis):
    async def override_get_backend():
        backend_client = backend.client()
        try:
            yield backend_client
        finally:
            await backend_client.aclose()

    app.dependency_overrides[get_backend] = override_get_backend
    app.dependency_overrides[get_redis] = lambda: fake_redis
    app.dependency_overrides[get_clock] = lambda: (lambda: NOW)
    with TestClient(app, base_url="http://testserver") as test_client:
        yield test_client
    app.dependency_overrides.clear()
