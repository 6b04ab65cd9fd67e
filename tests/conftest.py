"""Pytest fixtures for the dashboard service.

The scraping backend is replaced by ``FakeBackend`` behind an
``httpx.MockTransport``; no network access is needed.
"""

from typing import Dict, List, Optional

import httpx
import pytest
from fastapi.testclient import TestClient

from libs.common.metrics import MetricsCollector
from service_dashboard.app.api.routes import get_backend_proxy
from service_dashboard.app.main import app
from service_dashboard.app.proxy.forwarder import BackendProxy

BACKEND_URL = "http://backend.test"

PROFILE = {
    "userName": "geek_01",
    "fullName": "Ada Lovelace",
    "designation": "Student",
    "codingScore": 1250,
    "problemsSolved": 145,
    "instituteRank": 0,
    "articlesPublished": 3,
    "potdStreak": 4,
    "longestStreak": 28,
    "potdsSolved": 42,
}

STATS = {
    "userName": "geek_01",
    "School": 15,
    "Basic": 25,
    "Easy": 45,
    "Medium": 40,
    "Hard": 20,
    "totalProblemsSolved": 145,
}

PROBLEMS = {
    "userName": "geek_01",
    "problemsByDifficulty": {"Easy": 2, "Hard": 1},
    "Problems": {
        "Easy": [
            {"question": "Two Sum", "questionUrl": "https://practice.geeksforgeeks.org/two-sum"},
            {"question": "Reverse Array", "questionUrl": "https://practice.geeksforgeeks.org/reverse"},
        ],
        "Hard": [
            {"question": "N Queens", "questionUrl": "https://practice.geeksforgeeks.org/n-queens"},
        ],
    },
}


class FakeBackend:
    """Answers backend requests from a path -> response table and records them."""

    def __init__(self):
        self.responses: Dict[str, httpx.Response] = {}
        self.requests: List[httpx.Request] = []
        self.error: Optional[Exception] = None

    def add(self, path: str, response: httpx.Response) -> None:
        self.responses[path] = response

    def add_user(self, username: str = "geek_01") -> None:
        self.add(f"/profile/{username}", httpx.Response(200, json=PROFILE))
        self.add(f"/stats/{username}", httpx.Response(200, json=STATS))
        self.add(f"/problems/{username}", httpx.Response(200, json=PROBLEMS))

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        response = self.responses.get(request.url.path)
        if response is None:
            return httpx.Response(404, json={"detail": "User not found"})
        return response


@pytest.fixture
def backend():
    """Empty fake backend; tests register the responses they need."""
    return FakeBackend()


@pytest.fixture
def metrics_collector():
    return MetricsCollector("test-service")


@pytest.fixture
def proxy(backend, metrics_collector):
    """Backend proxy wired to the fake backend."""
    return BackendProxy(
        BACKEND_URL,
        metrics_collector=metrics_collector,
        transport=httpx.MockTransport(backend.handler),
    )


@pytest.fixture
def client(proxy):
    """Test client whose proxy routes talk to the fake backend."""
    app.dependency_overrides[get_backend_proxy] = lambda: proxy
    try:
        with TestClient(app) as test_client:
            yield test_client
    finally:
        app.dependency_overrides.clear()
