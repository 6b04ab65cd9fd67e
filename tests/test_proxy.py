"""Tests for the validating backend proxy and its routes."""

import json

import httpx
import pytest

from libs.common.config import DashboardConfig
from service_dashboard.app.proxy.forwarder import (
    BACKEND_ERROR_MESSAGE,
    SVG_CACHE_CONTROL,
    BackendProxy,
    build_routes,
)

from .conftest import BACKEND_URL, PROBLEMS, STATS

SVG = b'<svg xmlns="http://www.w3.org/2000/svg" width="10" height="10"></svg>'


@pytest.fixture
def routes():
    return build_routes(DashboardConfig())


def test_route_table(routes):
    """Routes carry the per-route behavior."""
    assert set(routes) == {"problems", "stats", "profile"}
    assert not routes["problems"].passthrough_status
    assert routes["stats"].passthrough_status
    assert routes["stats"].forward_query
    assert not routes["problems"].forward_query
    assert routes["problems"].json_cache_control == "public, s-maxage=7200"
    assert routes["stats"].json_cache_control is None
    assert not routes["problems"].validator.allows_dot
    assert routes["stats"].validator.allows_dot


def test_build_url(routes):
    """Query strings are only appended for forwarding routes."""
    proxy = BackendProxy(BACKEND_URL + "/")
    assert proxy.build_url(routes["stats"], "geek", "format=svg") == f"{BACKEND_URL}/stats/geek?format=svg"
    assert proxy.build_url(routes["stats"], "geek", "") == f"{BACKEND_URL}/stats/geek"
    assert proxy.build_url(routes["problems"], "geek", "format=svg") == f"{BACKEND_URL}/problems/geek"


@pytest.mark.asyncio
async def test_forward_rejects_invalid_username_without_backend_call(backend, proxy, routes):
    """Validation failures never reach the backend."""
    response = await proxy.forward(routes["problems"], "no")
    assert response.status_code == 400
    assert json.loads(response.body) == {"error": "String must contain at least 3 character(s)"}
    assert backend.requests == []
    await proxy.cleanup()


@pytest.mark.asyncio
async def test_forward_uses_route_timeout(backend, proxy, routes):
    """Each route applies its own timeout to the backend call."""
    backend.add("/problems/geek_01", httpx.Response(200, json=PROBLEMS))
    backend.add("/stats/geek_01", httpx.Response(200, json=STATS))

    await proxy.forward(routes["problems"], "geek_01")
    await proxy.forward(routes["stats"], "geek_01")

    problems_request, stats_request = backend.requests
    assert problems_request.extensions["timeout"]["read"] == 60.0
    assert stats_request.extensions["timeout"]["read"] == 30.0
    await proxy.cleanup()


@pytest.mark.asyncio
async def test_cleanup_closes_client(proxy):
    """Cleanup releases the pooled client and is safe to repeat."""
    await proxy.initialize()
    assert proxy.http_client is not None
    await proxy.cleanup()
    assert proxy.http_client is None
    await proxy.cleanup()


class TestProblemsRoute:
    """GET /api/problems/{username}"""

    def test_success_returns_json_with_cache_header(self, client, backend):
        backend.add("/problems/geek_01", httpx.Response(200, json=PROBLEMS))

        response = client.get("/api/problems/geek_01")

        assert response.status_code == 200
        assert response.json() == PROBLEMS
        assert response.headers["cache-control"] == "public, s-maxage=7200"
        assert str(backend.requests[0].url) == f"{BACKEND_URL}/problems/geek_01"

    @pytest.mark.parametrize("username", ["ab", "x" * 51, "john.doe", "geek$"])
    def test_invalid_username_is_400(self, client, backend, username):
        response = client.get(f"/api/problems/{username}")
        assert response.status_code == 400
        assert "error" in response.json()
        assert backend.requests == []

    def test_backend_error_is_generalized(self, client, backend):
        backend.add("/problems/geek_01", httpx.Response(404, json={"detail": "User not found"}))

        response = client.get("/api/problems/geek_01")

        assert response.status_code == 500
        assert response.json() == {"error": "Failed to fetch problems"}

    def test_timeout_is_500(self, client, backend):
        backend.error = httpx.ReadTimeout("timed out")

        response = client.get("/api/problems/geek_01")

        assert response.status_code == 500
        assert response.json() == {"error": "Failed to fetch problems"}

    def test_query_string_is_not_forwarded(self, client, backend):
        backend.add("/problems/geek_01", httpx.Response(200, json=PROBLEMS))

        client.get("/api/problems/geek_01?format=svg")

        assert backend.requests[0].url.query == b""

    def test_invalid_json_is_500(self, client, backend):
        backend.add(
            "/problems/geek_01",
            httpx.Response(200, content=b"<html>", headers={"content-type": "text/html"}),
        )

        response = client.get("/api/problems/geek_01")

        assert response.status_code == 500
        assert response.json() == {"error": "Failed to fetch problems"}


class TestStatsRoute:
    """GET /api/stats/{username}"""

    def test_json_success_has_no_cache_header(self, client, backend):
        backend.add("/stats/john.doe", httpx.Response(200, json=STATS))

        response = client.get("/api/stats/john.doe")

        assert response.status_code == 200
        assert response.json() == STATS
        assert "cache-control" not in response.headers

    def test_svg_is_passed_through(self, client, backend):
        backend.add(
            "/stats/geek_01",
            httpx.Response(200, content=SVG, headers={"content-type": "image/svg+xml; charset=utf-8"}),
        )

        response = client.get("/api/stats/geek_01?format=svg")

        assert response.status_code == 200
        assert response.content == SVG
        assert response.headers["content-type"] == "image/svg+xml"
        assert response.headers["cache-control"] == SVG_CACHE_CONTROL
        assert str(backend.requests[0].url) == f"{BACKEND_URL}/stats/geek_01?format=svg"

    def test_other_content_types_are_parsed_as_json(self, client, backend):
        backend.add(
            "/stats/geek_01",
            httpx.Response(200, content=json.dumps(STATS).encode(), headers={"content-type": "text/plain"}),
        )

        response = client.get("/api/stats/geek_01")

        assert response.status_code == 200
        assert response.json() == STATS

    @pytest.mark.parametrize("status_code", [404, 429, 503])
    def test_backend_status_is_passed_through(self, client, backend, status_code):
        backend.add("/stats/geek_01", httpx.Response(status_code, text="scraper says no"))

        response = client.get("/api/stats/geek_01")

        assert response.status_code == status_code
        assert response.json() == {"error": BACKEND_ERROR_MESSAGE}
        assert "scraper says no" not in response.text

    def test_backend_redirect_is_followed(self, client, backend):
        backend.add(
            "/stats/geek_01",
            httpx.Response(307, headers={"location": f"{BACKEND_URL}/v2/stats/geek_01"}),
        )
        backend.add("/v2/stats/geek_01", httpx.Response(200, json=STATS))

        response = client.get("/api/stats/geek_01")

        assert response.status_code == 200
        assert response.json() == STATS
        assert [request.url.path for request in backend.requests] == ["/stats/geek_01", "/v2/stats/geek_01"]

    def test_connection_failure_is_500(self, client, backend):
        backend.error = httpx.ConnectError("Connection refused")

        response = client.get("/api/stats/geek_01")

        assert response.status_code == 500
        assert response.json() == {"error": "Failed to connect to backend service"}

    @pytest.mark.parametrize(
        "username,message",
        [("jd", "Username too short"), ("j" * 51, "Username too long"), ("j%20d", "Invalid username format")],
    )
    def test_invalid_username_is_400(self, client, backend, username, message):
        response = client.get(f"/api/stats/{username}")
        assert response.status_code == 400
        assert response.json() == {"error": message}
        assert backend.requests == []


class TestProfileRoute:
    """GET /api/profile/{username}"""

    def test_not_found_is_passed_through(self, client, backend):
        response = client.get("/api/profile/ghost_user")

        assert response.status_code == 404
        assert response.json() == {"error": BACKEND_ERROR_MESSAGE}

    def test_success(self, client, backend):
        backend.add_user("geek_01")

        response = client.get("/api/profile/geek_01")

        assert response.status_code == 200
        assert response.json()["fullName"] == "Ada Lovelace"


def test_backend_metrics_are_recorded(client, backend, metrics_collector):
    """Proxy outcomes show up in the collector."""
    backend.add_user("geek_01")
    client.get("/api/profile/geek_01")
    client.get("/api/problems/no")

    registry = metrics_collector.registry
    assert registry.get_sample_value("gfg_backend_requests_total", {"route": "profile", "outcome": "ok"}) == 1.0
    assert registry.get_sample_value("gfg_username_validation_failures_total", {"route": "problems"}) == 1.0
