"""Validating proxy to the GFG scraping backend.

Each proxied route validates the username, forwards a GET to the backend
with a per-route timeout, and maps the backend's answer to a client response:

- network failure or timeout: 500 with the route's generic message
- non-2xx: the backend status (passthrough routes) or 500 (generalizing
  routes); backend error text only goes to the logs
- ``image/svg+xml``: bytes passed through with a long cache lifetime
- anything else: parsed as JSON and returned, optionally with a cache header
"""

import time
from dataclasses import dataclass
from typing import Dict, Optional

import httpx
import structlog
from fastapi.responses import JSONResponse, Response

from libs.common.config import DashboardConfig
from libs.common.metrics import MetricsCollector
from ..validation.username import (
    UsernameValidationError,
    UsernameValidator,
    dotted_username,
    strict_username,
)

logger = structlog.get_logger("dashboard_service.proxy")

SVG_MEDIA_TYPE = "image/svg+xml"
SVG_CACHE_CONTROL = "public, max-age=14400"
PROBLEMS_CACHE_CONTROL = "public, s-maxage=7200"
BACKEND_ERROR_MESSAGE = "User not found or backend error"


@dataclass(frozen=True)
class ProxyRoute:
    """How a single proxy route talks to the backend.

    Attributes
    - name: Route identifier used in logs and metric labels
    - backend_path: Path segment on the backend (``/{backend_path}/{username}``)
    - validator: Username validator variant for this route
    - timeout_seconds: Upper bound for the whole backend call
    - failure_message: Generic message returned with a 500
    - passthrough_status: Reflect the backend's non-2xx status instead of 500
    - forward_query: Append the inbound query string to the backend URL
    - json_cache_control: ``Cache-Control`` value for JSON responses, if any
    """

    name: str
    backend_path: str
    validator: UsernameValidator
    timeout_seconds: float
    failure_message: str
    passthrough_status: bool = False
    forward_query: bool = False
    json_cache_control: Optional[str] = None


def build_routes(config: DashboardConfig) -> Dict[str, ProxyRoute]:
    """Route table keyed by route name, with timeouts taken from ``config``."""
    return {
        "problems": ProxyRoute(
            name="problems",
            backend_path="problems",
            validator=strict_username,
            timeout_seconds=config.gfg_problems_timeout_seconds,
            failure_message="Failed to fetch problems",
            json_cache_control=PROBLEMS_CACHE_CONTROL,
        ),
        "stats": ProxyRoute(
            name="stats",
            backend_path="stats",
            validator=dotted_username,
            timeout_seconds=config.gfg_stats_timeout_seconds,
            failure_message="Failed to connect to backend service",
            passthrough_status=True,
            forward_query=True,
        ),
        "profile": ProxyRoute(
            name="profile",
            backend_path="profile",
            validator=dotted_username,
            timeout_seconds=config.gfg_profile_timeout_seconds,
            failure_message="Failed to connect to backend service",
            passthrough_status=True,
        ),
    }


def error_response(message: str, status_code: int) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


class BackendProxy:
    """Forwards validated requests to the backend and reshapes the responses.

    Holds one pooled ``httpx.AsyncClient`` for the lifetime of the service.
    The client is opened by ``initialize`` (or lazily on first use) and
    closed by ``cleanup``.

    Parameters
    - base_url: Backend base URL, e.g. ``http://127.0.0.1:5000``
    - metrics_collector: Optional collector for backend metrics
    - transport: Optional httpx transport (tests use ``httpx.MockTransport``)
    """

    def __init__(
        self,
        base_url: str,
        metrics_collector: Optional[MetricsCollector] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.metrics_collector = metrics_collector
        self._transport = transport
        self.http_client: Optional[httpx.AsyncClient] = None

    async def initialize(self) -> None:
        if self.http_client is None:
            self.http_client = httpx.AsyncClient(transport=self._transport, follow_redirects=True)
            logger.info("Backend proxy initialized", backend_url=self.base_url)

    async def cleanup(self) -> None:
        if self.http_client is not None:
            await self.http_client.aclose()
            self.http_client = None
            logger.info("Backend proxy closed")

    def build_url(self, route: ProxyRoute, username: str, query: str = "") -> str:
        url = f"{self.base_url}/{route.backend_path}/{username}"
        if route.forward_query and query:
            url = f"{url}?{query}"
        return url

    async def forward(self, route: ProxyRoute, raw_username: str, query: str = "") -> Response:
        """Validate, forward, and map the backend response for ``route``."""
        try:
            username = route.validator.validate(raw_username)
        except UsernameValidationError as e:
            logger.info("Rejected username", route=route.name, error=e.message)
            if self.metrics_collector:
                self.metrics_collector.record_validation_failure(route.name)
            return error_response(e.message, 400)

        await self.initialize()
        url = self.build_url(route, username, query)
        start_time = time.time()

        try:
            response = await self.http_client.get(url, timeout=route.timeout_seconds)
        except httpx.HTTPError as e:
            logger.error(
                "Backend request failed",
                route=route.name,
                url=url,
                error=str(e) or type(e).__name__,
            )
            self._record(route, "unreachable", start_time)
            return error_response(route.failure_message, 500)

        if not response.is_success:
            logger.error(
                "Backend error",
                route=route.name,
                url=url,
                status=response.status_code,
                body=response.text,
            )
            self._record(route, "http_error", start_time)
            if route.passthrough_status:
                return error_response(BACKEND_ERROR_MESSAGE, response.status_code)
            return error_response(route.failure_message, 500)

        content_type = response.headers.get("content-type") or ""
        if SVG_MEDIA_TYPE in content_type:
            self._record(route, "image", start_time)
            return Response(
                content=response.content,
                media_type=SVG_MEDIA_TYPE,
                headers={"Cache-Control": SVG_CACHE_CONTROL},
            )

        try:
            data = response.json()
        except ValueError as e:
            logger.error("Backend returned invalid JSON", route=route.name, url=url, error=str(e))
            self._record(route, "invalid_json", start_time)
            return error_response(route.failure_message, 500)

        self._record(route, "ok", start_time)
        headers = {"Cache-Control": route.json_cache_control} if route.json_cache_control else None
        return JSONResponse(content=data, headers=headers)

    def _record(self, route: ProxyRoute, outcome: str, start_time: float) -> None:
        duration = time.time() - start_time
        logger.debug(
            "Backend call finished",
            route=route.name,
            outcome=outcome,
            duration_ms=duration * 1000,
        )
        if self.metrics_collector:
            self.metrics_collector.record_backend_request(route.name, outcome, duration)
