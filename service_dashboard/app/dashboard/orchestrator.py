"""Dashboard orchestrator.

Fetches profile, stats and problems for a username from the service's own
proxy routes in parallel and either returns the three payloads untouched or
fails with exactly one user-facing message.
"""

import asyncio
import time
from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple
from urllib.parse import quote

import httpx
import structlog

from libs.common.logging import log_performance
from libs.common.metrics import MetricsCollector

logger = structlog.get_logger("dashboard_service.orchestrator")

EMPTY_USERNAME_MESSAGE = "Please enter a username"
FETCH_FALLBACK_MESSAGE = "Failed to fetch profile data. Please check the username and try again."

# (endpoint, message when the endpoint answers with a non-2xx status)
ENDPOINTS: Tuple[Tuple[str, str], ...] = (
    ("profile", "Profile not found"),
    ("stats", "Stats not found"),
    ("problems", "Problems not found"),
)


class DashboardError(Exception):
    """A search failed; ``message`` is what the user sees."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


@dataclass(frozen=True)
class DashboardResult:
    """The three payloads of a successful search, exactly as received."""

    username: str
    profile: Dict[str, Any]
    stats: Dict[str, Any]
    problems: Dict[str, Any]


class DashboardOrchestrator:
    """Runs a dashboard search against the proxy routes.

    Parameters
    - client: HTTP client able to reach the proxy routes
    - api_base: Prefix of the proxy routes on that client (default ``/api``)
    - metrics_collector: Optional collector for search outcomes
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        api_base: str = "/api",
        metrics_collector: Optional[MetricsCollector] = None,
    ):
        self.client = client
        self.api_base = api_base.rstrip("/")
        self.metrics_collector = metrics_collector

    async def search(self, username: str) -> DashboardResult:
        """Fetch all three payloads for ``username``.

        Raises ``DashboardError`` for an empty username, a failed call, or a
        payload carrying an ``error`` field. Calls and payloads are examined
        in profile, stats, problems order and the first problem found wins.
        """
        username = (username or "").strip()
        if not username:
            raise DashboardError(EMPTY_USERNAME_MESSAGE)

        start_time = time.time()
        try:
            result = await self._search(username)
        except DashboardError as e:
            logger.info("Dashboard search failed", username=username, error=e.message)
            self._record("error")
            raise

        self._record("ok")
        log_performance("dashboard_search", (time.time() - start_time) * 1000, username=username)
        return result

    async def _search(self, username: str) -> DashboardResult:
        outcomes = await asyncio.gather(
            *(self._fetch(endpoint, username, message) for endpoint, message in ENDPOINTS),
            return_exceptions=True,
        )

        for outcome in outcomes:
            if isinstance(outcome, DashboardError):
                raise outcome
            if isinstance(outcome, BaseException) and not isinstance(outcome, Exception):
                raise outcome
            if isinstance(outcome, Exception):
                raise DashboardError(str(outcome) or FETCH_FALLBACK_MESSAGE) from outcome

        profile, stats, problems = outcomes
        for payload in (profile, stats, problems):
            if payload.get("error"):
                raise DashboardError(str(payload["error"]))

        return DashboardResult(username=username, profile=profile, stats=stats, problems=problems)

    async def _fetch(self, endpoint: str, username: str, not_found_message: str) -> Dict[str, Any]:
        url = f"{self.api_base}/{endpoint}/{quote(username, safe='')}"
        response = await self.client.get(url)
        if not response.is_success:
            raise DashboardError(not_found_message)

        try:
            payload = response.json()
        except ValueError as e:
            raise DashboardError(FETCH_FALLBACK_MESSAGE) from e

        if not isinstance(payload, dict):
            raise DashboardError(FETCH_FALLBACK_MESSAGE)
        return payload

    def _record(self, outcome: str) -> None:
        if self.metrics_collector:
            self.metrics_collector.record_dashboard_search(outcome)
