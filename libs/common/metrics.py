"""Metrics collection for the GFG stats services.

Provides a thin convenience wrapper around ``prometheus_client`` so services
consistently record inbound HTTP, backend proxy, and dashboard metrics.

Design notes
- Metrics and labels are predeclared to avoid cardinality explosions
- A single registry is kept per service (can be injected if needed)
"""

from typing import Optional

from prometheus_client import CollectorRegistry, Counter, Histogram, generate_latest


class MetricsCollector:
    """Centralized metrics collection for the services.

    Parameters
    - service_name: Logical name used for scoping/labels if desired
    - registry: Optional custom ``CollectorRegistry`` (e.g. for testing)

    Exposes typed helpers for common events to keep label sets consistent.
    """

    def __init__(self, service_name: str, registry: Optional[CollectorRegistry] = None):
        self.service_name = service_name
        self.registry = registry or CollectorRegistry()

        # Inbound HTTP
        self.request_count = Counter(
            'http_requests_total',
            'Total HTTP requests',
            ['method', 'endpoint', 'status'],
            registry=self.registry
        )

        self.request_duration = Histogram(
            'http_request_duration_seconds',
            'HTTP request duration',
            ['method', 'endpoint'],
            registry=self.registry
        )

        # Outbound calls to the scraping backend
        self.backend_requests = Counter(
            'gfg_backend_requests_total',
            'Total requests forwarded to the backend',
            ['route', 'outcome'],
            registry=self.registry
        )

        self.backend_duration = Histogram(
            'gfg_backend_request_duration_seconds',
            'Backend request duration',
            ['route'],
            registry=self.registry
        )

        self.validation_failures = Counter(
            'gfg_username_validation_failures_total',
            'Usernames rejected before reaching the backend',
            ['route'],
            registry=self.registry
        )

        # Dashboard searches
        self.dashboard_searches = Counter(
            'gfg_dashboard_searches_total',
            'Dashboard searches partitioned by outcome',
            ['outcome'],
            registry=self.registry
        )

    def record_http_request(
        self,
        method: str,
        endpoint: str,
        status: int,
        duration: float
    ) -> None:
        """Record HTTP request metrics.

        duration is expected in seconds to match Prometheus histogram units.
        """
        self.request_count.labels(method=method, endpoint=endpoint, status=status).inc()
        self.request_duration.labels(method=method, endpoint=endpoint).observe(duration)

    def record_backend_request(
        self,
        route: str,
        outcome: str,
        duration: Optional[float] = None
    ) -> None:
        """Record a forwarded backend request.

        ``outcome`` is one of ``ok``, ``image``, ``http_error``, ``invalid_json``
        or ``unreachable``.
        """
        self.backend_requests.labels(route=route, outcome=outcome).inc()
        if duration is not None:
            self.backend_duration.labels(route=route).observe(duration)

    def record_validation_failure(self, route: str) -> None:
        """Record a rejected username."""
        self.validation_failures.labels(route=route).inc()

    def record_dashboard_search(self, outcome: str) -> None:
        """Record a dashboard search (``ok`` or ``error``)."""
        self.dashboard_searches.labels(outcome=outcome).inc()

    def get_metrics(self) -> str:
        """Get metrics in Prometheus exposition format for scraping."""
        return generate_latest(self.registry).decode('utf-8')


# Global metrics collector instance
_metrics_collector: Optional[MetricsCollector] = None


def get_metrics_collector(service_name: str) -> MetricsCollector:
    """Get or create metrics collector for a service.

    Returns a process‑wide singleton to avoid duplicate collectors/labels.
    """
    global _metrics_collector
    if _metrics_collector is None:
        _metrics_collector = MetricsCollector(service_name)
    return _metrics_collector
