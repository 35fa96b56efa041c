"""
Prometheus metrics for the query gateway.
"""

from typing import Optional

from prometheus_client import (
    Counter, Histogram, Info, CollectorRegistry, generate_latest, CONTENT_TYPE_LATEST,
)


class GatewayMetrics:
    """Metrics recorded by the gateway.

    Each instance owns its registry so several applications can live in one
    process (tests build a fresh app per case).
    """

    content_type = CONTENT_TYPE_LATEST

    def __init__(self, service_name: str, namespace: str = "gateway",
                 registry: Optional[CollectorRegistry] = None):
        self.service_name = service_name
        self.namespace = namespace
        self.registry = registry or CollectorRegistry()

        self.forwarded_requests_total = Counter(
            "forwarded_requests_total",
            "Requests relayed to a backend, by route and backend status",
            ["route", "status_code"],
            namespace=namespace,
            registry=self.registry,
        )
        self.gateway_errors_total = Counter(
            "errors_total",
            "Requests that could not reach their backend",
            ["route", "kind"],
            namespace=namespace,
            registry=self.registry,
        )
        self.upstream_duration = Histogram(
            "upstream_request_duration_seconds",
            "Time spent waiting on the backend",
            ["route"],
            namespace=namespace,
            buckets=[0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0],
            registry=self.registry,
        )
        self.inventory_errors_total = Counter(
            "inventory_errors_total",
            "Errors recorded while joining host inventory with liveness data",
            ["stage"],
            namespace=namespace,
            registry=self.registry,
        )

        self.app_info = Info(
            "app",
            "Application info",
            namespace=namespace,
            registry=self.registry,
        )
        self.app_info.info({"service": service_name})

    def record_forward(self, route: str, status_code: int, duration: float) -> None:
        self.forwarded_requests_total.labels(route=route, status_code=str(status_code)).inc()
        self.upstream_duration.labels(route=route).observe(duration)

    def record_gateway_error(self, route: str, kind: str, duration: float) -> None:
        self.gateway_errors_total.labels(route=route, kind=kind).inc()
        self.upstream_duration.labels(route=route).observe(duration)

    def record_inventory_error(self, stage: str) -> None:
        self.inventory_errors_total.labels(stage=stage).inc()

    def get_metrics(self) -> bytes:
        """Render the registry in Prometheus text format."""
        return generate_latest(self.registry)
