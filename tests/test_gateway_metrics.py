"""Tests for gateway Prometheus metrics."""

from prometheus_client import CollectorRegistry

from shared.observability import GatewayMetrics


class TestGatewayMetrics:
    """Test cases for metric recording."""

    def test_forward_recorded(self):
        metrics = GatewayMetrics("query-gateway")

        metrics.record_forward("/api/info", 200, 0.02)
        metrics.record_forward("/api/info", 200, 0.03)
        metrics.record_forward("/api/info", 500, 0.01)

        registry = metrics.registry
        assert registry.get_sample_value(
            "gateway_forwarded_requests_total", {"route": "/api/info", "status_code": "200"}
        ) == 2.0
        assert registry.get_sample_value(
            "gateway_forwarded_requests_total", {"route": "/api/info", "status_code": "500"}
        ) == 1.0
        assert registry.get_sample_value(
            "gateway_upstream_request_duration_seconds_count", {"route": "/api/info"}
        ) == 3.0

    def test_gateway_error_recorded(self):
        metrics = GatewayMetrics("query-gateway")

        metrics.record_gateway_error("/api/chart", "timeout", 5.0)

        assert metrics.registry.get_sample_value(
            "gateway_errors_total", {"route": "/api/chart", "kind": "timeout"}
        ) == 1.0

    def test_inventory_error_recorded(self):
        metrics = GatewayMetrics("query-gateway")

        metrics.record_inventory_error("decode")

        assert metrics.registry.get_sample_value(
            "gateway_inventory_errors_total", {"stage": "decode"}
        ) == 1.0

    def test_registries_independent(self):
        first = GatewayMetrics("query-gateway")
        second = GatewayMetrics("query-gateway")

        first.record_inventory_error("store")

        assert second.registry.get_sample_value(
            "gateway_inventory_errors_total", {"stage": "store"}
        ) is None

    def test_custom_registry_and_namespace(self):
        registry = CollectorRegistry()
        metrics = GatewayMetrics("query-gateway", namespace="portal", registry=registry)

        metrics.record_inventory_error("store")

        assert metrics.registry is registry
        assert registry.get_sample_value(
            "portal_inventory_errors_total", {"stage": "store"}
        ) == 1.0

    def test_exposition(self):
        metrics = GatewayMetrics("query-gateway")
        metrics.record_forward("/api/endpoints", 200, 0.1)

        output = metrics.get_metrics().decode()

        assert 'gateway_app_info{service="query-gateway"} 1.0' in output
        assert "gateway_forwarded_requests_total" in output
        assert metrics.content_type.startswith("text/plain")
