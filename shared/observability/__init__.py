"""
Observability package for the query gateway.

Provides structured logging and Prometheus metrics.
"""

from .logging import setup_logging, set_request_id, reset_request_id
from .metrics import GatewayMetrics

__all__ = [
    "setup_logging",
    "set_request_id",
    "reset_request_id",
    "GatewayMetrics",
]
