"""
Shared components for the query gateway.

This package contains the configuration, database and observability
layers used by the gateway service.
"""

__version__ = "0.1.0"
