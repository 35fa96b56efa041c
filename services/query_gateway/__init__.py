"""
Query Gateway service.

Forwards query and dashboard API calls to their backend services and
reports agent liveness for the registered host inventory.
"""

__version__ = "0.1.0"
