"""
Database Models

SQLAlchemy models for the tables the gateway reads.
"""

from .base import Base
from .hosts import Host

__all__ = [
    "Base",
    "Host",
]
