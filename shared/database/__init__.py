"""Database access for the host inventory store."""

from .connection import DatabaseManager
from .models import Base, Host

__all__ = ["DatabaseManager", "Base", "Host"]
