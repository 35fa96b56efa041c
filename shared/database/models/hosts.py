"""
Host Inventory Models

Hosts registered by the monitoring agents. The table is populated by the
portal; the gateway never writes to it.
"""

from sqlalchemy import Column, Integer, String

from .base import Base


class Host(Base):
    """A monitored host and the version of the agent running on it."""

    __tablename__ = "host"

    id = Column(Integer, primary_key=True, autoincrement=True)
    hostname = Column(String(255), nullable=False, unique=True, index=True)
    agent_version = Column(String(16), nullable=False, default="")

    def __repr__(self) -> str:
        return f"<Host(hostname='{self.hostname}', agent_version='{self.agent_version}')>"
