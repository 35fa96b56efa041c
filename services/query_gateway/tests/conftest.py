"""Test configuration and fixtures for the query gateway."""

from pathlib import Path
from typing import Callable

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session

from shared.config import Settings
from shared.database import Base, Host
from services.query_gateway.main import create_app
from gateway_fakes import DASHBOARD_BASE, QUERY_BASE, RecordingBackend


@pytest.fixture
def db_path(tmp_path) -> Path:
    return tmp_path / "portal.db"


@pytest.fixture
def settings(db_path) -> Settings:
    """Test settings pointing at fake backends and a throwaway SQLite store."""
    return Settings(
        _env_file=None,
        query_api_base=QUERY_BASE,
        dashboard_api_base=DASHBOARD_BASE,
        db_url=f"sqlite+aiosqlite:///{db_path}",
        proxy_timeout=5.0,
        environment="test",
        json_logging=False,
    )


@pytest.fixture
def seed_hosts(db_path) -> Callable:
    """Create the host table and return a function that inserts rows into it."""
    engine = create_engine(f"sqlite:///{db_path}")
    Base.metadata.create_all(engine)

    def _seed(*hosts):
        with Session(engine) as session:
            session.add_all(
                Host(hostname=hostname, agent_version=version)
                for hostname, version in hosts
            )
            session.commit()

    yield _seed
    engine.dispose()


@pytest.fixture
def backend() -> RecordingBackend:
    return RecordingBackend()


@pytest.fixture
def client(settings, backend):
    """Test client running the full app lifespan against the fake backends."""
    app = create_app(settings, transport=backend.transport)
    with TestClient(app) as test_client:
        yield test_client
