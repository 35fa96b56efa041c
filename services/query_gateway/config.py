"""Route table for the query gateway."""

from enum import Enum
from typing import Dict, List, Optional
from pydantic import BaseModel, Field

from shared.config import Settings


class ForwardMode(str, Enum):
    """How the inbound body is carried to the backend."""

    GET = "get"
    JSON = "json"
    FORM = "form"


class Backend(str, Enum):
    """Backend services the gateway can forward to."""

    QUERY = "query"
    DASHBOARD = "dashboard"


class RouteConfig(BaseModel):
    """Configuration for a route."""

    path: str
    backend: Backend
    mode: ForwardMode
    methods: List[str] = ["GET"]
    # None forwards the original request URI (path and query) unchanged
    target_path: Optional[str] = None

    def build_target_url(self, base_url: str, request_uri: str) -> str:
        """Join the backend base URL with the fixed suffix or the request URI."""
        if self.target_path is None:
            return base_url + request_uri
        return base_url + self.target_path


DEFAULT_ROUTES: List[RouteConfig] = [
    RouteConfig(
        path="/api/info",
        backend=Backend.QUERY,
        mode=ForwardMode.JSON,
        methods=["POST"],
        target_path="/graph/info",
    ),
    RouteConfig(
        path="/api/history",
        backend=Backend.QUERY,
        mode=ForwardMode.JSON,
        methods=["POST"],
        target_path="/graph/history",
    ),
    RouteConfig(
        path="/api/endpoints",
        backend=Backend.DASHBOARD,
        mode=ForwardMode.GET,
        methods=["GET"],
    ),
    RouteConfig(
        path="/api/counters",
        backend=Backend.DASHBOARD,
        mode=ForwardMode.FORM,
        methods=["POST"],
        target_path="/api/counters",
    ),
    RouteConfig(
        path="/api/chart",
        backend=Backend.DASHBOARD,
        mode=ForwardMode.FORM,
        methods=["POST"],
        target_path="/chart",
    ),
]

# Path of the liveness query on the query backend, used by the inventory join
GRAPH_LAST_PATH = "/graph/last"


class GatewayConfig(BaseModel):
    """Main gateway configuration."""

    backends: Dict[Backend, str]
    routes: List[RouteConfig] = Field(default_factory=lambda: list(DEFAULT_ROUTES))
    request_timeout: float = 30.0

    def base_url(self, backend: Backend) -> str:
        return self.backends[backend]


def get_gateway_config(settings: Settings) -> GatewayConfig:
    """Build the gateway configuration from settings."""
    return GatewayConfig(
        backends={
            Backend.QUERY: settings.query_api_base,
            Backend.DASHBOARD: settings.dashboard_api_base,
        },
        request_timeout=settings.proxy_timeout,
    )
