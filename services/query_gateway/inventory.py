"""Agent liveness for the registered host inventory.

Hosts are read from the portal database, narrowed to the agent host class
and checked against the query backend with a single batched "last value"
request. Every failure is recorded on the result and the join carries on
with what it has, so callers always get a (possibly partial) answer.
"""

import json
from typing import Dict, List, Optional, Tuple

import httpx
from pydantic import BaseModel, Field, TypeAdapter, ValidationError
from sqlalchemy import select
import structlog

from shared.database import DatabaseManager, Host
from shared.observability import GatewayMetrics
from .config import GRAPH_LAST_PATH

logger = structlog.get_logger()

AGENT_ALIVE_COUNTER = "agent.alive"


class GraphLastParam(BaseModel):
    """One series to look up on the query backend."""

    endpoint: str
    counter: str


class RRDData(BaseModel):
    timestamp: int
    # NaN is sent as null
    value: Optional[float] = None


class GraphLastResp(BaseModel):
    """Latest datapoint of one series."""

    endpoint: str
    counter: str
    value: Optional[RRDData] = None


class InventoryError(BaseModel):
    stage: str
    message: str


class InventoryResult(BaseModel):
    """Partial data and the errors met while producing it."""

    hostnames: List[str] = Field(default_factory=list)
    versions: Dict[str, str] = Field(default_factory=dict)
    items: List[GraphLastResp] = Field(default_factory=list)
    errors: List[InventoryError] = Field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors

    def add_error(self, stage: str, message: str) -> None:
        self.errors.append(InventoryError(stage=stage, message=message))


_graph_last_adapter = TypeAdapter(List[GraphLastResp])


def is_agent_host(hostname: str) -> bool:
    """Agent hosts carry a hyphen and no domain part, e.g. ``web-01``."""
    return "-" in hostname and "." not in hostname


def build_alive_queries(hostnames: List[str]) -> List[GraphLastParam]:
    return [
        GraphLastParam(endpoint=hostname, counter=AGENT_ALIVE_COUNTER)
        for hostname in hostnames
    ]


class InventoryService:
    """Joins the host table with the agent liveness series."""

    def __init__(
        self,
        database: DatabaseManager,
        client: httpx.AsyncClient,
        query_api_base: str,
        metrics: Optional[GatewayMetrics] = None,
    ):
        self.database = database
        self.client = client
        self.graph_last_url = query_api_base + GRAPH_LAST_PATH
        self.metrics = metrics

    def _record(self, result: InventoryResult, stage: str, error: Exception) -> None:
        message = str(error) or type(error).__name__
        result.add_error(stage, message)
        logger.error("Inventory join step failed", stage=stage, error=message)
        if self.metrics:
            self.metrics.record_inventory_error(stage)

    async def fetch_hosts(self, result: InventoryResult) -> List[Tuple[str, str]]:
        """Read ``(hostname, agent_version)`` pairs ordered by hostname."""
        stmt = select(Host.hostname, Host.agent_version).order_by(Host.hostname.asc())
        try:
            async with self.database.get_async_session() as session:
                rows = (await session.execute(stmt)).all()
        except Exception as e:
            # Store outages of any flavour (driver, pool, DNS) end up here
            self._record(result, "store", e)
            return []
        return [(hostname, agent_version or "") for hostname, agent_version in rows]

    async def agent_alive(self) -> InventoryResult:
        """Run the join. Never raises; inspect ``errors`` on the result."""
        result = InventoryResult()

        for hostname, agent_version in await self.fetch_hosts(result):
            if is_agent_host(hostname):
                result.hostnames.append(hostname)
                result.versions[hostname] = agent_version

        queries = build_alive_queries(result.hostnames)
        if not queries:
            logger.debug("No agent hosts to query")
            return result

        try:
            payload = json.dumps([query.model_dump() for query in queries]).encode("utf-8")
        except (TypeError, ValueError) as e:
            self._record(result, "serialize", e)
            return result

        try:
            response = await self.client.post(
                self.graph_last_url,
                content=payload,
                headers={"Content-Type": "application/json"},
            )
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            self._record(result, "request", e)
            return result

        if response.is_error:
            self._record(
                result,
                "status",
                RuntimeError(f"{self.graph_last_url} returned HTTP {response.status_code}"),
            )

        try:
            result.items = _graph_last_adapter.validate_json(response.content)
        except ValidationError as e:
            self._record(result, "decode", e)

        log = logger.info if result.ok else logger.warning
        log(
            "Inventory join finished",
            hosts=len(result.hostnames),
            items=len(result.items),
            errors=len(result.errors),
        )
        return result
