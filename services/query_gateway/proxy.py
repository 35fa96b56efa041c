"""Proxy functionality for the query gateway."""

import time
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

import httpx
from fastapi import Request, Response, status
from fastapi.responses import JSONResponse
import structlog

from shared.observability import GatewayMetrics
from .config import ForwardMode, GatewayConfig, RouteConfig

logger = structlog.get_logger()

# Every relayed response carries this type, whatever the backend declared
JSON_CONTENT_TYPE = "application/json; charset=UTF-8"

MODE_CONTENT_TYPES = {
    ForwardMode.JSON: "application/json",
    ForwardMode.FORM: "application/x-www-form-urlencoded",
}

# Hop-by-hop headers that should NOT be forwarded (RFC 2616)
HOP_BY_HOP_HEADERS = {
    "connection",
    "keep-alive",
    "proxy-authenticate",
    "proxy-authorization",
    "te",
    "trailers",
    "transfer-encoding",
    "upgrade",
}

# Recomputed for the outbound request
SKIPPED_REQUEST_HEADERS = HOP_BY_HOP_HEADERS | {
    "host",
    "content-length",
    "content-type",
    "x-forwarded-for",
    "x-forwarded-proto",
    "x-forwarded-host",
    "x-request-id",
}


@dataclass
class ForwardRequest:
    """An outbound request, built once per inbound request."""

    method: str
    url: str
    headers: httpx.Headers = field(default_factory=httpx.Headers)
    body: Optional[bytes] = None


@dataclass
class GatewayError:
    """Why a backend could not be reached."""

    kind: str
    message: str
    target: str

    @property
    def status_code(self) -> int:
        if self.kind == "timeout":
            return status.HTTP_504_GATEWAY_TIMEOUT
        return status.HTTP_502_BAD_GATEWAY

    def to_dict(self) -> Dict[str, Any]:
        return {
            "error": "Gateway Timeout" if self.kind == "timeout" else "Bad Gateway",
            "message": self.message,
            "kind": self.kind,
            "target": self.target,
        }


@dataclass
class ForwardResult:
    """Outcome of a forwarded request: a backend response or an error."""

    status_code: int = 0
    content: bytes = b""
    error: Optional[GatewayError] = None
    duration: float = 0.0

    @property
    def ok(self) -> bool:
        return self.error is None


def get_request_uri(request: Request) -> str:
    """Return the path and query string exactly as the client sent them."""
    raw_path = request.scope.get("raw_path")
    path = raw_path.decode("latin-1") if raw_path else request.url.path

    query_string = request.scope.get("query_string", b"")
    if query_string:
        return f"{path}?{query_string.decode('latin-1')}"
    return path


def prepare_headers(request: Request, route: RouteConfig) -> httpx.Headers:
    """
    Prepare headers for forwarding to the backend.
    Inbound values are carried as raw bytes; hop-by-hop and recomputed
    headers are dropped and proxy headers are added.
    """
    raw = [
        (name, value)
        for name, value in request.headers.raw
        if name.decode("latin-1").lower() not in SKIPPED_REQUEST_HEADERS
    ]

    content_type = MODE_CONTENT_TYPES.get(route.mode)
    if content_type:
        raw.append((b"content-type", content_type.encode("ascii")))

    # Add forwarded headers
    client_ip = request.client.host if request.client else "unknown"
    existing_xff = request.headers.get("x-forwarded-for", "")
    forwarded_for = f"{existing_xff}, {client_ip}".strip(", ")
    raw.append((b"x-forwarded-for", forwarded_for.encode("latin-1")))
    raw.append((b"x-forwarded-proto", request.url.scheme.encode("latin-1")))
    raw.append((b"x-forwarded-host", request.headers.get("host", "").encode("latin-1")))

    request_id = getattr(request.state, "request_id", None) or request.headers.get("x-request-id")
    if request_id:
        raw.append((b"x-request-id", request_id.encode("latin-1")))

    return httpx.Headers(raw)


async def build_forward_request(
    request: Request,
    route: RouteConfig,
    config: GatewayConfig,
) -> ForwardRequest:
    """Translate an inbound request into the outbound one for ``route``."""
    target_url = route.build_target_url(
        config.base_url(route.backend),
        get_request_uri(request),
    )
    headers = prepare_headers(request, route)

    if route.mode is ForwardMode.GET:
        return ForwardRequest(method="GET", url=target_url, headers=headers)

    # JSON and form bodies are relayed byte-for-byte
    body = await request.body()
    return ForwardRequest(method="POST", url=target_url, headers=headers, body=body)


def build_response(result: ForwardResult) -> Response:
    """Create the caller's response from a forward result."""
    if result.error is not None:
        return JSONResponse(
            status_code=result.error.status_code,
            content=result.error.to_dict(),
            media_type=JSON_CONTENT_TYPE,
        )

    return Response(
        content=result.content,
        status_code=result.status_code,
        media_type=JSON_CONTENT_TYPE,
    )


class ProxyClient:
    """HTTP client for proxying requests."""

    def __init__(
        self,
        timeout: float,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.client = httpx.AsyncClient(
            timeout=httpx.Timeout(timeout),
            transport=transport,
            follow_redirects=False,
        )

    async def send(self, forward_request: ForwardRequest) -> ForwardResult:
        """Issue one outbound request. Transport failures become errors, not exceptions."""
        start = time.perf_counter()
        target = forward_request.url

        try:
            response = await self.client.request(
                method=forward_request.method,
                url=target,
                headers=forward_request.headers,
                content=forward_request.body,
            )
        except httpx.TimeoutException as e:
            error = GatewayError("timeout", f"Backend timed out: {e}", target)
        except httpx.ConnectError as e:
            error = GatewayError("connect_error", f"Cannot connect to backend: {e}", target)
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            error = GatewayError("transport_error", f"Backend request failed: {e}", target)
        else:
            return ForwardResult(
                status_code=response.status_code,
                content=response.content,
                duration=time.perf_counter() - start,
            )

        return ForwardResult(error=error, duration=time.perf_counter() - start)

    async def close(self) -> None:
        """Close the HTTP client."""
        await self.client.aclose()


class GatewayProxy:
    """Main proxy class for the gateway."""

    def __init__(
        self,
        config: GatewayConfig,
        proxy_client: ProxyClient,
        metrics: Optional[GatewayMetrics] = None,
    ):
        self.config = config
        self.proxy_client = proxy_client
        self.metrics = metrics

    async def proxy_request(self, request: Request, route: RouteConfig) -> Response:
        """Proxy a request to the backend ``route`` points at.

        Path and method matching happen in the application router, one
        registered endpoint per route.
        """
        forward_request = await build_forward_request(request, route, self.config)
        logger.debug(
            "Forwarding request",
            route=route.path,
            method=forward_request.method,
            target=forward_request.url,
        )

        result = await self.proxy_client.send(forward_request)

        if not result.ok:
            logger.error(
                "Backend request failed",
                route=route.path,
                target=result.error.target,
                kind=result.error.kind,
                error=result.error.message,
            )
            if self.metrics:
                self.metrics.record_gateway_error(route.path, result.error.kind, result.duration)
        else:
            logger.info(
                "Request forwarded",
                route=route.path,
                target=forward_request.url,
                status_code=result.status_code,
                duration_ms=round(result.duration * 1000, 2),
            )
            if self.metrics:
                self.metrics.record_forward(route.path, result.status_code, result.duration)

        return build_response(result)

    async def close(self) -> None:
        """Close the proxy."""
        await self.proxy_client.close()
