"""HTTP handler for proxied requests.

Reads the proxy directives (``url`` query parameter, ``x-cache-name`` and
``x-cache-ttl`` headers), buffers the body once, and renders the service
result as a JSON response.
"""

import logging

import httpx
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from proxy_cache.entities import ProxyRequest, ProxyResponse
from proxy_cache.errors import ClientInputError
from proxy_cache.services import ProxyService
from proxy_cache.services.proxy_service import client_error_response

logger = logging.getLogger(__name__)

# Statuses that must not carry a body
BODYLESS_STATUSES = frozenset({204, 304})


class ProxyHandler:
    """HTTP handler for the catch-all proxy route.

    Example:
        ```python
        handler = ProxyHandler(proxy_service=service)

        async def proxy(request: Request) -> Response:
            return await handler.proxy(request)
        ```
    """

    def __init__(self, proxy_service: ProxyService, header_prefix: str = "x-cache-") -> None:
        """Initialize the proxy handler.

        Args:
            proxy_service: The proxy service for business logic (required).
            header_prefix: Prefix of the proxy control headers.
        """
        self._service = proxy_service
        self._name_header = f"{header_prefix}name"
        self._ttl_header = f"{header_prefix}ttl"

    async def to_proxy_request(self, request: Request) -> ProxyRequest:
        """Build a ProxyRequest from the inbound HTTP request.

        Raises:
            ClientInputError: If the target URL or the TTL header is unusable
        """
        target_url = self._service.validate_target_url(request.query_params.get("url"))
        requested_ttl = self._service.cache.resolve_ttl(request.headers.get(self._ttl_header))

        body: bytes | None = None
        if request.method != "GET" and request.headers.get("content-type"):
            # Starlette buffers the stream, the body is only consumed here
            body = await request.body()

        return ProxyRequest(
            target_url=target_url,
            method=request.method,
            requested_ttl=requested_ttl,
            cache_key=request.headers.get(self._name_header) or None,
            headers=httpx.Headers(request.headers.raw),
            body=body,
        )

    @staticmethod
    def render(response: ProxyResponse) -> Response:
        """Convert a ProxyResponse to a Starlette response."""
        if response.status_code < 200 or response.status_code in BODYLESS_STATUSES:
            return Response(status_code=response.status_code, headers=response.headers)
        return JSONResponse(
            content=response.body,
            status_code=response.status_code,
            headers=response.headers,
        )

    async def proxy(self, request: Request) -> Response:
        """Handle any method on any path."""
        try:
            proxy_request = await self.to_proxy_request(request)
        except ClientInputError as e:
            return self.render(client_error_response(e))

        result = await self._service.handle(proxy_request)
        logger.info(
            "%s %s -> %s (%d)",
            proxy_request.method,
            proxy_request.target_url,
            result.outcome.value,
            result.status_code,
        )
        return self.render(result)
