"""Forwarding engine.

Translates one ProxyRequest into exactly one upstream HTTP call and
normalizes the result. A completed exchange is a success whatever its
status code; only transport failures are errors. Nothing is retried.
"""

import json
import logging

import httpx

from proxy_cache.config import Settings, get_settings
from proxy_cache.entities import ForwardResult, JSONValue, ProxyRequest
from proxy_cache.errors import ForwardingTransportError

logger = logging.getLogger(__name__)

# httpx recomputes framing and connection headers for the outbound request.
# accept-encoding is left to httpx so it only asks for codecs it can decode.
TRANSPORT_MANAGED_HEADERS = frozenset(
    {
        "host",
        "content-length",
        "transfer-encoding",
        "connection",
        "keep-alive",
        "proxy-connection",
        "te",
        "trailer",
        "upgrade",
        "accept-encoding",
    }
)


def _reject_constant(name: str) -> None:
    raise ValueError(f"non-standard JSON constant {name}")


class ForwardingEngine:
    """Builds, sends and normalizes upstream requests.

    Example:
        ```python
        async with httpx.AsyncClient(timeout=30.0) as client:
            engine = ForwardingEngine(client=client)
            result = await engine.forward(proxy_request)
        ```
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        reserved_header_prefix: str = "x-cache-",
    ) -> None:
        """Initialize the forwarding engine.

        Args:
            client: Shared async HTTP client; its timeout bounds every upstream call.
            reserved_header_prefix: Inbound headers starting with this prefix
                are proxy directives and are never forwarded.
        """
        self._client = client
        self._reserved_prefix = reserved_header_prefix.lower()

    @classmethod
    def create(cls, settings: Settings | None = None) -> "ForwardingEngine":
        """Factory method creating the engine and its HTTP client from settings.

        The caller owns the client and must close it (see ``aclose``).
        """
        settings = settings or get_settings()
        client = httpx.AsyncClient(
            timeout=httpx.Timeout(settings.upstream_timeout),
            follow_redirects=settings.upstream_follow_redirects,
        )
        return cls(client=client, reserved_header_prefix=settings.cache_header_prefix)

    def filter_headers(self, headers: httpx.Headers) -> list[tuple[str, str]]:
        """Drop proxy directives and transport-managed headers.

        Repeated headers are kept, in order.
        """
        return [
            (name, value)
            for name, value in headers.multi_items()
            if not name.lower().startswith(self._reserved_prefix)
            and name.lower() not in TRANSPORT_MANAGED_HEADERS
        ]

    def build_request(self, request: ProxyRequest) -> httpx.Request:
        """Build the outbound request: original method, filtered headers, optional body."""
        if not request.target_url:
            raise ValueError("ProxyRequest has no target_url")
        return self._client.build_request(
            method=request.method,
            url=request.target_url,
            headers=self.filter_headers(request.headers),
            content=request.body,
        )

    @staticmethod
    def decode_payload(response: httpx.Response) -> JSONValue:
        """Decode an upstream body as JSON.

        Empty bodies decode to None and non-JSON bodies to their text, so
        the result can always be sent back as JSON. NaN and Infinity count
        as non-JSON.
        """
        if not response.content:
            return None
        try:
            return json.loads(response.content, parse_constant=_reject_constant)
        except ValueError:
            return response.text

    async def forward(self, request: ProxyRequest) -> ForwardResult:
        """Send the request upstream.

        Args:
            request: The inbound proxy request (target_url must be set)

        Returns:
            ForwardResult for any completed exchange, including 4xx/5xx

        Raises:
            ForwardingTransportError: If the exchange did not complete
        """
        outbound = self.build_request(request)
        target_url = str(request.target_url)

        try:
            response = await self._client.send(outbound)
        except httpx.RequestError as e:
            logger.error(
                "Forwarding %s %s failed: %r (headers=%s)",
                outbound.method,
                target_url,
                e,
                sorted(outbound.headers.keys()),
            )
            raise ForwardingTransportError(target_url, str(e) or type(e).__name__) from e

        logger.debug("Forwarded %s %s -> %d", outbound.method, target_url, response.status_code)
        return ForwardResult(
            status_code=response.status_code,
            payload=self.decode_payload(response),
            target_url=target_url,
        )

    async def aclose(self) -> None:
        """Close the underlying HTTP client."""
        await self._client.aclose()
