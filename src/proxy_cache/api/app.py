import httpx
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from starlette.types import Receive, Scope, Send

from proxy_cache.api.dependencies import get_handler, lifespan
from proxy_cache.config import Settings, get_settings
from proxy_cache.logging_config import configure_logging
from proxy_cache.protocols import KeyValueStore

DIAGNOSTIC_HEADERS = [
    "X-Cache-Hit",
    "X-Cache-Name",
    "X-Cache-Date",
    "X-Cache-TTL",
    "X-Proxy-Status",
    "X-Target-URL",
]


class ProxyEndpoint:
    """ASGI endpoint proxying any method on any path to the ``url`` query parameter.

    Registered without a method list, so non-standard methods are proxied too.
    """

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        request = Request(scope, receive)
        response = await get_handler(request).proxy(request)
        await response(scope, receive, send)


def create_app(
    settings: Settings | None = None,
    store: KeyValueStore | None = None,
    http_client: httpx.AsyncClient | None = None,
) -> FastAPI:
    """Build the proxy application.

    Args:
        settings: Application settings. If None, uses the cached settings.
        store: Key-value store to use instead of the configured backend.
        http_client: Upstream HTTP client to use instead of a default one.

    Returns:
        The FastAPI application
    """
    settings = settings or get_settings()
    configure_logging(settings.log_level)

    app = FastAPI(
        title="Proxy Cache",
        description="HTTP forwarding proxy with a named, TTL-based response cache",
        version="0.1.0",
        lifespan=lifespan,
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )
    app.state.settings = settings
    if store is not None:
        app.state.store = store
    if http_client is not None:
        app.state.http_client = http_client

    app.add_middleware(
        CORSMiddleware,  # type: ignore[arg-type]
        allow_origins=list(settings.cors_allow_origins),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=DIAGNOSTIC_HEADERS,
    )

    app.add_route("/{path:path}", ProxyEndpoint(), methods=None, include_in_schema=False)
    return app


app = create_app()


def main() -> None:
    """Run the proxy with uvicorn."""
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "proxy_cache.api.app:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.api_reload,
    )


if __name__ == "__main__":
    main()
