#!/usr/bin/env python3
"""
Demo script for the proxy cache.

Runs the real application in-process with the in-memory store and a fake
upstream, then walks through miss, hit, invalidation and a transport
failure. No Redis or network access needed.
"""

import asyncio
import itertools

import httpx

from proxy_cache.api.app import create_app
from proxy_cache.config import Settings
from proxy_cache.repositories import InMemoryKeyValueStore

TARGET = "https://api.example.com/data"


def print_section(title: str) -> None:
    """Print a section header."""
    print("\n" + "=" * 70)
    print(f"  {title}")
    print("=" * 70)


def print_response(response: httpx.Response) -> None:
    print(f"  status: {response.status_code}")
    for name in ("x-cache-hit", "x-cache-name", "x-cache-date", "x-cache-ttl", "x-proxy-status"):
        if name in response.headers:
            print(f"  {name}: {response.headers[name]}")
    print(f"  body: {response.json() if response.content else None}")


def fake_upstream() -> httpx.AsyncClient:
    counter = itertools.count(1)

    def respond(request: httpx.Request) -> httpx.Response:
        if request.url.host == "down.example.com":
            raise httpx.ConnectError("Name or service not known")
        return httpx.Response(200, json={"fetch": next(counter), "path": request.url.path})

    return httpx.AsyncClient(transport=httpx.MockTransport(respond))


async def run_demo() -> None:
    settings = Settings(cache_backend="memory", log_level="WARNING")
    app = create_app(settings=settings, store=InMemoryKeyValueStore(), http_client=fake_upstream())

    async with app.router.lifespan_context(app):
        transport = httpx.ASGITransport(app=app)
        async with httpx.AsyncClient(transport=transport, base_url="http://proxy") as client:
            cache_headers = {"x-cache-name": "mydata", "x-cache-ttl": "60"}

            print_section("First call: cache miss, forwarded and stored")
            print_response(await client.get("/", params={"url": TARGET}, headers=cache_headers))

            print_section("Second call: cache hit, upstream not called")
            print_response(await client.get("/", params={"url": TARGET}, headers=cache_headers))

            print_section("ttl=0: invalidate")
            print_response(
                await client.get("/", params={"url": TARGET}, headers={"x-cache-name": "mydata", "x-cache-ttl": "0"})
            )

            print_section("Third call: miss again after invalidation")
            print_response(await client.get("/", params={"url": TARGET}, headers=cache_headers))

            print_section("Transport failure")
            print_response(
                await client.get("/", params={"url": "https://down.example.com/"}, headers={"x-cache-name": "down"})
            )


def main() -> None:
    """Run the demo."""
    print("\n🚀 Proxy Cache Demo")
    asyncio.run(run_demo())
    print("\n✅ Demo completed successfully!")


if __name__ == "__main__":
    main()
