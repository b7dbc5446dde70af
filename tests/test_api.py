"""
Tests for the proxy HTTP surface.
"""

import json

import httpx
import pytest
from fastapi.testclient import TestClient

from proxy_cache.api.app import create_app
from proxy_cache.repositories import InMemoryKeyValueStore

from .conftest import UpstreamRecorder

TARGET = "https://api.example.com/data"


@pytest.fixture
def client(settings, store, upstream):
    """Create a test client backed by the in-memory store and a recording upstream."""
    app = create_app(settings=settings, store=store, http_client=upstream.client())
    with TestClient(app) as test_client:
        yield test_client


@pytest.mark.parametrize("method", ["GET", "POST", "PUT", "DELETE"])
def test_missing_url(client, upstream, method):
    """Missing url is a 400 regardless of method or cache headers."""
    response = client.request(method, "/", headers={"x-cache-name": "k", "x-cache-ttl": "0"})

    assert response.status_code == 400
    assert response.json() == {"error": "No URL provided"}
    assert upstream.calls == 0


def test_invalid_url(client):
    response = client.get("/", params={"url": "not-a-url"})

    assert response.status_code == 400
    assert "error" in response.json()


def test_invalid_ttl(client, upstream):
    response = client.get("/", params={"url": TARGET}, headers={"x-cache-name": "k", "x-cache-ttl": "soon"})

    assert response.status_code == 400
    assert response.json() == {"error": "Invalid cache TTL: 'soon'"}
    assert upstream.calls == 0


def test_forward_and_cache(client, upstream, store):
    response = client.get("/", params={"url": TARGET}, headers={"x-cache-name": "mydata"})

    assert response.status_code == 200
    assert response.json() == {"ok": True}
    assert response.headers["x-proxy-status"] == "success"
    assert response.headers["x-target-url"] == TARGET
    assert response.headers["x-cache-hit"] == "false"
    assert response.headers["x-cache-name"] == "mydata"
    assert response.headers["x-cache-ttl"] == "3600"
    assert str(upstream.requests[0].url) == TARGET
    assert json.loads(store._entries["mydata"][0])["data"] == {"ok": True}


def test_cache_hit_serves_stored_response(client, upstream):
    client.get("/", params={"url": TARGET}, headers={"x-cache-name": "mydata", "x-cache-ttl": "60"})

    response = client.get("/", params={"url": TARGET}, headers={"x-cache-name": "mydata"})

    assert upstream.calls == 1
    assert response.status_code == 200
    assert response.json() == {"ok": True}
    assert response.headers["x-cache-hit"] == "true"
    assert response.headers["x-cache-name"] == "mydata"
    assert response.headers["x-cache-date"].endswith("Z")
    assert "x-proxy-status" not in response.headers


def test_invalidate(client, upstream, store):
    client.get("/", params={"url": TARGET}, headers={"x-cache-name": "mydata"})

    response = client.get("/", params={"url": TARGET}, headers={"x-cache-name": "mydata", "x-cache-ttl": "0"})

    assert response.status_code == 200
    assert response.json() == {"message": "Cache cleared successfully", "cacheName": "mydata"}
    assert len(store) == 0
    assert upstream.calls == 1


def test_headers_forwarded_without_cache_directives(client, upstream):
    client.get(
        "/any/path",
        params={"url": TARGET},
        headers={
            "Authorization": "Bearer abc",
            "X-Request-Id": "req-1",
            "x-cache-name": "k",
            "x-cache-ttl": "60",
            "X-Cache-Anything": "secret",
        },
    )

    sent = upstream.requests[0]
    assert sent.headers["authorization"] == "Bearer abc"
    assert sent.headers["x-request-id"] == "req-1"
    assert not [name for name in sent.headers if name.lower().startswith("x-cache-")]
    assert sent.headers["host"] == "api.example.com"


def test_post_body_forwarded_verbatim(client, upstream):
    body = b'{"query": "widgets", "limit": 5}'

    client.post("/", params={"url": TARGET}, content=body, headers={"content-type": "application/json"})

    sent = upstream.requests[0]
    assert sent.method == "POST"
    assert sent.content == body
    assert sent.headers["content-type"] == "application/json"


def test_body_without_content_type_is_not_forwarded(client, upstream):
    client.request("PUT", "/", params={"url": TARGET}, content=b"raw bytes")

    assert upstream.requests[0].content == b""


def test_non_standard_method_is_proxied(client, upstream):
    response = client.request("PURGE", "/", params={"url": TARGET})

    assert response.status_code == 200
    assert upstream.requests[0].method == "PURGE"


def test_transport_failure(settings, store):
    def refuse(request):
        raise httpx.ConnectError("Connection refused")

    app = create_app(settings=settings, store=store, http_client=UpstreamRecorder(refuse).client())
    with TestClient(app) as client:
        response = client.get("/", params={"url": TARGET}, headers={"x-cache-name": "k"})

    assert response.status_code == 500
    assert response.json() == {"error": "Proxy error", "message": "Connection refused", "targetUrl": TARGET}
    assert len(store) == 0


def test_upstream_no_content_has_empty_body(settings):
    upstream = UpstreamRecorder(lambda request: httpx.Response(204))
    app = create_app(settings=settings, store=InMemoryKeyValueStore(), http_client=upstream.client())
    with TestClient(app) as client:
        response = client.delete("/", params={"url": TARGET})

    assert response.status_code == 204
    assert response.content == b""
    assert response.headers["x-proxy-status"] == "success"


def test_cors_exposes_diagnostic_headers(client):
    response = client.get("/", params={"url": TARGET}, headers={"Origin": "https://app.example.com"})

    assert response.headers["access-control-allow-origin"] in ("*", "https://app.example.com")
    assert "X-Cache-Hit" in response.headers["access-control-expose-headers"]


def test_chunked_body_forwarded_with_single_framing_header(client, upstream):
    chunks = [b'{"query": ', b'"widgets"}']

    client.post(
        "/",
        params={"url": TARGET},
        content=iter(chunks),
        headers={"content-type": "application/json"},
    )

    sent = upstream.requests[0]
    assert sent.content == b'{"query": "widgets"}'
    assert "transfer-encoding" not in sent.headers
    assert sent.headers["content-length"] == str(len(b'{"query": "widgets"}'))


def test_client_accept_encoding_not_forwarded(client, upstream):
    client.get("/", params={"url": TARGET}, headers={"Accept-Encoding": "br;q=1.0, gzip;q=0.5"})

    sent = upstream.requests[0]
    assert sent.headers.get("accept-encoding") != "br;q=1.0, gzip;q=0.5"


def test_upstream_nan_is_returned_as_text_and_cached_consistently(settings, store):
    upstream = UpstreamRecorder(
        lambda request: httpx.Response(200, content=b'{"v": NaN}', headers={"content-type": "application/json"})
    )
    app = create_app(settings=settings, store=store, http_client=upstream.client())
    with TestClient(app) as client:
        response = client.get("/", params={"url": TARGET}, headers={"x-cache-name": "k"})
        hit = client.get("/", params={"url": TARGET}, headers={"x-cache-name": "k"})

    assert response.status_code == 200
    assert response.json() == '{"v": NaN}'
    assert hit.headers["x-cache-hit"] == "true"
    assert hit.json() == '{"v": NaN}'
