"""Handler layer for HTTP endpoints.

This layer converts Starlette requests into ProxyRequest entities and
ProxyResponse entities back into HTTP responses. Handlers depend on
services (business logic), not directly on repositories.

Architecture:
    Handler -> Service -> Repository
    (HTTP)  -> (Business) -> (Data Access)
"""

from .proxy_handler import ProxyHandler

__all__ = [
    "ProxyHandler",
]
