"""Proxy error taxonomy.

Only client input problems and upstream transport failures are errors from
the proxy's point of view. An upstream response with a 4xx/5xx status is a
completed exchange and is passed through untouched.
"""


class ProxyError(Exception):
    """Base class for errors raised by the proxy."""

    status_code: int = 500


class ClientInputError(ProxyError):
    """The inbound request is unusable (missing or invalid url, bad ttl)."""

    status_code = 400

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ForwardingTransportError(ProxyError):
    """The upstream exchange did not complete (connect, DNS, timeout)."""

    status_code = 500

    def __init__(self, target_url: str, message: str) -> None:
        super().__init__(message)
        self.target_url = target_url
        self.message = message


class CacheReadCorruption(ProxyError):
    """A stored record could not be decoded into a cache entry."""

    def __init__(self, key: str, reason: str) -> None:
        super().__init__(f"Corrupt cache record for {key!r}: {reason}")
        self.key = key
        self.reason = reason
