"""Forward result domain entity."""

from dataclasses import dataclass

from .cache_entry import JSONValue


@dataclass(frozen=True)
class ForwardResult:
    """A completed upstream exchange, whatever its status code.

    Attributes:
        status_code: Upstream HTTP status
        payload: Decoded upstream body
        target_url: The URL the request was sent to
    """

    status_code: int
    payload: JSONValue
    target_url: str
