"""
Defines the types persisted by the response cache.

These types are as simple as possible so that they can be serialized without
any knowledge of `requests` or urllib3.
"""

from dataclasses import dataclass, field
from typing import List, Tuple


@dataclass
class CacheRecord:
    """
    A complete snapshot of a cachable response.

    Records are never patched. Storing a record for a key replaces whatever
    was stored for it before.
    """

    key: str
    """
    The cache key derived from the request URL.
    """

    url: str
    """
    The URL of the request the response was received for.
    """

    etag: str
    """
    The value of the response's ETag header. Never empty for a stored record.
    """

    status: int
    """
    The status code of the response. E.g., 200.
    """

    reason: str
    """
    The reason string, which relates to the status code.
    """

    version: int = 11
    """
    The HTTP version, encoded as urllib3 does it. E.g., 11 for HTTP/1.1.
    """

    headers: List[Tuple[str, str]] = field(default_factory=list)
    """
    The response headers in the order received. A name may occur several times.
    """

    content_length: int = -1
    """
    The value of the Content-Length header, or -1 if it was not sent.
    """

    transfer_encoding: List[str] = field(default_factory=list)
    """
    The transfer codings applied to the response, outermost last.
    """

    body: bytes = b''
    """
    The fully read response payload.
    """
