import hashlib
from typing import Optional

import requests


CACHABLE_METHODS = frozenset({'GET'})


def is_cachable_method(method: Optional[str]) -> bool:
    # An unset method means GET.
    return (method or 'GET').upper() in CACHABLE_METHODS


def cache_key(url: str) -> str:
    """
    Derive the storage key for a URL exactly as it is sent on the wire.
    """
    return hashlib.md5(url.encode('utf-8'), usedforsecurity=False).hexdigest()


def request_key(request: requests.PreparedRequest) -> str:
    return cache_key(request.url)
