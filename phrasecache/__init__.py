"""
A PhraseApp API client core with an ETag revalidating response cache.
"""

__version__ = '0.1.0'

from .adapter import CachingAdapter, create, install
from .auth import Credentials
from .client import Client
from .config import CacheConfig
from .store import ContentStore, EntryNotFound, FileStore, MemoryStore, StoreError

__all__ = [
    'CacheConfig',
    'CachingAdapter',
    'Client',
    'ContentStore',
    'Credentials',
    'EntryNotFound',
    'FileStore',
    'MemoryStore',
    'StoreError',
    'create',
    'install',
]
