from io import BytesIO
import logging
from typing import List, Optional, Tuple

import requests
from requests.adapters import BaseAdapter, HTTPAdapter
from requests.structures import CaseInsensitiveDict
from requests.utils import get_encoding_from_headers
import urllib3

from .codec import CorruptRecord, decode, encode
from .config import CacheConfig
from .eviction import SizeCeiling
from .key import is_cachable_method, request_key
from .model import CacheRecord
from .store import ContentStore, EntryNotFound, FileStore, StoreError
from .util import header_pairs, merge_headers


logger = logging.getLogger(__name__)

NOT_MODIFIED = 304
FRAMING_HEADERS = frozenset({'content-encoding', 'content-length', 'transfer-encoding'})


class CachingAdapter(BaseAdapter):
    """
    A transport adapter that revalidates cached GET responses with their ETags.

    The adapter wraps another adapter and sends every request through it. Cached responses are never served without
    asking the origin first; the cache only saves the origin from resending bodies that have not changed. Failures of
    the cache degrade to sending the request uncached. Failures of the wrapped adapter are raised unchanged.
    """

    def __init__(self, store: ContentStore, inner: Optional[BaseAdapter] = None,
                 ceiling: Optional[SizeCeiling] = None) -> None:
        super().__init__()
        self.store = store
        self.inner = inner if inner is not None else HTTPAdapter()
        self.ceiling = ceiling if ceiling is not None else SizeCeiling(CacheConfig().resolved_max_size())

    def send(self, request: requests.PreparedRequest, **kw) -> requests.Response:
        """
        Send a request, revalidating a cached response for it if there is one.

        Steps:
        1. Anything but a GET goes straight to the wrapped adapter.
        2. Look up a record for the request URL. If there is one, ask for it conditionally with `If-None-Match`.
        3. On `304 Not Modified`, answer with the cached response.
        4. On any other non-2xx status, answer with the response as is.
        5. On a 2xx status, read the whole body and, if the response has an ETag, store it.
        """
        if not is_cachable_method(request.method):
            logger.debug('Bypassing the cache for a {} request.'.format(request.method))
            return self.inner.send(request, **kw)

        key = request_key(request)
        record = self._lookup(key)
        if record is not None:
            logger.info('Revalidating cached response for {} with ETag {}.'.format(request.url, record.etag))
            # Leave the caller's request untouched.
            request = request.copy()
            request.headers['If-None-Match'] = record.etag
        else:
            logger.info('Requesting {} without an ETag.'.format(request.url))

        response = self.inner.send(request, **kw)

        if response.status_code == NOT_MODIFIED:
            if record is None:
                # The caller asked conditionally itself, or the entry disappeared. Either way there is nothing to
                # substitute, so the caller gets what the origin said.
                logger.warning('Received 304 Not Modified for {} without a cached response.'.format(request.url))
                return response
            logger.info('Not modified. Returning the cached response for {}.'.format(request.url))
            return self._build_cached_response(request, response, record)

        if not 200 <= response.status_code < 300:
            logger.debug('Not caching status {} for {}.'.format(response.status_code, request.url))
            return response

        headers = header_pairs(response)
        version = getattr(response.raw, 'version', 11)
        body = self._drain(response)

        etag = response.headers.get('ETag', '')
        if not etag:
            logger.info('Response for {} has no ETag. Not caching it.'.format(request.url))
            return response

        self._save(CacheRecord(
            key=key,
            url=request.url,
            etag=etag,
            status=response.status_code,
            reason=response.reason or '',
            version=version if isinstance(version, int) else 11,
            headers=headers,
            content_length=_content_length(response.headers),
            transfer_encoding=_transfer_encoding(response.headers),
            body=body,
        ))
        return response

    def close(self) -> None:
        self.inner.close()

    def _lookup(self, key: str) -> Optional[CacheRecord]:
        try:
            record = decode(self.store.get(key))
        except EntryNotFound:
            logger.debug('No cache entry for key {}.'.format(key))
            return None
        except CorruptRecord as e:
            # A fresh 2xx response will overwrite it.
            logger.warning('Ignoring cache entry {}. {}'.format(key, e))
            return None
        except StoreError:
            logger.warning('Could not read cache entry {}. Continuing without it.'.format(key), exc_info=True)
            return None
        except Exception:
            logger.warning('Unexpected error loading cache entry {}. Continuing without it.'.format(key),
                           exc_info=True)
            return None

        if record.key != key:
            logger.warning('Ignoring cache entry {}. It was written for key {}.'.format(key, record.key))
            return None
        if not record.etag:
            logger.warning('Ignoring cache entry {}. It has no ETag.'.format(key))
            return None
        logger.debug('Found ETag {} for key {}.'.format(record.etag, key))
        return record

    def _save(self, record: CacheRecord) -> None:
        try:
            if self.ceiling.enforce(self.store):
                logger.info('Cache was emptied before storing {}.'.format(record.url))
            self.store.put(record.key, encode(record))
            logger.info('Stored response for {} with ETag {}.'.format(record.url, record.etag))
        except Exception:
            logger.warning('Could not store the response for {}. Continuing without caching it.'.format(record.url),
                           exc_info=True)

    @staticmethod
    def _drain(response: requests.Response) -> bytes:
        """
        Read the whole body and make it readable again for the caller.

        Errors while reading are network errors and are raised.
        """
        body = response.content
        # The body is fully read, so this hands the connection back to its pool.
        response.close()
        response.raw = BytesIO(body)
        return body

    def _build_cached_response(self, request: requests.PreparedRequest, live: requests.Response,
                               record: CacheRecord) -> requests.Response:
        headers = _payload_headers(record)
        result = requests.Response()
        result.status_code = record.status
        result.reason = record.reason
        result.headers = merge_headers(headers)
        result.encoding = get_encoding_from_headers(result.headers)
        result.raw = urllib3.HTTPResponse(
            body=BytesIO(record.body),
            headers=headers,
            status=record.status,
            version=record.version,
            reason=record.reason,
            preload_content=False,
            decode_content=False,
        )
        result.url = live.url or request.url
        result.request = request
        result.elapsed = live.elapsed
        result.connection = getattr(live, 'connection', self)
        live.close()
        return result


def _payload_headers(record: CacheRecord) -> List[Tuple[str, str]]:
    """
    The stored headers, adjusted to describe the stored body.

    Bodies are stored decoded and unframed, so the original encoding and framing headers no longer apply to them.
    """
    pairs = [(name, value) for name, value in record.headers if name.lower() not in FRAMING_HEADERS]
    pairs.append(('Content-Length', str(len(record.body))))
    return pairs


def _content_length(headers: CaseInsensitiveDict) -> int:
    try:
        return int(headers.get('Content-Length', -1))
    except ValueError:
        return -1


def _transfer_encoding(headers: CaseInsensitiveDict) -> List[str]:
    value = headers.get('Transfer-Encoding', '')
    return [coding.strip() for coding in value.split(',') if coding.strip()]


def create(config: Optional[CacheConfig] = None, inner: Optional[BaseAdapter] = None) -> CachingAdapter:
    config = config if config is not None else CacheConfig()
    store = FileStore(config.resolved_directory(), config.directory_levels)
    return CachingAdapter(store, inner, SizeCeiling(config.resolved_max_size()))


def install(session: requests.Session, config: Optional[CacheConfig] = None,
            inner: Optional[BaseAdapter] = None) -> CachingAdapter:
    """
    Route all of `session`'s HTTP and HTTPS traffic through one caching adapter.
    """
    adapter = create(config, inner)
    session.mount('http://', adapter)
    session.mount('https://', adapter)
    return adapter
