import logging
from typing import Any, Mapping, Optional

import requests

from . import __version__
from .adapter import CachingAdapter, install
from .auth import Credentials, TokenAuth, resolve_credentials
from .config import CacheConfig
from .errors import handle_response_status


logger = logging.getLogger(__name__)

REDACTED_HEADERS = frozenset({'authorization', 'x-phraseapp-otp'})


def user_agent() -> str:
    return 'PhraseApp python ({})'.format(__version__)


class Client:
    """
    The core of the API client. Resource specific methods are built on `request()` and `request_paginated()`.

    Everything a client needs is passed to it, so differently configured clients can be used side by side.
    """

    def __init__(self, credentials: Credentials, defaults: Optional[Credentials] = None, debug: bool = False,
                 cache: Optional[CacheConfig] = None) -> None:
        self.credentials = resolve_credentials(credentials, defaults)
        self.debug = debug
        self.session = requests.Session()
        self.session.auth = TokenAuth(self.credentials, user_agent())
        self.cache_adapter: Optional[CachingAdapter] = None
        if cache is not None:
            self.enable_caching(cache)

    def enable_caching(self, config: CacheConfig) -> CachingAdapter:
        logger.info('Caching responses in {}'.format(config.resolved_directory()))
        self.cache_adapter = install(self.session, config)
        return self.cache_adapter

    def url(self, path: str) -> str:
        return self.credentials.host + path

    def request(self, method: str, path: str, params: Optional[Mapping[str, Any]] = None, json: Any = None,
                data: Any = None, files: Any = None, expected_status: int = 200) -> requests.Response:
        """
        Send a request to the API and check its status.

        @throws APIError
          If the response does not have `expected_status`. The response is closed first.
        @throws requests.RequestException
          If the request could not be sent.
        """
        request = requests.Request(method, self.url(path), params=params, json=json, data=data, files=files)
        prepared = self.session.prepare_request(request)
        if self.debug:
            self._log_request(prepared)

        settings = self.session.merge_environment_settings(prepared.url, {}, None, None, None)
        response = self.session.send(prepared, **settings)
        if self.debug:
            logger.debug('Response HTTP Status Code: {} {}'.format(response.status_code, response.reason))

        try:
            handle_response_status(response, expected_status)
        except Exception:
            response.close()
            raise
        return response

    def request_paginated(self, method: str, path: str, page: int, per_page: int,
                          params: Optional[Mapping[str, Any]] = None, **kw) -> requests.Response:
        paged = dict(params or {})
        paged['page'] = page
        paged['per_page'] = per_page
        return self.request(method, path, params=paged, **kw)

    def close(self) -> None:
        self.session.close()

    def __enter__(self) -> 'Client':
        return self

    def __exit__(self, *args) -> None:
        self.close()

    @staticmethod
    def _log_request(request: requests.PreparedRequest) -> None:
        logger.debug('{} {}'.format(request.method, request.url))
        for name, value in request.headers.items():
            if name.lower() in REDACTED_HEADERS:
                value = '<redacted>'
            logger.debug('{}: {}'.format(name, value))
        if request.body:
            body = request.body
            if isinstance(body, bytes):
                body = body.decode('utf-8', errors='replace')
            logger.debug(body)
