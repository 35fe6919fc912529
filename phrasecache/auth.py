from dataclasses import dataclass, replace
import getpass
import os
from typing import Callable, Mapping, Optional

import requests
from requests.auth import AuthBase, HTTPBasicAuth

from .errors import AuthenticationError


DEFAULT_HOST = 'https://api.phraseapp.com'
ACCESS_TOKEN_VARIABLE = 'PHRASEAPP_ACCESS_TOKEN'
OTP_HEADER = 'X-PhraseApp-OTP'


@dataclass(frozen=True)
class Credentials:
    username: str = ''
    token: str = ''
    tfa: bool = False
    """
    Whether a two factor token is required. Only used with username and password authentication.
    """
    host: str = ''


def resolve_credentials(credentials: Credentials, defaults: Optional[Credentials] = None,
                        environ: Mapping[str, str] = os.environ) -> Credentials:
    """
    Combine explicitly given credentials with fallbacks.

    Precedence is: the explicit token, the explicit username, the access token from the environment, the token from
    `defaults`, then the username from `defaults`. The host falls back to `defaults` and then to the public API.
    """
    token = ''
    username = ''
    if credentials.token:
        token = credentials.token
    elif credentials.username:
        username = credentials.username
    elif environ.get(ACCESS_TOKEN_VARIABLE):
        token = environ[ACCESS_TOKEN_VARIABLE]
    elif defaults is not None and defaults.token:
        token = defaults.token
    elif defaults is not None and defaults.username:
        username = defaults.username

    host = credentials.host or (defaults.host if defaults is not None else '') or DEFAULT_HOST
    return replace(credentials, username=username, token=token, tfa=credentials.tfa and bool(username),
                   host=host.rstrip('/'))


class TokenAuth(AuthBase):
    """
    Attaches API credentials to every request.

    Passwords and two factor tokens are never stored. They are asked for each time a request is prepared.
    """

    def __init__(self, credentials: Credentials, user_agent: str,
                 prompt: Callable[[str], str] = getpass.getpass) -> None:
        self.credentials = credentials
        self.user_agent = user_agent
        self.prompt = prompt

    def __call__(self, request: requests.PreparedRequest) -> requests.PreparedRequest:
        if not self.credentials.token and not self.credentials.username:
            raise AuthenticationError('either username or token must be given')

        request.headers['User-Agent'] = self.user_agent
        if self.credentials.token:
            request.headers['Authorization'] = 'token {}'.format(self.credentials.token)
        else:
            password = self.prompt('Password: ')
            request = HTTPBasicAuth(self.credentials.username, password)(request)
            if self.credentials.tfa:
                request.headers[OTP_HEADER] = self.prompt('TFA-Token: ')
        return request
