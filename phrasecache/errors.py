"""
Errors raised for API responses that do not have the expected status.

None of these are raised by the caching adapter. A cached or revalidated
response is checked here exactly like one that came straight from the network.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
import logging
from typing import List

import requests


logger = logging.getLogger(__name__)


class APIError(Exception):
    pass


class AuthenticationError(APIError):
    pass


class NotFoundError(APIError):
    def __init__(self, url: str = ''):
        super().__init__('not found')
        self.url = url


class UnexpectedStatusError(APIError):
    def __init__(self, status: int, expected: int):
        super().__init__('unexpected status code ({}) received; expected {}'.format(status, expected))
        self.status = status
        self.expected = expected


class ErrorResponse(APIError):
    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


@dataclass
class ValidationErrorMessage:
    resource: str
    field: str
    message: str

    def __str__(self) -> str:
        return '\t[{}:{}] {}'.format(self.resource, self.field, self.message)


class ValidationErrorResponse(ErrorResponse):
    def __init__(self, message: str, errors: List[ValidationErrorMessage]):
        super().__init__(message)
        self.errors = errors

    def __str__(self) -> str:
        return '\n'.join([self.message] + [str(error) for error in self.errors])


class RateLimitingError(APIError):
    def __init__(self, limit: int, remaining: int, reset: datetime):
        super().__init__('Rate limit exceeded')
        self.limit = limit
        self.remaining = remaining
        self.reset = reset

    @classmethod
    def from_response(cls, response: requests.Response) -> 'RateLimitingError':
        """
        @throws ValueError
          If any of the rate limit headers is missing or not an integer.
        """
        limit = int(response.headers['X-Rate-Limit-Limit'])
        remaining = int(response.headers['X-Rate-Limit-Remaining'])
        reset = datetime.fromtimestamp(int(response.headers['X-Rate-Limit-Reset']), tz=timezone.utc)
        return cls(limit, remaining, reset)

    def __str__(self) -> str:
        seconds = int((self.reset - datetime.now(timezone.utc)).total_seconds())
        return 'Rate limit exceeded: from {} requests {} are remaining (reset in {} seconds)'.format(
            self.limit, self.remaining, seconds)


def handle_response_status(response: requests.Response, expected_status: int) -> None:
    """
    Raise the error matching `response`, unless it has `expected_status`.

    An error body that cannot be understood is reported as an unexpected status.
    """
    status = response.status_code
    if status == expected_status:
        return

    try:
        if status == 400:
            document = response.json()
            raise ErrorResponse(str(document['message']))
        if status == 404:
            raise NotFoundError(response.url or '')
        if status == 422:
            document = response.json()
            errors = [ValidationErrorMessage(resource=str(error.get('resource', '')),
                                             field=str(error.get('field', '')),
                                             message=str(error.get('message', '')))
                      for error in document.get('errors') or []]
            raise ValidationErrorResponse(str(document.get('message', '')), errors)
        if status == 429:
            raise RateLimitingError.from_response(response)
    except (ValueError, KeyError, TypeError, AttributeError) as e:
        logger.debug('Could not interpret the body of a {} response: {}'.format(status, e))
        raise UnexpectedStatusError(status, expected_status) from e

    raise UnexpectedStatusError(status, expected_status)
