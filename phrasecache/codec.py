"""
Converts cache records to bytes and back.

The format is private to this package. Bumping `FORMAT_VERSION` makes every
previously written record decode as corrupt, which the cache treats as a miss.
"""

import base64
import binascii
import json

from .model import CacheRecord
from .util import DataclassJSONEncoder


FORMAT_VERSION = 1


class CorruptRecord(Exception):
    def __init__(self, reason: str):
        super().__init__('Corrupt cache record: {}'.format(reason))
        self.__reason = reason

    @property
    def reason(self) -> str:
        return self.__reason


def encode(record: CacheRecord) -> bytes:
    document = {
        'version': FORMAT_VERSION,
        'record': record,
    }
    return json.dumps(document, cls=DataclassJSONEncoder, separators=(',', ':')).encode('utf-8')


def decode(data: bytes) -> CacheRecord:
    """
    Parse bytes written by `encode()`.

    @throws CorruptRecord
      If `data` is truncated, was not written by `encode()`, or was written by another format version.
    """
    try:
        document = json.loads(data.decode('utf-8'))
        if not isinstance(document, dict):
            raise CorruptRecord('expected an object, found {}'.format(type(document).__name__))
        if document.get('version') != FORMAT_VERSION:
            raise CorruptRecord('unsupported format version {!r}'.format(document.get('version')))

        fields = document['record']
        return CacheRecord(
            key=_string(fields['key']),
            url=_string(fields['url']),
            etag=_string(fields['etag']),
            status=_integer(fields['status']),
            reason=_string(fields['reason']),
            version=_integer(fields['version']),
            headers=[(_string(name), _string(value)) for name, value in fields['headers']],
            content_length=_integer(fields['content_length']),
            transfer_encoding=[_string(coding) for coding in fields['transfer_encoding']],
            body=base64.b64decode(_string(fields['body']).encode('ascii'), validate=True),
        )
    except (UnicodeError, ValueError, KeyError, TypeError, binascii.Error, RecursionError) as e:
        # Deeply nested JSON exhausts the parser's recursion limit.
        raise CorruptRecord(str(e)) from e


def _string(value) -> str:
    if not isinstance(value, str):
        raise TypeError('expected a string, found {}'.format(type(value).__name__))
    return value


def _integer(value) -> int:
    # bool is an int subclass, but never a valid status or length.
    if not isinstance(value, int) or isinstance(value, bool):
        raise TypeError('expected an integer, found {}'.format(type(value).__name__))
    return value
