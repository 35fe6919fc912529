import base64
import dataclasses
import json
from typing import Iterable, List, Tuple

import requests
from requests.structures import CaseInsensitiveDict
import urllib3


def clamp(value, min, max):
    return sorted((min, value, max))[1]


class DataclassJSONEncoder(json.JSONEncoder):
    """
    Serializes dataclasses as objects and byte strings as base64 text.
    """

    def default(self, o):
        if dataclasses.is_dataclass(o):
            return dataclasses.asdict(o)
        if isinstance(o, (bytes, bytearray)):
            return base64.b64encode(o).decode('ascii')
        return super().default(o)


def header_pairs(response: requests.Response) -> List[Tuple[str, str]]:
    """
    List the headers of `response` in wire order, one pair per occurrence.

    `requests` folds repeated header names into a single comma-joined value,
    so the urllib3 response is consulted first when there is one.
    """
    if isinstance(response.raw, urllib3.HTTPResponse):
        return [(str(name), str(value)) for name, value in response.raw.headers.iteritems()]
    return [(str(name), str(value)) for name, value in response.headers.items()]


def merge_headers(pairs: Iterable[Tuple[str, str]]) -> CaseInsensitiveDict:
    merged = CaseInsensitiveDict()
    for name, value in pairs:
        if name in merged:
            merged[name] = '{}, {}'.format(merged[name], value)
        else:
            merged[name] = value
    return merged
