"""Immutable endpoint descriptors."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class HTTPMethod(str, Enum):
    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    DELETE = "DELETE"


@dataclass(frozen=True)
class Endpoint:
    """Fixed path and method for one backend operation.

    GET bodies are encoded into the query string; other methods send JSON.
    ``encode_body=False`` skips body encoding entirely.
    """

    path: str
    method: HTTPMethod = HTTPMethod.GET
    encode_body: bool = True
