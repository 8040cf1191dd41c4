from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Dict, Optional
from urllib.parse import urlsplit

# Response.type values, as a browser reports them.
BASIC = "basic"
CORS = "cors"
OPAQUE = "opaque"
ERROR = "error"


class FetchError(OSError):
    """Network-level failure: the request never produced an HTTP response."""


def origin_of(url: str) -> str:
    parts = urlsplit(url)
    return f"{parts.scheme}://{parts.netloc}".lower()


@dataclass(frozen=True)
class Request:
    url: str
    method: str = "GET"
    # "navigate" for page loads; anything else is a subresource fetch.
    mode: str = "no-cors"
    headers: Dict[str, str] = field(default_factory=dict)

    @property
    def origin(self) -> str:
        return origin_of(self.url)

    def header(self, name: str, default: str = "") -> str:
        wanted = name.lower()
        for key, value in self.headers.items():
            if key.lower() == wanted:
                return value
        return default

    @property
    def cache_key(self) -> str:
        return f"{self.method.upper()} {self.url}"


@dataclass(frozen=True)
class Response:
    status: int
    body: bytes = b""
    headers: Dict[str, str] = field(default_factory=dict)
    url: str = ""
    type: str = BASIC

    @property
    def ok(self) -> bool:
        return 200 <= self.status <= 299

    def text(self, encoding: Optional[str] = None, errors: str = "strict") -> str:
        return self.body.decode(encoding or "utf-8", errors)

    def clone(self) -> "Response":
        return replace(self, body=bytes(self.body), headers=dict(self.headers))

    @classmethod
    def error(cls) -> "Response":
        return cls(status=0, type=ERROR)
