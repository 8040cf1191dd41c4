"""In-memory cache storage keyed by request identity.

Mirrors the browser Cache API closely enough for the shell worker: named caches, each mapping
``METHOD URL`` to a stored Response. Every operation is a coroutine so a persistent backend can be
dropped in without touching callers.
"""

from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Optional, Union

from .http import FetchError, Request, Response

logger = logging.getLogger(__name__)

RequestLike = Union[Request, str]


def _as_request(request: RequestLike) -> Request:
    return request if isinstance(request, Request) else Request(request)


class Cache:
    def __init__(self, name: str):
        self.name = name
        self._entries: Dict[str, Response] = {}

    async def match(self, request: RequestLike) -> Optional[Response]:
        stored = self._entries.get(_as_request(request).cache_key)
        return stored.clone() if stored is not None else None

    async def put(self, request: RequestLike, response: Response) -> None:
        self._entries[_as_request(request).cache_key] = response.clone()

    async def delete(self, request: RequestLike) -> bool:
        return self._entries.pop(_as_request(request).cache_key, None) is not None

    async def keys(self) -> List[str]:
        return list(self._entries)

    async def add_all(self, requests: Iterable[RequestLike], fetch) -> None:
        """Fetch every request, then store them all; any failure stores nothing.

        Raises FetchError for a network failure or a non-OK response.
        """
        fetched = []
        for item in requests:
            request = _as_request(item)
            response = await fetch(request)
            if not response.ok:
                raise FetchError(f"{request.url} answered HTTP {response.status}")
            fetched.append((request, response))
        for request, response in fetched:
            await self.put(request, response)
        logger.info("Cache %s: stored %d entries.", self.name, len(fetched))


class CacheStorage:
    def __init__(self):
        self._caches: Dict[str, Cache] = {}

    async def open(self, name: str) -> Cache:
        if name not in self._caches:
            self._caches[name] = Cache(name)
        return self._caches[name]

    async def has(self, name: str) -> bool:
        return name in self._caches

    async def delete(self, name: str) -> bool:
        return self._caches.pop(name, None) is not None

    async def keys(self) -> List[str]:
        return list(self._caches)
