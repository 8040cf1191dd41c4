from __future__ import annotations

import asyncio
import logging
from typing import Optional

import aiohttp

from .http import BASIC, CORS, FetchError, Request, Response, origin_of

logger = logging.getLogger(__name__)

# Request cache modes that must bypass intermediate HTTP caches.
_BYPASS_HEADERS = {
    "no-cache": {"Cache-Control": "no-cache", "Pragma": "no-cache"},
    "no-store": {"Cache-Control": "no-store", "Pragma": "no-cache"},
}


class AiohttpFetcher:
    """Network capability backed by an aiohttp client session.

    Responses from `origin` are typed "basic", everything else "cors". Transport failures
    raise FetchError; HTTP error statuses are returned as ordinary responses.
    """

    def __init__(self, origin: str, session: Optional[aiohttp.ClientSession] = None):
        self.origin = origin_of(origin)
        self._session = session
        self._owns_session = session is None

    async def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None:
            self._session = aiohttp.ClientSession()
        return self._session

    async def __call__(self, request: Request, cache_mode: Optional[str] = None) -> Response:
        headers = dict(request.headers)
        headers.update(_BYPASS_HEADERS.get(cache_mode or "", {}))
        session = await self._get_session()
        try:
            async with session.request(request.method, request.url, headers=headers) as resp:
                body = await resp.read()
                final_url = str(resp.url)
                return Response(
                    status=resp.status,
                    body=body,
                    headers=dict(resp.headers),
                    url=final_url,
                    type=BASIC if origin_of(final_url) == self.origin else CORS,
                )
        except (aiohttp.ClientError, asyncio.TimeoutError) as exc:
            logger.debug("Fetch of %s failed: %s", request.url, exc)
            raise FetchError(f"{request.url}: {exc}") from exc

    async def close(self) -> None:
        if self._session is not None and self._owns_session:
            await self._session.close()
        self._session = None

    async def __aenter__(self) -> "AiohttpFetcher":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()
