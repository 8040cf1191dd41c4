# ====================================================================================================
# Offline shell cache - one worker per cache generation
#
# Lifecycle (per generation, identified by `config.cache_name`):
#   parsed -> installing -> installed -> activating -> activated
#                      \-> redundant (install failed; the previous generation keeps serving)
#
# Fetch policy (same-origin GET only; everything else passes through untouched):
# - page/navigation requests  network first (no-store), then cached "./", then "./index.html"
# - the reference dataset     network first; fresh OK copies are re-cached in the background
# - other static assets       cache first; OK same-origin responses are stored on the way out
#
# Capabilities are injected: `fetch` (network), `caches` (CacheStorage), `clients` (ClientRegistry).
# ====================================================================================================

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Any, Optional, Set
from urllib.parse import urljoin, urlsplit

from .clients import ClientRegistry
from .http import BASIC, ERROR, FetchError, Request, Response, origin_of
from .storage import Cache, CacheStorage

if TYPE_CHECKING:
    from src.tugs.settings import AppConfig

logger = logging.getLogger(__name__)

PARSED = "parsed"
INSTALLING = "installing"
INSTALLED = "installed"
ACTIVATING = "activating"
ACTIVATED = "activated"
REDUNDANT = "redundant"

SKIP_WAITING_MESSAGE = "SKIP_WAITING"
OFFLINE_PAGE_FALLBACKS = ("./", "./index.html")


class InstallError(RuntimeError):
    """The generation's asset manifest could not be cached in full."""


class ShellCacheWorker:
    def __init__(
        self,
        config: "AppConfig",
        fetch,
        caches: Optional[CacheStorage] = None,
        clients: Optional[ClientRegistry] = None,
    ):
        self.config = config
        self.fetch = fetch
        self.caches = caches if caches is not None else CacheStorage()
        self.clients = clients if clients is not None else ClientRegistry()
        self.state = PARSED
        self.skip_waiting_requested = False
        self.registration: Optional["ServiceWorkerRegistration"] = None
        self._origin = origin_of(config.base_url)
        self._dataset_path = urlsplit(self.resolve(config.dataset_path)).path
        self._background: Set[asyncio.Task] = set()

    @property
    def cache_name(self) -> str:
        return self.config.cache_name

    def resolve(self, path: str) -> str:
        return urljoin(self.config.base_url, path)

    async def _cache(self) -> Cache:
        return await self.caches.open(self.cache_name)

    # ------------------------------------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------------------------------------
    async def install(self) -> None:
        self.state = INSTALLING
        if self.config.skip_waiting_on_install:
            self.skip_waiting_requested = True
        logger.info("Installing %s (%d assets).", self.cache_name, len(self.config.static_assets))

        cache = await self._cache()
        assets = [self.resolve(path) for path in self.config.static_assets]
        try:
            await cache.add_all(assets, self.fetch)
        except FetchError as exc:
            self.state = REDUNDANT
            logger.error("Install of %s failed: %s", self.cache_name, exc)
            raise InstallError(f"Failed to cache shell assets for {self.cache_name}: {exc}") from exc

        self.state = INSTALLED
        logger.info("Installed %s.", self.cache_name)

    async def activate(self) -> None:
        if self.state != INSTALLED:
            raise RuntimeError(f"Cannot activate {self.cache_name} from state '{self.state}'.")
        self.state = ACTIVATING

        for name in await self.caches.keys():
            if name != self.cache_name:
                await self.caches.delete(name)
                logger.info("Deleted stale cache %s.", name)

        await self.clients.claim(self)
        self.state = ACTIVATED
        logger.info("Activated %s.", self.cache_name)

    async def skip_waiting(self) -> None:
        self.skip_waiting_requested = True
        if self.registration is not None and self.registration.waiting is self:
            await self.registration.activate_waiting()

    async def on_message(self, data: Any) -> None:
        if isinstance(data, dict) and data.get("type") == SKIP_WAITING_MESSAGE:
            logger.info("SKIP_WAITING received for %s.", self.cache_name)
            await self.skip_waiting()

    # ------------------------------------------------------------------------------------------------
    # Fetch interception
    # ------------------------------------------------------------------------------------------------
    def intercepts(self, request: Request) -> bool:
        return request.method.upper() == "GET" and request.origin == self._origin

    @staticmethod
    def is_page_request(request: Request) -> bool:
        return request.mode == "navigate" or "text/html" in request.header("accept")

    def is_dataset_request(self, request: Request) -> bool:
        return urlsplit(request.url).path == self._dataset_path

    async def handle_fetch(self, request: Request) -> Optional[Response]:
        """Answer an intercepted request, or return None to leave it to the default network path."""
        if not self.intercepts(request):
            return None
        if self.is_page_request(request):
            return await self._page_network_first(request)
        if self.is_dataset_request(request):
            return await self._dataset_network_first(request)
        return await self._asset_cache_first(request)

    async def _page_network_first(self, request: Request) -> Response:
        try:
            return await self.fetch(request, cache_mode="no-store")
        except FetchError as exc:
            logger.warning("Offline page request %s (%s); serving cached shell.", request.url, exc)

        cache = await self._cache()
        for fallback in OFFLINE_PAGE_FALLBACKS:
            cached = await cache.match(self.resolve(fallback))
            if cached is not None:
                return cached
        return Response.error()

    async def _dataset_network_first(self, request: Request) -> Response:
        cache = await self._cache()
        try:
            fresh = await self.fetch(request)
        except FetchError as exc:
            cached = await cache.match(request)
            if cached is not None:
                logger.warning("Dataset fetch failed (%s); serving cached copy.", exc)
                return cached
            logger.warning("Dataset fetch failed (%s) and nothing is cached.", exc)
            return Response.error()

        if fresh.ok:
            self._store_in_background(cache, request, fresh.clone())
        return fresh

    async def _asset_cache_first(self, request: Request) -> Response:
        cache = await self._cache()
        cached = await cache.match(request)
        if cached is not None:
            return cached

        try:
            fresh = await self.fetch(request)
        except FetchError as exc:
            logger.warning("Asset fetch failed for %s: %s", request.url, exc)
            return Response.error()

        if fresh.ok and fresh.type == BASIC:
            try:
                await cache.put(request, fresh.clone())
            except Exception as exc:
                logger.warning("Could not cache %s: %s", request.url, exc)
        return fresh

    def _store_in_background(self, cache: Cache, request: Request, response: Response) -> None:
        task = asyncio.get_running_loop().create_task(cache.put(request, response))
        self._background.add(task)
        task.add_done_callback(self._background_done)

    def _background_done(self, task: asyncio.Task) -> None:
        self._background.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.warning("Background cache store failed: %s", exc)

    async def wait_for_background(self) -> None:
        if self._background:
            await asyncio.gather(*list(self._background), return_exceptions=True)

    def controlled_fetch(self, network=None):
        """A page-side fetch routed through this worker (default network for pass-through requests).

        Like a browser, an error response from the worker surfaces as a FetchError.
        """
        network = network or self.fetch

        async def fetch(request: Request, cache_mode: Optional[str] = None) -> Response:
            response = await self.handle_fetch(request)
            if response is None:
                return await network(request, cache_mode=cache_mode)
            if response.type == ERROR:
                raise FetchError(f"Network error for {request.url}")
            return response

        return fetch


# ----------------------------------------------------------------------------------------------------
# ServiceWorkerRegistration
# Purpose (simple): Track the active and waiting generations for one shell scope.
# Inputs: `clients` (open pages)
# Outputs: state transitions; a failed install never replaces the active generation
# ----------------------------------------------------------------------------------------------------
class ServiceWorkerRegistration:
    def __init__(self, clients: Optional[ClientRegistry] = None):
        self.clients = clients if clients is not None else ClientRegistry()
        self.active: Optional[ShellCacheWorker] = None
        self.waiting: Optional[ShellCacheWorker] = None

    async def register(self, worker: ShellCacheWorker) -> ShellCacheWorker:
        worker.registration = self
        worker.clients = self.clients
        await worker.install()

        if self.waiting is not None and self.waiting is not worker:
            self.waiting.state = REDUNDANT
        self.waiting = worker

        if self.active is None or worker.skip_waiting_requested:
            await self.activate_waiting()
        else:
            logger.info("%s installed; waiting for open pages to close.", worker.cache_name)
        return worker

    async def activate_waiting(self) -> Optional[ShellCacheWorker]:
        worker = self.waiting
        if worker is None:
            return None
        previous = self.active
        self.waiting = None
        await worker.activate()
        if previous is not None and previous is not worker:
            previous.state = REDUNDANT
        self.active = worker
        return worker

    async def clients_closed(self) -> Optional[ShellCacheWorker]:
        """Call when pages close; the waiting generation takes over once none remain."""
        if self.clients.ids():
            return None
        return await self.activate_waiting()

    async def handle_fetch(self, request: Request) -> Optional[Response]:
        if self.active is None:
            return None
        return await self.active.handle_fetch(request)
