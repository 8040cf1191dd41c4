from .clients import ClientRegistry
from .fetchers import AiohttpFetcher
from .http import FetchError, Request, Response
from .storage import Cache, CacheStorage
from .worker import (
    ACTIVATED,
    INSTALLED,
    REDUNDANT,
    SKIP_WAITING_MESSAGE,
    InstallError,
    ServiceWorkerRegistration,
    ShellCacheWorker,
)

__all__ = [
    "ACTIVATED",
    "INSTALLED",
    "REDUNDANT",
    "SKIP_WAITING_MESSAGE",
    "AiohttpFetcher",
    "Cache",
    "CacheStorage",
    "ClientRegistry",
    "FetchError",
    "InstallError",
    "Request",
    "Response",
    "ServiceWorkerRegistration",
    "ShellCacheWorker",
]
