from __future__ import annotations

import logging
from typing import Callable, Dict, List, Optional

logger = logging.getLogger(__name__)


class ClientRegistry:
    """Open shell pages and the worker controlling them.

    `on_controller_change` listeners are the page-side update channel: a page typically reloads
    when a new generation takes control.
    """

    def __init__(self):
        self._controllers: Dict[str, Optional[object]] = {}
        self._listeners: List[Callable[[str, object], None]] = []

    def open(self, client_id: str) -> None:
        self._controllers.setdefault(client_id, None)

    def close(self, client_id: str) -> None:
        self._controllers.pop(client_id, None)

    def ids(self) -> List[str]:
        return list(self._controllers)

    def controller(self, client_id: str) -> Optional[object]:
        return self._controllers.get(client_id)

    def on_controller_change(self, listener: Callable[[str, object], None]) -> None:
        self._listeners.append(listener)

    async def claim(self, worker: object) -> None:
        for client_id, current in list(self._controllers.items()):
            if current is worker:
                continue
            self._controllers[client_id] = worker
            for listener in self._listeners:
                listener(client_id, worker)
        logger.info("Claimed %d client(s).", len(self._controllers))
