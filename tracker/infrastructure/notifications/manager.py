"""Registry of open notification websockets, keyed by user."""

from __future__ import annotations

import logging
from collections import defaultdict
from typing import Any

from fastapi import WebSocket

logger = logging.getLogger(__name__)


class NotificationConnectionManager:
    """Track which users have a live in-app session and push messages to them."""

    def __init__(self) -> None:
        self._sockets: defaultdict[int, set[WebSocket]] = defaultdict(set)

    async def connect(self, user_id: int, websocket: WebSocket) -> None:
        await websocket.accept()
        self._sockets[user_id].add(websocket)
        logger.debug("User %s opened a notification socket (%d open)", user_id, len(self._sockets[user_id]))

    def disconnect(self, user_id: int, websocket: WebSocket) -> None:
        sockets = self._sockets.get(user_id)
        if not sockets:
            return
        sockets.discard(websocket)
        if not sockets:
            del self._sockets[user_id]

    def is_connected(self, user_id: int) -> bool:
        return bool(self._sockets.get(user_id))

    async def send_to_user(self, user_id: int, message: dict[str, Any]) -> int:
        """Send ``message`` to every socket of ``user_id``; return how many got it."""

        delivered = 0
        for websocket in tuple(self._sockets.get(user_id, ())):
            try:
                await websocket.send_json(message)
            except Exception:
                logger.debug("Dropping stale websocket for user %s", user_id, exc_info=True)
                self.disconnect(user_id, websocket)
            else:
                delivered += 1
        return delivered


notification_manager = NotificationConnectionManager()


__all__ = ["NotificationConnectionManager", "notification_manager"]
