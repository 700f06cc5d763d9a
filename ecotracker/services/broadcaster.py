"""Live reading fan-out to WebSocket subscribers.

Subscribers register per device id. Publishing is best effort: a socket
that fails to receive is dropped from the map and the remaining
subscribers still get the message.
"""

import asyncio
import uuid
from collections import defaultdict
from typing import Any

from fastapi import Request, WebSocket

from ecotracker.logging_config import get_logger

logger = get_logger(__name__)


class ReadingBroadcaster:
    """Maps device id -> set of open WebSocket connections."""

    def __init__(self):
        self._subscribers: dict[str, set[WebSocket]] = defaultdict(set)
        self._lock = asyncio.Lock()

    async def subscribe(self, device_id: str | uuid.UUID, websocket: WebSocket) -> None:
        async with self._lock:
            self._subscribers[str(device_id)].add(websocket)
        logger.debug("WebSocket subscribed", device_id=str(device_id))

    async def unsubscribe(self, websocket: WebSocket) -> None:
        """Remove a socket from every device it subscribed to."""
        async with self._lock:
            for device_id in list(self._subscribers):
                sockets = self._subscribers[device_id]
                sockets.discard(websocket)
                if not sockets:
                    del self._subscribers[device_id]

    def subscriber_count(self, device_id: str | uuid.UUID) -> int:
        return len(self._subscribers.get(str(device_id), ()))

    async def publish(self, device_id: str | uuid.UUID, data: dict[str, Any]) -> int:
        """Send a sensorData message to every subscriber of ``device_id``.

        Returns:
            Number of subscribers the message was delivered to.
        """
        key = str(device_id)
        async with self._lock:
            targets = list(self._subscribers.get(key, ()))

        if not targets:
            return 0

        message = {"type": "sensorData", "deviceId": key, "data": data}
        delivered = 0
        failed: list[WebSocket] = []
        for websocket in targets:
            try:
                await websocket.send_json(message)
                delivered += 1
            except Exception as e:
                logger.warning(
                    "Dropping WebSocket subscriber after failed send",
                    device_id=key,
                    error=str(e),
                )
                failed.append(websocket)

        if failed:
            async with self._lock:
                sockets = self._subscribers.get(key)
                if sockets is not None:
                    sockets.difference_update(failed)
                    if not sockets:
                        del self._subscribers[key]

        return delivered


def get_broadcaster(request: Request) -> ReadingBroadcaster:
    """FastAPI dependency returning the app-wide broadcaster."""
    return request.app.state.broadcaster
