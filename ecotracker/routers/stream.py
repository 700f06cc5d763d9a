"""Real-time reading stream over WebSocket.

Protocol:
    client -> {"type": "subscribe", "deviceId": "<id>"}
    server -> {"type": "subscribed", "deviceId": "<id>"}
    server -> {"type": "sensorData", "deviceId": "<id>", "data": {...}}  (per reading)
    client -> {"type": "unsubscribe"}

A socket follows one device at a time; subscribing again switches device.
"""

import json

from fastapi import APIRouter, WebSocket, WebSocketDisconnect

from ecotracker.logging_config import get_logger
from ecotracker.services.broadcaster import ReadingBroadcaster

logger = get_logger(__name__)

router = APIRouter(tags=["stream"])


async def _send_error(websocket: WebSocket, message: str) -> None:
    await websocket.send_json({"type": "error", "message": message})


@router.websocket("/ws")
async def reading_stream(websocket: WebSocket) -> None:
    broadcaster: ReadingBroadcaster = websocket.app.state.broadcaster

    await websocket.accept()
    logger.info("WebSocket client connected")

    try:
        while True:
            text = await websocket.receive_text()
            try:
                message = json.loads(text)
            except ValueError:
                await _send_error(websocket, "Messages must be JSON")
                continue

            if not isinstance(message, dict):
                await _send_error(websocket, "Messages must be JSON objects")
                continue

            message_type = message.get("type")
            if message_type == "subscribe":
                device_id = message.get("deviceId")
                if not device_id:
                    await _send_error(websocket, "deviceId required")
                    continue

                await broadcaster.unsubscribe(websocket)
                await broadcaster.subscribe(device_id, websocket)
                await websocket.send_json(
                    {"type": "subscribed", "deviceId": str(device_id)}
                )
            elif message_type == "unsubscribe":
                await broadcaster.unsubscribe(websocket)
                await websocket.send_json({"type": "unsubscribed"})
            else:
                logger.debug("Ignoring WebSocket message", message_type=message_type)

    except WebSocketDisconnect:
        logger.info("WebSocket client disconnected")
    finally:
        await broadcaster.unsubscribe(websocket)
