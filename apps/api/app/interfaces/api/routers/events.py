import json
import logging
from typing import Any, Optional

from fastapi import APIRouter, Depends, WebSocket, WebSocketDisconnect

from app.application.event_gateway import EventGateway, GatewayConnection
from app.container import get_event_gateway

router = APIRouter()
logger = logging.getLogger("events")


@router.websocket("/events")
async def events_socket(
    websocket: WebSocket, gateway: EventGateway = Depends(get_event_gateway)
) -> None:
    await websocket.accept()
    client = websocket.client.host if websocket.client else "unknown"
    logger.info("Event socket connected", extra={"ip": client})

    async def receive() -> Optional[Any]:
        try:
            text = await websocket.receive_text()
        except WebSocketDisconnect:
            return None
        try:
            return json.loads(text)
        except json.JSONDecodeError:
            # Non-JSON frames are answered with an error message by the gateway.
            return text

    connection = GatewayConnection(gateway, receive=receive, send=websocket.send_json)
    try:
        await connection.run()
    except WebSocketDisconnect:
        pass
    logger.info("Event socket disconnected", extra={"ip": client})
