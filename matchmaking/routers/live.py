import logging

from fastapi import APIRouter, WebSocket, WebSocketDisconnect, status

from matchmaking.config import settings
from matchmaking.services.auth_service import verify_token
from matchmaking.services.connection_registry import connection_registry
from matchmaking.utils.errors import ServiceError

router = APIRouter(tags=["Live"])
logger = logging.getLogger(__name__)


@router.websocket("/ws")
async def live_connection(websocket: WebSocket, token: str | None = None):
    try:
        payload = verify_token(token, settings.JWT_SECRET_KEY)
        user_id = payload["userId"]
    except (ServiceError, KeyError):
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return

    await websocket.accept()
    connection_registry.register(user_id, websocket)
    logger.info("Live connection opened for user %s", user_id)
    try:
        await websocket.send_json({"type": "connected", "userId": user_id})
        while True:
            # Clients only listen; anything they send is treated as a keepalive
            await websocket.receive_text()
    except WebSocketDisconnect:
        pass
    finally:
        connection_registry.unregister(user_id, websocket)
        logger.info("Live connection closed for user %s", user_id)
