import logging

from fastapi import APIRouter, Depends, Query, WebSocket, WebSocketDisconnect, status

from app.core.security import decode_access_token
from app.services.notifications import NotificationDispatcher, get_dispatcher

logger = logging.getLogger(__name__)
router = APIRouter(tags=["Notifications"])


@router.websocket("/ws/notifications")
async def notifications_socket(
    websocket: WebSocket,
    token: str = Query(default=""),
    dispatcher: NotificationDispatcher = Depends(get_dispatcher),
):
    if dispatcher.mode != "push":
        # Implantação em modo poll: o canal nunca receberia eventos.
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return

    user_id = decode_access_token(token) if token else None
    if user_id is None:
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return

    await websocket.accept()
    dispatcher.registry.register(user_id, websocket)
    try:
        # O cliente não envia nada útil; a leitura só detecta a desconexão.
        while True:
            await websocket.receive_text()
    except WebSocketDisconnect:
        logger.debug("Usuário %s desconectou do canal de notificações", user_id)
    finally:
        dispatcher.registry.unregister(user_id, websocket)
