import logging
from collections import defaultdict
from typing import Iterable

from app.core.config import NOTIFICATION_MODE
from app.models.bid import BID_STATUS_HIRED, Bid
from app.schemas.hire import HireNotification

logger = logging.getLogger(__name__)

NOTIFICATION_MODES = {"push", "poll"}


class ConnectionRegistry:
    """Conexões WebSocket ativas, agrupadas pelo id do usuário."""

    def __init__(self):
        self._connections = defaultdict(set)

    def register(self, user_id: int, websocket) -> None:
        self._connections[user_id].add(websocket)

    def unregister(self, user_id: int, websocket) -> None:
        sockets = self._connections.get(user_id)
        if not sockets:
            return
        sockets.discard(websocket)
        if not sockets:
            self._connections.pop(user_id, None)

    def connection_count(self, user_id: int) -> int:
        return len(self._connections.get(user_id, ()))

    async def emit(self, user_id: int, payload: dict) -> int:
        delivered = 0
        for websocket in list(self._connections.get(user_id, ())):
            try:
                await websocket.send_json(payload)
            except Exception:
                logger.warning("Conexão do usuário %s falhou no envio; removendo", user_id)
                self.unregister(user_id, websocket)
                continue
            delivered += 1
        return delivered


class NotificationDispatcher:
    """Entrega best-effort do evento de contratação.

    No modo ``push`` o evento é enviado uma vez para cada conexão ativa do
    freelancer. Sem conexão, o evento é descartado: o status da proposta no
    banco continua sendo a fonte de verdade e aparece na próxima leitura.
    No modo ``poll`` nada é enviado.
    """

    def __init__(self, registry: ConnectionRegistry, mode: str = NOTIFICATION_MODE):
        if mode not in NOTIFICATION_MODES:
            raise ValueError(f"NOTIFICATION_MODE inválido: {mode}")
        self.registry = registry
        self.mode = mode

    async def dispatch(self, event: HireNotification) -> int:
        if self.mode != "push":
            return 0
        try:
            delivered = await self.registry.emit(event.freelancer_id, event.model_dump())
        except Exception:
            logger.exception("Falha ao notificar contratação (bid %s)", event.bid_id)
            return 0
        if not delivered:
            logger.debug(
                "Freelancer %s sem conexão ativa; notificação do bid %s descartada",
                event.freelancer_id,
                event.bid_id,
            )
        return delivered


def new_hires(bids: Iterable[Bid], seen_ids: Iterable[int]) -> list[Bid]:
    seen = set(seen_ids)
    return [bid for bid in bids if bid.status == BID_STATUS_HIRED and bid.id not in seen]


def parse_seen_ids(value: str) -> set[int]:
    if not value:
        return set()
    result = set()
    for item in value.split(","):
        item = item.strip()
        if item.isdigit():
            result.add(int(item))
    return result


registry = ConnectionRegistry()
dispatcher = NotificationDispatcher(registry)


def get_dispatcher() -> NotificationDispatcher:
    return dispatcher
