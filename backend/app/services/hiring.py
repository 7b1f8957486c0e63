import logging
import threading
from contextlib import contextmanager
from typing import Optional

from sqlalchemy import case, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.config import HIRE_LOCK_TIMEOUT_SECONDS
from app.core.errors import (
    InvalidStateError,
    MarketplaceError,
    NotFoundError,
    TransactionFailure,
    UnauthorizedError,
)
from app.models.bid import BID_STATUS_HIRED, BID_STATUS_REJECTED, Bid
from app.models.gig import GIG_STATUS_ASSIGNED, GIG_STATUS_OPEN, Gig
from app.schemas.hire import HireNotification

logger = logging.getLogger(__name__)


class GigLockRegistry:
    """Locks de contratação por gig.

    Cada gig tem o seu próprio lock, criado sob demanda e removido quando
    nenhuma requisição o está usando. Contratações em gigs diferentes nunca
    disputam o mesmo lock.
    """

    def __init__(self):
        self._guard = threading.Lock()
        self._entries: dict[int, list] = {}

    @property
    def active_count(self) -> int:
        with self._guard:
            return len(self._entries)

    @contextmanager
    def hold(self, gig_id: int, timeout: float):
        with self._guard:
            entry = self._entries.get(gig_id)
            if entry is None:
                entry = [threading.Lock(), 0]
                self._entries[gig_id] = entry
            entry[1] += 1

        lock = entry[0]
        acquired = lock.acquire(timeout=max(float(timeout), 0.0))
        try:
            if not acquired:
                logger.warning("Timeout aguardando lock de contratação (gig %s)", gig_id)
                raise TransactionFailure()
            yield
        finally:
            if acquired:
                lock.release()
            with self._guard:
                entry[1] -= 1
                if entry[1] <= 0:
                    self._entries.pop(gig_id, None)


gig_locks = GigLockRegistry()


def hire_bid(
    db: Session,
    actor_id: int,
    gig_id: int,
    bid_id: int,
    locks: Optional[GigLockRegistry] = None,
    timeout: Optional[float] = None,
) -> HireNotification:
    """Contrata a proposta ``bid_id`` do gig ``gig_id`` em nome de ``actor_id``.

    Leitura, validação e escrita acontecem dentro do lock do gig e de uma
    única transação: o gig passa para ``assigned``, a proposta escolhida para
    ``hired`` e todas as outras do gig para ``rejected``. Em qualquer falha a
    sessão sofre rollback e nenhuma escrita permanece.

    Levanta ``NotFoundError``, ``UnauthorizedError``, ``InvalidStateError``
    ou ``TransactionFailure``. Retorna o evento de notificação para o
    freelancer contratado.
    """
    locks = locks or gig_locks
    timeout = HIRE_LOCK_TIMEOUT_SECONDS if timeout is None else timeout

    with locks.hold(gig_id, timeout):
        try:
            _limit_row_lock_wait(db, timeout)
            notification = _apply_hire(db, actor_id, gig_id, bid_id)
        except MarketplaceError:
            db.rollback()
            raise
        except SQLAlchemyError as exc:
            db.rollback()
            logger.exception("Falha ao gravar contratação (gig %s, bid %s)", gig_id, bid_id)
            raise TransactionFailure() from exc

    logger.info(
        "Gig %s atribuído: bid %s contratado (freelancer %s)",
        gig_id,
        bid_id,
        notification.freelancer_id,
    )
    return notification


def _limit_row_lock_wait(db: Session, timeout: float) -> None:
    """Limita a espera pelo `FOR UPDATE` do gig quando outro processo o segura.

    Só o PostgreSQL tem `lock_timeout`; o valor vale apenas para a transação
    corrente. Zero desligaria o limite, por isso o mínimo é 1 ms.
    """
    if db.get_bind().dialect.name != "postgresql":
        return
    milliseconds = max(int(float(timeout) * 1000), 1)
    db.execute(text(f"SET LOCAL lock_timeout = {milliseconds}"))


def _apply_hire(db: Session, actor_id: int, gig_id: int, bid_id: int) -> HireNotification:
    bid = db.query(Bid).filter(Bid.id == bid_id).populate_existing().first()
    if not bid or bid.gig_id != gig_id:
        raise NotFoundError("bid")

    gig = (
        db.query(Gig)
        .filter(Gig.id == gig_id)
        .with_for_update()
        .populate_existing()
        .first()
    )
    if not gig:
        raise NotFoundError("gig")
    if gig.owner_id != actor_id:
        raise UnauthorizedError()
    if gig.status != GIG_STATUS_OPEN:
        raise InvalidStateError()

    notification = HireNotification(
        bid_id=bid.id,
        gig_id=gig.id,
        gig_title=gig.title,
        freelancer_id=bid.freelancer_id,
        price=bid.price,
    )

    # Outro processo pode ter atribuído o gig entre a leitura e a escrita.
    assigned = (
        db.query(Gig)
        .filter(Gig.id == gig_id, Gig.status == GIG_STATUS_OPEN)
        .update({Gig.status: GIG_STATUS_ASSIGNED}, synchronize_session=False)
    )
    if assigned != 1:
        raise InvalidStateError()

    db.query(Bid).filter(Bid.gig_id == gig_id).update(
        {Bid.status: case((Bid.id == bid_id, BID_STATUS_HIRED), else_=BID_STATUS_REJECTED)},
        synchronize_session=False,
    )
    db.commit()
    return notification
