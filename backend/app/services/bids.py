import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.errors import DuplicateBidError, InvalidStateError, NotFoundError, OwnGigBidError
from app.models.bid import BID_STATUS_PENDING, Bid
from app.models.gig import GIG_STATUS_OPEN, Gig

logger = logging.getLogger(__name__)


def place_bid(db: Session, freelancer_id: int, gig_id: int, message: str, price: float) -> Bid:
    """Cria uma proposta pendente; no máximo uma por (gig, freelancer)."""
    gig = db.query(Gig).filter(Gig.id == gig_id).first()
    if not gig:
        raise NotFoundError("gig")
    if gig.owner_id == freelancer_id:
        raise OwnGigBidError()
    if gig.status != GIG_STATUS_OPEN:
        raise InvalidStateError("Gig não está aberto para propostas")

    existing = (
        db.query(Bid)
        .filter(Bid.gig_id == gig_id, Bid.freelancer_id == freelancer_id)
        .first()
    )
    if existing:
        raise DuplicateBidError()

    bid = Bid(
        gig_id=gig_id,
        freelancer_id=freelancer_id,
        message=message.strip(),
        price=price,
        status=BID_STATUS_PENDING,
    )
    db.add(bid)
    try:
        db.commit()
    except IntegrityError as exc:
        # Corrida com outra requisição do mesmo freelancer: vale a constraint do banco.
        db.rollback()
        logger.info("Proposta duplicada barrada pelo banco (gig %s, freelancer %s)", gig_id, freelancer_id)
        raise DuplicateBidError() from exc
    db.refresh(bid)
    return bid
