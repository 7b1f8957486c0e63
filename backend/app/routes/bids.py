from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session, aliased

from app.core.auth import get_current_user
from app.core.errors import MarketplaceError, as_http_exception
from app.database.deps import get_db
from app.models.bid import BID_STATUS_HIRED, Bid
from app.models.gig import Gig
from app.models.user import User
from app.routes.gigs import build_gig_out
from app.schemas.bid import BidCreate, BidOut, BidWithGigOut
from app.services.bids import place_bid
from app.services.notifications import new_hires, parse_seen_ids

router = APIRouter(prefix="/bids", tags=["Bids"])


def build_bid_out(bid: Bid, freelancer_name: Optional[str]) -> BidOut:
    return BidOut(
        id=bid.id,
        gig_id=bid.gig_id,
        freelancer_id=bid.freelancer_id,
        freelancer_name=freelancer_name,
        message=bid.message,
        price=bid.price,
        status=bid.status,
        created_at=bid.created_at,
    )


@router.get("/", response_model=list[BidOut])
def list_bids(
    gig_id: Optional[int] = Query(default=None),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    query = db.query(Bid, User.name).join(User, User.id == Bid.freelancer_id)
    if gig_id is not None:
        gig = db.query(Gig).filter(Gig.id == gig_id).first()
        if not gig:
            raise HTTPException(status_code=404, detail="Gig não encontrado")
        query = query.filter(Bid.gig_id == gig_id)
        # Somente o dono do gig enxerga as propostas dos outros freelancers.
        if gig.owner_id != current_user.id:
            query = query.filter(Bid.freelancer_id == current_user.id)
    else:
        query = query.filter(Bid.freelancer_id == current_user.id)

    rows = query.order_by(Bid.created_at.asc(), Bid.id.asc()).all()
    return [build_bid_out(bid, freelancer_name) for bid, freelancer_name in rows]


@router.post("/", response_model=BidOut, status_code=status.HTTP_201_CREATED)
def create_bid(
    payload: BidCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    try:
        bid = place_bid(db, current_user.id, payload.gig_id, payload.message, payload.price)
    except MarketplaceError as exc:
        raise as_http_exception(exc)
    return build_bid_out(bid, current_user.name)


@router.get("/mine", response_model=list[BidWithGigOut])
def list_my_bids(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    owner = aliased(User)
    rows = (
        db.query(Bid, Gig, owner.name)
        .join(Gig, Gig.id == Bid.gig_id)
        .join(owner, owner.id == Gig.owner_id)
        .filter(Bid.freelancer_id == current_user.id)
        .order_by(Bid.created_at.desc(), Bid.id.desc())
        .all()
    )
    return [
        BidWithGigOut(bid=build_bid_out(bid, current_user.name), gig=build_gig_out(gig, owner_name))
        for bid, gig, owner_name in rows
    ]


@router.get("/hires", response_model=list[BidOut])
def list_new_hires(
    seen: str = Query(default=""),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    rows = (
        db.query(Bid)
        .filter(Bid.freelancer_id == current_user.id, Bid.status == BID_STATUS_HIRED)
        .order_by(Bid.id.asc())
        .all()
    )
    return [build_bid_out(bid, current_user.name) for bid in new_hires(rows, parse_seen_ids(seen))]
