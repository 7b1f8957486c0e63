from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from app.core.auth import get_current_user
from app.database.deps import get_db
from app.models.gig import GIG_STATUS_OPEN, Gig
from app.models.user import User
from app.schemas.gig import GigCreate, GigOut

router = APIRouter(prefix="/gigs", tags=["Gigs"])


def build_gig_out(gig: Gig, owner_name: Optional[str]) -> GigOut:
    return GigOut(
        id=gig.id,
        title=gig.title,
        description=gig.description,
        budget=gig.budget,
        owner_id=gig.owner_id,
        owner_name=owner_name,
        status=gig.status,
        created_at=gig.created_at,
    )


@router.get("/", response_model=list[GigOut])
def list_gigs(
    search: Optional[str] = Query(default=None),
    owner_id: Optional[int] = Query(default=None),
    db: Session = Depends(get_db),
):
    query = db.query(Gig, User.name).join(User, User.id == Gig.owner_id)
    if owner_id is not None:
        query = query.filter(Gig.owner_id == owner_id)
    else:
        query = query.filter(Gig.status == GIG_STATUS_OPEN)

    term = str(search or "").strip()
    if term:
        query = query.filter(Gig.title.ilike(f"%{term}%"))

    rows = query.order_by(Gig.created_at.desc(), Gig.id.desc()).all()
    return [build_gig_out(gig, owner_name) for gig, owner_name in rows]


@router.get("/{gig_id}", response_model=GigOut)
def read_gig(gig_id: int, db: Session = Depends(get_db)):
    row = (
        db.query(Gig, User.name)
        .join(User, User.id == Gig.owner_id)
        .filter(Gig.id == gig_id)
        .first()
    )
    if not row:
        raise HTTPException(status_code=404, detail="Gig não encontrado")
    gig, owner_name = row
    return build_gig_out(gig, owner_name)


@router.post("/", response_model=GigOut, status_code=status.HTTP_201_CREATED)
def create_gig(
    payload: GigCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    gig = Gig(
        title=payload.title.strip(),
        description=payload.description.strip(),
        budget=payload.budget,
        owner_id=current_user.id,
        status=GIG_STATUS_OPEN,
    )
    db.add(gig)
    db.commit()
    db.refresh(gig)
    return build_gig_out(gig, current_user.name)
