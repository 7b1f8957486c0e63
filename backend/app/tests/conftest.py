import os
import tempfile
from pathlib import Path
from uuid import uuid4

import pytest

TEST_DB_FILE = Path(tempfile.gettempdir()) / f"test_gigflow_{uuid4().hex}.db"
os.environ["DATABASE_URL"] = f"sqlite:///{TEST_DB_FILE.as_posix()}"
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("ALGORITHM", "HS256")
os.environ.setdefault("ACCESS_TOKEN_EXPIRE_MINUTES", "60")
os.environ.setdefault("DB_BOOTSTRAP_MODE", "off")
os.environ.setdefault("NOTIFICATION_MODE", "push")

from app.core.security import get_password_hash  # noqa: E402
from app.database.base import Base  # noqa: E402
from app.database.session import SessionLocal, engine  # noqa: E402
from app.models.bid import Bid  # noqa: E402
from app.models.gig import Gig  # noqa: E402
from app.models.user import User  # noqa: E402


@pytest.fixture(autouse=True)
def reset_database():
    engine.dispose()
    if TEST_DB_FILE.exists():
        TEST_DB_FILE.unlink()
    Base.metadata.create_all(bind=engine)
    try:
        yield
    finally:
        Base.metadata.drop_all(bind=engine)
        engine.dispose()
        if TEST_DB_FILE.exists():
            TEST_DB_FILE.unlink()


@pytest.fixture
def db_session():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def create_user(db, name: str) -> User:
    suffix = uuid4().hex[:8]
    user = User(
        name=name,
        email=f"{name.lower().replace(' ', '.')}.{suffix}@test.local",
        password=get_password_hash("Senha@123"),
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def create_gig(db, owner: User, title: str = "App de entregas", budget: float = 500) -> Gig:
    gig = Gig(
        title=title,
        description="Procuro alguém para construir um app de entregas.",
        budget=budget,
        owner_id=owner.id,
        status="open",
    )
    db.add(gig)
    db.commit()
    db.refresh(gig)
    return gig


def create_bid(db, gig: Gig, freelancer: User, price: float) -> Bid:
    bid = Bid(
        gig_id=gig.id,
        freelancer_id=freelancer.id,
        message=f"Proposta de {freelancer.name}",
        price=price,
        status="pending",
    )
    db.add(bid)
    db.commit()
    db.refresh(bid)
    return bid


def snapshot(gig_id: int) -> tuple[str, dict[int, str]]:
    """Estado gravado no banco, lido por uma sessão independente."""
    db = SessionLocal()
    try:
        gig = db.query(Gig).filter(Gig.id == gig_id).first()
        bids = db.query(Bid).filter(Bid.gig_id == gig_id).all()
        return (gig.status if gig else None), {bid.id: bid.status for bid in bids}
    finally:
        db.close()


@pytest.fixture
def marketplace(db_session):
    """Gig G1 aberto com duas propostas pendentes (F1 por 100, F2 por 120)."""
    owner = create_user(db_session, "Alice Client")
    f1 = create_user(db_session, "Bruno Freelancer")
    f2 = create_user(db_session, "Carla Freelancer")
    gig = create_gig(db_session, owner)
    b1 = create_bid(db_session, gig, f1, 100)
    b2 = create_bid(db_session, gig, f2, 120)
    return {"owner": owner, "f1": f1, "f2": f2, "gig": gig, "b1": b1, "b2": b2}
