from sqlalchemy import Column, DateTime, Float, ForeignKey, Integer, String, Text, UniqueConstraint, func

from app.database.base import Base

BID_STATUS_PENDING = "pending"
BID_STATUS_HIRED = "hired"
BID_STATUS_REJECTED = "rejected"
BID_STATUSES = {BID_STATUS_PENDING, BID_STATUS_HIRED, BID_STATUS_REJECTED}


class Bid(Base):
    __tablename__ = "bids"
    __table_args__ = (
        UniqueConstraint("gig_id", "freelancer_id", name="uq_bids_gig_freelancer"),
    )

    id = Column(Integer, primary_key=True, index=True)
    gig_id = Column(Integer, ForeignKey("gigs.id"), nullable=False, index=True)
    freelancer_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    message = Column(Text, nullable=False)
    price = Column(Float, nullable=False)
    status = Column(String(20), nullable=False, default=BID_STATUS_PENDING, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
