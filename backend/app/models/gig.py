from sqlalchemy import Column, DateTime, Float, ForeignKey, Index, Integer, String, Text, func

from app.database.base import Base

GIG_STATUS_OPEN = "open"
GIG_STATUS_ASSIGNED = "assigned"
GIG_STATUSES = {GIG_STATUS_OPEN, GIG_STATUS_ASSIGNED}


class Gig(Base):
    __tablename__ = "gigs"
    __table_args__ = (
        Index("ix_gigs_status_created_at", "status", "created_at"),
    )

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=False)
    budget = Column(Float, nullable=False)
    owner_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    status = Column(String(20), nullable=False, default=GIG_STATUS_OPEN, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False, index=True)
