from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from app.schemas.gig import GigOut

class BidCreate(BaseModel):
    gig_id: int
    message: str = Field(min_length=1)
    price: float = Field(gt=0)

class BidOut(BaseModel):
    id: int
    gig_id: int
    freelancer_id: int
    freelancer_name: Optional[str] = None
    message: str
    price: float
    status: str
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True

class BidWithGigOut(BaseModel):
    bid: BidOut
    gig: GigOut
