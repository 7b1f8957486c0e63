from typing import Literal

from pydantic import BaseModel


class HireRequest(BaseModel):
    gig_id: int
    bid_id: int


class HireOut(BaseModel):
    success: bool = True
    gig_id: int
    bid_id: int


class HireNotification(BaseModel):
    """Evento enviado ao freelancer contratado."""

    type: Literal["bid.hired"] = "bid.hired"
    bid_id: int
    gig_id: int
    gig_title: str
    freelancer_id: int
    price: float
