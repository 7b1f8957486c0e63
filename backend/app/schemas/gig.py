from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

class GigCreate(BaseModel):
    title: str = Field(min_length=1, max_length=200)
    description: str = Field(min_length=1)
    budget: float = Field(gt=0)

class GigOut(BaseModel):
    id: int
    title: str
    description: str
    budget: float
    owner_id: int
    owner_name: Optional[str] = None
    status: str
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True
