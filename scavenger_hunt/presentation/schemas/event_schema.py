from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class EventCreate(BaseModel):
    title: str = Field(..., min_length=1)
    slug: Optional[str] = None
    description: Optional[str] = None
    date: Optional[datetime] = None


class EventOut(BaseModel):
    id: str
    title: str
    slug: str
    description: Optional[str] = None
    date: Optional[datetime] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class SlugCheckOut(BaseModel):
    slug: str
    available: bool
