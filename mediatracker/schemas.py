from __future__ import annotations
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from .models import MediaStatus, MediaType

# Largest value an INTEGER column holds
MAX_INT64 = 2**63 - 1


class MediaCreate(BaseModel):
    title: str
    type: MediaType
    status: MediaStatus
    rating: Optional[float] = Field(default=None, ge=0.0, le=5.0)
    review: Optional[str] = None
    release_date: Optional[str] = None
    total_pages: Optional[int] = Field(default=None, ge=0, le=MAX_INT64)


class MediaUpdate(BaseModel):
    """Full replacement of an item's editable fields."""

    title: str
    type: MediaType
    status: MediaStatus
    rating: Optional[float] = Field(default=None, ge=0.0, le=5.0)
    review: Optional[str] = None
    release_date: Optional[str] = None
    pages_read: int = Field(default=0, ge=0, le=MAX_INT64)
    is_finished: bool = False


class Media(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    title: str
    type: MediaType
    status: MediaStatus
    rating: Optional[float] = None
    review: Optional[str] = None
    release_date: Optional[str] = None
    pages_read: int = 0
    total_pages: Optional[int] = None
    is_finished: bool = False
    date_added: datetime
    date_completed: Optional[datetime] = None


class MediaCreated(BaseModel):
    id: int
    message: str


class Message(BaseModel):
    message: str


class DailyPages(BaseModel):
    pages: int = Field(ge=-MAX_INT64 - 1, le=MAX_INT64)


class DailyLeaderboardEntry(BaseModel):
    username: str
    profile_picture: Optional[str] = None
    pages_read: int


class AnnualLeaderboardEntry(BaseModel):
    username: str
    profile_picture: Optional[str] = None
    count: int
