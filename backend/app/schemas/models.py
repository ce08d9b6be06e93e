from __future__ import annotations

import uuid
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict

from .common import Timestamps


class VideoRead(Timestamps):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    link: str
    youtube_id: str
    published_at: Optional[datetime] = None
    title: str
    description: Optional[str] = None
    thumbnail: Optional[str] = None
    channel_title: str
    channel_id: Optional[str] = None
    user_id: uuid.UUID
    is_active: bool
    visits: int


class RankedVideoRead(VideoRead):
    bookmark_count: int = 0
    relevance_score: float = 0.0
    popularity_score: float = 0.0
    # Only present on personalized listings
    is_bookmarked: Optional[bool] = None


class PageResultRead(BaseModel):
    videos: List[RankedVideoRead]
    page: int
    limit: int
    total: int
    has_more: bool


class SuggestionRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    title: str
    channel_title: str


class BookmarkedVideoRead(VideoRead):
    bookmarked_at: datetime
