from __future__ import annotations

import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from sqlalchemy import (
    String,
    Integer,
    Boolean,
    DateTime,
    ForeignKey,
    UniqueConstraint,
    Index,
    Text,
    Uuid,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship, validates

from ..session import Base
from ...utils.normalize import normalize_text


def utcnow() -> datetime:
    """Naive UTC timestamp, the convention for every DateTime column here."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


class SortBy(str, Enum):
    popular = "popular"
    recent = "recent"


class SearchType(str, Enum):
    video = "video"
    channel = "channel"


def _normalized_from(column: str):
    def _default(context) -> str:
        return normalize_text(context.get_current_parameters().get(column))
    return _default


class Video(Base):
    __tablename__ = "videos"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    link: Mapped[str] = mapped_column(String(1000), nullable=False)
    youtube_id: Mapped[str] = mapped_column(String(64), nullable=False)
    published_at: Mapped[Optional[datetime]] = mapped_column(DateTime)
    title: Mapped[str] = mapped_column(String(500), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text)
    thumbnail: Mapped[Optional[str]] = mapped_column(String(1000))
    channel_title: Mapped[str] = mapped_column(String(300), nullable=False)
    channel_id: Mapped[Optional[str]] = mapped_column(String(100))
    user_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    visits: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    # Search columns; kept in step with title/channel_title on insert and on ORM edits
    normalized_title: Mapped[str] = mapped_column(String(500), default=_normalized_from("title"), nullable=False)
    normalized_channel_title: Mapped[str] = mapped_column(
        String(300), default=_normalized_from("channel_title"), nullable=False
    )
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    __table_args__ = (
        UniqueConstraint("youtube_id", name="uq_video_youtube_id"),
        Index("ix_video_active_created", "is_active", "created_at"),
        Index("ix_video_user", "user_id"),
        Index("ix_video_normalized_title", "normalized_title"),
        Index("ix_video_normalized_channel", "normalized_channel_title"),
    )

    @validates("title", "channel_title")
    def _sync_normalized(self, key: str, value: str) -> str:
        # Core UPDATEs that change a title must set the normalized column themselves
        setattr(self, f"normalized_{key}", normalize_text(value))
        return value


class Bookmark(Base):
    __tablename__ = "bookmarks"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    video_id: Mapped[uuid.UUID] = mapped_column(ForeignKey("videos.id", ondelete="CASCADE"), nullable=False)
    user_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    video: Mapped[Video] = relationship(backref="bookmarks")

    __table_args__ = (
        UniqueConstraint("video_id", "user_id", name="uq_bookmark_video_user"),
        Index("ix_bookmark_user_created", "user_id", "created_at"),
    )
