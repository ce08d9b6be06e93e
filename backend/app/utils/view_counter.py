"""
View counter: bump ``visits`` and read the video back in one transaction.

The increment is evaluated by the database (``visits = visits + 1 ... RETURNING``),
so concurrent viewers never lose an update and each sees its own new count.
"""
from __future__ import annotations

import contextlib
import logging
import uuid
from typing import Optional

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.errors import VideoNotFoundError
from ..db.models.models import Bookmark, Video
from .catalog_search import RankedVideo
from .popularity import popularity_score
from .storage import run_bounded

logger = logging.getLogger("backend.app.views")


def _transaction(session: AsyncSession):
    # A caller's open transaction owns commit and rollback; otherwise the view is its own unit
    if session.in_transaction():
        return contextlib.nullcontext()
    return session.begin()


async def _view(session: AsyncSession, video_id: uuid.UUID) -> RankedVideo:
    async with _transaction(session):
        stmt = (
            update(Video)
            .where(Video.id == video_id, Video.is_active.is_(True))
            # a view is not an edit: keep updated_at as it was
            .values(visits=Video.visits + 1, updated_at=Video.updated_at)
            .returning(*Video.__table__.c)
        )
        row = (await session.execute(stmt)).one_or_none()
        if row is None:
            raise VideoNotFoundError(video_id)
        bookmark_count = (
            await session.execute(
                select(func.count(Bookmark.id)).where(Bookmark.video_id == video_id)
            )
        ).scalar_one()

    # Transient copy of the returned row; later views in this session leave it alone
    video = Video(**row._mapping)
    logger.debug("video %s viewed, visits=%s", video_id, video.visits)
    return RankedVideo(
        video=video,
        bookmark_count=int(bookmark_count),
        popularity_score=popularity_score(int(bookmark_count), video.visits),
    )


async def view_video(session: AsyncSession, video_id: uuid.UUID, timeout: Optional[float] = None) -> RankedVideo:
    """Increment the view count of an active video and return it with its bookmark count.

    The returned video is a snapshot of the row as this call left it, not a
    session-tracked object.

    Raises :class:`VideoNotFoundError` when no active video has ``video_id``; nothing
    is written in that case. When the call opened the transaction itself, that
    rollback also expires the objects loaded in ``session``. Inside a transaction
    the caller already holds, the increment commits or rolls back with it.
    """
    return await run_bounded(_view(session, video_id), "record video view", timeout)
