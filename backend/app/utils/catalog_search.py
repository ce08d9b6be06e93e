"""
Catalog search engine.

Turns a normalized :class:`SearchRequest` into one page of ranked videos plus the
total number of matches. The count and the page share the same inclusion
predicate; the personalized variant only adds an ``is_bookmarked`` column, so it
never changes membership, order or total.
"""
from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional

from sqlalchemy import Select, func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql.elements import ColumnElement

from ..db.models.models import Bookmark, SortBy, Video
from .popularity import popularity_expression
from .query_params import SearchRequest
from .relevance import Relevance, build_relevance
from .storage import run_bounded

logger = logging.getLogger("backend.app.catalog")


@dataclass
class RankedVideo:
    video: Video
    bookmark_count: int = 0
    relevance_score: float = 0.0
    popularity_score: float = 0.0
    # None on anonymous listings
    is_bookmarked: Optional[bool] = None


@dataclass
class PageResult:
    videos: List[RankedVideo]
    page: int
    limit: int
    total: int
    has_more: bool


@dataclass
class BookmarkedVideo:
    video: Video
    bookmarked_at: datetime


def bookmark_counts():
    """Per-video bookmark totals, for LEFT JOIN onto videos."""
    return (
        select(Bookmark.video_id.label("video_id"), func.count(Bookmark.id).label("bookmark_count"))
        .group_by(Bookmark.video_id)
        .subquery("bookmark_counts")
    )


def bookmarked_by(user_id: uuid.UUID) -> ColumnElement[bool]:
    return (
        select(Bookmark.id)
        .where(Bookmark.video_id == Video.id, Bookmark.user_id == user_id)
        .correlate(Video)
        .exists()
    )


def ranked_select(relevance: Relevance, user_id: Optional[uuid.UUID] = None):
    """Select of videos with bookmark count, relevance and popularity columns.

    Returns ``(statement, relevance_label, popularity_label)``; the labels are
    reused for ordering.
    """
    counts = bookmark_counts()
    bookmark_count = func.coalesce(counts.c.bookmark_count, 0).label("bookmark_count")
    rank = relevance.score.label("relevance_score")
    popularity = popularity_expression(counts.c.bookmark_count, Video.visits).label("popularity_score")
    columns: list = [Video, bookmark_count, rank, popularity]
    if user_id is not None:
        columns.append(bookmarked_by(user_id).label("is_bookmarked"))
    stmt = select(*columns).outerjoin(counts, counts.c.video_id == Video.id)
    return stmt, rank, popularity


def order_clauses(request: SearchRequest, rank, popularity) -> list:
    """Sort keys for a listing; relevance joins in whenever there is search text.

    ``created_at`` then ``id`` close every ordering so pages never overlap.
    """
    if request.sort_by is SortBy.recent:
        keys = [rank.desc()] if request.has_query else []
    else:
        keys = [popularity.desc()]
        if request.has_query:
            keys.append(rank.desc())
    keys.extend([Video.created_at.desc(), Video.id.asc()])
    return keys


def _to_ranked(row, personalized: bool) -> RankedVideo:
    return RankedVideo(
        video=row[0],
        bookmark_count=int(row.bookmark_count or 0),
        relevance_score=float(row.relevance_score or 0.0),
        popularity_score=float(row.popularity_score or 0.0),
        is_bookmarked=bool(row.is_bookmarked) if personalized else None,
    )


class CatalogSearchEngine:
    """Read paths over the video catalog. Holds no state beyond its session."""

    def __init__(self, session: AsyncSession, timeout: Optional[float] = None) -> None:
        self.session = session
        self.timeout = timeout

    async def search(self, request: SearchRequest, user_id: Optional[uuid.UUID] = None) -> PageResult:
        """One page of ranked videos; with ``user_id`` each row also carries ``is_bookmarked``."""
        return await run_bounded(self._search(request, user_id), "search videos", self.timeout)

    async def count(self, request: SearchRequest) -> int:
        relevance = build_relevance(request.query, request.search_type)
        return await run_bounded(self._count(relevance), "count videos", self.timeout)

    async def videos_by_owner(self, user_id: uuid.UUID) -> List[Video]:
        return await run_bounded(self._videos_by_owner(user_id), "list videos by owner", self.timeout)

    async def bookmarked_videos(self, user_id: uuid.UUID) -> List[BookmarkedVideo]:
        return await run_bounded(self._bookmarked_videos(user_id), "list bookmarked videos", self.timeout)

    async def _count(self, relevance: Relevance) -> int:
        stmt = select(func.count()).select_from(Video).where(relevance.predicate.to_clause())
        return int((await self.session.execute(stmt)).scalar_one())

    def _page_statement(self, request: SearchRequest, relevance: Relevance, user_id: Optional[uuid.UUID]) -> Select:
        stmt, rank, popularity = ranked_select(relevance, user_id)
        return (
            stmt.where(relevance.predicate.to_clause())
            .order_by(*order_clauses(request, rank, popularity))
            .limit(request.limit)
            .offset(request.offset)
        )

    async def _search(self, request: SearchRequest, user_id: Optional[uuid.UUID]) -> PageResult:
        relevance = build_relevance(request.query, request.search_type)
        total = await self._count(relevance)

        stmt = self._page_statement(request, relevance, user_id)
        rows = (await self.session.execute(stmt)).all()
        videos = [_to_ranked(row, user_id is not None) for row in rows]

        has_more = request.offset + len(videos) < total
        logger.debug(
            "search page=%s limit=%s sort=%s type=%s query=%r personalized=%s -> %s/%s",
            request.page,
            request.limit,
            request.sort_by.value,
            request.search_type.value,
            request.query,
            user_id is not None,
            len(videos),
            total,
        )
        return PageResult(videos=videos, page=request.page, limit=request.limit, total=total, has_more=has_more)

    async def _videos_by_owner(self, user_id: uuid.UUID) -> List[Video]:
        stmt = select(Video).where(Video.user_id == user_id).order_by(Video.created_at.desc(), Video.id.asc())
        return list((await self.session.execute(stmt)).scalars().all())

    async def _bookmarked_videos(self, user_id: uuid.UUID) -> List[BookmarkedVideo]:
        stmt = (
            select(Video, Bookmark.created_at.label("bookmarked_at"))
            .join(Bookmark, Bookmark.video_id == Video.id)
            .where(Bookmark.user_id == user_id, Video.is_active.is_(True))
            .order_by(Bookmark.created_at.desc())
        )
        rows = (await self.session.execute(stmt)).all()
        return [BookmarkedVideo(video=row[0], bookmarked_at=row.bookmarked_at) for row in rows]
