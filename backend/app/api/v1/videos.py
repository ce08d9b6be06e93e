import uuid
from typing import List, Optional

from fastapi import APIRouter, Depends, Header, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

try:
    from ...db.session import get_session  # type: ignore
    from ...core.config import settings  # type: ignore
    from ...core.errors import CatalogValidationError  # type: ignore
    from ...schemas.common import ErrorResponse  # type: ignore
    from ...schemas.models import (
        BookmarkedVideoRead,
        PageResultRead,
        RankedVideoRead,
        SuggestionRead,
        VideoRead,
    )  # type: ignore
    from ...utils.autocomplete import suggest  # type: ignore
    from ...utils.catalog_search import CatalogSearchEngine, RankedVideo  # type: ignore
    from ...utils.query_params import normalize_search_request  # type: ignore
    from ...utils.view_counter import view_video  # type: ignore
except Exception:  # pragma: no cover
    from db.session import get_session  # type: ignore
    from core.config import settings  # type: ignore
    from core.errors import CatalogValidationError  # type: ignore
    from schemas.common import ErrorResponse  # type: ignore
    from schemas.models import (
        BookmarkedVideoRead,
        PageResultRead,
        RankedVideoRead,
        SuggestionRead,
        VideoRead,
    )  # type: ignore
    from utils.autocomplete import suggest  # type: ignore
    from utils.catalog_search import CatalogSearchEngine, RankedVideo  # type: ignore
    from utils.query_params import normalize_search_request  # type: ignore
    from utils.view_counter import view_video  # type: ignore


router = APIRouter(
    prefix="/videos",
    tags=["videos"],
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)


def current_user_id(x_user_id: Optional[str] = Header(None)) -> Optional[uuid.UUID]:
    """Identity resolved upstream by the auth layer, forwarded as ``X-User-ID``."""
    if x_user_id is None or not x_user_id.strip():
        return None
    try:
        return uuid.UUID(x_user_id.strip())
    except ValueError:
        raise CatalogValidationError("X-User-ID must be a UUID") from None


def require_user_id(user_id: Optional[uuid.UUID] = Depends(current_user_id)) -> uuid.UUID:
    if user_id is None:
        raise HTTPException(status_code=401, detail="Not Authorized")
    return user_id


def _ranked_read(item: RankedVideo) -> RankedVideoRead:
    base = VideoRead.model_validate(item.video).model_dump()
    return RankedVideoRead(
        **base,
        bookmark_count=item.bookmark_count,
        relevance_score=item.relevance_score,
        popularity_score=item.popularity_score,
        is_bookmarked=item.is_bookmarked,
    )


@router.get("", response_model=PageResultRead)
@router.get("/", response_model=PageResultRead, include_in_schema=False)
async def list_videos(
    session: AsyncSession = Depends(get_session),
    user_id: Optional[uuid.UUID] = Depends(current_user_id),
    page: Optional[str] = Query(None, description="Page number, starting at 1"),
    limit: Optional[str] = Query(None, description="Page size, 1-100"),
    sort_by: Optional[str] = Query(None, alias="sortBy", description="popular (default) or recent"),
    q: Optional[str] = Query(None, description="Free-text search"),
    search_type: Optional[str] = Query(None, alias="type", description="video (default) or channel"),
):
    """Ranked, paginated listing; personalized with ``is_bookmarked`` when a user is known."""
    request = normalize_search_request(page, limit, sort_by=sort_by, query=q, search_type=search_type)
    engine = CatalogSearchEngine(session, timeout=settings.query_timeout_seconds)
    result = await engine.search(request, user_id=user_id)
    return PageResultRead(
        videos=[_ranked_read(v) for v in result.videos],
        page=result.page,
        limit=result.limit,
        total=result.total,
        has_more=result.has_more,
    )


@router.get("/autocomplete", response_model=List[SuggestionRead])
async def autocomplete(
    session: AsyncSession = Depends(get_session),
    q: Optional[str] = Query(None, description="Name fragment, at least 2 characters"),
):
    return await suggest(session, q, timeout=settings.query_timeout_seconds)


@router.get("/mine", response_model=List[VideoRead], responses={401: {"model": ErrorResponse}})
async def list_my_videos(
    session: AsyncSession = Depends(get_session),
    user_id: uuid.UUID = Depends(require_user_id),
):
    engine = CatalogSearchEngine(session, timeout=settings.query_timeout_seconds)
    return await engine.videos_by_owner(user_id)


@router.get("/bookmarked", response_model=List[BookmarkedVideoRead], responses={401: {"model": ErrorResponse}})
async def list_bookmarked_videos(
    session: AsyncSession = Depends(get_session),
    user_id: uuid.UUID = Depends(require_user_id),
):
    engine = CatalogSearchEngine(session, timeout=settings.query_timeout_seconds)
    items = await engine.bookmarked_videos(user_id)
    return [
        BookmarkedVideoRead(**VideoRead.model_validate(item.video).model_dump(), bookmarked_at=item.bookmarked_at)
        for item in items
    ]


@router.get("/{video_id}", response_model=RankedVideoRead, responses={404: {"model": ErrorResponse}})
async def get_video(video_id: uuid.UUID, session: AsyncSession = Depends(get_session)):
    """Fetch one active video; every call counts as a view."""
    item = await view_video(session, video_id, timeout=settings.query_timeout_seconds)
    return _ranked_read(item)
