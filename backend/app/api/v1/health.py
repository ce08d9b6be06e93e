from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

try:
    from ...core.config import settings  # type: ignore
    from ...db.session import get_session  # type: ignore
    from ...utils.storage import run_bounded  # type: ignore
except Exception:  # pragma: no cover
    from core.config import settings  # type: ignore
    from db.session import get_session  # type: ignore
    from utils.storage import run_bounded  # type: ignore

router = APIRouter(tags=["health"])


@router.get("/health")
def health():
    return {"status": "ok"}


@router.get("/health/db")
async def health_db(session: AsyncSession = Depends(get_session)):
    """Round-trip a trivial query through the catalog store."""
    await run_bounded(session.execute(text("SELECT 1")), "ping database", settings.query_timeout_seconds)
    return {"status": "ok", "database": "reachable"}


@router.get("/info")
def info():
    """Return application info: name and version."""
    return {"name": settings.app_name, "version": settings.version}
