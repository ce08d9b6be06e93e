from datetime import datetime, timedelta
from pathlib import Path
import os
import sys
import uuid

import pytest
from httpx import ASGITransport, AsyncClient

# Ensure project root is importable for tests
ROOT = Path(__file__).resolve().parents[2]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

"""
Test configuration

Every test gets its own in-memory SQLite engine (StaticPool, so all sessions
share one connection) with the text-matching functions registered. API tests
override the app's session dependency to point at that engine.
"""
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")
os.environ.setdefault("QUERY_TIMEOUT_SECONDS", "5")

from backend.app.db.session import Base, build_engine, build_sessionmaker, get_session  # noqa: E402
from backend.app.db.models.models import Bookmark, Video  # noqa: E402
from backend.app.main import app  # noqa: E402

BASE_TIME = datetime(2024, 1, 1, 12, 0, 0)


async def _create_engine(url: str):
    engine = build_engine(url)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    return engine


@pytest.fixture
async def engine():
    eng = await _create_engine("sqlite+aiosqlite://")
    yield eng
    await eng.dispose()


@pytest.fixture
async def file_engine(tmp_path):
    """File-backed engine with a real connection pool, for concurrency tests."""
    eng = await _create_engine(f"sqlite+aiosqlite:///{tmp_path / 'catalog.db'}")
    yield eng
    await eng.dispose()


@pytest.fixture
def session_factory(engine):
    return build_sessionmaker(engine)


@pytest.fixture
async def session(session_factory):
    async with session_factory() as s:
        yield s


@pytest.fixture
async def client(session_factory):
    async def _session_override():
        async with session_factory() as s:
            try:
                yield s
                await s.commit()
            except Exception:
                await s.rollback()
                raise

    app.dependency_overrides[get_session] = _session_override
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.pop(get_session, None)


def make_video(title: str, channel: str = "Some Channel", *, minutes: int = 0, **overrides) -> Video:
    """Build an active video; ``minutes`` offsets created_at from a fixed base time."""
    n = uuid.uuid4().hex[:11]
    fields = dict(
        link=f"https://www.youtube.com/watch?v={n}",
        youtube_id=n,
        published_at=BASE_TIME,
        title=title,
        description=f"About {title}",
        thumbnail=f"https://i.ytimg.com/vi/{n}/hqdefault.jpg",
        channel_title=channel,
        channel_id=f"UC{n}",
        user_id=uuid.uuid4(),
        is_active=True,
        visits=0,
        created_at=BASE_TIME + timedelta(minutes=minutes),
        updated_at=BASE_TIME + timedelta(minutes=minutes),
    )
    fields.update(overrides)
    return Video(**fields)


async def add_videos(session, *videos: Video):
    session.add_all(videos)
    await session.commit()
    return list(videos)


async def add_bookmarks(session, video: Video, *user_ids: uuid.UUID):
    for i, uid in enumerate(user_ids):
        session.add(Bookmark(video_id=video.id, user_id=uid, created_at=BASE_TIME + timedelta(minutes=i)))
    await session.commit()
