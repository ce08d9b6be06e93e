import uuid
from datetime import timedelta

import pytest
from sqlalchemy.exc import OperationalError

from backend.app.core.errors import StorageError
from backend.app.db.models.models import Bookmark
from backend.app.utils.catalog_search import CatalogSearchEngine
from backend.app.utils.query_params import normalize_search_request
from backend.app.utils.ranking_config import RankingConfig

from conftest import BASE_TIME, add_bookmarks, add_videos, make_video


def _titles(result):
    return [rv.video.title for rv in result.videos]


@pytest.mark.asyncio
async def test_go_search_excludes_unrelated_titles(session):
    await add_videos(
        session,
        make_video("Intro to Go", minutes=1),
        make_video("Go Concurrency", minutes=2),
        make_video("Rust Basics", minutes=3),
    )
    engine = CatalogSearchEngine(session)
    req = normalize_search_request("1", "10", query="go", search_type="video")

    result = await engine.search(req)

    assert sorted(_titles(result)) == ["Go Concurrency", "Intro to Go"]
    assert result.total == 2
    assert result.has_more is False
    assert all(rv.relevance_score > 0 for rv in result.videos)


@pytest.mark.asyncio
async def test_pagination_over_static_dataset(session):
    await add_videos(session, *[make_video(f"Video {i:02d}", minutes=i) for i in range(15)])
    engine = CatalogSearchEngine(session)

    first = await engine.search(normalize_search_request(1, 10))
    second = await engine.search(normalize_search_request(2, 10))

    assert (len(first.videos), first.has_more, first.total) == (10, True, 15)
    assert (len(second.videos), second.has_more, second.total) == (5, False, 15)
    ids = [rv.video.id for rv in first.videos + second.videos]
    assert len(set(ids)) == 15


@pytest.mark.asyncio
async def test_page_beyond_end_is_empty(session):
    await add_videos(session, make_video("Only one"))
    result = await CatalogSearchEngine(session).search(normalize_search_request(3, 10))
    assert result.videos == []
    assert result.total == 1
    assert result.has_more is False


@pytest.mark.asyncio
@pytest.mark.parametrize("page,limit", [(1, 1), (2, 2), (3, 2), (1, 7), (2, 3)])
async def test_has_more_matches_offset_arithmetic(session, page, limit):
    await add_videos(session, *[make_video(f"Clip {i}", minutes=i) for i in range(7)])
    req = normalize_search_request(page, limit)
    result = await CatalogSearchEngine(session).search(req)
    assert result.has_more == (req.offset + len(result.videos) < result.total)
    assert result.page == page and result.limit == limit


@pytest.mark.asyncio
async def test_inactive_videos_are_never_listed(session):
    await add_videos(
        session,
        make_video("Go live", minutes=1),
        make_video("Go hidden", minutes=2, is_active=False),
    )
    engine = CatalogSearchEngine(session)
    for req in (normalize_search_request(1, 10), normalize_search_request(1, 10, query="go")):
        result = await engine.search(req)
        assert _titles(result) == ["Go live"]
        assert result.total == 1


@pytest.mark.asyncio
async def test_popular_orders_by_bookmarks_and_views(session):
    a, b, c = await add_videos(
        session,
        make_video("A", minutes=1, visits=10),
        make_video("B", minutes=2, visits=20),
        make_video("C", minutes=3, visits=0),
    )
    await add_bookmarks(session, a, uuid.uuid4(), uuid.uuid4())
    await add_bookmarks(session, c, uuid.uuid4())

    result = await CatalogSearchEngine(session).search(normalize_search_request(1, 10, sort_by="popular"))

    assert _titles(result) == ["B", "A", "C"]
    by_title = {rv.video.title: rv for rv in result.videos}
    assert by_title["A"].bookmark_count == 2
    assert by_title["A"].popularity_score == 16.0
    assert by_title["C"].popularity_score == 3.0
    assert by_title["B"].relevance_score == 0.0


@pytest.mark.asyncio
async def test_recent_orders_newest_first(session):
    await add_videos(
        session,
        make_video("Old", minutes=1, visits=100),
        make_video("New", minutes=5),
        make_video("Middle", minutes=3),
    )
    result = await CatalogSearchEngine(session).search(normalize_search_request(1, 10, sort_by="recent"))
    assert _titles(result) == ["New", "Middle", "Old"]


@pytest.mark.asyncio
async def test_recent_with_query_ranks_by_relevance_first(session):
    await add_videos(
        session,
        # substring only ("conc" is not a word of the title): 1.5
        make_video("Go Concurrency", minutes=1),
        # full-text hit for "conc": rank * 2.0, well below 1.5
        make_video("Conc tricks", minutes=9),
    )
    req = normalize_search_request(1, 10, sort_by="recent", query="conc")
    result = await CatalogSearchEngine(session).search(req)
    assert _titles(result) == ["Go Concurrency", "Conc tricks"]


@pytest.mark.asyncio
async def test_relevance_tiers(session):
    await add_videos(
        session,
        make_video("Go Concurrency", "Gophers", minutes=1),
        make_video("Concurrency in Go", "Gophers", minutes=2),
    )
    engine = CatalogSearchEngine(session)

    async def score(query, title):
        result = await engine.search(normalize_search_request(1, 10, query=query))
        return {rv.video.title: rv.relevance_score for rv in result.videos}.get(title)

    # full-text and substring both apply: the full-text tier wins
    fulltext_score = await score("concurrency", "Go Concurrency")
    assert fulltext_score is not None
    assert 0 < fulltext_score < RankingConfig.SUBSTRING_MATCH_SCORE
    # substring only
    assert await score("concurr", "Go Concurrency") == pytest.approx(RankingConfig.SUBSTRING_MATCH_SCORE)
    # typo: similarity only, scored by the best of title/channel similarity
    assert await score("concurency", "Go Concurrency") == pytest.approx(10 / 16)


@pytest.mark.asyncio
async def test_channel_search_targets_channel_title(session):
    await add_videos(
        session,
        make_video("Weekly news", "Gopher Academy", minutes=1),
        make_video("Gopher facts", "Nature Channel", minutes=2),
    )
    engine = CatalogSearchEngine(session)

    by_channel = await engine.search(normalize_search_request(1, 10, query="gopher academy", search_type="channel"))
    assert _titles(by_channel) == ["Weekly news"]

    by_title = await engine.search(normalize_search_request(1, 10, query="gopher facts", search_type="video"))
    assert _titles(by_title) == ["Gopher facts"]


@pytest.mark.asyncio
async def test_personalized_overlay_keeps_total_and_order(session):
    me, other = uuid.uuid4(), uuid.uuid4()
    videos = await add_videos(session, *[make_video(f"Go tip {i}", minutes=i, visits=i) for i in range(6)])
    await add_bookmarks(session, videos[1], me)
    await add_bookmarks(session, videos[2], other)
    await add_bookmarks(session, videos[4], me, other)
    engine = CatalogSearchEngine(session)

    for req in (
        normalize_search_request(1, 4),
        normalize_search_request(2, 4),
        normalize_search_request(1, 10, query="go tip", sort_by="recent"),
    ):
        anonymous = await engine.search(req)
        personal = await engine.search(req, user_id=me)

        assert personal.total == anonymous.total == await engine.count(req)
        assert personal.has_more == anonymous.has_more
        assert [rv.video.id for rv in personal.videos] == [rv.video.id for rv in anonymous.videos]
        assert all(rv.is_bookmarked is None for rv in anonymous.videos)
        for rv in personal.videos:
            assert rv.is_bookmarked == (rv.video.id in {videos[1].id, videos[4].id})


@pytest.mark.asyncio
async def test_storage_failure_surfaces_as_storage_error(session, monkeypatch):
    async def failing_execute(*args, **kwargs):
        raise OperationalError("SELECT", {}, Exception("database is locked"))

    monkeypatch.setattr(session, "execute", failing_execute)
    with pytest.raises(StorageError) as exc_info:
        await CatalogSearchEngine(session).search(normalize_search_request(1, 10))
    assert isinstance(exc_info.value.__cause__, OperationalError)


@pytest.mark.asyncio
async def test_videos_by_owner_lists_all_of_the_owners_videos(session):
    owner = uuid.uuid4()
    await add_videos(
        session,
        make_video("Mine old", minutes=1, user_id=owner),
        make_video("Mine hidden", minutes=2, user_id=owner, is_active=False),
        make_video("Mine new", minutes=3, user_id=owner),
        make_video("Someone else's", minutes=4),
    )
    videos = await CatalogSearchEngine(session).videos_by_owner(owner)
    assert [v.title for v in videos] == ["Mine new", "Mine hidden", "Mine old"]


@pytest.mark.asyncio
async def test_bookmarked_videos_newest_bookmark_first(session):
    me = uuid.uuid4()
    first, second, hidden, _ = await add_videos(
        session,
        make_video("First saved", minutes=5),
        make_video("Second saved", minutes=1),
        make_video("Saved then hidden", minutes=2, is_active=False),
        make_video("Not saved", minutes=3),
    )
    session.add_all(
        [
            Bookmark(video_id=first.id, user_id=me, created_at=BASE_TIME),
            Bookmark(video_id=second.id, user_id=me, created_at=BASE_TIME + timedelta(hours=1)),
            Bookmark(video_id=hidden.id, user_id=me, created_at=BASE_TIME + timedelta(hours=2)),
        ]
    )
    await session.commit()

    saved = await CatalogSearchEngine(session).bookmarked_videos(me)

    assert [b.video.title for b in saved] == ["Second saved", "First saved"]
    assert saved[0].bookmarked_at == BASE_TIME + timedelta(hours=1)
    assert await CatalogSearchEngine(session).bookmarked_videos(uuid.uuid4()) == []


@pytest.mark.asyncio
async def test_renamed_video_is_found_by_its_new_title(session):
    (video,) = await add_videos(session, make_video("Rust Basics", "Crabs"))
    video.title = "Zig Basics"
    video.channel_title = "Lizards"
    await session.commit()

    engine = CatalogSearchEngine(session)
    by_new_title = await engine.search(normalize_search_request(1, 10, query="zig"))
    by_old_title = await engine.search(normalize_search_request(1, 10, query="rust"))
    by_channel = await engine.search(normalize_search_request(1, 10, query="lizards", search_type="channel"))

    assert video.normalized_title == "zig basics"
    assert _titles(by_new_title) == ["Zig Basics"]
    assert by_old_title.total == 0
    assert _titles(by_channel) == ["Zig Basics"]
