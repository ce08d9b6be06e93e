"""
Autocomplete over video titles and channel names.

Prefix hits beat substring hits, which beat trigram similarity; title hits beat
channel hits within a tier. Results are unique per (title, channel).
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional

from sqlalchemy import Float, case, func, literal, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.errors import CatalogValidationError
from ..db.functions import greatest, similarity
from ..db.models.models import Video
from .normalize import normalize_text
from .ranking_config import RankingConfig
from .storage import run_bounded

logger = logging.getLogger("backend.app.autocomplete")


@dataclass(frozen=True)
class Suggestion:
    title: str
    channel_title: str


def suggestion_score(text: str):
    title = Video.normalized_title
    channel = Video.normalized_channel_title
    return case(
        (title.startswith(text, autoescape=True), literal(RankingConfig.AUTOCOMPLETE_TITLE_PREFIX_SCORE, Float)),
        (channel.startswith(text, autoescape=True), literal(RankingConfig.AUTOCOMPLETE_CHANNEL_PREFIX_SCORE, Float)),
        (title.contains(text, autoescape=True), literal(RankingConfig.AUTOCOMPLETE_TITLE_CONTAINS_SCORE, Float)),
        (channel.contains(text, autoescape=True), literal(RankingConfig.AUTOCOMPLETE_CHANNEL_CONTAINS_SCORE, Float)),
        else_=greatest(similarity(title, text), similarity(channel, text)),
    )


def normalize_prefix(name: Optional[str]) -> str:
    text = normalize_text(name)
    if len(text) < RankingConfig.AUTOCOMPLETE_MIN_CHARS:
        raise CatalogValidationError(
            f"query must be at least {RankingConfig.AUTOCOMPLETE_MIN_CHARS} characters"
        )
    return text


async def _suggest(session: AsyncSession, text: str) -> List[Suggestion]:
    ranked = (
        select(
            Video.title.label("title"),
            Video.channel_title.label("channel_title"),
            Video.visits.label("visits"),
            suggestion_score(text).label("score"),
        )
        .where(Video.is_active.is_(True))
        .subquery("ranked")
    )
    best_score = func.max(ranked.c.score).label("best_score")
    best_visits = func.max(ranked.c.visits).label("best_visits")
    stmt = (
        select(ranked.c.title, ranked.c.channel_title, best_score, best_visits)
        .where(ranked.c.score >= RankingConfig.AUTOCOMPLETE_SIMILARITY_FLOOR)
        .group_by(ranked.c.title, ranked.c.channel_title)
        .order_by(best_score.desc(), best_visits.desc(), ranked.c.title.asc())
        .limit(RankingConfig.AUTOCOMPLETE_MAX_RESULTS)
    )
    rows = (await session.execute(stmt)).all()
    return [Suggestion(title=row.title, channel_title=row.channel_title) for row in rows]


async def suggest(session: AsyncSession, name: Optional[str], timeout: Optional[float] = None) -> List[Suggestion]:
    """Ranked (title, channel) suggestions for ``name``; at most 10, active videos only.

    Input shorter than two characters after trimming is rejected before any query runs.
    """
    text = normalize_prefix(name)
    suggestions = await run_bounded(_suggest(session, text), "suggest video names", timeout)
    logger.debug("autocomplete %r -> %s suggestions", text, len(suggestions))
    return suggestions
