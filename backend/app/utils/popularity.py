"""Popularity score: bookmarks * 3.0 + views * 1.0, as a plain function and as SQL."""
from __future__ import annotations

from sqlalchemy import func
from sqlalchemy.sql.elements import ColumnElement

from .ranking_config import RankingConfig


def popularity_score(bookmark_count: int, view_count: int) -> float:
    return (
        (bookmark_count or 0) * RankingConfig.POPULARITY_BOOKMARK_WEIGHT
        + (view_count or 0) * RankingConfig.POPULARITY_VIEW_WEIGHT
    )


def popularity_expression(bookmark_count: ColumnElement, view_count: ColumnElement) -> ColumnElement[float]:
    return (
        func.coalesce(bookmark_count, 0) * RankingConfig.POPULARITY_BOOKMARK_WEIGHT
        + func.coalesce(view_count, 0) * RankingConfig.POPULARITY_VIEW_WEIGHT
    )
