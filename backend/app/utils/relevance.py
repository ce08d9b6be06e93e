"""
Relevance expression builder.

A search is described as a small tree of predicate variants (``Substring``,
``FullText``, ``Similarity``, ``AnyOf``, ``AllOf``, ``IsActive``). Each variant
compiles to a SQLAlchemy clause whose values travel as bound parameters, so
callers never assemble SQL text or track placeholder positions.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple, Union

from sqlalchemy import Float, and_, case, literal, or_
from sqlalchemy.sql.elements import ColumnElement

from ..db.functions import fulltext_match, fulltext_rank, greatest, similarity
from ..db.models.models import SearchType, Video
from .ranking_config import RankingConfig


@dataclass(frozen=True, eq=False)
class IsActive:
    def to_clause(self) -> ColumnElement[bool]:
        return Video.is_active.is_(True)


@dataclass(frozen=True, eq=False)
class Substring:
    """Case-insensitive containment; ``%`` and ``_`` in the text match literally."""

    column: ColumnElement[str]
    text: str

    def to_clause(self) -> ColumnElement[bool]:
        return self.column.contains(self.text, autoescape=True)


@dataclass(frozen=True, eq=False)
class FullText:
    column: ColumnElement[str]
    text: str

    def to_clause(self) -> ColumnElement[bool]:
        return fulltext_match(self.column, self.text)

    def rank(self) -> ColumnElement[float]:
        return fulltext_rank(self.column, self.text)


@dataclass(frozen=True, eq=False)
class Similarity:
    """Trigram similarity strictly above ``threshold``."""

    column: ColumnElement[str]
    text: str
    threshold: float = RankingConfig.SIMILARITY_THRESHOLD

    def to_clause(self) -> ColumnElement[bool]:
        return self.value() > self.threshold

    def value(self) -> ColumnElement[float]:
        return similarity(self.column, self.text)


@dataclass(frozen=True, eq=False)
class AnyOf:
    parts: Tuple["Predicate", ...]

    def to_clause(self) -> ColumnElement[bool]:
        return or_(*(p.to_clause() for p in self.parts))


@dataclass(frozen=True, eq=False)
class AllOf:
    parts: Tuple["Predicate", ...]

    def to_clause(self) -> ColumnElement[bool]:
        return and_(*(p.to_clause() for p in self.parts))


Predicate = Union[IsActive, Substring, FullText, Similarity, AnyOf, AllOf]


@dataclass(frozen=True, eq=False)
class Relevance:
    """Inclusion predicate plus the per-row score used for ranking."""

    predicate: Predicate
    score: ColumnElement[float]
    has_query: bool = False


def target_column(search_type: SearchType) -> ColumnElement[str]:
    if search_type is SearchType.channel:
        return Video.normalized_channel_title
    return Video.normalized_title


def build_relevance(query: Optional[str], search_type: SearchType = SearchType.video) -> Relevance:
    """Build predicate and score for already-normalized search text.

    Tiers, first match wins:
      1. full-text match on the target field: rank * 2.0
      2. target field contains the text: 1.5
      3. target similarity above threshold: max(title similarity, channel similarity)
      4. anything else the predicate admitted: 0.1

    Without search text every active row is included with a score of 0.
    """
    if not query:
        return Relevance(predicate=IsActive(), score=literal(0.0, Float))

    target = target_column(search_type)
    fulltext = FullText(target, query)
    substring = Substring(target, query)
    fuzzy = Similarity(target, query)

    predicate = AllOf((IsActive(), AnyOf((substring, fulltext, fuzzy))))
    score = case(
        (fulltext.to_clause(), fulltext.rank() * RankingConfig.FULLTEXT_RANK_MULTIPLIER),
        (substring.to_clause(), literal(RankingConfig.SUBSTRING_MATCH_SCORE, Float)),
        (
            fuzzy.to_clause(),
            greatest(
                similarity(Video.normalized_title, query),
                similarity(Video.normalized_channel_title, query),
            ),
        ),
        else_=literal(RankingConfig.FALLBACK_SCORE, Float),
    )
    return Relevance(predicate=predicate, score=score, has_query=True)
