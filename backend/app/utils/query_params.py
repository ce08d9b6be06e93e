"""
Listing request normalization.

Page and limit are strict (a bad value is a caller error); sort order and search
type are lenient and fall back to their defaults so listing endpoints keep
working when clients send values this server does not know.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional, Type, TypeVar

from ..core.errors import CatalogValidationError
from ..db.models.models import SearchType, SortBy
from .normalize import normalize_text
from .ranking_config import RankingConfig

logger = logging.getLogger("backend.app.query_params")

E = TypeVar("E", bound=Enum)

_SEARCH_TYPE_ALIASES: Dict[str, SearchType] = {
    "video-title": SearchType.video,
    "video_title": SearchType.video,
    "channel-title": SearchType.channel,
    "channel_title": SearchType.channel,
}


@dataclass(frozen=True)
class SearchRequest:
    page: int
    limit: int
    sort_by: SortBy = SortBy.popular
    query: Optional[str] = None
    search_type: SearchType = SearchType.video

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit

    @property
    def has_query(self) -> bool:
        return bool(self.query)


def parse_enum(enum_cls: Type[E], raw: Any, default: E, aliases: Optional[Dict[str, E]] = None) -> E:
    """Parse ``raw`` into ``enum_cls``; unknown or missing values yield ``default``."""
    if raw is None or (isinstance(raw, str) and not raw.strip()):
        return default
    if isinstance(raw, enum_cls):
        return raw
    key = str(raw).strip().lower()
    try:
        return enum_cls(key)
    except ValueError:
        pass
    if aliases and key in aliases:
        return aliases[key]
    logger.warning("unrecognized %s value %r, defaulting to %r", enum_cls.__name__, raw, default.value)
    return default


def parse_sort_by(raw: Any) -> SortBy:
    return parse_enum(SortBy, raw, SortBy.popular)


def parse_search_type(raw: Any) -> SearchType:
    return parse_enum(SearchType, raw, SearchType.video, _SEARCH_TYPE_ALIASES)


def _parse_bounded_int(name: str, raw: Any, lower: int, upper: Optional[int] = None) -> int:
    if raw is None or isinstance(raw, bool):
        raise CatalogValidationError(f"{name} is required")
    try:
        value = int(raw) if isinstance(raw, int) else int(str(raw).strip())
    except ValueError:
        raise CatalogValidationError(f"{name} must be an integer, got {raw!r}") from None
    if value < lower or (upper is not None and value > upper):
        bound = f"between {lower} and {upper}" if upper is not None else f">= {lower}"
        raise CatalogValidationError(f"{name} must be {bound}, got {value}")
    return value


def normalize_query(raw: Any) -> Optional[str]:
    """Trimmed, case-folded search text, or ``None`` when nothing is left."""
    if raw is None:
        return None
    text = normalize_text(str(raw))
    return text or None


def normalize_search_request(
    page: Any,
    limit: Any,
    sort_by: Any = None,
    query: Any = None,
    search_type: Any = None,
) -> SearchRequest:
    """Validate raw listing parameters into a :class:`SearchRequest`.

    Raises :class:`CatalogValidationError` for a missing/unparsable page or limit,
    or one outside its bounds.
    """
    return SearchRequest(
        page=_parse_bounded_int("page", page, RankingConfig.MIN_PAGE),
        limit=_parse_bounded_int("limit", limit, RankingConfig.MIN_LIMIT, RankingConfig.MAX_LIMIT),
        sort_by=parse_sort_by(sort_by),
        query=normalize_query(query),
        search_type=parse_search_type(search_type),
    )
