"""
Configuration parameters for catalog search ranking and autocomplete.
All weights, tier scores and thresholds are defined here for easy tuning.
"""


class RankingConfig:
    """Configuration for the catalog ranking algorithm."""

    # Popularity: bookmarks weigh three times a view
    POPULARITY_BOOKMARK_WEIGHT = 3.0
    POPULARITY_VIEW_WEIGHT = 1.0

    # Relevance tiers (first matching tier wins)
    FULLTEXT_RANK_MULTIPLIER = 2.0
    SUBSTRING_MATCH_SCORE = 1.5
    FALLBACK_SCORE = 0.1
    # Shared by the inclusion predicate and the similarity tier
    SIMILARITY_THRESHOLD = 0.15

    # Autocomplete
    AUTOCOMPLETE_MIN_CHARS = 2
    AUTOCOMPLETE_MAX_RESULTS = 10
    AUTOCOMPLETE_TITLE_PREFIX_SCORE = 1.0
    AUTOCOMPLETE_CHANNEL_PREFIX_SCORE = 0.9
    AUTOCOMPLETE_TITLE_CONTAINS_SCORE = 0.7
    AUTOCOMPLETE_CHANNEL_CONTAINS_SCORE = 0.6
    AUTOCOMPLETE_SIMILARITY_FLOOR = 0.1

    # Listing bounds
    MIN_PAGE = 1
    MIN_LIMIT = 1
    MAX_LIMIT = 100
