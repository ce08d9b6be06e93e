"""
Text normalization and matching primitives for catalog search.

Responsibilities:
- Normalize free text the same way stored ``normalized_*`` columns are normalized
- Trigram similarity with pg_trgm semantics (word-padded trigram sets, Jaccard ratio)
- A small English full-text matcher mirroring ``to_tsvector('english') @@ plainto_tsquery``

All functions are pure and deterministic. The SQLite engine binds the matching
functions as SQL functions so the same query shape runs on SQLite and PostgreSQL.
"""
from __future__ import annotations

import re
from collections import Counter
from typing import FrozenSet, List, Optional

_WS_RE = re.compile(r"\s+")
# pg_trgm treats any non-alphanumeric character as a word separator
_WORD_RE = re.compile(r"[^\W_]+", flags=re.UNICODE)

# Subset of the PostgreSQL 'english' stop list; enough to keep filler words from matching
_STOPWORDS = frozenset(
    """
    a an and are as at be but by for from had has have he her his i if in into is it its
    me my no not of on or our she so that the their them then there these they this to
    was we were what when where which who will with you your
    """.split()
)


def normalize_text(value: Optional[str]) -> str:
    """Trim, collapse inner whitespace and case-fold. ``None`` becomes an empty string."""
    if not value:
        return ""
    return _WS_RE.sub(" ", value).strip().casefold()


def trigrams(value: Optional[str]) -> FrozenSet[str]:
    """Return the pg_trgm trigram set of ``value``.

    Each word is lower-cased and padded with two spaces in front and one behind,
    so "go" yields {"  g", " go", "go "}.
    """
    out = set()
    for word in _WORD_RE.findall((value or "").lower()):
        padded = f"  {word} "
        for i in range(len(padded) - 2):
            out.add(padded[i:i + 3])
    return frozenset(out)


def trigram_similarity(left: Optional[str], right: Optional[str]) -> float:
    """Similarity in [0, 1]: shared trigrams over the union of both sets."""
    a = trigrams(left)
    b = trigrams(right)
    if not a or not b:
        return 0.0
    shared = len(a & b)
    return shared / float(len(a) + len(b) - shared)


def _stem(word: str) -> str:
    # Light plural folding; the PostgreSQL side uses the real snowball stemmer
    if len(word) > 4 and word.endswith("ies"):
        return word[:-3] + "y"
    if len(word) > 3 and word.endswith("s") and not word.endswith("ss"):
        return word[:-1]
    return word


def lexemes(value: Optional[str]) -> List[str]:
    """Tokenize into stemmed lexemes with stop words removed (document order, duplicates kept)."""
    words = _WORD_RE.findall((value or "").casefold())
    return [_stem(w) for w in words if w not in _STOPWORDS]


def fulltext_match(document: Optional[str], query: Optional[str]) -> bool:
    """True when every query lexeme occurs in the document (plainto_tsquery AND semantics).

    A query made only of stop words matches nothing.
    """
    wanted = set(lexemes(query))
    if not wanted:
        return False
    return wanted.issubset(lexemes(document))


def fulltext_rank(document: Optional[str], query: Optional[str]) -> float:
    """Relevance of ``document`` for ``query`` in [0, 0.2), 0 when it does not match.

    Repeated occurrences raise the rank with diminishing returns and longer
    documents are slightly discounted, roughly like ``ts_rank``.
    """
    wanted = set(lexemes(query))
    doc = lexemes(document)
    if not wanted or not wanted.issubset(doc):
        return 0.0
    counts = Counter(doc)
    per_term = sum(counts[w] / (counts[w] + 1.0) for w in wanted) / len(wanted)
    length_discount = 1.0 / (1.0 + 0.05 * max(len(doc) - len(wanted), 0))
    return 0.2 * per_term * length_discount
