"""
SQL constructs for catalog text matching.

Each construct compiles to the native PostgreSQL spelling (pg_trgm ``similarity``,
``to_tsvector``/``plainto_tsquery``/``ts_rank``, ``greatest``) and, on every other
dialect, to a function name that ``register_sqlite_functions`` binds to the Python
implementation in ``utils.normalize``.
"""
from __future__ import annotations

from typing import Any

from sqlalchemy import Boolean, Float
from sqlalchemy.ext.compiler import compiles
from sqlalchemy.sql.expression import FunctionElement

from ..utils.normalize import fulltext_match as _py_fulltext_match
from ..utils.normalize import fulltext_rank as _py_fulltext_rank
from ..utils.normalize import trigram_similarity as _py_trigram_similarity


class similarity(FunctionElement):
    """Trigram similarity of two text expressions, in [0, 1]."""

    type = Float()
    name = "similarity"
    inherit_cache = True


class fulltext_match(FunctionElement):
    """True when the document matches every lexeme of the plain-text query."""

    type = Boolean()
    name = "fulltext_match"
    inherit_cache = True


class fulltext_rank(FunctionElement):
    type = Float()
    name = "fulltext_rank"
    inherit_cache = True


class greatest(FunctionElement):
    type = Float()
    name = "greatest"
    inherit_cache = True


def _args(element: FunctionElement, compiler: Any, **kw: Any) -> list[str]:
    return [compiler.process(clause, **kw) for clause in element.clauses]


@compiles(similarity)
def _similarity_default(element, compiler, **kw):
    return "trigram_similarity(%s)" % ", ".join(_args(element, compiler, **kw))


@compiles(similarity, "postgresql")
def _similarity_pg(element, compiler, **kw):
    return "similarity(%s)" % ", ".join(_args(element, compiler, **kw))


@compiles(fulltext_match)
def _fulltext_match_default(element, compiler, **kw):
    return "fulltext_match(%s)" % ", ".join(_args(element, compiler, **kw))


@compiles(fulltext_match, "postgresql")
def _fulltext_match_pg(element, compiler, **kw):
    document, query = _args(element, compiler, **kw)
    return "(to_tsvector('english', coalesce(%s, '')) @@ plainto_tsquery('english', %s))" % (document, query)


@compiles(fulltext_rank)
def _fulltext_rank_default(element, compiler, **kw):
    return "fulltext_rank(%s)" % ", ".join(_args(element, compiler, **kw))


@compiles(fulltext_rank, "postgresql")
def _fulltext_rank_pg(element, compiler, **kw):
    document, query = _args(element, compiler, **kw)
    return "ts_rank(to_tsvector('english', coalesce(%s, '')), plainto_tsquery('english', %s))" % (document, query)


@compiles(greatest)
def _greatest_default(element, compiler, **kw):
    # SQLite's multi-argument max() is the scalar maximum
    return "max(%s)" % ", ".join(_args(element, compiler, **kw))


@compiles(greatest, "postgresql")
def _greatest_pg(element, compiler, **kw):
    return "greatest(%s)" % ", ".join(_args(element, compiler, **kw))


def _sql_fulltext_match(document, query):
    return 1 if _py_fulltext_match(document, query) else 0


def register_sqlite_functions(dbapi_connection: Any) -> None:
    """Bind the Python matchers on a fresh SQLite DB-API connection (sqlite3 or aiosqlite adapter)."""
    dbapi_connection.create_function("trigram_similarity", 2, _py_trigram_similarity, deterministic=True)
    dbapi_connection.create_function("fulltext_match", 2, _sql_fulltext_match, deterministic=True)
    dbapi_connection.create_function("fulltext_rank", 2, _py_fulltext_rank, deterministic=True)
