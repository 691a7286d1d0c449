"""
Trigram similarity with pg_trgm semantics.

PostgreSQL provides ``similarity()`` through the pg_trgm extension. SQLite
databases (tests, local development) get the same function registered per
connection from here, together with ``greatest()`` and ``encode(x, 'hex')``,
so the engines issue one query text for both dialects.
"""

from __future__ import annotations

import re

# pg_trgm splits on anything that is not alphanumeric
_WORD_RE = re.compile(r"[^\W_]+")


def trigrams(text: str) -> set[str]:
    """Return the set of trigrams pg_trgm extracts from ``text``."""
    grams: set[str] = set()
    for word in _WORD_RE.findall(text.lower()):
        padded = f"  {word} "
        grams.update(padded[i:i + 3] for i in range(len(padded) - 2))
    return grams


def similarity(a: str | None, b: str | None) -> float | None:
    """Shared trigrams over all distinct trigrams of both strings, in [0, 1]."""
    if a is None or b is None:
        return None
    ta, tb = trigrams(a), trigrams(b)
    if not ta or not tb:
        return 0.0
    common = len(ta & tb)
    return common / (len(ta) + len(tb) - common)


def greatest(*values):
    """PostgreSQL ``greatest``: NULL arguments are ignored."""
    present = [v for v in values if v is not None]
    return max(present) if present else None


def encode(value: bytes | None, fmt: str) -> str | None:
    if value is None:
        return None
    if fmt != "hex":
        raise ValueError(f"unsupported encoding: {fmt}")
    return bytes(value).hex()


def register_sqlite_functions(dbapi_connection) -> None:
    """Install similarity/greatest/encode on a SQLite DB-API connection."""
    dbapi_connection.create_function("similarity", 2, similarity)
    dbapi_connection.create_function("greatest", -1, greatest)
    dbapi_connection.create_function("encode", 2, encode)
