"""
Case-insensitive substring matching shared by search and listing.
"""

from __future__ import annotations

LIKE_ESCAPE = "\\"


def escape_like(text: str) -> str:
    """Escape LIKE metacharacters so user text only ever matches literally."""
    return (
        text.replace(LIKE_ESCAPE, LIKE_ESCAPE * 2)
        .replace("%", LIKE_ESCAPE + "%")
        .replace("_", LIKE_ESCAPE + "_")
    )


def contains_pattern(text: str) -> str:
    return f"%{escape_like(text)}%"


def icontains(column, text: str):
    """``column ILIKE '%text%'`` with ``text`` taken literally."""
    return column.ilike(contains_pattern(text), escape=LIKE_ESCAPE)
