"""
Core Utilities.

Shared utility functions used across the backend.
All modules should import utilities from this module.
"""

from datetime import datetime, timezone

from slugify import slugify as _slugify

SLUG_REPLACEMENTS = [["&", " and "]]


def utc_now() -> datetime:
    """
    Return current UTC time as timezone-naive datetime.

    All datetime values in the application should be timezone-naive
    and assumed to be UTC. This ensures consistent behavior across
    the codebase and simplifies database storage.

    Returns:
        Current UTC time with tzinfo stripped
    """
    return datetime.now(timezone.utc).replace(tzinfo=None)


def slugify(text: str) -> str:
    """
    Build a URL slug from arbitrary text.

    Cyrillic and accented Latin are transliterated and "&" reads as "and";
    any other run of non-alphanumerics becomes one hyphen.

    Examples:
        >>> slugify("Ипотека в 2025 году")
        'ipoteka-v-2025-godu'
    """
    return _slugify(text, replacements=SLUG_REPLACEMENTS)


def with_suffix(base_slug: str, counter: int) -> str:
    """Return the n-th candidate for a slug collision (``base-1``, ``base-2``...)."""
    return f"{base_slug}-{counter}"


def total_pages(total: int, limit: int) -> int:
    """Number of pages needed to show `total` items, `limit` per page."""
    if limit <= 0:
        return 0
    return (total + limit - 1) // limit


def to_naive_utc(value: datetime) -> datetime:
    """Convert an aware datetime to naive UTC; naive values are assumed UTC already."""
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)
