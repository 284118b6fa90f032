"""Slug helpers for URL-safe category and brand identifiers."""

import re

_NON_ALNUM = re.compile(r"[^a-z0-9]+")


def slugify(value: str) -> str:
    """Lower-case, collapse every run of non-alphanumerics into one hyphen."""
    slug = _NON_ALNUM.sub("-", value.strip().lower())
    return slug.strip("-")
