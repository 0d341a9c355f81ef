"""URL slug generation for category names."""

import re

_NON_ALNUM = re.compile(r"[^a-z0-9]+")
_EDGE_HYPHEN = re.compile(r"^-|-$")


def slugify(name: str) -> str:
    """Turn a name into a URL-safe slug.

    Lower-cases the name, collapses every run of characters outside
    ``[a-z0-9]`` into a single hyphen and strips one leading and one
    trailing hyphen. Two names may share a slug.

    Args:
        name: Source name.

    Returns:
        Slug such as ``"running-shoes"``.
    """
    slug = _NON_ALNUM.sub("-", name.lower())
    return _EDGE_HYPHEN.sub("", slug)
