"""Text helpers shared by derivation and rendering."""

import re
from typing import Any

_NON_ALNUM_RE = re.compile(r"[^a-z0-9]+")
_CATEGORY_SPLIT_RE = re.compile(r"[,\n]")


def is_blank(value: Any) -> bool:
    """Return True for None, empty/whitespace text, and empty lists."""
    if value is None:
        return True
    if isinstance(value, (list, tuple)):
        return len(value) == 0
    return str(value).strip() == ""


def to_text(value: Any) -> str:
    """Convert a scalar to its template text form.

    Booleans render the way YAML and RSS spell them (``true``/``false``).
    """
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def slugify(value: Any) -> str:
    """Slugify a title for URLs and file names.

    Example:
        >>> slugify("Hello, World! #1")
        'hello-world-1'
    """
    if value is None:
        return ""
    slug = _NON_ALNUM_RE.sub("-", str(value).lower())
    return slug.strip("-")


def normalize_categories(value: Any) -> list[str]:
    """Normalize categories given as a list or a comma/newline string.

    Entries are trimmed and empty ones dropped. Order and duplicates are kept.
    """
    if isinstance(value, (list, tuple)):
        raw = [to_text(item) for item in value if item is not None]
    elif isinstance(value, str):
        raw = _CATEGORY_SPLIT_RE.split(value)
    else:
        raw = []
    return [item.strip() for item in raw if item.strip()]
