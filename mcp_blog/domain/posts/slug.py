"""Slug generation for post identifiers."""

import re
import unicodedata

FALLBACK_SLUG = "post"
MAX_SLUG_LENGTH = 80

_UNSAFE_SLUG_CHARS = ("/", "\\", "\x00")


def slugify(text: str, max_len: int = MAX_SLUG_LENGTH) -> str:
    """Convert text to a lowercase, ASCII-only, hyphen-separated slug.

    Examples:
        >>> slugify("Hello World!")
        'hello-world'
        >>> slugify("Café à Paris")
        'cafe-a-paris'
        >>> slugify("!!!")
        'post'
    """
    text = unicodedata.normalize("NFKD", text).encode("ascii", "ignore").decode("ascii")
    text = text.lower()
    text = re.sub(r"[^a-z0-9\s_-]", "", text)
    text = re.sub(r"[\s_-]+", "-", text).strip("-")
    text = text[:max_len].rstrip("-")
    return text or FALLBACK_SLUG


def is_safe_slug(slug: str) -> bool:
    """True if ``slug`` can be used as a filename stem inside the posts directory."""
    if not slug or slug.startswith("."):
        return False
    return not any(ch in slug for ch in _UNSAFE_SLUG_CHARS)
