"""Domain models and pure helpers for blog posts."""

from .frontmatter import parse_post, serialize_post, split_frontmatter
from .models import DeleteOutcome, Post, PostFrontmatter, PostStatus, PostSummary
from .slug import is_safe_slug, slugify

__all__ = [
    "DeleteOutcome",
    "Post",
    "PostFrontmatter",
    "PostStatus",
    "PostSummary",
    "is_safe_slug",
    "parse_post",
    "serialize_post",
    "slugify",
    "split_frontmatter",
]
