"""Domain models for posts."""

import datetime as dt
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, field_validator

UNTITLED = "Untitled"


class PostStatus(str, Enum):
    """Publication state of a post."""
    DRAFT = "draft"
    PUBLISHED = "published"


class DeleteOutcome(Enum):
    """Result of removing a post file."""
    REMOVED = "removed"
    ABSENT = "absent"


class PostFrontmatter(BaseModel):
    """Typed frontmatter block of a post.

    Every field is optional at parse time so that hand-written files with
    partial metadata can still be listed. ``with_defaults`` is the single
    place where creation defaults are filled in. Keys not declared here are
    kept as extras and written back unchanged.
    """

    model_config = ConfigDict(extra="allow", use_enum_values=True)

    title: Optional[str] = None
    slug: Optional[str] = None
    date: Optional[str] = None
    updated: Optional[str] = None
    author: Optional[str] = None
    tags: Optional[List[str]] = None
    status: Optional[PostStatus] = None
    excerpt: Optional[str] = None

    @field_validator("date", "updated", mode="before")
    @classmethod
    def _coerce_date(cls, value: Any) -> Any:
        # YAML loads unquoted ISO dates as date/datetime objects
        if isinstance(value, dt.datetime):
            return value.date().isoformat()
        if isinstance(value, dt.date):
            return value.isoformat()
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(value)
        return value

    @field_validator("title", "slug", "author", "excerpt", mode="before")
    @classmethod
    def _coerce_scalar(cls, value: Any) -> Any:
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(value)
        return value

    @field_validator("tags", mode="before")
    @classmethod
    def _coerce_tags(cls, value: Any) -> Any:
        if isinstance(value, str):
            return [value]
        if isinstance(value, list):
            return [str(tag) for tag in value if tag is not None]
        return value

    @field_validator("status", mode="before")
    @classmethod
    def _normalize_status(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.strip().lower()
        return value

    def with_defaults(self, today: str) -> "PostFrontmatter":
        """Return a copy with ``date`` and ``status`` filled in when missing."""
        updates: Dict[str, Any] = {}
        if not self.date:
            updates["date"] = today
        if not self.status:
            updates["status"] = PostStatus.DRAFT.value
        return self.model_copy(update=updates) if updates else self

    def to_yaml_dict(self) -> Dict[str, Any]:
        """Declared fields in order, then extras; unset fields are omitted."""
        return self.model_dump(exclude_none=True)


@dataclass
class Post:
    """A post as stored on disk: identity, metadata, body and the raw file text."""
    slug: str
    frontmatter: PostFrontmatter
    content: str
    raw: str

    @property
    def title(self) -> str:
        return self.frontmatter.title or UNTITLED

    @property
    def status(self) -> str:
        return self.frontmatter.status or PostStatus.DRAFT.value

    @property
    def is_published(self) -> bool:
        return self.status == PostStatus.PUBLISHED.value

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "slug": self.slug,
            "frontmatter": self.frontmatter.to_yaml_dict(),
            "content": self.content,
            "raw": self.raw,
        }


@dataclass
class PostSummary:
    """Listing entry for a post."""
    slug: str
    title: str = UNTITLED
    date: str = ""
    author: Optional[str] = None
    tags: List[str] = field(default_factory=list)
    status: str = PostStatus.DRAFT.value
    excerpt: Optional[str] = None

    @classmethod
    def from_frontmatter(cls, slug: str, frontmatter: PostFrontmatter) -> "PostSummary":
        return cls(
            slug=slug,
            title=frontmatter.title or UNTITLED,
            date=frontmatter.date or "",
            author=frontmatter.author,
            tags=list(frontmatter.tags or []),
            status=frontmatter.status or PostStatus.DRAFT.value,
            excerpt=frontmatter.excerpt,
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "slug": self.slug,
            "title": self.title,
            "date": self.date,
            "author": self.author,
            "tags": self.tags,
            "status": self.status,
            "excerpt": self.excerpt,
        }
