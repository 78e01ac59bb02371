"""File-backed post repository.

One markdown file per post, named ``<slug>.md``, stored flat in the posts
directory. The directory is the only source of truth: nothing is cached
between calls and there is no index besides the directory listing.

Writes go to a temporary file in the same directory first. New posts are
published with ``os.link`` (fails if the name is taken, which drives the
collision suffix); updates use ``os.replace``. Readers never see a partial
file under a post's final name. Concurrent updates to one slug are
last-write-wins.
"""

import asyncio
import datetime as dt
import logging
import os
import tempfile
from pathlib import Path
from typing import Callable, List, Optional, Union
from uuid import uuid4

from mcp_blog.core.log_sanitizer import sanitize_for_logging
from mcp_blog.domain.errors import NotFoundError, ValidationError
from mcp_blog.domain.posts.frontmatter import parse_post, serialize_post
from mcp_blog.domain.posts.models import DeleteOutcome, Post, PostFrontmatter, PostStatus, PostSummary
from mcp_blog.domain.posts.slug import is_safe_slug, slugify

logger = logging.getLogger(__name__)

POST_EXTENSION = ".md"
SLUG_SUFFIX_LENGTH = 6
MAX_SLUG_ATTEMPTS = 10


def _utc_today() -> dt.date:
    return dt.datetime.now(dt.timezone.utc).date()


def _random_suffix() -> str:
    return uuid4().hex[:SLUG_SUFFIX_LENGTH]


class FilePostRepository:
    """
    Filesystem implementation of PostRepository.

    Blocking file I/O runs in worker threads so the event loop only
    suspends on storage access.
    """

    def __init__(self, posts_dir: Union[str, Path], clock: Optional[Callable[[], dt.date]] = None):
        """
        Args:
            posts_dir: Directory holding the post files; created if missing
            clock: Returns the current date; defaults to today in UTC
        """
        self.posts_dir = Path(posts_dir)
        self._clock = clock or _utc_today
        self.posts_dir.mkdir(parents=True, exist_ok=True)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    async def list(self, include_drafts: bool = False) -> List[PostSummary]:
        """List posts sorted by date descending; drafts only when requested."""
        return await asyncio.to_thread(self._list_sync, include_drafts)

    async def get(self, slug: str) -> Optional[Post]:
        """Read a post; None if the file is missing or cannot be read."""
        return await asyncio.to_thread(self._read, slug)

    async def create(self, markdown: str) -> Post:
        """Create a post, appending a random suffix to the slug on collision."""
        frontmatter, content = parse_post(markdown, require_title=True)
        base_slug = slugify(frontmatter.slug or frontmatter.title)
        frontmatter = frontmatter.with_defaults(today=self._today())
        return await asyncio.to_thread(self._create_sync, base_slug, frontmatter, content)

    async def update(self, slug: str, markdown: str) -> Post:
        """Overwrite a post; the slug argument wins over any slug in the markdown."""
        frontmatter, content = parse_post(markdown, require_title=True)
        return await asyncio.to_thread(self._update_sync, slug, frontmatter, content)

    async def remove(self, slug: str) -> DeleteOutcome:
        """Remove a post file, reporting whether anything was there."""
        return await asyncio.to_thread(self._remove_sync, slug)

    async def delete(self, slug: str) -> bool:
        """Delete a post; False when it did not exist or could not be removed."""
        try:
            outcome = await self.remove(slug)
        except OSError as e:
            logger.warning(f"Failed to delete post {sanitize_for_logging(slug)}: {e}")
            return False
        return outcome is DeleteOutcome.REMOVED

    async def set_status(self, slug: str, status: Union[PostStatus, str]) -> Post:
        """Change a post's status and stamp ``updated``."""
        try:
            status = PostStatus(status)
        except ValueError as e:
            raise ValidationError(f"Invalid status: {status}", code="INVALID_STATUS") from e
        return await asyncio.to_thread(self._set_status_sync, slug, status)

    # ------------------------------------------------------------------
    # Internals (run in worker threads)
    # ------------------------------------------------------------------
    def _today(self) -> str:
        return self._clock().isoformat()

    def _path_for(self, slug: str) -> Optional[Path]:
        if not is_safe_slug(slug):
            return None
        return self.posts_dir / f"{slug}{POST_EXTENSION}"

    def _require_path(self, slug: str) -> Path:
        path = self._path_for(slug)
        if path is None or not path.is_file():
            raise NotFoundError(f"Post not found: {slug}", code="POST_NOT_FOUND")
        return path

    def _list_sync(self, include_drafts: bool) -> List[PostSummary]:
        summaries: List[PostSummary] = []
        for path in sorted(self.posts_dir.glob(f"*{POST_EXTENSION}")):
            if path.name.startswith(".") or not path.is_file():
                continue
            try:
                frontmatter, _ = parse_post(path.read_text(encoding="utf-8"))
            except (OSError, UnicodeDecodeError, ValidationError) as e:
                logger.warning(f"Skipping unreadable post file {path.name}: {e}")
                continue
            summary = PostSummary.from_frontmatter(path.stem, frontmatter)
            if not include_drafts and summary.status == PostStatus.DRAFT.value:
                continue
            summaries.append(summary)
        summaries.sort(key=lambda s: s.date, reverse=True)
        return summaries

    def _read(self, slug: str) -> Optional[Post]:
        path = self._path_for(slug)
        if path is None:
            return None
        try:
            raw = path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except (OSError, UnicodeDecodeError) as e:
            logger.warning(f"Could not read post {sanitize_for_logging(slug)}: {e}")
            return None
        try:
            frontmatter, content = parse_post(raw)
        except ValidationError as e:
            logger.warning(f"Could not parse post {sanitize_for_logging(slug)}: {e.message}")
            return None
        return Post(slug=slug, frontmatter=frontmatter, content=content, raw=raw)

    def _create_sync(self, base_slug: str, frontmatter: PostFrontmatter, content: str) -> Post:
        slug = base_slug
        for _ in range(MAX_SLUG_ATTEMPTS):
            stamped = frontmatter.model_copy(update={"slug": slug})
            raw = serialize_post(stamped, content)
            if self._publish_new(self.posts_dir / f"{slug}{POST_EXTENSION}", raw):
                logger.info(f"Created post {slug}")
                return Post(slug=slug, frontmatter=stamped, content=content, raw=raw)
            slug = f"{base_slug}-{_random_suffix()}"
            logger.info(f"Slug {base_slug} is taken, trying {slug}")
        raise FileExistsError(f"Could not allocate a unique slug for {base_slug}")

    def _update_sync(self, slug: str, frontmatter: PostFrontmatter, content: str) -> Post:
        path = self._require_path(slug)
        today = self._today()
        updates = {"slug": slug, "updated": today}
        if not frontmatter.date:
            previous = self._read(slug)
            if previous is not None and previous.frontmatter.date:
                updates["date"] = previous.frontmatter.date
        stamped = frontmatter.model_copy(update=updates).with_defaults(today=today)
        raw = serialize_post(stamped, content)
        self._replace(path, raw)
        logger.info(f"Updated post {sanitize_for_logging(slug)}")
        return Post(slug=slug, frontmatter=stamped, content=content, raw=raw)

    def _set_status_sync(self, slug: str, status: PostStatus) -> Post:
        path = self._require_path(slug)
        post = self._read(slug)
        if post is None:
            raise NotFoundError(f"Post not found: {slug}", code="POST_NOT_FOUND")
        stamped = post.frontmatter.model_copy(update={"status": status.value, "updated": self._today()})
        raw = serialize_post(stamped, post.content)
        self._replace(path, raw)
        logger.info(f"Set status of post {sanitize_for_logging(slug)} to {status.value}")
        return Post(slug=slug, frontmatter=stamped, content=post.content, raw=raw)

    def _remove_sync(self, slug: str) -> DeleteOutcome:
        path = self._path_for(slug)
        if path is None:
            return DeleteOutcome.ABSENT
        try:
            path.unlink()
        except FileNotFoundError:
            return DeleteOutcome.ABSENT
        logger.info(f"Deleted post {sanitize_for_logging(slug)}")
        return DeleteOutcome.REMOVED

    def _write_temp(self, raw: str) -> Path:
        fd, name = tempfile.mkstemp(prefix=".", suffix=".tmp", dir=self.posts_dir)
        tmp_path = Path(name)
        try:
            with os.fdopen(fd, "w", encoding="utf-8", newline="") as f:
                f.write(raw)
                f.flush()
                os.fsync(f.fileno())
        except Exception:
            tmp_path.unlink(missing_ok=True)
            raise
        return tmp_path

    def _publish_new(self, path: Path, raw: str) -> bool:
        """Atomically create ``path``; False if it already exists."""
        tmp_path = self._write_temp(raw)
        try:
            os.link(tmp_path, path)
            return True
        except FileExistsError:
            return False
        finally:
            tmp_path.unlink(missing_ok=True)

    def _replace(self, path: Path, raw: str) -> None:
        tmp_path = self._write_temp(raw)
        try:
            os.replace(tmp_path, path)
        except Exception:
            tmp_path.unlink(missing_ok=True)
            raise
