"""Post repository interface."""

from typing import List, Optional, Protocol

from mcp_blog.domain.posts.models import DeleteOutcome, Post, PostStatus, PostSummary


class PostRepository(Protocol):
    """
    Port for post storage and retrieval.

    Abstracts post persistence from the MCP tools and the website,
    so the file-backed store can be swapped in tests.
    """

    async def list(self, include_drafts: bool = False) -> List[PostSummary]:
        """
        List posts, newest first.

        Args:
            include_drafts: Include posts whose status is draft

        Returns:
            Summaries sorted by date descending
        """
        pass

    async def get(self, slug: str) -> Optional[Post]:
        """
        Retrieve a post by slug.

        Args:
            slug: Post identifier

        Returns:
            Post if found and readable, None otherwise
        """
        pass

    async def create(self, markdown: str) -> Post:
        """
        Create a post from markdown with frontmatter.

        Args:
            markdown: Full markdown text; frontmatter must include a title

        Returns:
            Created post, with its final (possibly suffixed) slug
        """
        pass

    async def update(self, slug: str, markdown: str) -> Post:
        """
        Replace a post's frontmatter and content.

        Args:
            slug: Post identifier; overrides any slug in the markdown
            markdown: Replacement markdown with frontmatter

        Returns:
            Updated post
        """
        pass

    async def remove(self, slug: str) -> DeleteOutcome:
        """
        Remove a post file.

        Args:
            slug: Post identifier

        Returns:
            Whether a file was removed or none existed
        """
        pass

    async def delete(self, slug: str) -> bool:
        """
        Delete a post.

        Args:
            slug: Post identifier

        Returns:
            True if a post was deleted, False otherwise
        """
        pass

    async def set_status(self, slug: str, status: PostStatus) -> Post:
        """
        Change a post's publication status.

        Args:
            slug: Post identifier
            status: New status

        Returns:
            Updated post
        """
        pass
