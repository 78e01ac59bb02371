"""
Blog MCP server using FastMCP.

Exposes the post repository to agents as a fixed set of tools. A new
server instance is built for every MCP session; all of them share one
repository.
"""

import json
import logging
from typing import Annotated

from fastmcp import FastMCP
from fastmcp.exceptions import ToolError

from mcp_blog.domain.errors import DomainError
from mcp_blog.domain.posts.models import PostStatus
from mcp_blog.interfaces.posts import PostRepository
from mcp_blog.version import VERSION

logger = logging.getLogger(__name__)

SERVER_NAME = "mcp-blog"
SERVER_INSTRUCTIONS = (
    "Manage blog posts stored as markdown files with YAML frontmatter. "
    "New posts start as drafts; use publish_post to make them visible on the site."
)

# Tool descriptions shown to agents (FastMCP would keep only the first docstring line)
LIST_POSTS_DESCRIPTION = (
    "List all blog posts. Returns slug, title, date, status, tags, and excerpt for each post. "
    "Drafts are only included when include_drafts is true."
)
GET_POST_DESCRIPTION = (
    "Get a single blog post by slug. Returns the full markdown content including YAML frontmatter."
)
CREATE_POST_DESCRIPTION = """Create a new blog post. Supply full markdown with YAML frontmatter.
Required frontmatter fields: title
Optional frontmatter fields: slug, date, author, tags, status (draft|published), excerpt
If slug is omitted it is derived from the title. If date is omitted today's date is used.
The post is created as a draft unless status is set to "published"."""
UPDATE_POST_DESCRIPTION = (
    "Update an existing blog post. Supply the slug and the full new markdown with YAML frontmatter. "
    "The slug argument always wins over any slug in the frontmatter."
)
DELETE_POST_DESCRIPTION = "Delete a blog post by slug."
PUBLISH_POST_DESCRIPTION = "Set a blog post's status to published."
UNPUBLISH_POST_DESCRIPTION = "Set a blog post's status back to draft."

Slug = Annotated[str, "The post's URL slug"]
Markdown = Annotated[
    str,
    "Full markdown content including YAML frontmatter (---\\ntitle: ...\\n---\\n\\nBody here)",
]


async def serve_mcp_streams(server: FastMCP, read_stream, write_stream) -> None:
    """Run ``server`` over an already-connected pair of message streams.

    This is the only use of FastMCP's low-level server.
    """
    low_level = server._mcp_server
    await low_level.run(read_stream, write_stream, low_level.create_initialization_options())


def _describe(error: Exception) -> str:
    if isinstance(error, DomainError):
        return error.message
    return str(error)


def create_blog_mcp_server(repository: PostRepository) -> FastMCP:
    """Build a FastMCP server whose tools operate on ``repository``."""
    mcp = FastMCP(SERVER_NAME, instructions=SERVER_INSTRUCTIONS, version=VERSION)

    @mcp.tool(description=LIST_POSTS_DESCRIPTION)
    async def list_posts(include_drafts: bool = False) -> str:
        """
        List blog posts, newest first.

        Args:
            include_drafts: Also return posts whose status is draft (default false)

        Returns:
            JSON array of post summaries with slug, title, date, author, tags,
            status and excerpt
        """
        try:
            summaries = await repository.list(include_drafts)
        except OSError as e:
            raise ToolError(f"Error listing posts: {e}") from e
        return json.dumps([s.to_dict() for s in summaries], indent=2)

    @mcp.tool(description=GET_POST_DESCRIPTION)
    async def get_post(slug: Slug) -> str:
        """
        Get the full markdown of a post, frontmatter included.

        Args:
            slug: Post identifier

        Returns:
            Raw markdown as stored
        """
        post = await repository.get(slug)
        if post is None:
            raise ToolError(f"Post not found: {slug}")
        return post.raw

    @mcp.tool(description=CREATE_POST_DESCRIPTION)
    async def create_post(markdown: Markdown) -> str:
        """
        Create a new blog post from markdown with YAML frontmatter.

        A random suffix is appended to the slug if it is already taken.

        Returns:
            Confirmation with the final slug and status
        """
        try:
            post = await repository.create(markdown)
        except (DomainError, OSError) as e:
            raise ToolError(f"Error creating post: {_describe(e)}") from e
        return f'Post created: "{post.title}" (slug: {post.slug}, status: {post.status})'

    @mcp.tool(description=UPDATE_POST_DESCRIPTION)
    async def update_post(slug: Slug, markdown: Markdown) -> str:
        """
        Replace an existing post with new markdown and frontmatter.

        The slug argument always wins over any slug in the frontmatter.

        Args:
            slug: Post identifier
            markdown: Full replacement text including frontmatter with a title

        Returns:
            Confirmation message
        """
        try:
            post = await repository.update(slug, markdown)
        except (DomainError, OSError) as e:
            raise ToolError(f"Error updating post: {_describe(e)}") from e
        return f'Post updated: "{post.title}" (slug: {post.slug})'

    @mcp.tool(description=DELETE_POST_DESCRIPTION)
    async def delete_post(slug: Slug) -> str:
        """
        Delete a post permanently.

        Args:
            slug: Post identifier

        Returns:
            Confirmation message
        """
        if not await repository.delete(slug):
            raise ToolError(f"Post not found: {slug}")
        return f"Post deleted: {slug}"

    @mcp.tool(description=PUBLISH_POST_DESCRIPTION)
    async def publish_post(slug: Slug) -> str:
        """
        Publish a post so it appears on the site and in the feed.

        Args:
            slug: Post identifier

        Returns:
            Confirmation message
        """
        try:
            post = await repository.set_status(slug, PostStatus.PUBLISHED)
        except (DomainError, OSError) as e:
            raise ToolError(f"Error: {_describe(e)}") from e
        return f'Post published: "{post.title}"'

    @mcp.tool(description=UNPUBLISH_POST_DESCRIPTION)
    async def unpublish_post(slug: Slug) -> str:
        """
        Move a post back to draft, hiding it from the site.

        Args:
            slug: Post identifier

        Returns:
            Confirmation message
        """
        try:
            post = await repository.set_status(slug, PostStatus.DRAFT)
        except (DomainError, OSError) as e:
            raise ToolError(f"Error: {_describe(e)}") from e
        return f'Post unpublished (set to draft): "{post.title}"'

    logger.debug("Created blog MCP server")
    return mcp
