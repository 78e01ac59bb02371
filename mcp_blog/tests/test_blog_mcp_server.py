"""Tests for the blog MCP tools, called through an in-memory FastMCP client."""

import json

import pytest
from fastmcp import Client

from mcp_blog.mcp.blog_server import CREATE_POST_DESCRIPTION, create_blog_mcp_server

HELLO = "---\ntitle: Hello World\n---\nBody"

EXPECTED_TOOLS = [
    "create_post",
    "delete_post",
    "get_post",
    "list_posts",
    "publish_post",
    "unpublish_post",
    "update_post",
]


@pytest.fixture
def mcp_server(repository):
    return create_blog_mcp_server(repository)


def _text(result) -> str:
    return result.content[0].text


@pytest.mark.asyncio
async def test_exposes_fixed_tool_set(mcp_server):
    async with Client(mcp_server) as client:
        tools = await client.list_tools()

    assert sorted(tool.name for tool in tools) == EXPECTED_TOOLS
    create_tool = next(tool for tool in tools if tool.name == "create_post")
    assert create_tool.description == CREATE_POST_DESCRIPTION
    assert "Required frontmatter fields: title" in create_tool.description
    assert "excerpt" in create_tool.description
    assert "YAML frontmatter" in create_tool.inputSchema["properties"]["markdown"]["description"]


@pytest.mark.asyncio
async def test_create_and_get_post(mcp_server):
    async with Client(mcp_server) as client:
        created = await client.call_tool("create_post", {"markdown": HELLO})
        fetched = await client.call_tool("get_post", {"slug": "hello-world"})

    assert _text(created) == 'Post created: "Hello World" (slug: hello-world, status: draft)'
    assert _text(fetched).startswith("---\ntitle: Hello World\n")
    assert _text(fetched).endswith("\nBody")


@pytest.mark.asyncio
async def test_list_posts_respects_include_drafts(mcp_server):
    async with Client(mcp_server) as client:
        await client.call_tool("create_post", {"markdown": HELLO})
        published_only = await client.call_tool("list_posts", {})
        with_drafts = await client.call_tool("list_posts", {"include_drafts": True})

    assert json.loads(_text(published_only)) == []
    [summary] = json.loads(_text(with_drafts))
    assert summary["slug"] == "hello-world"
    assert summary["status"] == "draft"
    assert summary["title"] == "Hello World"


@pytest.mark.asyncio
async def test_publish_and_unpublish(mcp_server):
    async with Client(mcp_server) as client:
        await client.call_tool("create_post", {"markdown": HELLO})

        published = await client.call_tool("publish_post", {"slug": "hello-world"})
        listed = json.loads(_text(await client.call_tool("list_posts", {})))
        unpublished = await client.call_tool("unpublish_post", {"slug": "hello-world"})
        relisted = json.loads(_text(await client.call_tool("list_posts", {})))

    assert _text(published) == 'Post published: "Hello World"'
    assert [s["slug"] for s in listed] == ["hello-world"]
    assert _text(unpublished) == 'Post unpublished (set to draft): "Hello World"'
    assert relisted == []


@pytest.mark.asyncio
async def test_update_post_uses_slug_argument(mcp_server, repository):
    async with Client(mcp_server) as client:
        await client.call_tool("create_post", {"markdown": HELLO})
        result = await client.call_tool(
            "update_post",
            {"slug": "hello-world", "markdown": "---\ntitle: Renamed\nslug: other\n---\nNew"},
        )

    assert _text(result) == 'Post updated: "Renamed" (slug: hello-world)'
    assert (await repository.get("hello-world")).content == "New"
    assert await repository.get("other") is None


@pytest.mark.asyncio
async def test_delete_post(mcp_server):
    async with Client(mcp_server) as client:
        await client.call_tool("create_post", {"markdown": HELLO})
        deleted = await client.call_tool("delete_post", {"slug": "hello-world"})
        again = await client.call_tool("delete_post", {"slug": "hello-world"}, raise_on_error=False)

    assert _text(deleted) == "Post deleted: hello-world"
    assert again.is_error
    assert _text(again) == "Post not found: hello-world"


@pytest.mark.asyncio
@pytest.mark.parametrize("tool, arguments, message", [
    ("get_post", {"slug": "ghost"}, "Post not found: ghost"),
    ("create_post", {"markdown": "no frontmatter"}, "Error creating post: Post must have a title in frontmatter"),
    ("update_post", {"slug": "ghost", "markdown": HELLO}, "Error updating post: Post not found: ghost"),
    ("publish_post", {"slug": "ghost"}, "Error: Post not found: ghost"),
    ("unpublish_post", {"slug": "ghost"}, "Error: Post not found: ghost"),
])
async def test_operation_failures_are_error_results(mcp_server, tool, arguments, message):
    async with Client(mcp_server) as client:
        result = await client.call_tool(tool, arguments, raise_on_error=False)
        # The session is still usable afterwards
        followup = await client.call_tool("list_posts", {})

    assert result.is_error
    assert _text(result) == message
    assert not followup.is_error


@pytest.mark.asyncio
@pytest.mark.parametrize("tool, arguments", [
    ("get_post", {}),
    ("list_posts", {"include_drafts": "definitely"}),
    ("update_post", {"slug": "x"}),
])
async def test_invalid_arguments_are_error_results(mcp_server, repository, tool, arguments):
    async with Client(mcp_server) as client:
        result = await client.call_tool(tool, arguments, raise_on_error=False)

    assert result.is_error
    assert await repository.list(True) == []
