"""Public website routes: post index, single posts and the RSS feed.

Only published posts are ever shown. The repository and settings are read
from ``request.app.state`` (set up by ``create_web_app``).
"""

import logging

from fastapi import APIRouter, Request
from fastapi.responses import HTMLResponse, Response

from mcp_blog.core.log_sanitizer import sanitize_for_logging
from mcp_blog.web.rendering import render_markdown, render_page, render_rss

logger = logging.getLogger(__name__)

router = APIRouter(tags=["site"])


def render_not_found(request: Request) -> HTMLResponse:
    settings = request.app.state.settings
    html = render_page("not_found.html", blog_title=settings.blog_title)
    return HTMLResponse(html, status_code=404)


@router.get("/", response_class=HTMLResponse)
async def index(request: Request) -> HTMLResponse:
    """List published posts, newest first."""
    settings = request.app.state.settings
    posts = await request.app.state.post_repository.list(include_drafts=False)
    html = render_page(
        "index.html",
        blog_title=settings.blog_title,
        blog_description=settings.blog_description,
        posts=posts,
    )
    return HTMLResponse(html)


@router.get("/post/{slug}", response_class=HTMLResponse)
async def show_post(slug: str, request: Request) -> HTMLResponse:
    """Render a single published post; drafts are reported as missing."""
    post = await request.app.state.post_repository.get(slug)
    if post is None or not post.is_published:
        logger.debug(f"No published post for slug {sanitize_for_logging(slug)}")
        return render_not_found(request)
    html = render_page(
        "post.html",
        blog_title=request.app.state.settings.blog_title,
        post=post,
        content_html=render_markdown(post.content),
    )
    return HTMLResponse(html)


@router.get("/feed.xml")
async def feed(request: Request) -> Response:
    """RSS 2.0 feed of the most recent published posts."""
    settings = request.app.state.settings
    posts = await request.app.state.post_repository.list(include_drafts=False)
    xml = render_rss(
        posts[: settings.feed_max_items],
        title=settings.blog_title,
        description=settings.blog_description,
        base_url=settings.blog_base_url,
    )
    return Response(content=xml, media_type="application/rss+xml")
