"""HTML and RSS rendering for the public site."""

import datetime as dt
from email.utils import format_datetime
from pathlib import Path
from typing import Any, Iterable, Optional
from xml.etree.ElementTree import Element, SubElement, tostring

from jinja2 import Environment, PackageLoader, select_autoescape
from markdown_it import MarkdownIt

from mcp_blog.domain.posts.models import PostSummary

STATIC_DIR = Path(__file__).parent / "static"

# Raw HTML in post bodies is escaped, not passed through
_md = MarkdownIt("commonmark", {"html": False}).enable("table")

_env = Environment(
    loader=PackageLoader("mcp_blog.web", "templates"),
    autoescape=select_autoescape(),
    trim_blocks=True,
    lstrip_blocks=True,
)


def render_markdown(content: str) -> str:
    """Render a post body to HTML."""
    return _md.render(content)


def render_page(template_name: str, **context: Any) -> str:
    """Render one of the site templates."""
    return _env.get_template(template_name).render(**context)


def _rfc822_date(value: str) -> Optional[str]:
    try:
        day = dt.date.fromisoformat(value)
    except ValueError:
        return None
    return format_datetime(dt.datetime(day.year, day.month, day.day, tzinfo=dt.timezone.utc))


def render_rss(
    posts: Iterable[PostSummary],
    title: str,
    description: str,
    base_url: str,
) -> str:
    """Serialize published posts as an RSS 2.0 document."""
    rss = Element("rss", attrib={"version": "2.0"})
    channel = SubElement(rss, "channel")
    SubElement(channel, "title").text = title
    SubElement(channel, "link").text = base_url
    SubElement(channel, "description").text = description

    for post in posts:
        url = f"{base_url}/post/{post.slug}"
        item = SubElement(channel, "item")
        SubElement(item, "title").text = post.title
        SubElement(item, "link").text = url
        SubElement(item, "guid").text = url
        pub_date = _rfc822_date(post.date)
        if pub_date:
            SubElement(item, "pubDate").text = pub_date
        SubElement(item, "description").text = post.excerpt or ""

    body = tostring(rss, encoding="unicode")
    return f'<?xml version="1.0" encoding="UTF-8"?>\n{body}'
