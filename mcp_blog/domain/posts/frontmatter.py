"""Parse and serialize markdown files carrying a YAML frontmatter block.

File layout::

    ---
    title: Hello World
    status: draft
    ---

    Body text in markdown.

``serialize_post`` always writes one blank line between the closing
delimiter and the body, and ``parse_post`` drops exactly that one line
break, so ``parse_post(serialize_post(fm, body)) == (fm, body)``.
"""

import re
from typing import Any, Dict, Tuple

import pydantic
import yaml

from mcp_blog.domain.errors import ValidationError

from .models import PostFrontmatter

FRONTMATTER_RE = re.compile(r"\A---[ \t]*\r?\n(.*?)^---[ \t]*(?:\r?\n|\Z)", re.DOTALL | re.MULTILINE)
DELIMITER = "---"


def split_frontmatter(text: str) -> Tuple[Dict[str, Any], str]:
    """Return (frontmatter_dict, body) with the YAML header removed.

    Text without a header yields an empty dict and the full text.

    Raises:
        ValidationError: if the header is not valid YAML or not a mapping
    """
    m = FRONTMATTER_RE.match(text)
    if not m:
        return {}, text
    try:
        data = yaml.safe_load(m.group(1)) or {}
    except yaml.YAMLError as e:
        raise ValidationError(f"Invalid YAML frontmatter: {e}", code="INVALID_FRONTMATTER") from e
    if not isinstance(data, dict):
        raise ValidationError(
            f"Invalid YAML frontmatter: expected a mapping, got {type(data).__name__}",
            code="INVALID_FRONTMATTER",
        )
    body = text[m.end():]
    if body.startswith("\r\n"):
        body = body[2:]
    elif body.startswith("\n"):
        body = body[1:]
    return {str(k): v for k, v in data.items()}, body


def parse_post(text: str, require_title: bool = False) -> Tuple[PostFrontmatter, str]:
    """Parse raw markdown into typed frontmatter and body.

    Args:
        text: Full markdown text, optionally starting with a frontmatter block
        require_title: Reject input whose frontmatter has no non-empty title

    Returns:
        Tuple of (frontmatter, content)

    Raises:
        ValidationError: if the header is malformed, a field has the wrong
            type, or a required title is missing
    """
    data, content = split_frontmatter(text)
    try:
        frontmatter = PostFrontmatter.model_validate(data)
    except pydantic.ValidationError as e:
        problems = "; ".join(
            f"{'.'.join(str(p) for p in err['loc']) or 'frontmatter'}: {err['msg']}"
            for err in e.errors()
        )
        raise ValidationError(f"Invalid frontmatter: {problems}", code="INVALID_FRONTMATTER") from e
    if require_title and not (frontmatter.title or "").strip():
        raise ValidationError("Post must have a title in frontmatter", code="MISSING_TITLE")
    return frontmatter, content


def serialize_post(frontmatter: PostFrontmatter, content: str) -> str:
    """Render the canonical on-disk form of a post."""
    header = yaml.safe_dump(
        frontmatter.to_yaml_dict(),
        sort_keys=False,
        allow_unicode=True,
        default_flow_style=False,
    )
    return f"{DELIMITER}\n{header}{DELIMITER}\n\n{content}"
