import datetime as dt
from pathlib import Path

import pytest
import yaml

from mcp_blog.infrastructure.app_factory import AppFactory
from mcp_blog.infrastructure.posts.file_repository import FilePostRepository
from mcp_blog.modules.config import AppSettings, ConfigManager

FIXED_TODAY = dt.date(2026, 10, 19)


@pytest.fixture
def posts_dir(tmp_path) -> Path:
    return tmp_path / "posts"


@pytest.fixture
def repository(posts_dir) -> FilePostRepository:
    return FilePostRepository(posts_dir, clock=lambda: FIXED_TODAY)


@pytest.fixture
def write_post(posts_dir):
    """Drop a hand-written post file into the posts directory."""
    def _write(slug: str, body: str = "Body", **frontmatter) -> Path:
        posts_dir.mkdir(parents=True, exist_ok=True)
        header = yaml.safe_dump(frontmatter, sort_keys=False) if frontmatter else ""
        path = posts_dir / f"{slug}.md"
        path.write_text(f"---\n{header}---\n\n{body}", encoding="utf-8")
        return path
    return _write


@pytest.fixture
def make_settings(posts_dir):
    def _make(**overrides) -> AppSettings:
        values = {
            "posts_dir": str(posts_dir),
            "mcp_api_token": "",
            "mcp_json_response": True,
            "blog_title": "Test Blog",
            "blog_description": "Posts for tests",
            "blog_base_url": "https://blog.example.com",
        }
        values.update(overrides)
        return AppSettings(_env_file=None, **values)
    return _make


@pytest.fixture
def make_factory(make_settings, repository):
    def _make(**overrides) -> AppFactory:
        return AppFactory(ConfigManager(make_settings(**overrides)), post_repository=repository)
    return _make
