"""Tests for the file-backed post repository."""

import re

import pytest

from mcp_blog.domain.errors import NotFoundError, ValidationError
from mcp_blog.domain.posts.frontmatter import parse_post
from mcp_blog.domain.posts.models import DeleteOutcome, PostStatus
from mcp_blog.infrastructure.posts.file_repository import FilePostRepository

from .conftest import FIXED_TODAY

HELLO = "---\ntitle: Hello World\n---\nBody"


def _files(posts_dir):
    return sorted(p.name for p in posts_dir.iterdir())


def test_creates_posts_dir(tmp_path):
    target = tmp_path / "nested" / "posts"

    FilePostRepository(target)

    assert target.is_dir()


class TestCreate:

    @pytest.mark.asyncio
    async def test_create_derives_slug_and_defaults(self, repository, posts_dir):
        post = await repository.create(HELLO)

        assert post.slug == "hello-world"
        assert post.status == PostStatus.DRAFT
        assert post.frontmatter.date == FIXED_TODAY.isoformat()
        assert post.content == "Body"
        assert _files(posts_dir) == ["hello-world.md"]
        assert (posts_dir / "hello-world.md").read_text(encoding="utf-8") == post.raw

    @pytest.mark.asyncio
    async def test_create_same_title_twice_suffixes_slug(self, repository, posts_dir):
        first = await repository.create(HELLO)
        second = await repository.create(HELLO)

        assert first.slug == "hello-world"
        assert re.fullmatch(r"hello-world-[a-z0-9]{6}", second.slug)
        assert len(_files(posts_dir)) == 2
        # The first post is untouched
        assert (posts_dir / "hello-world.md").read_text(encoding="utf-8") == first.raw

    @pytest.mark.asyncio
    async def test_create_many_collisions_keeps_slugs_unique(self, repository, posts_dir):
        slugs = [(await repository.create(HELLO)).slug for _ in range(5)]

        assert len(set(slugs)) == 5
        assert len(_files(posts_dir)) == 5

    @pytest.mark.asyncio
    async def test_create_keeps_supplied_values(self, repository):
        post = await repository.create(
            "---\ntitle: Custom\nslug: my-custom-slug\ndate: 2020-01-01\nstatus: published\n---\nBody"
        )

        assert post.slug == "my-custom-slug"
        assert post.frontmatter.slug == "my-custom-slug"
        assert post.frontmatter.date == "2020-01-01"
        assert post.is_published

    @pytest.mark.asyncio
    async def test_create_normalizes_supplied_slug(self, repository):
        post = await repository.create("---\ntitle: x\nslug: ../Sneaky Path\n---\n")

        assert post.slug == "sneaky-path"

    @pytest.mark.asyncio
    async def test_create_without_title_fails(self, repository, posts_dir):
        with pytest.raises(ValidationError, match="must have a title"):
            await repository.create("---\nauthor: me\n---\nBody")

        assert _files(posts_dir) == []

    @pytest.mark.asyncio
    async def test_create_leaves_no_temp_files(self, repository, posts_dir):
        await repository.create(HELLO)
        await repository.create(HELLO)

        assert all(name.endswith(".md") and not name.startswith(".") for name in _files(posts_dir))


class TestGet:

    @pytest.mark.asyncio
    async def test_get_existing(self, repository):
        created = await repository.create(HELLO)

        post = await repository.get("hello-world")

        assert post is not None
        assert post.slug == "hello-world"
        assert post.title == "Hello World"
        assert post.raw == created.raw

    @pytest.mark.asyncio
    async def test_get_missing_returns_none(self, repository):
        assert await repository.get("nope") is None

    @pytest.mark.asyncio
    @pytest.mark.parametrize("slug", ["../secret", "a/b", ".hidden", ""])
    async def test_get_unsafe_slug_returns_none(self, repository, slug):
        assert await repository.get(slug) is None

    @pytest.mark.asyncio
    async def test_get_unparseable_file_returns_none(self, repository, posts_dir):
        (posts_dir / "broken.md").write_text("---\ntitle: [oops\n---\nBody", encoding="utf-8")

        assert await repository.get("broken") is None


class TestList:

    @pytest.mark.asyncio
    async def test_list_filters_drafts(self, repository, write_post):
        write_post("draft-one", title="Draft", date="2024-01-01", status="draft")
        write_post("live-one", title="Live", date="2024-01-02", status="published")

        published = await repository.list(False)
        everything = await repository.list(True)

        assert [s.slug for s in published] == ["live-one"]
        assert all(s.status != PostStatus.DRAFT for s in published)
        assert {s.slug for s in everything} == {"draft-one", "live-one"}

    @pytest.mark.asyncio
    async def test_list_sorted_by_date_descending(self, repository, write_post):
        write_post("b", title="B", date="2023-06-01", status="published")
        write_post("a", title="A", date="2024-01-01", status="published")
        write_post("c", title="C", date="2023-12-31", status="published")

        dates = [s.date for s in await repository.list(False)]

        assert dates == ["2024-01-01", "2023-12-31", "2023-06-01"]
        assert dates == sorted(dates, reverse=True)

    @pytest.mark.asyncio
    async def test_list_ties_keep_scan_order(self, repository, write_post):
        write_post("first", title="1", date="2024-01-01", status="published")
        write_post("second", title="2", date="2024-01-01", status="published")

        assert [s.slug for s in await repository.list(False)] == ["first", "second"]

    @pytest.mark.asyncio
    async def test_list_defaults_for_sparse_metadata(self, repository, write_post):
        write_post("sparse", author="anon")

        [summary] = await repository.list(True)

        assert summary.slug == "sparse"
        assert summary.title == "Untitled"
        assert summary.status == PostStatus.DRAFT
        assert summary.date == ""
        assert summary.tags == []
        assert await repository.list(False) == []

    @pytest.mark.asyncio
    async def test_list_includes_hand_written_year_only_date(self, repository, write_post):
        write_post("yearly", title="Yearly", date=2024, status="published")

        [summary] = await repository.list(False)

        assert summary.slug == "yearly"
        assert summary.date == "2024"

    @pytest.mark.asyncio
    async def test_list_skips_unparseable_and_foreign_files(self, repository, posts_dir, write_post):
        write_post("good", title="Good", status="published")
        (posts_dir / "bad.md").write_text("---\n[not: yaml\n---\n", encoding="utf-8")
        (posts_dir / "notes.txt").write_text("ignore me", encoding="utf-8")
        (posts_dir / ".hidden.md").write_text("---\ntitle: Hidden\nstatus: published\n---\n", encoding="utf-8")

        assert [s.slug for s in await repository.list(True)] == ["good"]


class TestUpdate:

    @pytest.mark.asyncio
    async def test_update_forces_url_slug(self, repository, posts_dir):
        await repository.create(HELLO)

        post = await repository.update(
            "hello-world",
            "---\ntitle: Renamed\nslug: something-else\n---\nNew body",
        )

        assert post.slug == "hello-world"
        assert post.frontmatter.slug == "hello-world"
        assert post.frontmatter.updated == FIXED_TODAY.isoformat()
        assert _files(posts_dir) == ["hello-world.md"]
        stored, content = parse_post((posts_dir / "hello-world.md").read_text(encoding="utf-8"))
        assert stored.slug == "hello-world"
        assert stored.title == "Renamed"
        assert content == "New body"

    @pytest.mark.asyncio
    async def test_update_keeps_original_date_when_omitted(self, repository):
        await repository.create("---\ntitle: Old\ndate: 2020-05-05\n---\nBody")

        post = await repository.update("old", "---\ntitle: Old\n---\nEdited")

        assert post.frontmatter.date == "2020-05-05"
        assert post.status == PostStatus.DRAFT

    @pytest.mark.asyncio
    async def test_update_missing_raises_not_found(self, repository, posts_dir):
        with pytest.raises(NotFoundError, match="Post not found: ghost"):
            await repository.update("ghost", HELLO)

        assert _files(posts_dir) == []

    @pytest.mark.asyncio
    async def test_update_requires_title(self, repository):
        await repository.create(HELLO)

        with pytest.raises(ValidationError):
            await repository.update("hello-world", "---\nauthor: x\n---\n")


class TestDelete:

    @pytest.mark.asyncio
    async def test_delete_existing(self, repository, posts_dir):
        await repository.create(HELLO)

        assert await repository.delete("hello-world") is True
        assert _files(posts_dir) == []

    @pytest.mark.asyncio
    async def test_delete_missing_is_noop(self, repository, posts_dir, write_post):
        write_post("keep", title="Keep")

        assert await repository.delete("nonexistent") is False
        assert _files(posts_dir) == ["keep.md"]

    @pytest.mark.asyncio
    async def test_remove_reports_outcome(self, repository):
        await repository.create(HELLO)

        assert await repository.remove("hello-world") is DeleteOutcome.REMOVED
        assert await repository.remove("hello-world") is DeleteOutcome.ABSENT
        assert await repository.remove("../escape") is DeleteOutcome.ABSENT


class TestSetStatus:

    @pytest.mark.asyncio
    async def test_publish_then_unpublish(self, repository):
        await repository.create(HELLO)

        published = await repository.set_status("hello-world", PostStatus.PUBLISHED)
        assert published.status == PostStatus.PUBLISHED
        assert published.frontmatter.updated == FIXED_TODAY.isoformat()
        assert "hello-world" in [s.slug for s in await repository.list(False)]

        await repository.set_status("hello-world", PostStatus.DRAFT)
        assert "hello-world" not in [s.slug for s in await repository.list(False)]

    @pytest.mark.asyncio
    async def test_set_status_preserves_content(self, repository):
        await repository.create("---\ntitle: Keep me\ntags: [a]\n---\nOriginal body")

        post = await repository.set_status("keep-me", "published")

        assert post.content == "Original body"
        assert post.frontmatter.tags == ["a"]
        assert (await repository.get("keep-me")).is_published

    @pytest.mark.asyncio
    async def test_set_status_missing_raises_not_found(self, repository):
        with pytest.raises(NotFoundError):
            await repository.set_status("ghost", PostStatus.PUBLISHED)

    @pytest.mark.asyncio
    async def test_set_status_rejects_unknown_status(self, repository):
        await repository.create(HELLO)

        with pytest.raises(ValidationError):
            await repository.set_status("hello-world", "archived")
