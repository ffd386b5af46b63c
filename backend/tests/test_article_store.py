"""Tests for article create/get/list/update/delete."""

import asyncio
from datetime import UTC, datetime, timedelta, timezone

import pytest
from pydantic import ValidationError
from sqlalchemy import func, select

from pocket.db import create_session_factory
from pocket.errors import DuplicateURL, NotFound
from pocket.models import Article
from pocket.schemas import ArticleCreate, ArticleUpdate
from pocket.services.article_store import ArticleStore


def make_article(n: int = 1, **fields) -> ArticleCreate:
    data = {"url": f"https://a.example/{n}", "title": f"Article {n}", "text_content": f"body {n}"}
    data.update(fields)
    return ArticleCreate(**data)


class TestCreate:
    """Saving new articles."""

    async def test_create_and_get(self, store) -> None:
        article_id = await store.create(
            make_article(title="Go Concurrency", text_content="goroutines and channels")
        )

        article = await store.get(article_id)
        assert article.id == article_id
        assert article.url == "https://a.example/1"
        assert article.title == "Go Concurrency"
        assert article.text_content == "goroutines and channels"
        assert article.tags == []
        assert article.archived is False
        assert article.read_at is None
        assert article.saved_at.tzinfo is not None

    async def test_ids_increase(self, store) -> None:
        first = await store.create(make_article(1))
        second = await store.create(make_article(2))
        assert second > first

    async def test_ids_not_reused_after_delete(self, store) -> None:
        first = await store.create(make_article(1))
        await store.delete(first)
        second = await store.create(make_article(2))
        assert second > first

    async def test_all_optional_fields_empty(self, store) -> None:
        article_id = await store.create(ArticleCreate(url="https://a.example/empty"))
        article = await store.get(article_id)
        assert article.title is None
        assert article.content is None

    async def test_duplicate_url_rejected(self, store, engine) -> None:
        await store.create(make_article(1))
        with pytest.raises(DuplicateURL) as excinfo:
            await store.create(make_article(1, title="Other"))
        assert excinfo.value.url == "https://a.example/1"

        async with engine.connect() as conn:
            count = await conn.scalar(
                select(func.count()).select_from(Article).where(Article.url == "https://a.example/1")
            )
        assert count == 1

    async def test_duplicate_url_does_not_touch_index(self, store) -> None:
        await store.create(make_article(1, text_content="original words"))
        with pytest.raises(DuplicateURL):
            await store.create(make_article(1, text_content="intruder words"))
        assert await store.search("intruder") == []

    def test_empty_url_rejected(self) -> None:
        with pytest.raises(ValidationError):
            ArticleCreate(url="")

    async def test_long_url_accepted(self, store) -> None:
        url = "https://a.example/" + "x" * 5000
        article_id = await store.create(ArticleCreate(url=url))
        assert (await store.get(article_id)).url == url

    async def test_timestamps_stored_in_utc(self, engine, settings) -> None:
        paris = timezone(timedelta(hours=2))
        clock = lambda: datetime(2026, 6, 1, 14, 0, tzinfo=paris)
        store = ArticleStore(create_session_factory(engine), settings=settings, clock=clock)

        article_id = await store.create(make_article())
        await store.update(article_id, ArticleUpdate(mark_read=True))

        article = await store.get(article_id)
        assert article.saved_at == datetime(2026, 6, 1, 12, 0, tzinfo=UTC)
        assert article.saved_at.utcoffset() == timedelta(0)
        assert article.read_at == datetime(2026, 6, 1, 12, 0, tzinfo=UTC)

    async def test_naive_clock_taken_as_utc(self, engine, settings) -> None:
        store = ArticleStore(
            create_session_factory(engine), settings=settings, clock=lambda: datetime(2026, 6, 1, 9, 30)
        )
        article_id = await store.create(make_article())
        assert (await store.get(article_id)).saved_at == datetime(2026, 6, 1, 9, 30, tzinfo=UTC)


class TestGet:
    async def test_missing_article(self, store) -> None:
        with pytest.raises(NotFound):
            await store.get(404)

    async def test_tags_sorted(self, store) -> None:
        article_id = await store.create(make_article())
        for name in ("zebra", "apple", "Mango"):
            await store.tag_article(article_id, name)

        article = await store.get(article_id)
        assert article.tags == ["Mango", "apple", "zebra"]


class TestList:
    """Listing and pagination."""

    async def test_newest_first(self, store) -> None:
        ids = [await store.create(make_article(n)) for n in range(3)]
        listed = await store.list_articles()
        assert [a.id for a in listed] == list(reversed(ids))

    async def test_pagination_has_no_gaps_or_duplicates(self, store) -> None:
        ids = [await store.create(make_article(n)) for n in range(4)]

        first_page = await store.list_articles(limit=2, offset=0)
        second_page = await store.list_articles(limit=2, offset=2)

        seen = [a.id for a in first_page + second_page]
        assert seen == list(reversed(ids))
        assert len(set(seen)) == 4

    async def test_same_saved_at_ordered_by_id(self, engine, settings) -> None:
        fixed = datetime(2026, 3, 1, 9, 30)
        store = ArticleStore(create_session_factory(engine), settings=settings, clock=lambda: fixed)
        ids = [await store.create(make_article(n)) for n in range(3)]

        listed = await store.list_articles()
        assert [a.id for a in listed] == sorted(ids, reverse=True)

    async def test_summary_excludes_body(self, store) -> None:
        await store.create(make_article(content="<p>body</p>"))
        [summary] = await store.list_articles()
        assert not hasattr(summary, "content")
        assert not hasattr(summary, "text_content")

    async def test_archived_filter(self, store) -> None:
        kept = await store.create(make_article(1))
        archived = await store.create(make_article(2))
        await store.update(archived, ArticleUpdate(archived=True))

        assert [a.id for a in await store.list_articles(archived=True)] == [archived]
        assert [a.id for a in await store.list_articles(archived=False)] == [kept]
        assert len(await store.list_articles()) == 2

    async def test_limit_clamped(self, store, settings) -> None:
        settings.max_list_limit = 2
        for n in range(3):
            await store.create(make_article(n))

        assert len(await store.list_articles(limit=500)) == 2
        assert len(await store.list_articles(limit=-1)) == 2

    async def test_negative_offset_treated_as_zero(self, store) -> None:
        await store.create(make_article(1))
        assert len(await store.list_articles(offset=-5)) == 1

    async def test_list_page_totals(self, store) -> None:
        for n in range(5):
            await store.create(make_article(n))

        page = await store.list_page(limit=2, offset=2)
        assert page.total == 5
        assert page.limit == 2
        assert page.offset == 2
        assert len(page.articles) == 2
        assert await store.count_articles(archived=True) == 0


class TestUpdate:
    """Archive and mark-read changes."""

    async def test_mark_read(self, store) -> None:
        article_id = await store.create(make_article())
        await store.update(article_id, ArticleUpdate(mark_read=True))

        article = await store.get(article_id)
        assert article.read_at is not None
        assert article.archived is False

    async def test_archive_keeps_read_at(self, store) -> None:
        article_id = await store.create(make_article())
        await store.update(article_id, ArticleUpdate(mark_read=True))
        read_at = (await store.get(article_id)).read_at

        await store.update(article_id, ArticleUpdate(archived=True))

        article = await store.get(article_id)
        assert article.archived is True
        assert article.read_at == read_at

    async def test_mark_read_twice(self, store) -> None:
        article_id = await store.create(make_article())
        await store.update(article_id, ArticleUpdate(mark_read=True))
        await store.update(article_id, ArticleUpdate(mark_read=True))
        assert (await store.get(article_id)).read_at is not None

    async def test_unarchive(self, store) -> None:
        article_id = await store.create(make_article())
        await store.update(article_id, ArticleUpdate(archived=True))
        await store.update(article_id, ArticleUpdate(archived=False))
        assert (await store.get(article_id)).archived is False

    async def test_both_fields(self, store) -> None:
        article_id = await store.create(make_article())
        await store.update(article_id, ArticleUpdate(archived=True, mark_read=True))
        article = await store.get(article_id)
        assert article.archived is True
        assert article.read_at is not None

    async def test_no_changes_is_noop(self, store) -> None:
        article_id = await store.create(make_article())
        await store.update(article_id, ArticleUpdate())
        await store.update(404, ArticleUpdate())
        assert (await store.get(article_id)).read_at is None

    async def test_mark_read_false_leaves_read_at(self, store) -> None:
        article_id = await store.create(make_article())
        await store.update(article_id, ArticleUpdate(mark_read=False))
        assert (await store.get(article_id)).read_at is None

    async def test_missing_article(self, store) -> None:
        with pytest.raises(NotFound):
            await store.update(404, ArticleUpdate(archived=True))

    async def test_saved_at_unchanged(self, store) -> None:
        article_id = await store.create(make_article())
        saved_at = (await store.get(article_id)).saved_at
        await store.update(article_id, ArticleUpdate(archived=True, mark_read=True))
        assert (await store.get(article_id)).saved_at == saved_at


class TestDelete:
    async def test_delete(self, store) -> None:
        article_id = await store.create(make_article())
        await store.delete(article_id)
        with pytest.raises(NotFound):
            await store.get(article_id)

    async def test_delete_missing_is_noop(self, store) -> None:
        await store.delete(404)

    async def test_delete_frees_url(self, store) -> None:
        article_id = await store.create(make_article())
        await store.delete(article_id)
        assert await store.create(make_article()) != article_id


class TestConcurrency:
    """Independent callers sharing one store."""

    async def test_concurrent_creates(self, store) -> None:
        results = await asyncio.gather(
            *(store.create(make_article(n, text_content=f"parallel item{n}")) for n in range(8)),
            return_exceptions=True,
        )

        assert all(isinstance(r, int) for r in results), results
        assert len(set(results)) == 8
        found = {r.article.id for r in await store.search("parallel", limit=50)}
        assert found == set(results)

    async def test_concurrent_same_url(self, store) -> None:
        results = await asyncio.gather(
            *(store.create(make_article(1)) for _ in range(6)),
            return_exceptions=True,
        )

        ids = [r for r in results if isinstance(r, int)]
        duplicates = [r for r in results if isinstance(r, DuplicateURL)]
        assert len(ids) == 1
        assert len(duplicates) == 5
        assert [a.id for a in await store.list_articles()] == ids

    async def test_concurrent_tag_and_update(self, store) -> None:
        ids = [await store.create(make_article(n)) for n in range(4)]
        await store.create_tag("shared")
        for article_id in ids:
            await store.tag_article(article_id, "old")

        results = await asyncio.gather(
            *(store.tag_article(article_id, "shared") for article_id in ids),
            *(store.untag_article(article_id, "old") for article_id in ids),
            *(store.update(article_id, ArticleUpdate(archived=True, mark_read=True)) for article_id in ids),
            store.delete(404),
            return_exceptions=True,
        )

        assert not [r for r in results if isinstance(r, Exception)], results
        for article_id in ids:
            article = await store.get(article_id)
            assert article.tags == ["shared"]
            assert article.archived is True
            assert article.read_at is not None
