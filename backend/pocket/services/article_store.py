"""Article store - saved articles, tags and full-text search over SQLite."""

from collections.abc import AsyncIterator, Callable
from contextlib import asynccontextmanager
from datetime import UTC, datetime

from sqlalchemy import delete, select, update
from sqlalchemy.dialects.sqlite import insert
from sqlalchemy.exc import IntegrityError, OperationalError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from pocket.config import Settings, get_settings
from pocket.constants.search_defaults import FTS_QUERY_ERRORS
from pocket.db import BEGIN_IMMEDIATE
from pocket.errors import ArticleStoreError, DuplicateURL, InvalidQuery, NotFound, StoreError
from pocket.models import Article, ArticleTag, Tag
from pocket.schemas import (
    ArticleCreate,
    ArticleDetail,
    ArticlePage,
    ArticleSummary,
    ArticleUpdate,
    SearchResult,
    TagRead,
)
from pocket.services import queries


def utcnow() -> datetime:
    return datetime.now(UTC)


def _page_size(limit: int | None, default: int, maximum: int) -> int:
    if limit is None or limit < 1:
        limit = default
    return min(limit, maximum)


def _is_violation(exc: IntegrityError, marker: str) -> bool:
    return marker in str(exc.orig)


class ArticleStore:
    """
    Persistent article store.

    Every public method runs as one transaction on its own session. Writes to
    `articles` reach the full-text index through triggers, so index upkeep
    commits or rolls back together with the row. Errors from the database are
    surfaced as pocket.errors types; nothing is logged or retried here.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        settings: Settings | None = None,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.session_factory = session_factory
        self.settings = settings or get_settings()
        self._clock = clock

    @asynccontextmanager
    async def _transaction(self, write: bool = False) -> AsyncIterator[AsyncSession]:
        try:
            async with self.session_factory() as session, session.begin():
                if write:
                    await session.connection(execution_options={BEGIN_IMMEDIATE: True})
                yield session
        except ArticleStoreError:
            raise
        except SQLAlchemyError as e:
            raise StoreError(str(getattr(e, "orig", None) or e)) from e

    def _now(self) -> datetime:
        # Naive clock values are taken as UTC
        now = self._clock()
        if now.tzinfo is None:
            return now.replace(tzinfo=UTC)
        return now.astimezone(UTC)

    # ------------------------------------------------------------------
    # Articles
    # ------------------------------------------------------------------

    async def create(self, data: ArticleCreate) -> int:
        """Save a new article and return its id. Raises DuplicateURL if the url is taken."""
        article = Article(**data.model_dump(), saved_at=self._now())
        async with self._transaction(write=True) as session:
            session.add(article)
            try:
                await session.flush()
            except IntegrityError as e:
                if _is_violation(e, "articles.url"):
                    raise DuplicateURL(data.url) from e
                raise
        return article.id

    async def get(self, article_id: int) -> ArticleDetail:
        """Get a full article with its tags."""
        async with self._transaction() as session:
            article = await session.get(Article, article_id)
            if article is None:
                raise NotFound(f"Article {article_id} not found")
            tags = (await session.scalars(queries.article_tags_query(article_id))).all()
        return ArticleDetail.model_validate({**article.model_dump(), "tags": list(tags)})

    async def list_articles(
        self,
        archived: bool | None = None,
        limit: int | None = None,
        offset: int = 0,
    ) -> list[ArticleSummary]:
        """List article summaries, most recently saved first."""
        limit = _page_size(limit, self.settings.default_list_limit, self.settings.max_list_limit)
        query = queries.list_articles_query(archived, limit, max(0, offset))
        async with self._transaction() as session:
            rows = (await session.execute(query)).all()
        return [ArticleSummary.model_validate(row) for row in rows]

    async def count_articles(self, archived: bool | None = None) -> int:
        async with self._transaction() as session:
            return await session.scalar(queries.count_articles_query(archived))

    async def list_page(
        self,
        archived: bool | None = None,
        limit: int | None = None,
        offset: int = 0,
    ) -> ArticlePage:
        """
        List a page of summaries together with the total count.
        Both reads share one transaction so the total matches the page.
        """
        limit = _page_size(limit, self.settings.default_list_limit, self.settings.max_list_limit)
        offset = max(0, offset)
        async with self._transaction() as session:
            rows = (await session.execute(queries.list_articles_query(archived, limit, offset))).all()
            total = await session.scalar(queries.count_articles_query(archived))
        return ArticlePage(
            articles=[ArticleSummary.model_validate(row) for row in rows],
            total=total,
            limit=limit,
            offset=offset,
        )

    async def update(self, article_id: int, changes: ArticleUpdate) -> None:
        """
        Apply lifecycle changes. `mark_read=True` stamps read_at with the
        current time, including on an already-read article. No changes is a no-op.
        """
        if changes.is_empty:
            return
        values: dict = {}
        if changes.archived is not None:
            values["archived"] = changes.archived
        if changes.mark_read:
            values["read_at"] = self._now()

        async with self._transaction(write=True) as session:
            result = await session.execute(
                update(Article).where(Article.id == article_id).values(**values)
            )
            if result.rowcount == 0:
                raise NotFound(f"Article {article_id} not found")

    async def delete(self, article_id: int) -> None:
        """Delete an article, its tag links and its index entry. Unknown ids are ignored."""
        async with self._transaction(write=True) as session:
            await session.execute(delete(Article).where(Article.id == article_id))

    # ------------------------------------------------------------------
    # Tags
    # ------------------------------------------------------------------

    async def _ensure_tag(self, session: AsyncSession, name: str) -> int:
        if not name:
            raise ValueError("Tag name is required")
        await session.execute(insert(Tag).values(name=name).on_conflict_do_nothing(index_elements=["name"]))
        return await session.scalar(select(Tag.id).where(Tag.name == name))

    async def _attach(self, session: AsyncSession, article_id: int, tag_id: int) -> None:
        try:
            await session.execute(
                insert(ArticleTag)
                .values(article_id=article_id, tag_id=tag_id)
                .on_conflict_do_nothing()
            )
        except IntegrityError as e:
            if _is_violation(e, "FOREIGN KEY"):
                raise NotFound(f"Article {article_id} or tag {tag_id} not found") from e
            raise

    async def create_tag(self, name: str) -> int:
        """Return the id of the named tag, creating it if needed."""
        async with self._transaction(write=True) as session:
            return await self._ensure_tag(session, name)

    async def list_tags(self) -> list[TagRead]:
        async with self._transaction() as session:
            tags = (await session.scalars(select(Tag).order_by(Tag.name))).all()
        return [TagRead.model_validate(tag) for tag in tags]

    async def attach_tag(self, article_id: int, tag_id: int) -> None:
        """Link a tag to an article; an existing link is left as is."""
        async with self._transaction(write=True) as session:
            await self._attach(session, article_id, tag_id)

    async def detach_tag(self, article_id: int, tag_id: int) -> None:
        """Unlink a tag from an article; a missing link is ignored."""
        async with self._transaction(write=True) as session:
            await session.execute(
                delete(ArticleTag).where(
                    ArticleTag.article_id == article_id,
                    ArticleTag.tag_id == tag_id,
                )
            )

    async def tag_article(self, article_id: int, name: str) -> int:
        """Create the tag if needed and attach it, returning the tag id."""
        async with self._transaction(write=True) as session:
            tag_id = await self._ensure_tag(session, name)
            await self._attach(session, article_id, tag_id)
        return tag_id

    async def untag_article(self, article_id: int, name: str) -> None:
        """Detach a tag by name. Raises NotFound if no tag has that name."""
        async with self._transaction(write=True) as session:
            tag_id = await session.scalar(select(Tag.id).where(Tag.name == name))
            if tag_id is None:
                raise NotFound(f"Tag {name!r} not found")
            await session.execute(
                delete(ArticleTag).where(
                    ArticleTag.article_id == article_id,
                    ArticleTag.tag_id == tag_id,
                )
            )

    async def article_tags(self, article_id: int) -> list[str]:
        async with self._transaction() as session:
            return list((await session.scalars(queries.article_tags_query(article_id))).all())

    async def articles_by_tag(
        self,
        name: str,
        limit: int | None = None,
        offset: int = 0,
    ) -> list[ArticleSummary]:
        """Articles carrying the named tag, newest first. Unknown tags yield []."""
        limit = _page_size(limit, self.settings.default_list_limit, self.settings.max_list_limit)
        query = queries.articles_by_tag_query(name, limit, max(0, offset))
        async with self._transaction() as session:
            rows = (await session.execute(query)).all()
        return [ArticleSummary.model_validate(row) for row in rows]

    # ------------------------------------------------------------------
    # Search
    # ------------------------------------------------------------------

    async def search(self, query: str, limit: int | None = None) -> list[SearchResult]:
        """
        Full-text search over title and text content.

        `query` uses FTS5 query syntax; bare terms are ANDed. Results are
        ordered by relevance, then by saved_at. Malformed queries raise
        InvalidQuery.
        """
        match = query.strip()
        if not match:
            raise InvalidQuery(query, "empty query")
        limit = _page_size(limit, self.settings.default_search_limit, self.settings.max_search_limit)
        statement = queries.search_query(match, limit, self.settings.snippet_tokens)

        async with self._transaction() as session:
            try:
                rows = (await session.execute(statement)).all()
            except OperationalError as e:
                reason = str(e.orig)
                if any(marker in reason for marker in FTS_QUERY_ERRORS):
                    raise InvalidQuery(query, reason) from e
                raise
        return [
            SearchResult(article=ArticleSummary.model_validate(row), snippet=row.snippet or "")
            for row in rows
        ]
