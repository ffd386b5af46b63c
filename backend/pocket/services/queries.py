"""Query builders for article listings and full-text search."""

from sqlalchemy import Select, column, func, literal_column, select, table

from pocket.constants.search_defaults import FTS_TABLE, SNIPPET_CLOSE, SNIPPET_ELLIPSIS, SNIPPET_OPEN
from pocket.models import Article, ArticleTag, Tag

# Listing projection: everything except the article body
SUMMARY_COLUMNS = (
    Article.id,
    Article.url,
    Article.title,
    Article.excerpt,
    Article.author,
    Article.image_url,
    Article.saved_at,
    Article.read_at,
    Article.archived,
)

NEWEST_FIRST = (Article.saved_at.desc(), Article.id.desc())

fts = table(FTS_TABLE, column("rowid"), column("rank"))


def list_articles_query(archived: bool | None, limit: int, offset: int) -> Select:
    """Newest-first page of article summaries, optionally filtered on archive state."""
    query = select(*SUMMARY_COLUMNS)
    if archived is not None:
        query = query.where(Article.archived == archived)
    return query.order_by(*NEWEST_FIRST).offset(offset).limit(limit)


def count_articles_query(archived: bool | None) -> Select:
    query = select(func.count()).select_from(Article)
    if archived is not None:
        query = query.where(Article.archived == archived)
    return query


def articles_by_tag_query(tag_name: str, limit: int, offset: int) -> Select:
    """Newest-first page of articles carrying the named tag."""
    return (
        select(*SUMMARY_COLUMNS)
        .join(ArticleTag, ArticleTag.article_id == Article.id)
        .join(Tag, Tag.id == ArticleTag.tag_id)
        .where(Tag.name == tag_name)
        .order_by(*NEWEST_FIRST)
        .offset(offset)
        .limit(limit)
    )


def article_tags_query(article_id: int) -> Select:
    return (
        select(Tag.name)
        .join(ArticleTag, ArticleTag.tag_id == Tag.id)
        .where(ArticleTag.article_id == article_id)
        .order_by(Tag.name)
    )


def search_query(match: str, limit: int, snippet_tokens: int) -> Select:
    """
    Relevance-ranked full-text search.

    `rank` is FTS5's bm25 score (lower is better). The snippet is taken from
    whichever indexed column matched best (column index -1).
    """
    fts_table = literal_column(FTS_TABLE)
    snippet = func.snippet(
        fts_table, -1, SNIPPET_OPEN, SNIPPET_CLOSE, SNIPPET_ELLIPSIS, snippet_tokens
    ).label("snippet")
    return (
        select(*SUMMARY_COLUMNS, snippet)
        .select_from(fts)
        .join(Article, Article.id == fts.c.rowid)
        .where(fts_table.op("MATCH")(match))
        .order_by(fts.c.rank, *NEWEST_FIRST)
        .limit(limit)
    )
