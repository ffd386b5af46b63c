"""Pydantic schemas for the article store."""

from pocket.schemas.article import (
    ArticleCreate,
    ArticleDetail,
    ArticlePage,
    ArticleSummary,
    ArticleUpdate,
    ExtractedArticle,
    SearchResult,
)
from pocket.schemas.tag import TagRead

__all__ = [
    "ArticleCreate",
    "ArticleDetail",
    "ArticlePage",
    "ArticleSummary",
    "ArticleUpdate",
    "ExtractedArticle",
    "SearchResult",
    "TagRead",
]
