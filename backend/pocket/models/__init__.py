"""Models package - SQLModel database models."""

from pocket.models.article import Article
from pocket.models.tag import ArticleTag, Tag

__all__ = ["Article", "Tag", "ArticleTag"]
