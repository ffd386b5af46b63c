"""Article model - saved web pages with extracted content."""

from datetime import datetime

from sqlalchemy import Index
from sqlmodel import Field, SQLModel


class Article(SQLModel, table=True):
    """
    Saved article.
    Only `archived` and `read_at` change after insert; title and text_content
    are mirrored into the full-text index by triggers (see pocket.db.fts).
    """

    __tablename__ = "articles"
    __table_args__ = (
        Index("ix_articles_saved_at_id", "saved_at", "id"),
        {"sqlite_autoincrement": True},
    )

    id: int | None = Field(default=None, primary_key=True)
    url: str = Field(unique=True)

    # Extracted content
    title: str | None = Field(default=None)
    content: str | None = Field(default=None)
    text_content: str | None = Field(default=None)
    excerpt: str | None = Field(default=None)
    author: str | None = Field(default=None)
    image_url: str | None = Field(default=None)

    # Lifecycle
    saved_at: datetime
    read_at: datetime | None = Field(default=None)
    archived: bool = Field(default=False, index=True)
