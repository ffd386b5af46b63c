"""Article schemas for store input and output."""

from datetime import UTC, datetime

from pydantic import BaseModel, Field, field_validator


class ArticleCreate(BaseModel):
    """Fields supplied by the caller when saving an article."""

    url: str = Field(..., min_length=1)
    title: str | None = None
    content: str | None = Field(default=None, description="Sanitized article HTML")
    text_content: str | None = Field(default=None, description="Plain text used for search")
    excerpt: str | None = None
    author: str | None = None
    image_url: str | None = None


class ArticleUpdate(BaseModel):
    """Lifecycle changes; fields left as None are not touched."""

    archived: bool | None = None
    mark_read: bool | None = None

    @property
    def is_empty(self) -> bool:
        return self.archived is None and not self.mark_read


class ArticleSummary(BaseModel):
    """Listing projection, without the article body."""

    id: int
    url: str
    title: str | None = None
    excerpt: str | None = None
    author: str | None = None
    image_url: str | None = None
    saved_at: datetime
    read_at: datetime | None = None
    archived: bool = False

    class Config:
        from_attributes = True

    @field_validator("saved_at", "read_at")
    @classmethod
    def _assume_utc(cls, value: datetime | None) -> datetime | None:
        # SQLite hands timestamps back without an offset; they are stored in UTC
        if value is not None and value.tzinfo is None:
            return value.replace(tzinfo=UTC)
        return value


class ArticleDetail(ArticleSummary):
    """Full article with its tags."""

    content: str | None = None
    text_content: str | None = None
    tags: list[str] = Field(default_factory=list)


class ArticlePage(BaseModel):
    """Paginated article listing."""

    articles: list[ArticleSummary]
    total: int
    limit: int
    offset: int


class SearchResult(BaseModel):
    """A search hit with its highlighted snippet."""

    article: ArticleSummary
    snippet: str


class ExtractedArticle(BaseModel):
    """Output of the content extractor for a single url."""

    title: str | None = None
    html: str | None = None
    text: str | None = None
    excerpt: str | None = None
    author: str | None = None
    image: str | None = None
    error: str | None = None
