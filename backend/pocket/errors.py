"""Errors raised by the article store and the ingestion service."""


class ArticleStoreError(Exception):
    """Base class for every error surfaced by the article store."""


class NotFound(ArticleStoreError):
    """A lookup by id or tag name matched nothing."""


class DuplicateURL(ArticleStoreError):
    """An article with the same url is already saved."""

    def __init__(self, url: str):
        super().__init__(f"Article already saved: {url}")
        self.url = url


class InvalidQuery(ArticleStoreError):
    """The search query is not valid full-text query syntax."""

    def __init__(self, query: str, reason: str = ""):
        message = f"Invalid search query {query!r}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)
        self.query = query


class StoreError(ArticleStoreError):
    """The persistence engine failed (I/O, corruption, unexpected constraint)."""


class ExtractionError(Exception):
    """The content extractor could not turn a url into an article."""

    def __init__(self, url: str, reason: str):
        super().__init__(f"Failed to extract {url}: {reason}")
        self.url = url
        self.reason = reason
