"""Save a url by running it through the content extractor and into the store."""

import logging
from collections.abc import Awaitable, Callable
from urllib.parse import urlsplit

from pocket.errors import ExtractionError
from pocket.schemas import ArticleCreate, ExtractedArticle
from pocket.services.article_store import ArticleStore

logger = logging.getLogger(__name__)

Extractor = Callable[[str], Awaitable[ExtractedArticle]]


def normalize_url(url: str) -> str:
    """Trim the url and default to https when no scheme is given."""
    url = url.strip()
    if not url:
        raise ValueError("URL is required")
    if not urlsplit(url).scheme:
        url = f"https://{url.lstrip('/')}"
    return url


def clean_text(text: str | None) -> str:
    """Collapse extracted text to its non-blank lines, each stripped."""
    if not text:
        return ""
    return "\n".join(line.strip() for line in text.splitlines() if line.strip())


def make_excerpt(text: str, length: int) -> str:
    if len(text) > length:
        return text[:length] + "..."
    return text


def to_article(url: str, extracted: ExtractedArticle, excerpt_length: int) -> ArticleCreate:
    """Map extractor output onto store fields, filling in a missing excerpt."""
    text = clean_text(extracted.text)
    excerpt = extracted.excerpt or make_excerpt(text, excerpt_length) or None
    return ArticleCreate(
        url=url,
        title=extracted.title,
        content=extracted.html,
        text_content=text or None,
        excerpt=excerpt,
        author=extracted.author,
        image_url=extracted.image,
    )


async def save_url(store: ArticleStore, url: str, extract: Extractor) -> int:
    """
    Extract a url and save the result, returning the new article id.

    Raises ExtractionError when the extractor reports a failure. DuplicateURL
    from the store propagates unchanged.
    """
    url = normalize_url(url)
    extracted = await extract(url)
    if extracted.error:
        logger.warning("Extraction failed for %s: %s", url, extracted.error)
        raise ExtractionError(url, extracted.error)

    article_id = await store.create(to_article(url, extracted, store.settings.excerpt_length))
    logger.info("Saved article %s from %s", article_id, url)
    return article_id
