import logging
from pathlib import Path

from pydantic import TypeAdapter

from src.modules.persistence.contracts import ArticleStoreContract
from src.modules.scraper.schemas import ArticleRecord

logger = logging.getLogger(__name__)

_ARTICLES = TypeAdapter(list[ArticleRecord])


class PersistenceService(ArticleStoreContract):
    """Writes harvested articles to a pretty-printed JSON array."""

    async def save_articles(
        self,
        articles: list[ArticleRecord],
        destination: Path,
    ) -> Path:
        # Each run replaces the previous file
        destination = Path(destination)
        destination.parent.mkdir(parents=True, exist_ok=True)
        payload = _ARTICLES.dump_json(articles, indent=2, by_alias=True)
        destination.write_bytes(payload)
        logger.info("Saved %d articles to %s", len(articles), destination.resolve())
        return destination


persistence_service = PersistenceService()
