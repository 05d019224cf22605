from abc import ABC, abstractmethod
from pathlib import Path

from src.modules.scraper.schemas import ArticleRecord


class ArticleStoreContract(ABC):
    @abstractmethod
    async def save_articles(
        self,
        articles: list[ArticleRecord],
        destination: Path,
    ) -> Path: ...
