import logging
from collections.abc import Callable
from contextlib import AbstractAsyncContextManager

from playwright.async_api import Page

from src.config.settings import Settings, settings
from src.modules.browser.service import browser_session
from src.modules.persistence.contracts import ArticleStoreContract
from src.modules.persistence.service import persistence_service
from src.modules.scraper.schemas import ArticleRecord, CrawlResult
from src.modules.scraper.service import ScraperService, scraper_service

logger = logging.getLogger(__name__)

SessionFactory = Callable[[Settings], AbstractAsyncContextManager[Page]]


def _open_browser(config: Settings) -> AbstractAsyncContextManager[Page]:
    return browser_session(config.page_timeout, headless=config.headless)


class HarvestPipelineService:
    """Opens a browser, crawls, and always saves what was collected."""

    def __init__(
        self,
        config: Settings,
        scraper: ScraperService,
        store: ArticleStoreContract,
        session_factory: SessionFactory = _open_browser,
    ) -> None:
        self._config = config
        self._scraper = scraper
        self._store = store
        self._session_factory = session_factory

    def _log_configuration(self) -> None:
        date_range = self._config.date_range
        if date_range.is_unbounded:
            logger.info("No date filter set, scraping all articles")
        else:
            logger.info("Date range: %s", date_range.describe())
        if self._config.max_pages is not None:
            logger.info("Page limit: %d", self._config.max_pages)

    async def _save_partial(self, articles: list[ArticleRecord]) -> None:
        # Must not replace the crawl error already in flight
        try:
            await self._store.save_articles(articles, self._config.output_file)
        except Exception:
            logger.exception("Could not save partial results")

    async def run(self) -> CrawlResult:
        self._log_configuration()
        articles: list[ArticleRecord] = []

        async with self._session_factory(self._config) as page:
            try:
                result = await self._scraper.crawl(page, articles)
            except Exception:
                logger.error("Crawl aborted, saving %d partial articles", len(articles))
                await self._save_partial(articles)
                raise
            await self._store.save_articles(articles, self._config.output_file)

        logger.info(
            "Harvest finished: %d articles, %d skipped, stop reason %s",
            result.total, result.skipped, result.stop_reason.value,
        )
        return result


harvest_pipeline_service = HarvestPipelineService(
    settings, scraper_service, persistence_service
)
