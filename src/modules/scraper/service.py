import logging
from datetime import datetime, timezone

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import Page
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from src.config.settings import Settings, settings
from src.modules.browser.service import (
    accept_cookies,
    pause,
    scroll_to_bottom,
    wait_for_any,
)
from src.modules.scraper.dates import parse_date
from src.modules.scraper.exceptions import ListingFetchError, RetryExhaustedError
from src.modules.scraper.parsing import (
    DATE_ELEMENT,
    LISTING_ITEM,
    parse_article_page,
    parse_listing_page,
    parse_publication_stamp,
)
from src.modules.scraper.retry import RetryPolicy, retry
from src.modules.scraper.schemas import (
    ArticleLink,
    ArticleOutcome,
    ArticleRecord,
    CrawlResult,
    CrawlState,
    Record,
    Skip,
    StopCrawl,
    StopReason,
)

logger = logging.getLogger(__name__)

LISTING_FALLBACK = ".post-style1, .row"
HEADER_FALLBACK = "header.sub-header, .sub-header"
CONTENT_MARKERS = (".article-text", "header.sub-header", "article")

LISTING_WAIT_TIMEOUT = 30_000
ADVANCE_WAIT_TIMEOUT = 8_000
ARTICLE_WAIT_TIMEOUT = 20_000

LISTING_SETTLE = 1.0
DATE_SETTLE = 0.5
ARTICLE_SETTLE = 1.0
POLITENESS_DELAY = 1.0

LISTING_RETRY = RetryPolicy(attempts=3, delay=3.0, retry_delay=2.0)
ADVANCE_POLL = RetryPolicy(attempts=5, delay=1.5)
ARTICLE_RETRY = RetryPolicy(attempts=2, delay=2.0)


class ScraperService:
    """Crawls the industry-buzz listing newest-first and extracts dated articles."""

    def __init__(self, config: Settings) -> None:
        self._config = config
        self._range = config.date_range

    @staticmethod
    def _sleeper(page: Page):
        async def sleep(seconds: float) -> None:
            await pause(page, seconds)

        return sleep

    # ── URL building ────────────────────────────────────────────

    def listing_url(self, offset: int) -> str:
        url = f"{self._config.base_url.rstrip('/')}{self._config.listing_path}"
        if offset > 0:
            url = f"{url}?{self._config.offset_param}={offset}"
        return url

    async def _goto(self, page: Page, url: str) -> None:
        await page.goto(url, wait_until="load", timeout=self._config.page_timeout)

    # ── Listing pages ───────────────────────────────────────────

    async def fetch_listing(
        self, page: Page, offset: int, max_retries: int = LISTING_RETRY.attempts
    ) -> list[ArticleLink]:
        url = self.listing_url(offset)

        async def attempt_listing(attempt: int) -> list[ArticleLink]:
            logger.info(
                "Extracting article links (attempt %d/%d, offset %d): %s",
                attempt, max_retries, offset, url,
            )
            await self._goto(page, url)
            try:
                await page.wait_for_selector(
                    LISTING_ITEM, timeout=LISTING_WAIT_TIMEOUT, state="visible"
                )
            except PlaywrightTimeoutError:
                logger.info("Articles container not found, trying alternative selector")
                await page.wait_for_selector(LISTING_FALLBACK, timeout=LISTING_WAIT_TIMEOUT)

            await accept_cookies(page)
            await scroll_to_bottom(page)
            await pause(page, LISTING_SETTLE)
            return parse_listing_page(await page.content(), self._config.base_url)

        policy = RetryPolicy(
            attempts=max_retries,
            delay=LISTING_RETRY.delay,
            retry_delay=LISTING_RETRY.retry_delay,
        )
        try:
            links = await retry(
                attempt_listing,
                policy,
                label=f"listing offset {offset}",
                accept=bool,
                sleep=self._sleeper(page),
            )
        except RetryExhaustedError as exc:
            raise ListingFetchError(offset, exc.attempts) from exc

        logger.info("Found %d articles at offset %d", len(links), offset)
        return links

    async def advance_page(self, page: Page, next_offset: int) -> bool:
        url = self.listing_url(next_offset)
        logger.info("Navigating to next page (offset %d): %s", next_offset, url)
        try:
            await self._goto(page, url)
        except PlaywrightError as exc:
            logger.error("Error navigating to next page: %s", exc)
            return False

        async def poll(attempt: int) -> None:
            await page.wait_for_selector(
                LISTING_ITEM, timeout=ADVANCE_WAIT_TIMEOUT, state="visible"
            )

        try:
            await retry(
                poll,
                ADVANCE_POLL,
                label=f"articles at offset {next_offset}",
                sleep=self._sleeper(page),
            )
        except RetryExhaustedError:
            logger.info("No articles found at offset %d, reached end", next_offset)
            return False

        await scroll_to_bottom(page)
        await pause(page, LISTING_SETTLE)
        return True

    # ── Article pages ───────────────────────────────────────────

    async def _load_article(self, page: Page, link: ArticleLink) -> ArticleOutcome:
        await self._goto(page, link.href)
        try:
            await page.wait_for_selector(
                DATE_ELEMENT, timeout=ARTICLE_WAIT_TIMEOUT, state="visible"
            )
        except PlaywrightTimeoutError:
            await page.wait_for_selector(HEADER_FALLBACK, timeout=ARTICLE_WAIT_TIMEOUT)
        await accept_cookies(page)
        await pause(page, DATE_SETTLE)

        # Cheap date check before paying for full extraction
        stamp = parse_publication_stamp(await page.content())
        if stamp is None:
            logger.warning("Could not extract date for %s, skipping", link.href)
            return Skip("missing publication date")

        day = parse_date(stamp.published_at)
        if self._range.is_before_start(day):
            logger.info(
                "Article date %s (%s) is before %s, stopping",
                stamp.published_at, stamp.date_text, self._range.start,
            )
            return StopCrawl(day)

        if not self._range.contains(day):
            logger.info(
                "Article date %s (%s) is outside [%s], skipping",
                stamp.published_at, stamp.date_text, self._range.describe(),
            )
            return Skip("outside date range")

        marker = await wait_for_any(page, CONTENT_MARKERS, ARTICLE_WAIT_TIMEOUT)
        if marker is None:
            logger.info("Key elements not immediately visible, continuing anyway")
        await scroll_to_bottom(page)
        await pause(page, ARTICLE_SETTLE)

        article = parse_article_page(await page.content(), self._config.base_url)
        stamp = article.stamp or stamp
        return Record(
            ArticleRecord(
                href=link.href,
                title=article.title or link.title,
                description=link.description,
                image=article.main_image or link.image,
                published_at=stamp.published_at,
                date_text=stamp.date_text,
                photo_credit=article.photo_credit,
                content=article.content,
                url=page.url,
                scraped_at=datetime.now(timezone.utc),
            )
        )

    async def fetch_article(
        self, page: Page, link: ArticleLink, max_retries: int = ARTICLE_RETRY.attempts
    ) -> ArticleOutcome:
        async def attempt_article(attempt: int) -> ArticleOutcome:
            logger.info("Checking article: %s (attempt %d/%d)", link.title, attempt, max_retries)
            return await self._load_article(page, link)

        try:
            return await retry(
                attempt_article,
                RetryPolicy(attempts=max_retries, delay=ARTICLE_RETRY.delay),
                label=f"article {link.href}",
                sleep=self._sleeper(page),
            )
        except RetryExhaustedError as exc:
            logger.error("Failed to scrape %s: %s", link.href, exc.__cause__)
            return Skip("extraction failed")

    # ── Orchestration ───────────────────────────────────────────

    async def crawl(
        self, page: Page, articles: list[ArticleRecord] | None = None
    ) -> CrawlResult:
        """Walk listing pages from offset 0 until a stop condition is met.

        Records are appended to ``articles`` as they are scraped, so a caller
        holding the list keeps partial results if a listing page fails.
        """
        if articles is None:
            articles = []
        state = CrawlState.LOADING_PAGE
        stop_reason = StopReason.END_OF_LISTING
        offset = 0
        pages = 0
        skipped = 0
        links: list[ArticleLink] = []

        while state is not CrawlState.STOPPED:
            if state is CrawlState.LOADING_PAGE:
                logger.info("=== Scraping page %d (offset %d) ===", pages + 1, offset)
                links = await self.fetch_listing(page, offset)
                if links:
                    pages += 1
                    state = CrawlState.SCRAPING_ARTICLES
                else:
                    logger.info("No articles found on this page, reached end of pages")
                    stop_reason = StopReason.END_OF_LISTING
                    state = CrawlState.STOPPED

            elif state is CrawlState.SCRAPING_ARTICLES:
                state = CrawlState.ADVANCING
                for link in links:
                    outcome = await self.fetch_article(page, link)
                    if isinstance(outcome, StopCrawl):
                        logger.info(
                            "Reached articles older than %s, stopping with %d articles",
                            self._range.start, len(articles),
                        )
                        stop_reason = StopReason.DATE_BOUNDARY
                        state = CrawlState.STOPPED
                        break
                    if isinstance(outcome, Record):
                        articles.append(outcome.article)
                        logger.info("Scraped: %s", outcome.article.title)
                    else:
                        skipped += 1
                    await pause(page, POLITENESS_DELAY)

            elif state is CrawlState.ADVANCING:
                offset += self._config.page_stride
                if self._config.max_pages is not None and pages >= self._config.max_pages:
                    logger.info("Reached page limit (%d), stopping", self._config.max_pages)
                    stop_reason = StopReason.PAGE_LIMIT
                    state = CrawlState.STOPPED
                elif await self.advance_page(page, offset):
                    state = CrawlState.LOADING_PAGE
                else:
                    logger.info("Failed to load next page or no more articles, stopping")
                    stop_reason = StopReason.NO_NEXT_PAGE
                    state = CrawlState.STOPPED

        logger.info(
            "Crawl complete: %d articles, %d skipped, %d pages (%s)",
            len(articles), skipped, pages, stop_reason.value,
        )
        return CrawlResult(
            articles=articles,
            total=len(articles),
            skipped=skipped,
            pages=pages,
            stop_reason=stop_reason,
        )


scraper_service = ScraperService(settings)
