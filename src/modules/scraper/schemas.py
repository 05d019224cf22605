from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class ArticleLink(BaseModel):
    """Metadata extracted from a listing-page card."""

    href: str
    title: str
    description: str = ""
    image: str = ""


class PublicationStamp(BaseModel):
    """Date information read from an article header before full extraction."""

    published_at: str
    date_text: str | None = None


class ArticlePage(BaseModel):
    """Values read from an individual article page."""

    title: str | None = None
    content: str = ""
    photo_credit: str | None = None
    main_image: str | None = None
    stamp: PublicationStamp | None = None


class ArticleRecord(BaseModel):
    """Complete article as written to the output file."""

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, frozen=True
    )

    href: str
    title: str
    description: str
    image: str
    published_at: str | None = Field(default=None, alias="datetime")
    date_text: str | None = None
    photo_credit: str | None = None
    content: str
    url: str
    scraped_at: datetime


# ── Per-article outcomes ────────────────────────────────────────


@dataclass(frozen=True)
class Record:
    article: ArticleRecord


@dataclass(frozen=True)
class Skip:
    reason: str


@dataclass(frozen=True)
class StopCrawl:
    article_date: date


ArticleOutcome = Record | Skip | StopCrawl


# ── Crawl summary ───────────────────────────────────────────────


class CrawlState(str, Enum):
    LOADING_PAGE = "loading_page"
    SCRAPING_ARTICLES = "scraping_articles"
    ADVANCING = "advancing"
    STOPPED = "stopped"


class StopReason(str, Enum):
    END_OF_LISTING = "end_of_listing"
    DATE_BOUNDARY = "date_boundary"
    NO_NEXT_PAGE = "no_next_page"
    PAGE_LIMIT = "page_limit"


class CrawlResult(BaseModel):
    """Aggregated result of a full crawl."""

    articles: list[ArticleRecord]
    total: int
    skipped: int
    pages: int
    stop_reason: StopReason
