from datetime import date

import pytest
from bs4 import BeautifulSoup
from playwright.async_api import Error as PlaywrightError
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from src.config.settings import Settings
from src.modules.scraper.service import ScraperService

BASE_URL = "https://news.example.com"
LISTING_URL = f"{BASE_URL}/en/industry-buzz/"
NOT_FOUND = "<html><body><h1>Not Found</h1></body></html>"


class FakePage:
    """Stands in for a Playwright page, serving fixture HTML keyed by URL.

    Selector waits are answered by BeautifulSoup against the current document;
    timed waits are only recorded.
    """

    def __init__(
        self,
        site: dict[str, str],
        failing: dict[str, int] | None = None,
        fail_after: dict[str, int] | None = None,
    ):
        self.site = site
        # url -> number of loads that fail before it starts working
        self.failing = dict(failing or {})
        # url -> number of loads that work before it fails for good
        self.fail_after = dict(fail_after or {})
        self.visited: list[str] = []
        self.cookie_checks: list[str] = []
        self.waits: list[float] = []
        self.url = "about:blank"
        self._html = "<html><body></body></html>"

    async def goto(self, url, wait_until=None, timeout=None):
        self.visited.append(url)
        if self.failing.get(url, 0) > 0:
            self.failing[url] -= 1
            raise PlaywrightError(f"net::ERR_CONNECTION_RESET at {url}")
        if url in self.fail_after:
            if self.fail_after[url] <= 0:
                raise PlaywrightError(f"net::ERR_TIMED_OUT at {url}")
            self.fail_after[url] -= 1
        self.url = url
        self._html = self.site.get(url, NOT_FOUND)

    async def wait_for_selector(self, selector, timeout=None, state=None):
        element = BeautifulSoup(self._html, "lxml").select_one(selector)
        if element is None:
            raise PlaywrightTimeoutError(
                f"Timeout {timeout}ms exceeded waiting for {selector}"
            )
        return element

    async def wait_for_timeout(self, timeout):
        self.waits.append(timeout)

    async def query_selector(self, selector):
        self.cookie_checks.append(self.url)
        return None

    async def evaluate(self, expression):
        if "scrollTo" in expression:
            return None
        return 2400

    async def content(self):
        return self._html


def build_listing(items: list[dict]) -> str:
    cards = "".join(
        f"""
        <div class="post-style1 col-md-6">
          <img src="{item.get('image', '')}">
          <h4><a href="{item['href']}">{item['title']}</a></h4>
          <p>{item.get('description', '')}</p>
        </div>"""
        for item in items
    )
    return f'<html><body><div class="row">{cards}</div></body></html>'


def build_article(
    title: str,
    stamp: str | None = "2025-12-31 10:00:00",
    date_text: str = "31 December 2025",
    paragraphs: tuple[str, ...] = ("First paragraph.", "Second paragraph."),
    images: tuple[str, ...] = (),
    credit: str | None = "Photo: Studio Lumière",
) -> str:
    date_span = f'<span datetime="{stamp}">{date_text}</span>' if stamp else ""
    credit_block = f'<div class="col-md-12">{credit}</div>' if credit else ""
    body = "".join(f"<p>{p}</p>" for p in paragraphs)
    body += "".join(f'<img src="{src}">' for src in images)
    return f"""
    <html><body>
      <article>
        <h1>{title}</h1>
        <header class="sub-header">{credit_block}{date_span}<span>Share: X</span></header>
        <div class="article-text">{body}</div>
      </article>
    </body></html>"""


@pytest.fixture
def listing_page():
    return build_listing


@pytest.fixture
def article_page():
    return build_article


@pytest.fixture
def make_settings(tmp_path):
    def factory(**overrides) -> Settings:
        values = {
            "base_url": BASE_URL,
            "listing_path": "/en/industry-buzz/",
            "offset_param": "debut_rub_lastart",
            "page_stride": 10,
            "start_date": None,
            "end_date": None,
            "output_file": tmp_path / "out" / "articles.json",
            "max_pages": None,
            "_env_file": None,
        }
        values.update(overrides)
        return Settings(**values)

    return factory


@pytest.fixture
def make_scraper(make_settings):
    def factory(**overrides) -> ScraperService:
        return ScraperService(make_settings(**overrides))

    return factory


@pytest.fixture
def fake_page():
    return FakePage


@pytest.fixture
def december_range():
    return {"start_date": date(2025, 12, 29), "end_date": date(2025, 12, 31)}
