import re
from collections.abc import Callable, Sequence
from typing import TypeVar
from urllib.parse import urljoin

from bs4 import BeautifulSoup, Tag

from src.modules.scraper.schemas import ArticleLink, ArticlePage, PublicationStamp

T = TypeVar("T")

LISTING_ITEM = ".post-style1.col-md-6"
DATE_ELEMENT = "header.sub-header span[datetime]"
ARTICLE_BODY = ".article-text"
TITLE_SELECTORS = ("h1", ".article-title", "header h1")
MAIN_IMAGE_SELECTORS = (".article-text img", "article img", ".post-thumb img")

_DAY_MONTH_YEAR_RE = re.compile(r"\d{1,2}\s+\w+\s+\d{4}")
_SHARE_RE = re.compile(r"Share:.*", re.IGNORECASE)
_WHITESPACE_RE = re.compile(r"\s+")


def absolutize(url: str | None, base_url: str) -> str:
    """Resolve a site-relative path against ``base_url``; absolute URLs pass through."""
    if not url:
        return ""
    if url.startswith("data:"):
        return url
    return urljoin(base_url.rstrip("/") + "/", url)


def first_match(
    root: Tag,
    selectors: Sequence[str],
    extract: Callable[[Tag], T | None],
) -> T | None:
    """Try each selector in order and return the first non-empty extraction."""
    for selector in selectors:
        element = root.select_one(selector)
        if element is None:
            continue
        value = extract(element)
        if value:
            return value
    return None


def _text(element: Tag) -> str:
    return element.get_text().strip()


def _collapse(text: str) -> str:
    return _WHITESPACE_RE.sub(" ", text).strip()


# ── Listing pages ───────────────────────────────────────────────


def parse_listing_page(html: str, base_url: str) -> list[ArticleLink]:
    soup = BeautifulSoup(html, "lxml")
    links: list[ArticleLink] = []

    for item in soup.select(LISTING_ITEM):
        anchor = item.select_one("h4 a")
        if not anchor:
            continue
        href = anchor.get("href", "")
        if not href:
            continue

        paragraph = item.select_one("p")
        image = item.select_one("img")

        links.append(
            ArticleLink(
                href=absolutize(str(href), base_url),
                title=_text(anchor),
                description=_text(paragraph) if paragraph else "",
                image=absolutize(image.get("src") if image else None, base_url),
            )
        )
    return links


# ── Article pages ───────────────────────────────────────────────


def parse_publication_stamp(html: str) -> PublicationStamp | None:
    soup = BeautifulSoup(html, "lxml")
    return _stamp_from(soup)


def _stamp_from(soup: BeautifulSoup) -> PublicationStamp | None:
    element = soup.select_one(DATE_ELEMENT)
    if element is None:
        return None
    published_at = element.get("datetime")
    if not published_at:
        return None
    return PublicationStamp(published_at=str(published_at), date_text=_text(element))


def clean_photo_credit(raw: str) -> str | None:
    text = _DAY_MONTH_YEAR_RE.sub("", raw)
    text = _SHARE_RE.sub("", text)
    text = _collapse(text)
    return text or None


def _photo_credit(soup: BeautifulSoup) -> str | None:
    sub_header = soup.select_one(".sub-header")
    if sub_header is None:
        return None
    credit_block = sub_header.select_one(".col-md-12")
    source = credit_block if credit_block is not None else sub_header
    return clean_photo_credit(source.get_text())


def _body(soup: BeautifulSoup, base_url: str) -> str:
    body = soup.select_one(ARTICLE_BODY)
    if body is None:
        return ""

    paragraphs = [_text(p) for p in body.select("p")]
    text = "\n\n".join(p for p in paragraphs if p)

    image_urls = [absolutize(img.get("src"), base_url) for img in body.select("img")]
    image_urls = [url for url in image_urls if url]
    if image_urls:
        images = "[Article Images: " + ", ".join(image_urls) + "]"
        text = f"{text}\n\n{images}" if text else images
    return text


def parse_article_page(html: str, base_url: str) -> ArticlePage:
    soup = BeautifulSoup(html, "lxml")

    title = first_match(soup, TITLE_SELECTORS, _text)
    main_image = first_match(
        soup,
        MAIN_IMAGE_SELECTORS,
        lambda img: absolutize(img.get("src"), base_url),
    )

    return ArticlePage(
        title=title,
        content=_body(soup, base_url),
        photo_credit=_photo_credit(soup),
        main_image=main_image,
        stamp=_stamp_from(soup),
    )
