import asyncio
import json
from datetime import datetime, timezone

from src.modules.persistence.service import PersistenceService
from src.modules.scraper.schemas import ArticleRecord


def make_record(title: str) -> ArticleRecord:
    return ArticleRecord(
        href=f"https://news.example.com/{title}.html",
        title=title,
        description="Crème de la crème",
        image="",
        published_at="2025-12-30 09:15:00",
        date_text="30 December 2025",
        photo_credit=None,
        content="Body",
        url=f"https://news.example.com/{title}.html",
        scraped_at=datetime(2026, 1, 2, 3, 4, 5, tzinfo=timezone.utc),
    )


def test_save_articles_writes_camel_case_json(tmp_path):
    destination = tmp_path / "nested" / "articles.json"

    asyncio.run(PersistenceService().save_articles([make_record("alpha")], destination))

    raw = destination.read_text(encoding="utf-8")
    assert "Crème de la crème" in raw
    assert raw.startswith("[\n  {")
    data = json.loads(raw)
    assert list(data[0]) == [
        "href",
        "title",
        "description",
        "image",
        "datetime",
        "dateText",
        "photoCredit",
        "content",
        "url",
        "scrapedAt",
    ]
    assert data[0]["datetime"] == "2025-12-30 09:15:00"
    assert data[0]["photoCredit"] is None
    assert data[0]["scrapedAt"].startswith("2026-01-02T03:04:05")


def test_save_articles_overwrites_previous_run(tmp_path):
    destination = tmp_path / "articles.json"
    store = PersistenceService()

    asyncio.run(store.save_articles([make_record("a"), make_record("b")], destination))
    asyncio.run(store.save_articles([], destination))

    assert json.loads(destination.read_text(encoding="utf-8")) == []
