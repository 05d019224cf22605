from datetime import date
from pathlib import Path

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from src.modules.scraper.dates import DateRange


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    base_url: str = "https://www.premiumbeautynews.com"
    listing_path: str = "/en/industry-buzz/"
    offset_param: str = "debut_rub_lastart"
    page_stride: int = 10

    # Inclusive bounds; unset both to harvest everything
    start_date: date | None = date(2025, 12, 29)
    end_date: date | None = date(2025, 12, 31)

    output_file: Path = Path("scraped_articles.json")
    page_timeout: int = 120_000  # ms, per navigation
    headless: bool = True
    max_pages: int | None = Field(default=None, ge=1)
    log_level: str = "INFO"

    @model_validator(mode="after")
    def _check_range(self) -> "Settings":
        if self.start_date and self.end_date and self.start_date > self.end_date:
            raise ValueError(
                f"start_date {self.start_date} is after end_date {self.end_date}"
            )
        return self

    @property
    def date_range(self) -> DateRange:
        return DateRange(start=self.start_date, end=self.end_date)


settings = Settings()
