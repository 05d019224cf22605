import re
from dataclasses import dataclass
from datetime import date

_ISO_DATE_RE = re.compile(r"(\d{4}-\d{2}-\d{2})")


def parse_date(value: str | None) -> date | None:
    """Pull the calendar date out of a ``datetime`` attribute.

    The site publishes values such as ``"2026-01-16 19:32:27"``; only the
    ``YYYY-MM-DD`` part is used. Anything without a valid date yields ``None``.
    """
    if not value:
        return None
    match = _ISO_DATE_RE.search(value)
    if not match:
        return None
    try:
        return date.fromisoformat(match.group(1))
    except ValueError:
        return None


@dataclass(frozen=True)
class DateRange:
    """Inclusive publication-date window. Missing bounds are open."""

    start: date | None = None
    end: date | None = None

    @property
    def is_unbounded(self) -> bool:
        return self.start is None and self.end is None

    def contains(self, day: date | None) -> bool:
        if self.is_unbounded:
            return True
        if day is None:
            return False
        if self.start is not None and day < self.start:
            return False
        if self.end is not None and day > self.end:
            return False
        return True

    def is_before_start(self, day: date | None) -> bool:
        # Listings are newest-first, so this marks the end of useful pages
        if self.start is None or day is None:
            return False
        return day < self.start

    def describe(self) -> str:
        start = self.start.isoformat() if self.start else "no start"
        end = self.end.isoformat() if self.end else "no end"
        return f"{start} to {end}"
