class ScraperError(Exception):
    """Base class for errors that abort a harvest run."""


class RetryExhaustedError(ScraperError):
    def __init__(self, label: str, attempts: int) -> None:
        super().__init__(f"{label} failed after {attempts} attempts")
        self.label = label
        self.attempts = attempts


class ListingFetchError(ScraperError):
    def __init__(self, offset: int, attempts: int) -> None:
        super().__init__(
            f"Failed to extract article links at offset {offset} "
            f"after {attempts} attempts"
        )
        self.offset = offset
        self.attempts = attempts
