class IndiaStreamzError(Exception):
    """Base exception for scrape pipeline errors."""


class FetchError(IndiaStreamzError):
    """Raised when an upstream page could not be fetched after every retry."""

    def __init__(self, url: str, attempts: int, reason: str = None):
        self.url = url
        self.attempts = attempts
        self.reason = reason
        message = f"Failed to fetch {url} after {attempts} attempts"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class CacheWriteError(IndiaStreamzError):
    """Raised when a cache file cannot be staged."""


class ScrapeInProgressError(IndiaStreamzError):
    """Raised when an exclusive operation is requested while a scrape is running."""

    def __init__(self, operation: str = "scrape"):
        self.operation = operation
        super().__init__(f"Cannot start {operation}: a scrape is already running")
