"""Exception taxonomy for the crawl and content-intelligence pipeline.

Only ``CrawlCancelledError`` and ``StorageError`` are expected to reach the
caller. Everything else is recovered inside the component that raises it:
page fetch failures skip the page, robots.txt failures mean "no rules",
and completion failures fall back to the heuristic result.
"""

from typing import Optional


class SeoIntelError(Exception):
    """Base class for all pipeline errors."""


class NetworkError(SeoIntelError):
    """A single URL could not be fetched."""

    def __init__(self, url: str, reason: str, status_code: Optional[int] = None):
        self.url = url
        self.reason = reason
        self.status_code = status_code
        super().__init__(f"Failed to fetch {url}: {reason}")


class CrawlCancelledError(SeoIntelError):
    """The crawl was cancelled by the caller. No partial index is returned."""

    def __init__(self, message: str = "Crawling cancelled"):
        super().__init__(message)


class RobotsParseError(SeoIntelError):
    """robots.txt could not be fetched or parsed."""


class CompletionServiceError(SeoIntelError):
    """The text completion service failed or is unavailable."""


class MalformedCompletionResponse(SeoIntelError):
    """The completion service returned text that is not valid JSON, even after repair."""

    def __init__(self, raw: str, message: str = "Completion response is not valid JSON"):
        self.raw = raw
        super().__init__(message)


class StorageError(SeoIntelError):
    """Persisting or loading an analysis failed."""
