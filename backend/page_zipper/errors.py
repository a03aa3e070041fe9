class ScrapeError(Exception):
    """Base class for request-level scrape failures."""


class InvalidURLError(ScrapeError):
    """The target URL is missing or not an absolute http(s) URL."""


class PageFetchError(ScrapeError):
    """The target page could not be fetched. Aborts the request."""


class ArchiveBuildError(ScrapeError):
    """The zip archive could not be written. Aborts the request."""
