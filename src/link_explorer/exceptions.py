"""Errors raised by the link explorer."""

from typing import Optional


class ExplorerError(Exception):
    """Base class for recoverable explorer failures."""


class InvalidUrlError(ExplorerError):
    """Raised when a URL cannot be normalized to an absolute http(s) URL."""

    def __init__(self, url: str):
        self.url = url
        super().__init__(f"Invalid URL: {url}")


class MalformedResponseError(ExplorerError):
    """Raised when a proxy answers with something that is not an HTML page."""


class AllProxiesExhaustedError(ExplorerError):
    """Raised when every proxy in the fallback chain failed for a URL."""

    def __init__(self, url: str, last_error: Optional[Exception] = None):
        self.url = url
        self.last_error = last_error
        message = "All proxies failed"
        if last_error is not None:
            message = f"{message} (last error: {last_error})"
        super().__init__(message)
