from __future__ import annotations

from typing import Any


class GitlabSearchError(Exception):
    """
    Base exception for glsearch-specific errors.

    Raised to indicate incorrect usage or unrecoverable conditions
    within the search workflow.
    """
    pass


class ConstructionError(GitlabSearchError):
    """Invalid configuration detected before any request is made (empty URL or token, bad limits)."""
    pass


class TransportError(GitlabSearchError):
    """A single HTTP request failed (connection error, timeout, non-2xx status)."""
    pass


class DecodeError(GitlabSearchError):
    """A response body did not have the expected shape."""
    pass


class PaginationError(GitlabSearchError):
    """
    A page walk stopped because one of its pages failed.

    Attributes:
        path: API path being paginated.
        page: 1-based number of the page that failed.
        items: Items decoded from the pages fetched before the failure.
    """

    def __init__(self, path: str, page: int, cause: Exception, items: list[Any] | None = None) -> None:
        super().__init__(str(cause))
        self.path = path
        self.page = page
        self.cause = cause
        self.items: list[Any] = list(items or [])


class ResolutionError(GitlabSearchError):
    """Project resolution aborted under the fail-fast policy."""
    pass
