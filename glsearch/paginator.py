from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from enum import Enum
from typing import Any, Protocol, TypeVar

from glsearch.exceptions import DecodeError, PaginationError, TransportError

T = TypeVar("T")

MAX_PER_PAGE: int = 100

logger = logging.getLogger(__name__)


class JsonGetter(Protocol):
    def get(self, path: str, query: Mapping[str, Any] | None = None) -> Any: ...


class PageTermination(str, Enum):
    """
    When a page walk stops.

    - LITERAL: stop once the last page holds at most `per_page` items. The
      server never sends more than `per_page`, so this always stops after
      the first page.
    - FULL_PAGES: keep going while pages come back full; stop on a short
      or empty page.
    """
    LITERAL = "literal"
    FULL_PAGES = "full-pages"

    def is_last(self, page_len: int, per_page: int) -> bool:
        if self is PageTermination.LITERAL:
            return page_len <= per_page
        return page_len < per_page


def paginate(
        session: JsonGetter,
        path: str,
        query: Mapping[str, Any] | None = None,
        *,
        decode: Callable[[Any], T],
        per_page: int = MAX_PER_PAGE,
        termination: PageTermination = PageTermination.LITERAL,
) -> list[T]:
    """
    Walk a paginated list endpoint and collect decoded items.

    `per_page` and `page` are appended after the caller's own query
    parameters. Pages are requested starting at 1.

    Args:
        session: Object exposing `get(path, query)` (normally HttpSession).
        path: API path relative to /api/v4.
        query: Fixed query parameters for every page.
        decode: Converts one raw JSON item into the caller's type.
        per_page: Items requested per page.
        termination: Stop rule, see PageTermination.

    Returns:
        Items from all fetched pages, in page order.

    Raises:
        PaginationError: A page failed to load or decode; carries the
            items collected before the failure.
    """
    items: list[T] = []
    page = 0

    while True:
        page += 1
        params: dict[str, Any] = dict(query or {})
        params["per_page"] = per_page
        params["page"] = page

        try:
            batch = session.get(path, params)
            if not isinstance(batch, list):
                raise DecodeError(f"GET {path}: expected a JSON list, got {type(batch).__name__}")
            decoded = [decode(x) for x in batch]
        except (TransportError, DecodeError) as e:
            raise PaginationError(path, page, e, items) from e

        items.extend(decoded)
        logger.debug("Fetched page %s of %s: %s item(s).", page, path, len(batch))

        if termination.is_last(len(batch), per_page):
            break

    return items
