"""GitHub API pagination utilities.

The Actions list endpoints are walked by page number: ``page`` starts at 1 and
``per_page`` is capped at 100 by GitHub. Iteration ends on the first page
that comes back shorter than ``per_page`` (an empty page included), or when
``max_pages`` pages have been fetched.
"""

import logging
from collections.abc import AsyncIterator, Awaitable, Callable
from typing import Generic, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

GITHUB_MAX_PER_PAGE = 100

PageFetcher = Callable[[int, int], Awaitable[list[T]]]


class PageNumberPaginator(Generic[T]):
    """Async iterator over items of a page-number paginated endpoint."""

    def __init__(
        self,
        fetch_page: PageFetcher[T],
        per_page: int = 50,
        max_pages: int | None = None,
        should_stop: Callable[[], bool] | None = None,
    ):
        """Initialize paginator.

        Args:
            fetch_page: Coroutine function taking ``(page, per_page)`` and
                returning the items of that page
            per_page: Items per page (1 to 100)
            max_pages: Maximum number of pages to fetch, unbounded when None
            should_stop: Checked before every page fetch; iteration ends
                without fetching when it returns True
        """
        if not 1 <= per_page <= GITHUB_MAX_PER_PAGE:
            raise ValueError(f"per_page must be between 1 and {GITHUB_MAX_PER_PAGE}")
        if max_pages is not None and max_pages < 1:
            raise ValueError("max_pages must be >= 1")

        self.fetch_page = fetch_page
        self.per_page = per_page
        self.max_pages = max_pages
        self.should_stop = should_stop
        self.pages_fetched = 0

    async def pages(self) -> AsyncIterator[list[T]]:
        """Yield whole pages in order."""
        page = 1
        while self.max_pages is None or page <= self.max_pages:
            if self.should_stop and self.should_stop():
                logger.debug(f"Pagination stopped before page {page}")
                return

            items = await self.fetch_page(page, self.per_page)
            self.pages_fetched += 1
            if not items:
                return

            yield items

            if len(items) < self.per_page:
                return
            page += 1

    async def __aiter__(self) -> AsyncIterator[T]:
        """Yield items across pages."""
        async for items in self.pages():
            for item in items:
                yield item
