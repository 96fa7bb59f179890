"""Lazy traversal of paginated listings.

A :class:`PagedFetcher` is bound to one listing and one filter. It does
no I/O until a page is requested, and each page request is an ordinary
API call issued through the owning connection.

Examples:
    >>> fetcher = conn.fetch_batches(BatchFilter(tags=frozenset({"promo"})))
    >>> first = fetcher.fetch(0)
    >>> for batch in fetcher:
    ...     print(batch.id)
"""

import logging
from typing import TYPE_CHECKING, Any, Generic, Iterator, Optional, Sequence, Type, TypeVar

from .call_context import Callback, CallContext
from .exceptions import InvalidArgumentError
from .models.base_models import Page

if TYPE_CHECKING:
    from .connection import ApiConnection

logger = logging.getLogger(__name__)

T = TypeVar("T")


class PagedFetcher(Generic[T]):
    """Fetches pages of one listing.

    Pages are fetched independently; nothing is cached between them, so
    the listing may change while it is being traversed. Every page
    carries its own ``num_pages`` as reported when it was fetched.

    :param connection: Connection issuing the page calls
    :type connection: ApiConnection
    :param path: Path segments of the listing below the service plan
    :type path: Sequence[str]
    :param page_type: Model of one page of the listing
    :type page_type: Type[Page]
    :param filter: Filter providing the remaining query parameters
    """

    def __init__(
        self,
        connection: "ApiConnection",
        path: Sequence[str],
        page_type: Type[Page],
        filter: Any,
    ):
        self._connection = connection
        self._path = tuple(path)
        self._page_type = page_type
        self._filter = filter

    @property
    def filter(self) -> Any:
        return self._filter

    def fetch_async(
        self, page: int, callback: Optional[Callback] = None
    ) -> CallContext[Page[T]]:
        """Fetch one page.

        :param page: Zero based page index
        :type page: int
        :param callback: Optional completion observer
        :return: Handle on the call, completed with the page
        :raises InvalidArgumentError: If the page index is negative
        """
        if isinstance(page, bool) or not isinstance(page, int) or page < 0:
            raise InvalidArgumentError(
                "page must be a non-negative integer", argument="page", value=page
            )
        params = [("page", str(page))] + self._filter.to_query_params()
        return self._connection.call_async(
            "GET", self._path, (200,), self._page_type, params=params, callback=callback
        )

    def fetch(self, page: int) -> Page[T]:
        """Fetch one page, blocking until it arrives."""
        return self._connection._wait(self.fetch_async(page))

    def pages(self) -> Iterator[Page[T]]:
        """Iterate over the pages of the listing, starting at page zero.

        Each page is fetched when the iterator is advanced to it. The
        iteration stops after page ``n`` once ``n + 1`` reaches the page
        count reported by page ``n``. An empty listing yields no pages.

        :return: Iterator of pages
        :rtype: Iterator[Page]
        """
        index = 0
        while True:
            current = self.fetch(index)
            if index == 0 and current.num_pages == 0:
                return
            yield current
            if index + 1 >= current.num_pages:
                return
            index += 1

    def elements(self) -> Iterator[T]:
        """Iterate over the elements of every page in order.

        The next page is fetched only when the current one is exhausted,
        and empty pages in the middle of the listing are skipped.

        :return: Iterator of listing elements
        """
        for page in self.pages():
            yield from page.content

    def __iter__(self) -> Iterator[T]:
        return self.elements()

    def __repr__(self) -> str:
        return f"<PagedFetcher /{'/'.join(self._path)} filter={self._filter!r}>"
