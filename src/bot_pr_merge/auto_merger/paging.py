"""Lazy iteration over paginated API listings.

A listing endpoint is wrapped in a ``fetch_page(cursor)`` callable that
returns a :class:`Page`. Pages are requested only when the items of the
current page have all been consumed, so a caller that stops early never
pays for the remaining pages.
"""

from collections.abc import Callable, Iterator, Sequence
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

from .errors import EndOfList

M = TypeVar("M")
T = TypeVar("T")


@dataclass
class Page(Generic[M, T]):
    """One page of a listing.

    Attributes
    ----------
    metadata : M
        Page level data returned alongside the items (e.g. a total count).
    items : Sequence[T]
        Items on this page.
    next_cursor : Any
        Cursor for the following page, or None when this is the last page.

    """

    metadata: M
    items: Sequence[T]
    next_cursor: Any = None


class PagedSequence(Generic[M, T]):
    """Cursor driven sequence of ``(metadata, item)`` pairs.

    Parameters
    ----------
    fetch_page : Callable[[Any], Page[M, T]]
        Retrieves the page at a cursor. Called with ``start`` first, then
        with each page's ``next_cursor``.
    start : Any, optional
        Cursor of the first page (default=None).

    Notes
    -----
    Errors raised by ``fetch_page`` propagate to the caller of
    :meth:`has_next` or :meth:`next`. The sequence is not restartable:
    build a new one to read the listing again.

    """

    def __init__(
        self,
        fetch_page: Callable[[Any], Page[M, T]],
        start: Any = None,
    ) -> None:
        self._fetch_page = fetch_page
        self._cursor = start
        self._metadata: M | None = None
        self._items: Sequence[T] = ()
        self._index = 0
        self._last_page = False

    def _fill(self) -> None:
        # Empty intermediate pages are skipped.
        while self._index >= len(self._items) and not self._last_page:
            page = self._fetch_page(self._cursor)
            self._metadata = page.metadata
            self._items = page.items
            self._index = 0
            self._cursor = page.next_cursor
            self._last_page = page.next_cursor is None

    def has_next(self) -> bool:
        """Return True if another item is available, fetching a page if needed."""
        self._fill()
        return self._index < len(self._items)

    def next(self) -> tuple[M, T]:
        """Return the next ``(metadata, item)`` pair.

        Raises
        ------
        EndOfList
            If the sequence is exhausted.

        """
        if not self.has_next():
            raise EndOfList()
        item = self._items[self._index]
        self._index += 1
        return self._metadata, item  # type: ignore[return-value]

    def __iter__(self) -> Iterator[tuple[M, T]]:
        return self

    def __next__(self) -> tuple[M, T]:
        try:
            return self.next()
        except EndOfList:
            raise StopIteration from None


class ItemSequence(Generic[T]):
    """A :class:`PagedSequence` that yields items only."""

    def __init__(
        self,
        fetch_page: Callable[[Any], Page[Any, T]],
        start: Any = None,
    ) -> None:
        self._pages: PagedSequence[Any, T] = PagedSequence(fetch_page, start)

    def has_next(self) -> bool:
        """Return True if another item is available."""
        return self._pages.has_next()

    def next(self) -> T:
        """Return the next item.

        Raises
        ------
        EndOfList
            If the sequence is exhausted.

        """
        _, item = self._pages.next()
        return item

    def __iter__(self) -> Iterator[T]:
        return self

    def __next__(self) -> T:
        try:
            return self.next()
        except EndOfList:
            raise StopIteration from None
