"""
Reverse-Chronological Collection

A list of date-bearing elements that is always newest first.

DESIGN DECISION: This is composition over a private list, not a list
subclass. Only the operations that can keep the ordering honest are
exposed (add, insert, add_all, insert_all, replace, pop). Arbitrary
index assignment or slicing mutation is simply not available, so the
sort invariant cannot be bypassed.

INVARIANTS:
- For every adjacent pair, date_of(a) >= date_of(b)
- Equal dates keep their relative insertion order (stable sort)
- Every element went through the validation policy before insertion
- Batches are all-or-nothing
"""

import datetime as dt
from collections.abc import Sequence
from typing import Callable, Generic, Iterable, Iterator, TypeVar

from fintrack.errors import (
    IndexOutOfRangeError,
    InvalidElementError,
    UnsupportedMutationError,
)


T = TypeVar("T")

Policy = Callable[[T, int], None]


class ReverseChronoList(Generic[T]):
    """
    Generic newest-first collection.

    Sorting is applied after every addition. Removals keep the
    existing order. Validation failures from the policy always
    propagate to the caller untouched.
    """

    def __init__(
        self,
        date_of: Callable[[T], dt.date],
        policy: Policy,
    ):
        """
        Args:
            date_of: maps an element to the date it is ordered by
            policy: called as policy(element, position) before any
                    insertion; raises to reject the element
        """
        if date_of is None:
            raise ValueError("date_of cannot be None")
        if policy is None:
            raise ValueError("policy cannot be None")
        self._date_of = date_of
        self._policy = policy
        self._items: list[T] = []

    # ----- read access ---------------------------------------------------

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[T]:
        return iter(self._items)

    def __getitem__(self, index):
        return self._items[index]

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._items!r})"

    def view(self) -> "ReadOnlyView[T]":
        """Read-only, newest-first view backed by this collection."""
        return ReadOnlyView(self)

    # ----- mutation ------------------------------------------------------

    def add(self, element: T) -> bool:
        """
        Validate and add one element, then restore newest-first order.

        Returns:
            True if the collection changed

        Raises:
            InvalidElementError: element is None
            ValidationFailedError: the policy rejected the element
        """
        self._policy(element, -1)
        self._commit(self._items + [element])
        return True

    def insert(self, index: int, element: T) -> None:
        """
        Validate and insert one element at index, then re-sort.

        The final position is decided by the date, not by index;
        index only affects where the element sits before sorting.

        Raises:
            IndexOutOfRangeError: index not in 0..len
            InvalidElementError / ValidationFailedError: as for add()
        """
        self._check_insert_index(index)
        self._policy(element, index)
        updated = list(self._items)
        updated.insert(index, element)
        self._commit(updated)

    def add_all(self, elements: Iterable[T]) -> bool:
        """
        Validate every element, then add them all and re-sort.

        Nothing is added if any element is invalid.

        Returns:
            True if the collection changed (False for an empty batch)
        """
        batch = self._validated_batch(elements)
        if not batch:
            return False
        self._commit(self._items + batch)
        return True

    def insert_all(self, index: int, elements: Iterable[T]) -> bool:
        """
        Validate every element, then insert them at index and re-sort.

        Final positions are decided by the dates, not by index.
        """
        self._check_insert_index(index)
        batch = self._validated_batch(elements)
        if not batch:
            return False
        self._commit(self._items[:index] + batch + self._items[index:])
        return True

    def replace(self, index: int, candidate: T) -> T:
        """
        Swap the element at index for candidate, atomically.

        The candidate is validated first. The new ordering is built on
        a copy and only then swapped in, so a failure at any point
        leaves the collection exactly as it was.

        Returns:
            The element that was replaced

        Raises:
            IndexOutOfRangeError: no element at index
            InvalidElementError / ValidationFailedError: candidate rejected
        """
        self._check_index(index)
        self._policy(candidate, index)

        updated = list(self._items)
        old = updated[index]
        updated[index] = candidate
        self._commit(updated)
        return old

    def pop(self, index: int) -> T:
        """Remove and return the element at index. Order is preserved."""
        self._check_index(index)
        return self._items.pop(index)

    # ----- internals -----------------------------------------------------

    def _validated_batch(self, elements: Iterable[T]) -> list[T]:
        if elements is None:
            raise InvalidElementError("Collection cannot be empty")
        batch = list(elements)
        for position, element in enumerate(batch):
            self._policy(element, position)
        return batch

    def _check_index(self, index: int) -> None:
        if isinstance(index, bool) or not isinstance(index, int) \
                or not 0 <= index < len(self._items):
            raise IndexOutOfRangeError(
                f"Index {index} out of range for size {len(self._items)}"
            )

    def _check_insert_index(self, index: int) -> None:
        if isinstance(index, bool) or not isinstance(index, int) \
                or not 0 <= index <= len(self._items):
            raise IndexOutOfRangeError(
                f"Insert index {index} out of range for size {len(self._items)}"
            )

    def _sort(self, items: list[T]) -> None:
        # list.sort is stable even with reverse=True
        items.sort(key=self._date_of, reverse=True)

    def _commit(self, updated: list[T]) -> None:
        # Sort the candidate list first; self._items is untouched if that fails.
        self._sort(updated)
        self._items = updated
        assert self._is_newest_first(), "List must be sorted newest first by date"

    def _is_newest_first(self) -> bool:
        dates = [self._date_of(item) for item in self._items]
        return all(a >= b for a, b in zip(dates, dates[1:]))


class ReadOnlyView(Sequence, Generic[T]):
    """
    Live, read-only window onto a ReverseChronoList.

    Reads always reflect the current contents. Every mutating
    list method raises UnsupportedMutationError.
    """

    __slots__ = ("_source",)

    def __init__(self, source: ReverseChronoList[T]):
        self._source = source

    def __getitem__(self, index):
        if isinstance(index, slice):
            return tuple(self._source[index])
        return self._source[index]

    def __len__(self) -> int:
        return len(self._source)

    def __iter__(self) -> Iterator[T]:
        return iter(self._source)

    def __eq__(self, other) -> bool:
        if isinstance(other, Sequence) and not isinstance(other, (str, bytes)):
            return list(self) == list(other)
        return NotImplemented

    __hash__ = None

    def __repr__(self) -> str:
        return f"ReadOnlyView({list(self)!r})"

    def _refuse(self, *args, **kwargs):
        raise UnsupportedMutationError("This view is read-only")

    __setitem__ = _refuse
    __delitem__ = _refuse
    __iadd__ = _refuse
    append = _refuse
    extend = _refuse
    insert = _refuse
    remove = _refuse
    pop = _refuse
    clear = _refuse
    sort = _refuse
    reverse = _refuse
