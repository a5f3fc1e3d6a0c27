"""
Visibility engine shared by Form (sections) and Section (rows).

Keeps two ordered sequences: every declared child, and the children currently
shown. The shown sequence is always an order-preserving subsequence of the
declared one. Re-showing an item scans the declared sequence backwards for the
nearest preceding sibling that is shown and inserts right after it, so showing
never reorders siblings that are already shown.
"""

import logging
from typing import Callable, Generic, Iterable, List, Optional, TypeVar

from formstate.core.exceptions import FormIndexError

logger = logging.getLogger(__name__)

T = TypeVar('T')


def normalize_index(container: str, index: int, length: int, allow_end: bool = False) -> int:
    """Resolve a (possibly negative) position, failing loudly when out of range."""
    if not isinstance(index, int) or isinstance(index, bool):
        raise TypeError(f"{container}: indices must be integers, not {type(index).__name__}")
    resolved = index + length if index < 0 else index
    upper = length if allow_end else length - 1
    if not 0 <= resolved <= upper:
        raise FormIndexError(container, index, length)
    return resolved


class ShownSequence(Generic[T]):
    """Declared and shown children of one container.

    Membership uses identity, matching how rows and sections compare.
    """

    def __init__(self, owner: str = "sequence"):
        self.owner = owner
        self.declared: List[T] = []
        self.shown: List[T] = []

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def is_shown(self, item: T) -> bool:
        return any(candidate is item for candidate in self.shown)

    def is_declared(self, item: T) -> bool:
        return any(candidate is item for candidate in self.declared)

    def shown_index(self, item: T) -> Optional[int]:
        for index, candidate in enumerate(self.shown):
            if candidate is item:
                return index
        return None

    def declared_index(self, item: T) -> Optional[int]:
        for index, candidate in enumerate(self.declared):
            if candidate is item:
                return index
        return None

    def insertion_index(self, item: T) -> int:
        """
        Position in the shown sequence where ``item`` belongs.

        Scans declared siblings backward from ``item`` to the nearest one that
        is shown; the item goes right after it, or at 0 when none is shown.
        """
        declared_index = self.declared_index(item)
        if declared_index is None:
            raise ValueError(f"{self.owner}: {item!r} is not declared")
        for predecessor in reversed(self.declared[:declared_index]):
            shown_index = self.shown_index(predecessor)
            if shown_index is not None:
                return shown_index + 1
        return 0

    def anchor_for(self, shown_position: int) -> int:
        """Declared position matching shown position ``shown_position``.

        A position past the end of the shown sequence maps to the end of the
        declared sequence.
        """
        if shown_position >= len(self.shown):
            return len(self.declared)
        return self.declared_index(self.shown[shown_position])

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def hide(self, item: T) -> Optional[int]:
        """Remove ``item`` from the shown sequence.

        Returns:
            The shown index it occupied, or None when it was not shown
        """
        index = self.shown_index(item)
        if index is None:
            return None
        del self.shown[index]
        logger.debug(f"{self.owner}: hid {item!r} at {index}")
        return index

    def show(self, item: T) -> Optional[int]:
        """Insert ``item`` into the shown sequence at its declared position.

        Returns:
            The shown index it now occupies, or None when it was already shown
            or is not declared here
        """
        if self.is_shown(item) or not self.is_declared(item):
            return None
        index = self.insertion_index(item)
        self.shown.insert(index, item)
        logger.debug(f"{self.owner}: showed {item!r} at {index}")
        return index

    def rebuild(self, is_visible: Callable[[T], bool]) -> None:
        """Recompute the shown sequence from scratch."""
        self.shown = [item for item in self.declared if is_visible(item)]

    # ------------------------------------------------------------------
    # Declared sequence edits (shown sequence is edited by the caller)
    # ------------------------------------------------------------------

    def declare(self, position: int, items: Iterable[T]) -> None:
        self.declared[position:position] = list(items)

    def undeclare(self, item: T) -> None:
        index = self.declared_index(item)
        if index is not None:
            del self.declared[index]

    def __len__(self) -> int:
        return len(self.shown)

    def __repr__(self) -> str:
        return f"ShownSequence({self.owner}, declared={len(self.declared)}, shown={len(self.shown)})"
