"""Form delegate interface and implementations."""

import logging
from abc import ABC, abstractmethod
from typing import Any, Callable, List, Sequence, Type, TypeVar

from formstate.core.notifications.types import (
    ChangeKind,
    FormChange,
    IndexPath,
    RowsChange,
    SectionsChange,
    ValueChange,
)

logger = logging.getLogger(__name__)

C = TypeVar('C', bound=FormChange)


# =============================================================================
# FormDelegate Interface (ABC)
# =============================================================================


class FormDelegate(ABC):
    """Receives structural and value changes of a form.

    Delegate implementations decide WHERE changes go (a view, a log, a test).
    Methods are called synchronously, in the order the changes happened.
    Positions refer to the shown sequences.
    """

    @abstractmethod
    def sections_added(self, sections: List[Any], indexes: List[int]) -> None:
        pass

    @abstractmethod
    def sections_removed(self, sections: List[Any], indexes: List[int]) -> None:
        pass

    @abstractmethod
    def sections_replaced(self, old_sections: List[Any], new_sections: List[Any],
                          indexes: List[int]) -> None:
        pass

    @abstractmethod
    def rows_added(self, rows: List[Any], index_paths: List[IndexPath]) -> None:
        pass

    @abstractmethod
    def rows_removed(self, rows: List[Any], index_paths: List[IndexPath]) -> None:
        pass

    @abstractmethod
    def rows_replaced(self, old_rows: List[Any], new_rows: List[Any],
                      index_paths: List[IndexPath]) -> None:
        pass

    @abstractmethod
    def row_value_changed(self, row: Any, old_value: Any, new_value: Any) -> None:
        pass


# =============================================================================
# NoopDelegate - For Forms Without a View
# =============================================================================


class NoopDelegate(FormDelegate):
    """Ignores every change."""

    def sections_added(self, sections, indexes) -> None:
        pass

    def sections_removed(self, sections, indexes) -> None:
        pass

    def sections_replaced(self, old_sections, new_sections, indexes) -> None:
        pass

    def rows_added(self, rows, index_paths) -> None:
        pass

    def rows_removed(self, rows, index_paths) -> None:
        pass

    def rows_replaced(self, old_rows, new_rows, index_paths) -> None:
        pass

    def row_value_changed(self, row, old_value, new_value) -> None:
        pass


# =============================================================================
# ChangeDelegate - Rebuilds change objects from delegate calls
# =============================================================================


class ChangeDelegate(FormDelegate):
    """Base for delegates that handle each call as one FormChange object."""

    @abstractmethod
    def handle_change(self, change: FormChange) -> None:
        """Handle one change."""

    def sections_added(self, sections, indexes) -> None:
        self.handle_change(SectionsChange(ChangeKind.ADDED, tuple(sections), tuple(indexes)))

    def sections_removed(self, sections, indexes) -> None:
        self.handle_change(SectionsChange(ChangeKind.REMOVED, tuple(sections), tuple(indexes)))

    def sections_replaced(self, old_sections, new_sections, indexes) -> None:
        self.handle_change(SectionsChange(
            ChangeKind.REPLACED, tuple(new_sections), tuple(indexes), tuple(old_sections)
        ))

    def rows_added(self, rows, index_paths) -> None:
        self.handle_change(RowsChange(ChangeKind.ADDED, tuple(rows), tuple(index_paths)))

    def rows_removed(self, rows, index_paths) -> None:
        self.handle_change(RowsChange(ChangeKind.REMOVED, tuple(rows), tuple(index_paths)))

    def rows_replaced(self, old_rows, new_rows, index_paths) -> None:
        self.handle_change(RowsChange(
            ChangeKind.REPLACED, tuple(new_rows), tuple(index_paths), tuple(old_rows)
        ))

    def row_value_changed(self, row, old_value, new_value) -> None:
        self.handle_change(ValueChange(row, old_value, new_value))


class CallbackDelegate(ChangeDelegate):
    """Passes every change object to a callback.

    Exceptions raised by the callback propagate to the mutating call.
    """

    def __init__(self, callback: Callable[[FormChange], None]):
        """Initialize with callback.

        Args:
            callback: Function to call with each change
        """
        self.callback = callback

    def handle_change(self, change: FormChange) -> None:
        self.callback(change)


class RecordingDelegate(ChangeDelegate):
    """Keeps every change in ``changes``. Useful for tests and diffing."""

    def __init__(self):
        self.changes: List[FormChange] = []

    def handle_change(self, change: FormChange) -> None:
        self.changes.append(change)

    def of_type(self, change_type: Type[C]) -> List[C]:
        return [change for change in self.changes if isinstance(change, change_type)]

    def structural(self) -> List[FormChange]:
        """Section and row changes, without value changes."""
        return [change for change in self.changes if not isinstance(change, ValueChange)]

    def clear(self) -> None:
        self.changes.clear()


class LoggingDelegate(ChangeDelegate):
    """Logs every change at INFO level."""

    def __init__(self, prefix: str = "FORM"):
        """Initialize with log prefix.

        Args:
            prefix: Prefix for log messages (e.g., "FORM")
        """
        self.prefix = prefix

    def handle_change(self, change: FormChange) -> None:
        if isinstance(change, ValueChange):
            logger.info(
                f"[{self.prefix}] value | {change.row!r} | "
                f"{change.old_value!r} -> {change.new_value!r}"
            )
        elif isinstance(change, SectionsChange):
            logger.info(
                f"[{self.prefix}] sections {change.kind} | "
                f"{len(change.sections)} at {list(change.indexes)}"
            )
        else:
            logger.info(
                f"[{self.prefix}] rows {change.kind} | {len(change.rows)} at "
                f"{[str(path) for path in change.index_paths]}"
            )


class CompositeDelegate(ChangeDelegate):
    """Fans each change out to several delegates, in registration order."""

    def __init__(self, delegates: Sequence[FormDelegate] = ()):
        self.delegates: List[FormDelegate] = list(delegates)

    def add(self, delegate: FormDelegate) -> "CompositeDelegate":
        self.delegates.append(delegate)
        return self

    def remove(self, delegate: FormDelegate) -> bool:
        for index, candidate in enumerate(self.delegates):
            if candidate is delegate:
                del self.delegates[index]
                return True
        return False

    def handle_change(self, change: FormChange) -> None:
        for delegate in list(self.delegates):
            change.deliver_to(delegate)
