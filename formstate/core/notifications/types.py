"""Immutable change notifications delivered to a FormDelegate."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any, Tuple

if TYPE_CHECKING:
    from formstate.core.notifications.delegates import FormDelegate
    from formstate.core.row import Row
    from formstate.core.section import Section


# =============================================================================
# ChangeKind Enum
# =============================================================================


class ChangeKind(Enum):
    """Structural change kinds."""

    ADDED = "added"
    REMOVED = "removed"
    REPLACED = "replaced"

    def __str__(self):
        return self.value


@dataclass(frozen=True, order=True)
class IndexPath:
    """Position of a row: (shown section index, shown row index)."""

    section: int
    row: int

    def __iter__(self):
        return iter((self.section, self.row))

    def __str__(self):
        return f"[{self.section}, {self.row}]"


# =============================================================================
# Change events
# =============================================================================


class FormChange(ABC):
    """A single change, delivered to a delegate in program order."""

    @abstractmethod
    def deliver_to(self, delegate: "FormDelegate") -> None:
        """Call the delegate method matching this change."""


def _require_kind(kind) -> None:
    if not isinstance(kind, ChangeKind):
        raise TypeError(f"kind must be a ChangeKind, got {type(kind).__name__}")


@dataclass(frozen=True)
class SectionsChange(FormChange):
    """
    Sections added to, removed from or replaced in the shown sections.

    Attributes:
        kind: ADDED, REMOVED or REPLACED
        sections: Sections added or removed (the new sections for REPLACED)
        indexes: Shown positions (after the change for ADDED, before it for
            REMOVED, the replaced range for REPLACED)
        old_sections: Sections replaced (REPLACED only)
    """

    kind: ChangeKind
    sections: Tuple["Section", ...]
    indexes: Tuple[int, ...]
    old_sections: Tuple["Section", ...] = ()

    def __post_init__(self):
        _require_kind(self.kind)
        if self.kind is not ChangeKind.REPLACED and len(self.sections) != len(self.indexes):
            raise ValueError(
                f"{self.kind} change needs one index per section "
                f"({len(self.sections)} sections, {len(self.indexes)} indexes)"
            )

    def deliver_to(self, delegate: "FormDelegate") -> None:
        if self.kind is ChangeKind.ADDED:
            delegate.sections_added(list(self.sections), list(self.indexes))
        elif self.kind is ChangeKind.REMOVED:
            delegate.sections_removed(list(self.sections), list(self.indexes))
        else:
            delegate.sections_replaced(list(self.old_sections), list(self.sections), list(self.indexes))


@dataclass(frozen=True)
class RowsChange(FormChange):
    """
    Rows added to, removed from or replaced in a shown section.

    Attributes:
        kind: ADDED, REMOVED or REPLACED
        rows: Rows added or removed (the new rows for REPLACED)
        index_paths: Positions, following the same rules as SectionsChange
        old_rows: Rows replaced (REPLACED only)
    """

    kind: ChangeKind
    rows: Tuple["Row", ...]
    index_paths: Tuple[IndexPath, ...]
    old_rows: Tuple["Row", ...] = ()

    def __post_init__(self):
        _require_kind(self.kind)
        if self.kind is not ChangeKind.REPLACED and len(self.rows) != len(self.index_paths):
            raise ValueError(
                f"{self.kind} change needs one index path per row "
                f"({len(self.rows)} rows, {len(self.index_paths)} index paths)"
            )

    def deliver_to(self, delegate: "FormDelegate") -> None:
        if self.kind is ChangeKind.ADDED:
            delegate.rows_added(list(self.rows), list(self.index_paths))
        elif self.kind is ChangeKind.REMOVED:
            delegate.rows_removed(list(self.rows), list(self.index_paths))
        else:
            delegate.rows_replaced(list(self.old_rows), list(self.rows), list(self.index_paths))


@dataclass(frozen=True)
class ValueChange(FormChange):
    """A row value changed (old != new)."""

    row: "Row"
    old_value: Any
    new_value: Any

    def deliver_to(self, delegate: "FormDelegate") -> None:
        delegate.row_value_changed(self.row, self.old_value, self.new_value)
