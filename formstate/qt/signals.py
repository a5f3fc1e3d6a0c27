"""
Qt signals for form changes.

Re-emits form notifications as PyQt6 signals so Qt views can connect to a form
without implementing FormDelegate themselves.

Design:
    - QtSignalDelegate is the form's delegate
    - It owns a FormSignals QObject and emits one signal per change
    - Index paths are emitted as (section, row) tuples
"""

from typing import Any, List

from PyQt6.QtCore import QObject, pyqtSignal

from formstate.core.notifications import FormDelegate, IndexPath


def _paths(index_paths: List[IndexPath]) -> List[tuple]:
    return [(path.section, path.row) for path in index_paths]


class FormSignals(QObject):
    """
    Qt signals for form state changes.

    Signals:
        sections_added: (sections, indexes)
        sections_removed: (sections, indexes)
        sections_replaced: (old_sections, new_sections, indexes)
        rows_added: (rows, index_paths)
        rows_removed: (rows, index_paths)
        rows_replaced: (old_rows, new_rows, index_paths)
        row_value_changed: (row, old_value, new_value)
    """

    sections_added = pyqtSignal(object, object)
    sections_removed = pyqtSignal(object, object)
    sections_replaced = pyqtSignal(object, object, object)
    rows_added = pyqtSignal(object, object)
    rows_removed = pyqtSignal(object, object)
    rows_replaced = pyqtSignal(object, object, object)
    row_value_changed = pyqtSignal(object, object, object)

    def __init__(self, parent=None):
        """Initialize signal object."""
        super().__init__(parent)


class QtSignalDelegate(FormDelegate):
    """Form delegate that forwards every change to ``self.signals``."""

    def __init__(self, signals: FormSignals = None):
        self.signals = signals if signals is not None else FormSignals()

    def sections_added(self, sections: List[Any], indexes: List[int]) -> None:
        self.signals.sections_added.emit(list(sections), list(indexes))

    def sections_removed(self, sections: List[Any], indexes: List[int]) -> None:
        self.signals.sections_removed.emit(list(sections), list(indexes))

    def sections_replaced(self, old_sections, new_sections, indexes) -> None:
        self.signals.sections_replaced.emit(list(old_sections), list(new_sections), list(indexes))

    def rows_added(self, rows, index_paths) -> None:
        self.signals.rows_added.emit(list(rows), _paths(index_paths))

    def rows_removed(self, rows, index_paths) -> None:
        self.signals.rows_removed.emit(list(rows), _paths(index_paths))

    def rows_replaced(self, old_rows, new_rows, index_paths) -> None:
        self.signals.rows_replaced.emit(list(old_rows), list(new_rows), _paths(index_paths))

    def row_value_changed(self, row, old_value, new_value) -> None:
        self.signals.row_value_changed.emit(row, old_value, new_value)
