"""
Per-row-kind defaults table.

Holds the default initializer, cell setup and cell update callbacks for each
row class. A form owns one table; lookups walk the row's class hierarchy, so
defaults registered for ``Row`` apply to every row kind that has none of its
own.
"""

import logging
from typing import TYPE_CHECKING, Callable, Dict, Optional, Type

if TYPE_CHECKING:
    from formstate.core.row import Row

logger = logging.getLogger(__name__)

RowCallback = Callable[["Row"], None]


class RowDefaults:
    """Explicit table of default row callbacks, keyed by row class."""

    def __init__(self):
        self._initializers: Dict[type, RowCallback] = {}
        self._cell_setups: Dict[type, RowCallback] = {}
        self._cell_updates: Dict[type, RowCallback] = {}

    @staticmethod
    def _lookup(table: Dict[type, RowCallback], row_type: type) -> Optional[RowCallback]:
        for klass in row_type.__mro__:
            if klass in table:
                return table[klass]
        return None

    # Registration -------------------------------------------------------

    def set_initializer(self, row_type: Type["Row"], callback: Optional[RowCallback]) -> None:
        self._set(self._initializers, row_type, callback, "initializer")

    def set_cell_setup(self, row_type: Type["Row"], callback: Optional[RowCallback]) -> None:
        self._set(self._cell_setups, row_type, callback, "cell setup")

    def set_cell_update(self, row_type: Type["Row"], callback: Optional[RowCallback]) -> None:
        self._set(self._cell_updates, row_type, callback, "cell update")

    def _set(self, table: Dict[type, RowCallback], row_type: type,
             callback: Optional[RowCallback], label: str) -> None:
        if callback is None:
            table.pop(row_type, None)
            logger.debug(f"Cleared default {label} for {row_type.__name__}")
        else:
            table[row_type] = callback
            logger.debug(f"Set default {label} for {row_type.__name__}")

    # Lookup -------------------------------------------------------------

    def initializer_for(self, row_type: Type["Row"]) -> Optional[RowCallback]:
        return self._lookup(self._initializers, row_type)

    def cell_setup_for(self, row_type: Type["Row"]) -> Optional[RowCallback]:
        return self._lookup(self._cell_setups, row_type)

    def cell_update_for(self, row_type: Type["Row"]) -> Optional[RowCallback]:
        return self._lookup(self._cell_updates, row_type)

    def create(self, row_type: Type["Row"], tag: Optional[str] = None,
               initializer: Optional[RowCallback] = None, **kwargs) -> "Row":
        """
        Build a row, applying the default initializer and then ``initializer``.

        Args:
            row_type: Row class to instantiate
            tag: Row tag
            initializer: Per-row initializer, run after the default one
            **kwargs: Passed to the row constructor

        Returns:
            The initialized row
        """
        row = row_type(tag, **kwargs)
        default = self.initializer_for(row_type)
        if default is not None:
            default(row)
        if initializer is not None:
            initializer(row)
        return row
