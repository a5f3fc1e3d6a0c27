"""Hooks through which the view layer renders rows."""

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from formstate.core.row import Row


class RowRenderer(ABC):
    """View-layer collaborator for row cells.

    The form calls these hooks; it never draws anything itself.
    """

    @abstractmethod
    def render_row(self, row: "Row") -> None:
        """Build the cell for ``row``. Called once, when first attached to a form."""

    @abstractmethod
    def refresh_row(self, row: "Row") -> None:
        """Refresh the cell for ``row`` (value changed, disabled toggled, explicit update)."""

    @abstractmethod
    def release_focus(self, row: "Row") -> None:
        """Drop input focus from ``row``. Called before the row is hidden."""


class NoopRenderer(RowRenderer):
    """Renderer for forms without a view."""

    def render_row(self, row: "Row") -> None:
        pass

    def refresh_row(self, row: "Row") -> None:
        pass

    def release_focus(self, row: "Row") -> None:
        pass
