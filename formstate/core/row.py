"""
Rows: tagged value holders with optional hidden/disabled conditions.

A row belongs to at most one section. It is "attached" while that section
belongs to a form: only then are its conditions registered and evaluated,
and only then does a value change cascade to dependent rows and sections.
"""

import logging
from typing import TYPE_CHECKING, Any, Callable, Optional, Sequence

from formstate.core.conditions import Condition, ConditionKind, as_condition
from formstate.core.exceptions import RowValueTypeError
from formstate.core.notifications import IndexPath
from formstate.core.registry import DisableableObserver, HidableObserver
from formstate.core.visibility import normalize_index

if TYPE_CHECKING:
    from formstate.core.form import Form
    from formstate.core.section import Section

logger = logging.getLogger(__name__)

RowCallback = Callable[["Row"], None]


class Row(HidableObserver, DisableableObserver):
    """
    Untyped row. Accepts any value.

    Args:
        tag: Identifier, unique within a form; other rows reference it in conditions
        title: Label shown by the view
        value: Initial value
        hidden: Hidden condition (bool, predicate string or Condition)
        disabled: Disabled condition (bool, predicate string or Condition)
        on_change: Called with the row after each distinct value change
    """

    value_type: Optional[type] = None

    def __init__(self, tag: Optional[str] = None, title: Optional[str] = None, value: Any = None,
                 hidden: Any = None, disabled: Any = None,
                 on_change: Optional[RowCallback] = None):
        self.tag = tag
        self.title = title
        self._value = self._coerce(value) if value is not None else None
        self._hidden: Optional[Condition] = as_condition(hidden)
        self._disabled: Optional[Condition] = as_condition(disabled)
        self._hidden_cache = False
        self._disabled_cache = False
        self._rendered = False

        # Non-owning back link, set by the owning section
        self.section: Optional["Section"] = None

        self._on_change = on_change
        self._cell_setup: Optional[RowCallback] = None
        self._cell_update: Optional[RowCallback] = None
        self._on_cell_selection: Optional[RowCallback] = None
        self._display_value_for: Optional[Callable[[Any], Optional[str]]] = None

    def __repr__(self) -> str:
        return f"{type(self).__name__}(tag={self.tag!r})"

    # ------------------------------------------------------------------
    # Ownership
    # ------------------------------------------------------------------

    @property
    def form(self) -> Optional["Form"]:
        return self.section.form if self.section is not None else None

    def index_path(self) -> Optional[IndexPath]:
        """Shown position of this row, or None when it is not on screen."""
        if self.section is None:
            return None
        section_index = self.section.index
        row_index = self.section.shown_index(self)
        if section_index is None or row_index is None:
            return None
        return IndexPath(section_index, row_index)

    # ------------------------------------------------------------------
    # Value
    # ------------------------------------------------------------------

    @classmethod
    def _coerce(cls, value: Any) -> Any:
        """Validate ``value`` against ``value_type``.

        Raises:
            RowValueTypeError: If the value has the wrong type
        """
        if value is None or cls.value_type is None:
            return value
        if isinstance(value, cls.value_type):
            return value
        raise RowValueTypeError(cls, cls.value_type, value)

    @property
    def value(self) -> Any:
        return self._value

    @value.setter
    def value(self, new_value: Any) -> None:
        self._set_value(self._coerce(new_value))

    @property
    def base_value(self) -> Any:
        return self._value

    @base_value.setter
    def base_value(self, new_value: Any) -> None:
        """Untyped assignment: a value of the wrong type becomes None."""
        try:
            coerced = self._coerce(new_value)
        except RowValueTypeError:
            logger.debug(f"{self!r}: discarding {new_value!r}, not a {self.value_type.__name__}")
            coerced = None
        self._set_value(coerced)

    def _set_value(self, new_value: Any) -> None:
        form = self.form
        if form is not None:
            form._ensure_mutable()
        old_value = self._value
        self._value = new_value
        if old_value is new_value or old_value == new_value:
            return
        if form is None:
            return
        form._row_value_changed(self, old_value, new_value)

    def display_value_for(self, value: Any) -> Optional[str]:
        """Text the view should display for ``value``."""
        if self._display_value_for is not None:
            return self._display_value_for(value)
        return None if value is None else str(value)

    @property
    def display_value(self) -> Optional[str]:
        return self.display_value_for(self._value)

    # ------------------------------------------------------------------
    # Conditions
    # ------------------------------------------------------------------

    @property
    def hidden(self) -> Optional[Condition]:
        return self._hidden

    @hidden.setter
    def hidden(self, condition: Any) -> None:
        self._replace_condition(ConditionKind.HIDDEN, as_condition(condition))
        self.evaluate_hidden()

    @property
    def disabled(self) -> Optional[Condition]:
        return self._disabled

    @disabled.setter
    def disabled(self, condition: Any) -> None:
        self._replace_condition(ConditionKind.DISABLED, as_condition(condition))
        self.evaluate_disabled()

    def _replace_condition(self, kind: ConditionKind, condition: Optional[Condition]) -> None:
        attr = '_hidden' if kind is ConditionKind.HIDDEN else '_disabled'
        form = self.form
        if form is not None:
            form._ensure_mutable()
            old = getattr(self, attr)
            if old is not None:
                form.registry.remove_observer(self, old.referenced_tags, kind)
            if condition is not None:
                form.registry.add_observer(self, condition.referenced_tags, kind)
        setattr(self, attr, condition)

    @property
    def is_hidden(self) -> bool:
        """Result of the last hidden evaluation (False until attached)."""
        return self._hidden_cache

    @property
    def is_disabled(self) -> bool:
        """Result of the last disabled evaluation (False until attached)."""
        return self._disabled_cache

    def evaluate_hidden(self) -> None:
        """Re-evaluate the hidden condition and show or hide the row."""
        form = self.form
        if form is None:
            return
        self._hidden_cache = form.evaluate_condition(self._hidden)
        if self._hidden_cache:
            self.section._hide_row(self)
        else:
            self.section._show_row(self)

    def evaluate_disabled(self) -> None:
        """Re-evaluate the disabled condition and refresh the cell."""
        form = self.form
        if form is None:
            return
        self._disabled_cache = form.evaluate_condition(self._disabled)
        self.update_cell()

    # ------------------------------------------------------------------
    # Callbacks (chainable)
    # ------------------------------------------------------------------

    def on_change(self, callback: Optional[RowCallback]) -> "Row":
        self._on_change = callback
        return self

    def cell_setup(self, callback: Optional[RowCallback]) -> "Row":
        self._cell_setup = callback
        return self

    def cell_update(self, callback: Optional[RowCallback]) -> "Row":
        self._cell_update = callback
        return self

    def on_cell_selection(self, callback: Optional[RowCallback]) -> "Row":
        self._on_cell_selection = callback
        return self

    def display_value_formatter(self, formatter: Optional[Callable[[Any], Optional[str]]]) -> "Row":
        self._display_value_for = formatter
        return self

    def update_cell(self) -> None:
        """Ask the view to refresh this row's cell."""
        form = self.form
        if form is None:
            return
        form.renderer.refresh_row(self)
        default = form.row_defaults.cell_update_for(type(self))
        if default is not None:
            default(self)
        if self._cell_update is not None:
            self._cell_update(self)

    def did_select(self) -> None:
        """The user selected this row's cell. Ignored while disabled."""
        if self._disabled_cache:
            return
        if self._on_cell_selection is not None:
            self._on_cell_selection(self)

    # ------------------------------------------------------------------
    # Form attachment (driven by Section)
    # ------------------------------------------------------------------

    def _register(self, form: "Form") -> None:
        if self.tag is not None:
            form._tag_index[self.tag] = self
        if self._hidden is not None:
            form.registry.add_observer(self, self._hidden.referenced_tags, ConditionKind.HIDDEN)
        if self._disabled is not None:
            form.registry.add_observer(self, self._disabled.referenced_tags, ConditionKind.DISABLED)

    def _evaluate_on_attach(self, form: "Form") -> None:
        self._hidden_cache = form.evaluate_condition(self._hidden)
        self._disabled_cache = form.evaluate_condition(self._disabled)
        if not self._rendered:
            self._rendered = True
            form.renderer.render_row(self)
            default = form.row_defaults.cell_setup_for(type(self))
            if default is not None:
                default(self)
            if self._cell_setup is not None:
                self._cell_setup(self)
        logger.debug(f"Attached {self!r} (hidden={self._hidden_cache}, disabled={self._disabled_cache})")

    def _unregister(self, form: "Form") -> None:
        if self.tag is not None and form._tag_index.get(self.tag) is self:
            del form._tag_index[self.tag]
        form.registry.remove_everywhere(self)
        logger.debug(f"Detached {self!r}")


# =============================================================================
# Typed rows
# =============================================================================


class TextRow(Row):
    value_type = str


class IntRow(Row):
    value_type = int

    @classmethod
    def _coerce(cls, value: Any) -> Any:
        # bool is an int subclass but not a valid count
        if isinstance(value, bool):
            raise RowValueTypeError(cls, int, value)
        return super()._coerce(value)


class FloatRow(Row):
    value_type = float

    @classmethod
    def _coerce(cls, value: Any) -> Any:
        if isinstance(value, int) and not isinstance(value, bool):
            return float(value)
        return super()._coerce(value)


class BoolRow(Row):
    value_type = bool


class ChoiceRow(Row):
    """A row whose value is picked from ``options``."""

    def __init__(self, tag: Optional[str] = None, options: Sequence[Any] = (), **kwargs):
        self.options = list(options)
        super().__init__(tag, **kwargs)

    def select(self, index: int) -> None:
        """Set the value to ``options[index]``.

        Raises:
            FormIndexError: If ``index`` is outside ``options``
        """
        self.value = self.options[normalize_index(repr(self), index, len(self.options))]
