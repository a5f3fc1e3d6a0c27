"""
Sections: ordered containers of rows.

A section behaves as a sequence of its *shown* rows. Positions passed to
``insert``, ``replace_range``, ``section[i]`` and ``del section[i]`` are shown
positions; ``all_rows`` lists every declared row, hidden or not. A section
that does not belong to a form shows no rows.
"""

import logging
from typing import TYPE_CHECKING, Any, Callable, Iterable, Iterator, List, Optional, Sequence, Type

from formstate.core.conditions import Condition, ConditionKind, as_condition
from formstate.core.exceptions import DuplicateTagError, FormIndexError, RowOwnershipError
from formstate.core.notifications import ChangeKind, IndexPath, RowsChange
from formstate.core.registry import HidableObserver
from formstate.core.row import Row
from formstate.core.visibility import ShownSequence, normalize_index

if TYPE_CHECKING:
    from formstate.core.form import Form

logger = logging.getLogger(__name__)


def slice_bounds(container: str, key: slice, length: int):
    start, stop, step = key.indices(length)
    if step != 1:
        raise ValueError(f"{container}: extended slices are not supported")
    return start, max(start, stop)


def check_new_tags(rows: Iterable[Row], existing: Iterable[str]) -> None:
    """
    Fail before mutating when ``rows`` would introduce a duplicate tag.

    Raises:
        DuplicateTagError: If a tag is already taken or repeated within ``rows``
    """
    taken = set(existing)
    for row in rows:
        if row.tag is None:
            continue
        if row.tag in taken:
            raise DuplicateTagError(row.tag)
        taken.add(row.tag)


class Section(HidableObserver):
    """
    Ordered container of rows.

    Args:
        header: Header title
        footer: Footer title
        tag: Identifier for ``Form.section_by_tag``
        hidden: Hidden condition (bool, predicate string or Condition)
        rows: Initial rows
    """

    def __init__(self, header: Optional[str] = None, footer: Optional[str] = None,
                 tag: Optional[str] = None, hidden: Any = None, rows: Iterable[Row] = ()):
        self.header = header
        self.footer = footer
        self.tag = tag
        self._hidden: Optional[Condition] = as_condition(hidden)
        self._hidden_cache = False
        self._rows: ShownSequence[Row] = ShownSequence(owner=repr(self))

        # Non-owning back link, set by the owning form
        self.form: Optional["Form"] = None

        rows = list(rows)
        if rows:
            self.extend(rows)

    def __repr__(self) -> str:
        label = self.tag if self.tag is not None else self.header
        return f"Section({label!r})"

    # ------------------------------------------------------------------
    # Sequence protocol over shown rows
    # ------------------------------------------------------------------

    def __len__(self) -> int:
        return len(self._rows.shown)

    def __iter__(self) -> Iterator[Row]:
        return iter(list(self._rows.shown))

    def __contains__(self, row: object) -> bool:
        return self._rows.is_shown(row)

    def __bool__(self) -> bool:
        # A section with no shown rows is still a section
        return True

    def __getitem__(self, key):
        if isinstance(key, slice):
            return self._rows.shown[key]
        return self._rows.shown[normalize_index(repr(self), key, len(self))]

    def __setitem__(self, key, value) -> None:
        if isinstance(key, slice):
            start, stop = slice_bounds(repr(self), key, len(self))
            self.replace_range(start, stop, value)
        else:
            index = normalize_index(repr(self), key, len(self))
            self.replace_range(index, index + 1, [value])

    def __delitem__(self, key) -> None:
        if isinstance(key, slice):
            start, stop = slice_bounds(repr(self), key, len(self))
        else:
            start = normalize_index(repr(self), key, len(self))
            stop = start + 1
        self.replace_range(start, stop, [])

    def __iadd__(self, rows) -> "Section":
        if isinstance(rows, Row):
            self.append(rows)
        else:
            self.extend(rows)
        return self

    def __lshift__(self, row: Row) -> "Section":
        """``section << row1 << row2`` appends and chains."""
        self.append(row)
        return self

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @property
    def all_rows(self) -> List[Row]:
        """Every declared row, in declared order."""
        return list(self._rows.declared)

    @property
    def index(self) -> Optional[int]:
        """Position among the form's shown sections, or None when not shown."""
        if self.form is None:
            return None
        return self.form._sections.shown_index(self)

    def shown_index(self, row: Row) -> Optional[int]:
        return self._rows.shown_index(row)

    def row_by_tag(self, tag: str, row_type: Optional[Type[Row]] = None) -> Optional[Row]:
        """Declared row with ``tag``, or None (also when it is not a ``row_type``)."""
        for row in self._rows.declared:
            if row.tag == tag:
                if row_type is not None and not isinstance(row, row_type):
                    return None
                return row
        return None

    # ------------------------------------------------------------------
    # Hidden condition
    # ------------------------------------------------------------------

    @property
    def hidden(self) -> Optional[Condition]:
        return self._hidden

    @hidden.setter
    def hidden(self, condition: Any) -> None:
        condition = as_condition(condition)
        form = self.form
        if form is not None:
            form._ensure_mutable()
            if self._hidden is not None:
                form.registry.remove_observer(self, self._hidden.referenced_tags, ConditionKind.HIDDEN)
            if condition is not None:
                form.registry.add_observer(self, condition.referenced_tags, ConditionKind.HIDDEN)
        self._hidden = condition
        self.evaluate_hidden()

    @property
    def is_hidden(self) -> bool:
        return self._hidden_cache

    def evaluate_hidden(self) -> None:
        """Re-evaluate the hidden condition and show or hide the section."""
        form = self.form
        if form is None:
            return
        self._hidden_cache = form.evaluate_condition(self._hidden)
        if self._hidden_cache:
            form._hide_section(self)
        else:
            form._show_section(self)

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------

    def append(self, row: Row) -> None:
        self.extend([row])

    def extend(self, rows: Iterable[Row]) -> None:
        """Append several rows, emitting a single change."""
        end = len(self)
        self.replace_range(end, end, rows)

    def insert(self, index: int, row: Row) -> None:
        """Insert ``row`` before shown position ``index``."""
        index = normalize_index(repr(self), index, len(self), allow_end=True)
        self.replace_range(index, index, [row])

    def replace_range(self, start: int, stop: int, rows: Iterable[Row]) -> None:
        """
        Replace shown rows ``[start, stop)`` with ``rows``.

        Replaced rows are detached. New rows are declared where the replaced
        range was and shown according to their own hidden condition. Emits
        one change: REPLACED, or ADDED/REMOVED when only one side is shown.

        Raises:
            FormIndexError: If the range is outside the shown rows
            RowOwnershipError: If a new row belongs to another section
            DuplicateTagError: If a new row's tag is already used
        """
        form = self.form
        if form is not None:
            form._ensure_mutable()
        length = len(self)
        if not 0 <= start <= length:
            raise FormIndexError(repr(self), start, length)
        if not start <= stop <= length:
            raise FormIndexError(repr(self), stop, length)

        new_rows = list(rows)
        old_rows = self._rows.shown[start:stop]
        self._validate_new_rows(new_rows, old_rows)

        declared_before = list(self._rows.declared)
        shown_before = list(self._rows.shown)
        caches_before = [(row, row._hidden_cache, row._disabled_cache) for row in new_rows]

        try:
            anchor = self._rows.anchor_for(start)
            for row in old_rows:
                self._release_row(row)
            del self._rows.shown[start:stop]

            self._rows.declare(anchor, new_rows)
            for row in new_rows:
                row.section = self
            if form is not None:
                self._attach_rows(form, new_rows)
            shown_new = [row for row in new_rows if form is not None and not row.is_hidden]
            self._rows.shown[start:start] = shown_new
        except BaseException:
            self._restore_rows(old_rows, caches_before, declared_before, shown_before)
            raise

        if old_rows and shown_new:
            self._notify_rows(ChangeKind.REPLACED, shown_new, range(start, stop), old_rows)
        elif old_rows:
            self._notify_rows(ChangeKind.REMOVED, old_rows, range(start, stop))
        elif shown_new:
            self._notify_rows(ChangeKind.ADDED, shown_new, range(start, start + len(shown_new)))

        if form is not None:
            form._reevaluate_dependents(old_rows + new_rows, skip=new_rows)

    def remove(self, row: Row) -> None:
        """Remove a declared row, shown or hidden."""
        if not self._rows.is_declared(row):
            raise ValueError(f"{self!r}: {row!r} is not in this section")
        self.remove_all(lambda candidate: candidate is row)

    def remove_all(self, predicate: Optional[Callable[[Row], bool]] = None) -> None:
        """Remove every declared row (or those matching ``predicate``), emitting one change."""
        form = self.form
        if form is not None:
            form._ensure_mutable()
        doomed = [row for row in self._rows.declared if predicate is None or predicate(row)]
        if not doomed:
            return
        shown = [(index, row) for index, row in enumerate(self._rows.shown)
                 if any(row is candidate for candidate in doomed)]

        for row in doomed:
            self._release_row(row)
        doomed_ids = {id(row) for row in doomed}
        self._rows.shown = [row for row in self._rows.shown if id(row) not in doomed_ids]

        if shown:
            self._notify_rows(ChangeKind.REMOVED, [row for _, row in shown], [index for index, _ in shown])
        if form is not None:
            form._reevaluate_dependents(doomed)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _validate_new_rows(self, new_rows: Sequence[Row], old_rows: Sequence[Row]) -> None:
        old_ids = {id(row) for row in old_rows}
        seen = set()
        for row in new_rows:
            if not isinstance(row, Row):
                raise TypeError(f"{self!r}: expected a Row, got {type(row).__name__}")
            if id(row) in seen:
                raise RowOwnershipError(f"{row!r} appears twice in the same insertion")
            seen.add(id(row))
            if row.section is not None and id(row) not in old_ids:
                raise RowOwnershipError(
                    f"{row!r} already belongs to {row.section!r}; remove it before adding it here"
                )

        if self.form is not None:
            existing = self.form._tag_index.keys()
        else:
            existing = [row.tag for row in self._rows.declared if row.tag is not None]
        old_tags = {row.tag for row in old_rows if row.tag is not None}
        check_new_tags(new_rows, (tag for tag in existing if tag not in old_tags))

    def _release_row(self, row: Row) -> None:
        self._rows.undeclare(row)
        if self.form is not None:
            row._unregister(self.form)
        row.section = None

    def _restore_rows(self, old_rows: Sequence[Row], caches: Sequence[tuple],
                      declared: List[Row], shown: List[Row]) -> None:
        """Undo a replacement that failed part way through attaching its rows."""
        form = self.form
        for row, hidden_cache, disabled_cache in caches:
            if form is not None:
                row._unregister(form)
            row.section = None
            row._hidden_cache = hidden_cache
            row._disabled_cache = disabled_cache
        for row in old_rows:
            row.section = self
            if form is not None:
                row._register(form)
        self._rows.declared = declared
        self._rows.shown = shown
        logger.debug(f"{self!r}: replacement failed, restored {len(declared)} rows")

    def _reattach(self, form: "Form") -> None:
        """Re-attach with the condition results cached before a failed replacement."""
        self._register(form)
        self._rows.rebuild(lambda row: not row.is_hidden)

    def _attach_rows(self, form: "Form", rows: Sequence[Row]) -> None:
        # Register every tag before evaluating, so rows added together see each other
        for row in rows:
            row._register(form)
        for row in rows:
            row._evaluate_on_attach(form)

    def _hide_row(self, row: Row) -> None:
        if not self._rows.is_shown(row):
            return
        if self.form is not None:
            self.form.renderer.release_focus(row)
        index = self._rows.hide(row)
        self._notify_rows(ChangeKind.REMOVED, [row], [index])

    def _show_row(self, row: Row) -> None:
        index = self._rows.show(row)
        if index is not None:
            self._notify_rows(ChangeKind.ADDED, [row], [index])

    def _notify_rows(self, kind: ChangeKind, rows: Sequence[Row], positions: Iterable[int],
                     old_rows: Sequence[Row] = ()) -> None:
        # Rows of a section that is not on screen arrive with the section itself
        section_index = self.index
        if section_index is None:
            return
        self.form._notify(RowsChange(
            kind,
            tuple(rows),
            tuple(IndexPath(section_index, position) for position in positions),
            tuple(old_rows),
        ))

    # ------------------------------------------------------------------
    # Form attachment (driven by Form)
    # ------------------------------------------------------------------

    def _register(self, form: "Form") -> None:
        self.form = form
        if self._hidden is not None:
            form.registry.add_observer(self, self._hidden.referenced_tags, ConditionKind.HIDDEN)
        for row in self._rows.declared:
            row._register(form)

    def _evaluate_on_attach(self) -> None:
        form = self.form
        for row in self._rows.declared:
            row._evaluate_on_attach(form)
        self._rows.rebuild(lambda row: not row.is_hidden)
        self._hidden_cache = form.evaluate_condition(self._hidden)
        logger.debug(f"Attached {self!r} (hidden={self._hidden_cache}, rows shown={len(self)})")

    def _unregister(self) -> None:
        form = self.form
        for row in self._rows.declared:
            row._unregister(form)
        form.registry.remove_everywhere(self)
        self._rows.shown.clear()
        self.form = None
        logger.debug(f"Detached {self!r}")
