"""
Form: the root of the section/row tree.

The form owns the tag index, the dependency registry and its collaborators
(delegate, renderer, row defaults). It behaves as a sequence of its *shown*
sections; ``all_sections`` lists every declared section.

Example:
    >>> form = Form(delegate=RecordingDelegate())
    >>> form += Section("Account") << IntRow("age", value=30) << TextRow("guardian", hidden="$age >= 18")
    >>> form.row_by_tag("guardian").is_hidden
    True
    >>> form.row_by_tag("age").value = 12
    >>> form.row_by_tag("guardian").index_path()
    IndexPath(section=0, row=1)
"""

import logging
from contextlib import contextmanager
from typing import Any, Callable, Dict, Iterable, Iterator, List, Optional, Sequence, Type, Union

from formstate.config import get_framework_config
from formstate.core.conditions import Condition, ConditionKind
from formstate.core.exceptions import FormIndexError, ReentrantEvaluationError, RowOwnershipError
from formstate.core.notifications import (
    ChangeKind,
    FormChange,
    FormDelegate,
    IndexPath,
    SectionsChange,
    ValueChange,
)
from formstate.core.registry import DependencyRegistry
from formstate.core.rendering import NoopRenderer, RowRenderer
from formstate.core.row import Row
from formstate.core.row_defaults import RowDefaults
from formstate.core.section import Section, check_new_tags, slice_bounds
from formstate.core.visibility import ShownSequence, normalize_index

logger = logging.getLogger(__name__)


class Form:
    """
    Ordered container of sections.

    Args:
        sections: Initial sections
        delegate: Receives change notifications (None for no view)
        renderer: View-layer hooks for row cells
        row_defaults: Default row callbacks per row kind
    """

    def __init__(self, sections: Iterable[Section] = (), delegate: Optional[FormDelegate] = None,
                 renderer: Optional[RowRenderer] = None, row_defaults: Optional[RowDefaults] = None):
        self.delegate = delegate
        self.renderer = renderer if renderer is not None else NoopRenderer()
        self.row_defaults = row_defaults if row_defaults is not None else RowDefaults()
        self.registry = DependencyRegistry()
        self._tag_index: Dict[str, Row] = {}
        self._sections: ShownSequence[Section] = ShownSequence(owner="Form")
        self._evaluation_depth = 0

        sections = list(sections)
        if sections:
            self.extend(sections)

    def __repr__(self) -> str:
        return f"Form(sections={len(self._sections.declared)}, shown={len(self)})"

    # ------------------------------------------------------------------
    # Sequence protocol over shown sections
    # ------------------------------------------------------------------

    def __len__(self) -> int:
        return len(self._sections.shown)

    def __iter__(self) -> Iterator[Section]:
        return iter(list(self._sections.shown))

    def __contains__(self, section: object) -> bool:
        return self._sections.is_shown(section)

    def __bool__(self) -> bool:
        return True

    def __getitem__(self, key):
        """``form[i]`` is a shown section; ``form[IndexPath]`` / ``form[s, r]`` a shown row."""
        if isinstance(key, slice):
            return self._sections.shown[key]
        if isinstance(key, (IndexPath, tuple)):
            section_index, row_index = key
            return self[section_index][row_index]
        return self._sections.shown[normalize_index("Form", key, len(self))]

    def __setitem__(self, key, value) -> None:
        if isinstance(key, slice):
            start, stop = slice_bounds("Form", key, len(self))
            self.replace_range(start, stop, value)
        else:
            index = normalize_index("Form", key, len(self))
            self.replace_range(index, index + 1, [value])

    def __delitem__(self, key) -> None:
        if isinstance(key, slice):
            start, stop = slice_bounds("Form", key, len(self))
        else:
            start = normalize_index("Form", key, len(self))
            stop = start + 1
        self.replace_range(start, stop, [])

    def __iadd__(self, item: Union[Section, Row, Iterable[Union[Section, Row]]]) -> "Form":
        """``form += section``, ``form += row`` (wrapped in a new section) or an iterable of either."""
        if isinstance(item, (Section, Row)):
            items = [item]
        else:
            items = list(item)
        self.extend(Section(rows=[entry]) if isinstance(entry, Row) else entry for entry in items)
        return self

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @property
    def all_sections(self) -> List[Section]:
        return list(self._sections.declared)

    @property
    def rows(self) -> List[Row]:
        """Shown rows of shown sections, flattened."""
        return [row for section in self._sections.shown for row in section]

    @property
    def all_rows(self) -> List[Row]:
        """Every declared row of every declared section."""
        return [row for section in self._sections.declared for row in section.all_rows]

    def row_by_tag(self, tag: str, row_type: Optional[Type[Row]] = None) -> Optional[Row]:
        """Row with ``tag``, or None (also when it is not a ``row_type``)."""
        row = self._tag_index.get(tag)
        if row is not None and row_type is not None and not isinstance(row, row_type):
            return None
        return row

    def section_by_tag(self, tag: str) -> Optional[Section]:
        for section in self._sections.declared:
            if section.tag == tag:
                return section
        return None

    def values(self, include_hidden: bool = False) -> Dict[str, Any]:
        """Tag -> value for tagged rows (shown rows only unless ``include_hidden``)."""
        rows = self.all_rows if include_hidden else self.rows
        return {row.tag: row.value for row in rows if row.tag is not None}

    def set_values(self, values: Dict[str, Any]) -> None:
        """Assign values by tag. Unknown tags are ignored."""
        for tag, value in values.items():
            row = self._tag_index.get(tag)
            if row is not None:
                row.value = value

    def predicate_values(self) -> Dict[str, Any]:
        """Snapshot of every tagged row's value, hidden or not."""
        return {tag: row.value for tag, row in self._tag_index.items()}

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------

    def append(self, section: Section) -> None:
        self.extend([section])

    def extend(self, sections: Iterable[Section]) -> None:
        """Append several sections, emitting a single change."""
        end = len(self)
        self.replace_range(end, end, sections)

    def insert(self, index: int, section: Section) -> None:
        """Insert ``section`` before shown position ``index``."""
        index = normalize_index("Form", index, len(self), allow_end=True)
        self.replace_range(index, index, [section])

    def replace_range(self, start: int, stop: int, sections: Iterable[Section]) -> None:
        """
        Replace shown sections ``[start, stop)`` with ``sections``.

        Emits one change: REPLACED, or ADDED/REMOVED when only one side is shown.

        Raises:
            FormIndexError: If the range is outside the shown sections
            RowOwnershipError: If a new section belongs to another form
            DuplicateTagError: If a row of a new section reuses a tag
        """
        self._ensure_mutable()
        length = len(self)
        if not 0 <= start <= length:
            raise FormIndexError("Form", start, length)
        if not start <= stop <= length:
            raise FormIndexError("Form", stop, length)

        new_sections = list(sections)
        old_sections = self._sections.shown[start:stop]
        self._validate_new_sections(new_sections, old_sections)

        declared_before = list(self._sections.declared)
        shown_before = list(self._sections.shown)
        caches_before = [
            (section, section._hidden_cache,
             [(row, row._hidden_cache, row._disabled_cache) for row in section.all_rows])
            for section in new_sections
        ]

        try:
            anchor = self._sections.anchor_for(start)
            for section in old_sections:
                self._sections.undeclare(section)
                section._unregister()
            del self._sections.shown[start:stop]

            self._sections.declare(anchor, new_sections)
            for section in new_sections:
                section._register(self)
            for section in new_sections:
                section._evaluate_on_attach()
            shown_new = [section for section in new_sections if not section.is_hidden]
            self._sections.shown[start:start] = shown_new
        except BaseException:
            self._restore_sections(old_sections, caches_before, declared_before, shown_before)
            raise

        if old_sections and shown_new:
            self._notify(SectionsChange(
                ChangeKind.REPLACED, tuple(shown_new), tuple(range(start, stop)), tuple(old_sections)
            ))
        elif old_sections:
            self._notify(SectionsChange(ChangeKind.REMOVED, tuple(old_sections), tuple(range(start, stop))))
        elif shown_new:
            self._notify(SectionsChange(
                ChangeKind.ADDED, tuple(shown_new), tuple(range(start, start + len(shown_new)))
            ))

        new_rows = [row for section in new_sections for row in section.all_rows]
        old_rows = [row for section in old_sections for row in section.all_rows]
        self._reevaluate_dependents(old_rows + new_rows, skip=list(new_sections) + new_rows)

    def remove(self, section: Section) -> None:
        """Remove a declared section, shown or hidden."""
        if not self._sections.is_declared(section):
            raise ValueError(f"{section!r} is not in this form")
        self.remove_all(lambda candidate: candidate is section)

    def remove_all(self, predicate: Optional[Callable[[Section], bool]] = None) -> None:
        """Remove every declared section (or those matching ``predicate``), emitting one change."""
        self._ensure_mutable()
        doomed = [section for section in self._sections.declared if predicate is None or predicate(section)]
        if not doomed:
            return
        doomed_ids = {id(section) for section in doomed}
        shown = [(index, section) for index, section in enumerate(self._sections.shown)
                 if id(section) in doomed_ids]
        removed_rows = [row for section in doomed for row in section.all_rows]

        for section in doomed:
            self._sections.undeclare(section)
            section._unregister()
        self._sections.shown = [section for section in self._sections.shown if id(section) not in doomed_ids]

        if shown:
            self._notify(SectionsChange(
                ChangeKind.REMOVED, tuple(section for _, section in shown), tuple(index for index, _ in shown)
            ))
        self._reevaluate_dependents(removed_rows)

    # ------------------------------------------------------------------
    # Condition evaluation
    # ------------------------------------------------------------------

    @contextmanager
    def _evaluating(self):
        self._evaluation_depth += 1
        try:
            yield
        finally:
            self._evaluation_depth -= 1

    def evaluate_condition(self, condition: Optional[Condition]) -> bool:
        """
        Evaluate ``condition`` against this form. An absent condition is False.

        The form rejects mutation while a condition is evaluating.
        """
        if condition is None:
            return False
        with self._evaluating():
            return bool(condition.evaluate(self))

    def _ensure_mutable(self) -> None:
        if self._evaluation_depth and not get_framework_config().disable_reentrancy_guard:
            raise ReentrantEvaluationError(
                "Form mutated while a condition was evaluating; conditions must be side-effect free"
            )

    # ------------------------------------------------------------------
    # Cascade and visibility (driven by rows and sections)
    # ------------------------------------------------------------------

    def _row_value_changed(self, row: Row, old_value: Any, new_value: Any) -> None:
        self._notify(ValueChange(row, old_value, new_value))
        if row._on_change is not None:
            row._on_change(row)
        row.update_cell()
        if row.tag is None:
            return
        for observer in self.registry.observers_for(row.tag, ConditionKind.HIDDEN):
            observer.evaluate_hidden()
        for observer in self.registry.observers_for(row.tag, ConditionKind.DISABLED):
            observer.evaluate_disabled()

    def _reevaluate_dependents(self, rows: Sequence[Row], skip: Sequence[Any] = ()) -> None:
        """Re-evaluate observers of tags that just appeared in or left the form."""
        skip_ids = {id(item) for item in skip}
        for tag in dict.fromkeys(row.tag for row in rows if row.tag is not None):
            for observer in self.registry.observers_for(tag, ConditionKind.HIDDEN):
                if id(observer) not in skip_ids:
                    observer.evaluate_hidden()
            for observer in self.registry.observers_for(tag, ConditionKind.DISABLED):
                if id(observer) not in skip_ids:
                    observer.evaluate_disabled()

    def _hide_section(self, section: Section) -> None:
        index = self._sections.hide(section)
        if index is not None:
            self._notify(SectionsChange(ChangeKind.REMOVED, (section,), (index,)))

    def _show_section(self, section: Section) -> None:
        index = self._sections.show(section)
        if index is not None:
            self._notify(SectionsChange(ChangeKind.ADDED, (section,), (index,)))

    def _notify(self, change: FormChange) -> None:
        if get_framework_config().log_notifications:
            logger.debug(f"Form change: {change}")
        if self.delegate is not None:
            change.deliver_to(self.delegate)

    def _restore_sections(self, old_sections: Sequence[Section], caches: Sequence[tuple],
                          declared: List[Section], shown: List[Section]) -> None:
        """Undo a replacement that failed part way through attaching its sections."""
        for section, hidden_cache, row_caches in caches:
            if section.form is self:
                section._unregister()
            section._hidden_cache = hidden_cache
            for row, row_hidden, row_disabled in row_caches:
                row._hidden_cache = row_hidden
                row._disabled_cache = row_disabled
        for section in old_sections:
            section._reattach(self)
        self._sections.declared = declared
        self._sections.shown = shown
        logger.debug(f"Form: replacement failed, restored {len(declared)} sections")

    def _validate_new_sections(self, new_sections: Sequence[Section], old_sections: Sequence[Section]) -> None:
        old_ids = {id(section) for section in old_sections}
        seen = set()
        for section in new_sections:
            if not isinstance(section, Section):
                raise TypeError(f"Form: expected a Section, got {type(section).__name__}")
            if id(section) in seen:
                raise RowOwnershipError(f"{section!r} appears twice in the same insertion")
            seen.add(id(section))
            if section.form is not None and id(section) not in old_ids:
                raise RowOwnershipError(
                    f"{section!r} already belongs to a form; remove it before adding it here"
                )

        old_tags = {row.tag for section in old_sections for row in section.all_rows if row.tag is not None}
        existing = (tag for tag in self._tag_index if tag not in old_tags)
        check_new_tags((row for section in new_sections for row in section.all_rows), existing)
