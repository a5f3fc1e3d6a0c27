"""Tests for the per-row-kind defaults table."""

from unittest.mock import Mock

from formstate.core.form import Form
from formstate.core.row import ChoiceRow, IntRow, Row, TextRow
from formstate.core.row_defaults import RowDefaults
from formstate.core.section import Section


class TestLookup:

    def test_exact_class(self):
        defaults = RowDefaults()
        setup = Mock()
        defaults.set_cell_setup(IntRow, setup)
        assert defaults.cell_setup_for(IntRow) is setup
        assert defaults.cell_setup_for(TextRow) is None

    def test_falls_back_along_class_hierarchy(self):
        defaults = RowDefaults()
        base_update = Mock()
        defaults.set_cell_update(Row, base_update)
        assert defaults.cell_update_for(IntRow) is base_update

    def test_subclass_entry_wins(self):
        defaults = RowDefaults()
        base, specific = Mock(), Mock()
        defaults.set_initializer(Row, base)
        defaults.set_initializer(TextRow, specific)
        assert defaults.initializer_for(TextRow) is specific
        assert defaults.initializer_for(IntRow) is base

    def test_clearing_an_entry(self):
        defaults = RowDefaults()
        defaults.set_cell_setup(IntRow, Mock())
        defaults.set_cell_setup(IntRow, None)
        assert defaults.cell_setup_for(IntRow) is None


class TestCreate:

    def test_create_runs_default_then_row_initializer(self):
        calls = []
        defaults = RowDefaults()
        defaults.set_initializer(Row, lambda row: calls.append(("default", row.tag)))

        row = defaults.create(IntRow, "age", initializer=lambda row: calls.append(("own", row.tag)), value=3)

        assert isinstance(row, IntRow)
        assert row.value == 3
        assert calls == [("default", "age"), ("own", "age")]

    def test_create_passes_row_specific_arguments(self):
        row = RowDefaults().create(ChoiceRow, "plan", options=["a", "b"], title="Plan")
        assert row.options == ["a", "b"]
        assert row.title == "Plan"

    def test_create_sets_title_from_initializer(self):
        defaults = RowDefaults()

        def initializer(row):
            row.title = row.tag.upper()

        assert defaults.create(TextRow, "name", initializer=initializer).title == "NAME"


class TestFormIntegration:

    def test_form_applies_setup_and_update_defaults(self):
        setup, update = Mock(), Mock()
        defaults = RowDefaults()
        defaults.set_cell_setup(IntRow, setup)
        defaults.set_cell_update(Row, update)
        row = IntRow("a", value=1)

        form = Form(row_defaults=defaults)
        form += Section() << row
        setup.assert_called_once_with(row)

        row.value = 2
        update.assert_called_once_with(row)

    def test_default_runs_before_row_callback(self):
        calls = []
        defaults = RowDefaults()
        defaults.set_cell_update(Row, lambda row: calls.append("default"))
        row = Row("a").cell_update(lambda row: calls.append("row"))
        form = Form(row_defaults=defaults)
        form += row

        row.update_cell()

        assert calls == ["default", "row"]

    def test_forms_have_independent_tables(self):
        assert Form().row_defaults is not Form().row_defaults
