"""Tests for change objects and the stock delegates."""

import logging
from unittest.mock import Mock

import pytest

from formstate.core.notifications import (
    CallbackDelegate,
    ChangeKind,
    CompositeDelegate,
    IndexPath,
    LoggingDelegate,
    NoopDelegate,
    RecordingDelegate,
    RowsChange,
    SectionsChange,
    ValueChange,
)


class TestIndexPath:

    def test_unpacks(self):
        section, row = IndexPath(1, 2)
        assert (section, row) == (1, 2)

    def test_ordering(self):
        assert sorted([IndexPath(1, 0), IndexPath(0, 3), IndexPath(0, 1)]) == [
            IndexPath(0, 1), IndexPath(0, 3), IndexPath(1, 0)
        ]

    def test_str(self):
        assert str(IndexPath(0, 4)) == "[0, 4]"


class TestChangeValidation:

    def test_added_needs_one_index_per_section(self):
        with pytest.raises(ValueError, match="one index per section"):
            SectionsChange(ChangeKind.ADDED, ("s1", "s2"), (0,))

    def test_replaced_may_have_different_lengths(self):
        change = RowsChange(ChangeKind.REPLACED, ("new",), (IndexPath(0, 0), IndexPath(0, 1)), ("a", "b"))
        assert change.old_rows == ("a", "b")

    def test_kind_must_be_change_kind(self):
        with pytest.raises(TypeError, match="ChangeKind"):
            RowsChange("added", (), ())


class TestDelivery:

    def test_sections_added(self):
        delegate = Mock()
        SectionsChange(ChangeKind.ADDED, ("s",), (2,)).deliver_to(delegate)
        delegate.sections_added.assert_called_once_with(["s"], [2])

    def test_sections_replaced(self):
        delegate = Mock()
        SectionsChange(ChangeKind.REPLACED, ("new",), (0,), ("old",)).deliver_to(delegate)
        delegate.sections_replaced.assert_called_once_with(["old"], ["new"], [0])

    def test_rows_removed(self):
        delegate = Mock()
        RowsChange(ChangeKind.REMOVED, ("r",), (IndexPath(0, 1),)).deliver_to(delegate)
        delegate.rows_removed.assert_called_once_with(["r"], [IndexPath(0, 1)])

    def test_value_change(self):
        delegate = Mock()
        ValueChange("row", 1, 2).deliver_to(delegate)
        delegate.row_value_changed.assert_called_once_with("row", 1, 2)


class TestStockDelegates:

    def test_recording_delegate_rebuilds_change_objects(self):
        recorder = RecordingDelegate()
        recorder.rows_added(["r1", "r2"], [IndexPath(0, 0), IndexPath(0, 1)])
        recorder.row_value_changed("r1", None, 3)

        assert recorder.changes == [
            RowsChange(ChangeKind.ADDED, ("r1", "r2"), (IndexPath(0, 0), IndexPath(0, 1))),
            ValueChange("r1", None, 3),
        ]
        assert recorder.of_type(ValueChange) == [ValueChange("r1", None, 3)]
        assert len(recorder.structural()) == 1

        recorder.clear()
        assert recorder.changes == []

    def test_recording_delegate_replaced(self):
        recorder = RecordingDelegate()
        recorder.sections_replaced(["old"], ["new"], [0])
        assert recorder.changes == [SectionsChange(ChangeKind.REPLACED, ("new",), (0,), ("old",))]

    def test_callback_delegate(self):
        callback = Mock()
        CallbackDelegate(callback).sections_removed(["s"], [0])
        callback.assert_called_once_with(SectionsChange(ChangeKind.REMOVED, ("s",), (0,)))

    def test_callback_delegate_propagates_errors(self):
        delegate = CallbackDelegate(Mock(side_effect=RuntimeError("view bug")))
        with pytest.raises(RuntimeError, match="view bug"):
            delegate.rows_added([], [])

    def test_composite_delegate_fans_out_in_order(self):
        calls = []
        first = CallbackDelegate(lambda change: calls.append(("first", change.kind)))
        second = CallbackDelegate(lambda change: calls.append(("second", change.kind)))
        composite = CompositeDelegate([first]).add(second)

        composite.sections_added(["s"], [0])

        assert calls == [("first", ChangeKind.ADDED), ("second", ChangeKind.ADDED)]

    def test_composite_delegate_remove(self):
        recorder = RecordingDelegate()
        composite = CompositeDelegate([recorder])
        assert composite.remove(recorder) is True
        assert composite.remove(recorder) is False
        composite.rows_added(["r"], [IndexPath(0, 0)])
        assert recorder.changes == []

    def test_noop_delegate_accepts_everything(self):
        delegate = NoopDelegate()
        delegate.sections_added([], [])
        delegate.rows_replaced([], [], [])
        delegate.row_value_changed(None, 1, 2)

    def test_logging_delegate_logs_at_info(self, caplog):
        caplog.set_level(logging.INFO, logger="formstate.core.notifications.delegates")
        delegate = LoggingDelegate(prefix="TEST")

        delegate.rows_removed(["r"], [IndexPath(1, 2)])
        delegate.row_value_changed("r", 1, 2)

        assert "[TEST] rows removed | 1 at ['[1, 2]']" in caplog.text
        assert "[TEST] value | 'r' | 1 -> 2" in caplog.text
