import pytest

try:
    from PyQt6.QtCore import QCoreApplication

    PYQT_AVAILABLE = True
except Exception:
    PYQT_AVAILABLE = False

from formstate.core.form import Form
from formstate.core.row import IntRow, Row
from formstate.core.section import Section


def _app():
    app = QCoreApplication.instance()
    if app is None:
        app = QCoreApplication([])
    return app


@pytest.mark.skipif(not PYQT_AVAILABLE, reason="PyQt6 not available")
def test_qt_signal_delegate_reemits_structural_changes():
    from formstate.qt import QtSignalDelegate

    _app()
    delegate = QtSignalDelegate()
    sections_added = []
    rows_removed = []
    delegate.signals.sections_added.connect(lambda sections, indexes: sections_added.append(indexes))
    delegate.signals.rows_removed.connect(lambda rows, paths: rows_removed.append((rows, paths)))

    a = IntRow("a", value=1)
    b = Row("b", hidden="$a == 0")
    form = Form(delegate=delegate)
    form += Section() << a << b

    a.value = 0

    assert sections_added == [[0]]
    assert rows_removed == [([b], [(0, 1)])]


@pytest.mark.skipif(not PYQT_AVAILABLE, reason="PyQt6 not available")
def test_qt_signal_delegate_reemits_value_changes():
    from formstate.qt import QtSignalDelegate

    _app()
    delegate = QtSignalDelegate()
    values = []
    delegate.signals.row_value_changed.connect(lambda row, old, new: values.append((row.tag, old, new)))

    row = IntRow("a", value=1)
    form = Form(delegate=delegate)
    form += row
    row.value = 5

    assert values == [("a", 1, 5)]
