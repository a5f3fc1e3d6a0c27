"""PyQt6 bridge. Requires the ``qt`` extra."""

from formstate.qt.signals import FormSignals, QtSignalDelegate

__all__ = ['FormSignals', 'QtSignalDelegate']
