"""Change notification protocol: change objects and delegates."""

from formstate.core.notifications.delegates import (
    CallbackDelegate,
    ChangeDelegate,
    CompositeDelegate,
    FormDelegate,
    LoggingDelegate,
    NoopDelegate,
    RecordingDelegate,
)
from formstate.core.notifications.types import (
    ChangeKind,
    FormChange,
    IndexPath,
    RowsChange,
    SectionsChange,
    ValueChange,
)

__all__ = [
    'CallbackDelegate',
    'ChangeDelegate',
    'ChangeKind',
    'CompositeDelegate',
    'FormChange',
    'FormDelegate',
    'IndexPath',
    'LoggingDelegate',
    'NoopDelegate',
    'RecordingDelegate',
    'RowsChange',
    'SectionsChange',
    'ValueChange',
]
