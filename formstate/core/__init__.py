"""Form model core: entities, conditions, registry, visibility and notifications."""

from formstate.core.conditions import (
    Always,
    Condition,
    ConditionKind,
    Function,
    Predicate,
    as_condition,
    compile_predicate,
    depends_on,
)
from formstate.core.exceptions import (
    DuplicateTagError,
    FormConfigurationError,
    FormError,
    FormIndexError,
    PredicateEvaluationError,
    PredicateSyntaxError,
    ReentrantEvaluationError,
    RowOwnershipError,
    RowValueTypeError,
)
from formstate.core.notifications import (
    CallbackDelegate,
    ChangeDelegate,
    ChangeKind,
    CompositeDelegate,
    FormChange,
    FormDelegate,
    IndexPath,
    LoggingDelegate,
    NoopDelegate,
    RecordingDelegate,
    RowsChange,
    SectionsChange,
    ValueChange,
)
from formstate.core.registry import DependencyRegistry, DisableableObserver, HidableObserver
from formstate.core.rendering import NoopRenderer, RowRenderer
from formstate.core.row import BoolRow, ChoiceRow, FloatRow, IntRow, Row, TextRow
from formstate.core.row_defaults import RowDefaults
from formstate.core.section import Section
from formstate.core.form import Form
from formstate.core.visibility import ShownSequence
