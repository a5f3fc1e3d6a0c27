"""
formstate: a declarative model for dynamic forms.

Forms are ordered sections of tagged rows. Rows and sections can be hidden or
disabled by conditions over other rows' values; the form keeps the shown
sequences in declared order and reports every change to a delegate as a
minimal add/remove/replace notification.
"""

import logging

__version__ = "0.1.0"


def _ensure_basic_logging():
    """Ensure basic logging is configured if no configuration exists."""
    root_logger = logging.getLogger()

    # Only configure if no handlers exist and level is too high
    if not root_logger.handlers and root_logger.level > logging.INFO:
        logging.basicConfig(
            level=logging.INFO,
            format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
        )

# Configure basic logging on import
_ensure_basic_logging()

from formstate.config import FrameworkConfig, get_framework_config, reset_framework_config  # noqa: E402
from formstate.core import (  # noqa: E402
    Always,
    BoolRow,
    CallbackDelegate,
    ChangeKind,
    ChoiceRow,
    CompositeDelegate,
    Condition,
    ConditionKind,
    DuplicateTagError,
    FloatRow,
    Form,
    FormConfigurationError,
    FormDelegate,
    FormError,
    FormIndexError,
    Function,
    IndexPath,
    IntRow,
    LoggingDelegate,
    NoopDelegate,
    NoopRenderer,
    Predicate,
    PredicateEvaluationError,
    PredicateSyntaxError,
    RecordingDelegate,
    ReentrantEvaluationError,
    Row,
    RowDefaults,
    RowOwnershipError,
    RowRenderer,
    RowsChange,
    RowValueTypeError,
    Section,
    SectionsChange,
    TextRow,
    ValueChange,
    depends_on,
)

__all__ = [
    # Entities
    "Form",
    "Section",
    "Row",
    "TextRow",
    "IntRow",
    "FloatRow",
    "BoolRow",
    "ChoiceRow",

    # Conditions
    "Condition",
    "ConditionKind",
    "Always",
    "Predicate",
    "Function",
    "depends_on",

    # Notifications
    "FormDelegate",
    "NoopDelegate",
    "CallbackDelegate",
    "RecordingDelegate",
    "LoggingDelegate",
    "CompositeDelegate",
    "ChangeKind",
    "IndexPath",
    "SectionsChange",
    "RowsChange",
    "ValueChange",

    # Collaborators
    "RowRenderer",
    "NoopRenderer",
    "RowDefaults",

    # Configuration
    "FrameworkConfig",
    "get_framework_config",
    "reset_framework_config",

    # Errors
    "FormError",
    "FormConfigurationError",
    "DuplicateTagError",
    "FormIndexError",
    "RowOwnershipError",
    "RowValueTypeError",
    "PredicateSyntaxError",
    "PredicateEvaluationError",
    "ReentrantEvaluationError",
]
