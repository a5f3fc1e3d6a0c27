"""Immutable condition types for hidden/disabled state."""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any, Callable, FrozenSet, Optional

from formstate.config import get_framework_config
from formstate.core.conditions.predicate import PredicateProgram, compile_predicate

if TYPE_CHECKING:
    from formstate.core.form import Form

logger = logging.getLogger(__name__)


# =============================================================================
# ConditionKind Enum
# =============================================================================


class ConditionKind(Enum):
    """Which piece of state a condition controls."""

    HIDDEN = "hidden"
    DISABLED = "disabled"

    def __str__(self):
        return self.value


# =============================================================================
# Condition Interface (ABC)
# =============================================================================


class Condition(ABC):
    """A boolean expression over row values, tagged with the tags it reads.

    Subclasses expose ``referenced_tags`` (a frozenset of row tags) so the
    dependency registry can be keyed before the first evaluation.
    """

    referenced_tags: FrozenSet[str]

    @abstractmethod
    def evaluate(self, form: "Form") -> bool:
        """Evaluate against the current values of ``form``.

        Must not mutate the form. Exceptions raised by user callbacks
        propagate to the caller.
        """


@dataclass(frozen=True)
class Always(Condition):
    """A constant condition."""

    value: bool

    def __post_init__(self):
        if not isinstance(self.value, bool):
            raise TypeError(f"Always expects a bool, got {type(self.value).__name__}")

    @property
    def referenced_tags(self) -> FrozenSet[str]:
        return frozenset()

    def evaluate(self, form: "Form") -> bool:
        return self.value


@dataclass(frozen=True)
class Predicate(Condition):
    """A condition written in the predicate language, e.g. ``"$age < 18"``.

    The expression is compiled at construction, so syntax errors surface
    where the condition is declared.
    """

    expression: str
    program: PredicateProgram = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        object.__setattr__(self, 'program', compile_predicate(self.expression))

    @property
    def referenced_tags(self) -> FrozenSet[str]:
        return self.program.referenced_tags

    def evaluate(self, form: "Form") -> bool:
        strict = get_framework_config().strict_predicates
        return self.program.evaluate(form.predicate_values(), strict=strict)


@dataclass(frozen=True)
class Function(Condition):
    """A condition computed by a callback receiving the form.

    The callback may read any row of the form; ``referenced_tags`` must list
    the tags whose changes should trigger re-evaluation.

    Example:
        >>> Function({'country'}, lambda form: form.row_by_tag('country').value != 'US')
    """

    referenced_tags: FrozenSet[str]
    callback: Callable[["Form"], bool]

    def __post_init__(self):
        if isinstance(self.referenced_tags, str):
            # A bare string would otherwise become a set of characters
            tags = frozenset((self.referenced_tags,))
        else:
            tags = frozenset(self.referenced_tags)
        object.__setattr__(self, 'referenced_tags', tags)
        if not callable(self.callback):
            raise TypeError(f"Function condition callback must be callable, got {self.callback!r}")

    def evaluate(self, form: "Form") -> bool:
        return bool(self.callback(form))


# =============================================================================
# Helpers
# =============================================================================


def as_condition(value: Any) -> Optional[Condition]:
    """
    Coerce a user-supplied value into a Condition.

    Args:
        value: None, a bool, a predicate string or a Condition

    Returns:
        The matching Condition, or None for None

    Raises:
        TypeError: For any other type
        PredicateSyntaxError: For a malformed predicate string
    """
    if value is None or isinstance(value, Condition):
        return value
    if isinstance(value, bool):
        return Always(value)
    if isinstance(value, str):
        return Predicate(value)
    raise TypeError(f"Cannot use {type(value).__name__} as a condition: {value!r}")


def depends_on(*tags: str) -> Callable[[Callable[["Form"], bool]], Function]:
    """Decorator turning a function into a Function condition.

    Example:
        >>> @depends_on('plan')
        ... def hide_billing(form):
        ...     return form.row_by_tag('plan').value == 'free'
        >>> row.hidden = hide_billing
    """
    def decorator(callback: Callable[["Form"], bool]) -> Function:
        return Function(frozenset(tags), callback)
    return decorator
