"""Hidden/disabled conditions and the predicate language."""

from formstate.core.conditions.predicate import PredicateProgram, compile_predicate
from formstate.core.conditions.types import (
    Always,
    Condition,
    ConditionKind,
    Function,
    Predicate,
    as_condition,
    depends_on,
)

__all__ = [
    'Always',
    'Condition',
    'ConditionKind',
    'Function',
    'Predicate',
    'PredicateProgram',
    'as_condition',
    'compile_predicate',
    'depends_on',
]
