"""Form-model exceptions.

Configuration errors are programmer errors in how a form is built. They are
raised at the mutation call, before any state is changed, so the failing
append/insert points straight at the bug.
"""

from typing import Optional


class FormError(Exception):
    """Base exception for the form model."""

    pass


class FormConfigurationError(FormError):
    """Raised when a form is built in an invalid way."""

    pass


class DuplicateTagError(FormConfigurationError):
    """Raised when a row tag is already registered in the form."""

    def __init__(self, tag: str, message: Optional[str] = None):
        self.tag = tag
        super().__init__(message or f"Duplicate tag '{tag}'")


class FormIndexError(FormConfigurationError, IndexError):
    """Raised when indexing past the end of a form or section."""

    def __init__(self, container: str, index, length: int):
        self.container = container
        self.index = index
        self.length = length
        super().__init__(f"{container}: index {index} out of bounds (length {length})")


class RowOwnershipError(FormConfigurationError):
    """Raised when a row (or section) is inserted while still owned elsewhere."""

    pass


class RowValueTypeError(FormConfigurationError, TypeError):
    """Raised when a typed row is assigned a value of the wrong type."""

    def __init__(self, row_type: type, expected: type, value):
        self.row_type = row_type
        self.expected = expected
        self.value = value
        super().__init__(
            f"{row_type.__name__} expects {expected.__name__} values, "
            f"got {type(value).__name__}: {value!r}"
        )


class PredicateSyntaxError(FormConfigurationError):
    """
    Raised when a predicate expression cannot be compiled.

    Attributes:
        expression: The predicate source as written by the caller
        detail: What is wrong with it
        offset: Optional column where the problem was found
    """

    def __init__(self, expression: str, detail: str, offset: int = 0):
        self.expression = expression
        self.detail = detail
        self.offset = offset
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        parts = [f"Invalid predicate: {self.detail}"]
        if self.offset > 0:
            parts.append(f"Column {self.offset}")
        parts.append(f"Predicate: {self.expression}")
        return " | ".join(parts)


class PredicateEvaluationError(FormError):
    """Raised in strict mode when a predicate compares incompatible values."""

    def __init__(self, expression: str, message: str):
        self.expression = expression
        super().__init__(f"{message} (predicate: {expression})")


class ReentrantEvaluationError(FormError):
    """Raised when a form is mutated while one of its conditions is evaluating."""

    pass
