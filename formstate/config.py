"""
Framework configuration for the form model.

Controls framework-level behavior (guards, tracing, predicate strictness).
Values default to the production behavior and can be flipped through
environment variables, which are read once when the configuration is built.
"""

from dataclasses import dataclass
import os


_TRUTHY = ('1', 'true', 'yes')


def _env_flag(name: str) -> bool:
    return os.getenv(name, '').lower() in _TRUTHY


@dataclass
class FrameworkConfig:
    """
    Global configuration for the form framework itself.

    Separate from any application-level form definitions.
    """

    # DEBUGGING: Skip the re-entrant mutation guard around condition evaluation.
    # Mutating a form from inside a condition is never supported; this only
    # turns the fail-fast error into undefined behavior.
    disable_reentrancy_guard: bool = False

    # Trace every delivered change notification at DEBUG level
    log_notifications: bool = False

    # Raise PredicateEvaluationError instead of evaluating to False when a
    # predicate orders or does arithmetic on incompatible values (e.g. None > 3)
    strict_predicates: bool = False

    def __post_init__(self):
        """Initialize from environment variables if set."""
        if _env_flag('FORMSTATE_DISABLE_REENTRANCY_GUARD'):
            self.disable_reentrancy_guard = True
        if _env_flag('FORMSTATE_LOG_NOTIFICATIONS'):
            self.log_notifications = True
        if _env_flag('FORMSTATE_STRICT_PREDICATES'):
            self.strict_predicates = True


_framework_config: FrameworkConfig = FrameworkConfig()


def get_framework_config() -> FrameworkConfig:
    """
    Get the global framework configuration.

    Returns:
        The framework configuration instance

    Example:
        >>> from formstate.config import get_framework_config
        >>> config = get_framework_config()
        >>> config.log_notifications = True  # Trace notifications while debugging
    """
    return _framework_config


def reset_framework_config() -> FrameworkConfig:
    """Rebuild the configuration from the current environment. For testing."""
    global _framework_config
    _framework_config = FrameworkConfig()
    return _framework_config
