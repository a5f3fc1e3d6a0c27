"""
Dependency registry: which rows and sections re-evaluate when a tag changes.

The form owns one registry. Each entry maps a row tag to the observers whose
hidden or disabled condition reads that tag, partitioned by ConditionKind.
Observers are kept in registration order (dicts used as ordered sets), so a
cascade visits dependents in the order their conditions were registered.
"""

import logging
from abc import ABC, abstractmethod
from typing import Dict, Iterable, List, Set, Union

from formstate.core.conditions import ConditionKind

logger = logging.getLogger(__name__)


# =============================================================================
# Observer capabilities
# =============================================================================


class HidableObserver(ABC):
    """Anything whose hidden state depends on other rows."""

    @abstractmethod
    def evaluate_hidden(self) -> None:
        """Re-evaluate the hidden condition and apply show/hide."""


class DisableableObserver(ABC):
    """Anything whose disabled state depends on other rows."""

    @abstractmethod
    def evaluate_disabled(self) -> None:
        """Re-evaluate the disabled condition and refresh the cell."""


Observer = Union[HidableObserver, DisableableObserver]

_CAPABILITY = {
    ConditionKind.HIDDEN: HidableObserver,
    ConditionKind.DISABLED: DisableableObserver,
}


# =============================================================================
# DependencyRegistry
# =============================================================================


class DependencyRegistry:
    """Maps tag -> {ConditionKind -> ordered set of observers}."""

    def __init__(self):
        self._observers: Dict[str, Dict[ConditionKind, Dict[Observer, None]]] = {}

    def add_observer(self, observer: Observer, tags: Iterable[str], kind: ConditionKind) -> None:
        """
        Register ``observer`` under every tag in ``tags`` for ``kind``.

        Registering the same observer twice is a no-op.

        Raises:
            TypeError: If the observer lacks the capability ``kind`` requires
        """
        capability = _CAPABILITY[kind]
        if not isinstance(observer, capability):
            raise TypeError(f"{type(observer).__name__} is not a {capability.__name__}")

        for tag in tags:
            by_kind = self._observers.setdefault(tag, {})
            by_kind.setdefault(kind, {})[observer] = None
            logger.debug(f"Registered {kind} observer {observer!r} on tag '{tag}'")

    def remove_observer(self, observer: Observer, tags: Iterable[str], kind: ConditionKind) -> None:
        """Remove ``observer`` from ``tags`` for ``kind``, pruning empty entries."""
        for tag in tags:
            by_kind = self._observers.get(tag)
            if by_kind is None:
                continue
            observers = by_kind.get(kind)
            if observers is None or observer not in observers:
                continue
            del observers[observer]
            if not observers:
                del by_kind[kind]
            if not by_kind:
                del self._observers[tag]
            logger.debug(f"Removed {kind} observer {observer!r} from tag '{tag}'")

    def remove_everywhere(self, observer: Observer) -> None:
        """Remove ``observer`` from every tag under both kinds."""
        for tag in list(self._observers):
            for kind in list(self._observers[tag]):
                self.remove_observer(observer, (tag,), kind)

    def observers_for(self, tag: str, kind: ConditionKind) -> List[Observer]:
        """Observers of ``tag`` for ``kind``, as a copy safe to iterate while mutating."""
        return list(self._observers.get(tag, {}).get(kind, ()))

    def tags_for(self, observer: Observer, kind: ConditionKind) -> Set[str]:
        """Every tag ``observer`` is registered under for ``kind``."""
        return {
            tag for tag, by_kind in self._observers.items()
            if observer in by_kind.get(kind, ())
        }

    def contains(self, observer: Observer) -> bool:
        """True if ``observer`` is registered anywhere."""
        return any(
            observer in observers
            for by_kind in self._observers.values()
            for observers in by_kind.values()
        )

    def tags(self) -> List[str]:
        return list(self._observers)

    def is_empty(self) -> bool:
        return not self._observers

    def __len__(self) -> int:
        return len(self._observers)

    def __repr__(self) -> str:
        return f"DependencyRegistry(tags={self.tags()!r})"
