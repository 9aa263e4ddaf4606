"""
Runtime contract of generated view modules.

Generated code calls into three capabilities of the host application:

- the model's change tracker, ``model.changed(*fields)``, consulted by
  ``#[track]`` properties in the update routine
- the sender, ``sender.input(message)``, receiving messages from signal
  connections
- ``WidgetTemplate``, the base class of generated template classes

``TrackedModel`` is a ready-made change tracker for models that do not have
one.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class Sender(Protocol):
    """Receives the messages dispatched by signal connections."""

    def input(self, message: Any) -> None: ...


@runtime_checkable
class ChangeTracker(Protocol):
    """Reports which model fields changed since the last reset."""

    def changed(self, *fields: str) -> bool: ...


class TrackedModel:
    """
    Model base class recording every public attribute assignment.

    Assignments made while the model is constructed count as changes, so the
    first update after init re-applies every tracked property. Call
    ``reset()`` once the update routine has run.

    Example:
        class Counter(TrackedModel):
            def __init__(self) -> None:
                self.value = 0

        counter = Counter()
        counter.reset()
        counter.value += 1
        counter.changed("value")  # True
    """

    def __setattr__(self, name: str, value: Any) -> None:
        super().__setattr__(name, value)
        if not name.startswith("_"):
            self._changes().add(name)

    def _changes(self) -> set[str]:
        return self.__dict__.setdefault("_changed_fields", set())

    def changed(self, *fields: str) -> bool:
        """Whether any of ``fields`` changed; without fields, whether anything did."""
        changes = self._changes()
        if not fields:
            return bool(changes)
        return any(name in changes for name in fields)

    def reset(self) -> None:
        """Forget all recorded changes."""
        self._changes().clear()


class WidgetTemplate(ABC):
    """Base class of generated template classes."""

    root: Any

    @classmethod
    @abstractmethod
    def init(cls) -> WidgetTemplate:
        """Build the template's widget subtree."""
