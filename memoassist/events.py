"""A small process-wide event bus for task and database notifications."""

from __future__ import annotations

import enum
import threading
from typing import Any, Callable

Handler = Callable[..., Any]


class Event(enum.Enum):
    TASK_CHANGED = "task_changed"
    TASK_DELETED = "task_deleted"
    TASK_ADDED = "task_added"
    DATABASE_CHANGED = "database_changed"
    DATABASE_UNCHANGED = "database_unchanged"


class TaskEventBus:
    """Dispatches events synchronously to subscribed handlers in subscription order."""

    def __init__(self) -> None:
        self._handlers: dict[Event, list[Handler]] = {event: [] for event in Event}
        self._lock = threading.Lock()

    def subscribe(self, event: Event, handler: Handler) -> None:
        with self._lock:
            self._handlers[Event(event)].append(handler)

    def unsubscribe(self, event: Event, handler: Handler) -> None:
        with self._lock:
            try:
                self._handlers[Event(event)].remove(handler)
            except ValueError:
                raise ValueError(f"handler is not subscribed to {event}") from None

    def publish(self, event: Event, *args: Any) -> list[Any]:
        """Call every handler of the event with the arguments; return their results."""
        with self._lock:
            handlers = list(self._handlers[Event(event)])
        return [handler(*args) for handler in handlers]


_default_bus: TaskEventBus | None = None
_default_lock = threading.Lock()


def default_bus() -> TaskEventBus:
    """Return the shared bus, creating it on first use."""
    global _default_bus
    with _default_lock:
        if _default_bus is None:
            _default_bus = TaskEventBus()
        return _default_bus