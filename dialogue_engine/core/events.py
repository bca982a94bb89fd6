"""
Typed event bus for decoupled communication.

Uses Enums for event types to prevent magic strings. The presentation
layer subscribes to DialogueEvent members to render what a session
shows.

Usage:
    # Subscribe (bound methods can stay weak; lambdas need weak=False)
    event_bus.subscribe(DialogueEvent.LINE_SHOWN, view.on_line)
    event_bus.subscribe(DialogueEvent.ENDED, lambda e: close(), weak=False)

    # Publish
    event_bus.publish(DialogueEvent.LINE_SHOWN, node=node, text=text)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any, Callable
from weakref import WeakMethod, ref

logger = logging.getLogger(__name__)


class DialogueEvent(Enum):
    """Events published by a dialogue session."""
    STARTED = auto()
    LINE_SHOWN = auto()
    CHOICE_PRESENTED = auto()
    ENDED = auto()


@dataclass
class Event:
    """
    Event data container.

    Attributes:
        type: The event type (Enum member)
        data: Dictionary of event-specific data
    """
    type: Enum
    data: dict[str, Any] = field(default_factory=dict)

    def get(self, key: str, default: Any = None) -> Any:
        """Get event data by key."""
        return self.data.get(key, default)

    def __getitem__(self, key: str) -> Any:
        return self.data[key]


# Type alias for event handlers
EventHandler = Callable[[Event], None]


class EventBus:
    """
    Publish/subscribe hub between a dialogue session and its view.

    Handlers run in subscription order. A handler that raises is logged
    and the remaining handlers still run. Events published from inside a
    handler are queued and delivered after the current one finishes, so
    a view that answers CHOICE_PRESENTED by choosing immediately still
    sees events in order.

    Handlers are held by weak reference unless ``weak=False`` is passed.
    A lambda, closure or other function with no other live reference is
    collected right after ``subscribe`` returns and is then silently
    dropped: subscribe those with ``weak=False``.
    """

    def __init__(self):
        self._handlers: dict[Enum, list[Any]] = {}
        self._queue: list[Event] = []
        self._dispatching = False

    def subscribe(self, event_type: Enum, handler: EventHandler, weak: bool = True) -> None:
        """
        Subscribe to an event type.

        Args:
            event_type: The event type to listen for
            handler: Callback function(event: Event)
            weak: Hold the handler by weak reference (default). It is
                removed once its owner is garbage collected, which for a
                bare lambda is immediately; pass False to keep it alive.
        """
        if weak:
            handler_ref = WeakMethod(handler) if hasattr(handler, '__self__') else ref(handler)
        else:
            handler_ref = handler
        self._handlers.setdefault(event_type, []).append(handler_ref)

    def unsubscribe(self, event_type: Enum, handler: EventHandler) -> None:
        """Remove a handler from an event type."""
        if event_type in self._handlers:
            self._handlers[event_type] = [
                h for h in self._handlers[event_type] if self._resolve(h) != handler
            ]

    def publish(self, event_type: Enum, **data: Any) -> Event:
        """Publish an event; returns the Event that was (or will be) delivered."""
        event = Event(type=event_type, data=data)
        if self._dispatching:
            self._queue.append(event)
            return event

        self._dispatching = True
        try:
            self._dispatch(event)
            while self._queue:
                self._dispatch(self._queue.pop(0))
        finally:
            self._dispatching = False
        return event

    def _dispatch(self, event: Event) -> None:
        handlers = self._handlers.get(event.type)
        if not handlers:
            return

        for handler_ref in list(handlers):
            handler = self._resolve(handler_ref)
            if handler is None:
                continue
            try:
                handler(event)
            except Exception:
                logger.exception(f"Error in event handler for {event.type}")

        # Drop weak references whose target has been collected
        self._handlers[event.type] = [
            h for h in self._handlers.get(event.type, []) if self._resolve(h) is not None
        ]

    @staticmethod
    def _resolve(handler_ref: Any) -> EventHandler | None:
        if isinstance(handler_ref, (ref, WeakMethod)):
            return handler_ref()
        return handler_ref
