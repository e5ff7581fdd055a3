"""
Typed event bus for decoupled communication.

Event types are Enum members, so subscribers and publishers share
one vocabulary instead of magic strings.

Usage:
    class DialogEvent(Enum):
        LINE_STARTED = auto()

    event_bus.subscribe(DialogEvent.LINE_STARTED, on_line_started)
    event_bus.publish(DialogEvent.LINE_STARTED, node_id=3)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable
from weakref import WeakMethod, ref

logger = logging.getLogger(__name__)


@dataclass
class Event:
    """
    Event data container.

    Attributes:
        type: The event type (Enum member)
        data: Keyword payload given to publish()
        consumed: Set by a handler to stop propagation
    """
    type: Enum
    data: dict[str, Any] = field(default_factory=dict)
    consumed: bool = False

    def consume(self) -> None:
        """Stop delivery to lower priority handlers."""
        self.consumed = True

    def get(self, key: str, default: Any = None) -> Any:
        return self.data.get(key, default)

    def __getitem__(self, key: str) -> Any:
        return self.data[key]


EventHandler = Callable[[Event], None]


@dataclass(eq=False)
class _Subscription:
    priority: int
    handler_ref: Any
    one_shot: bool
    weak: bool

    def resolve(self) -> EventHandler | None:
        if self.weak:
            return self.handler_ref()
        return self.handler_ref


class EventBus:
    """
    Publish/subscribe hub.

    Handlers run highest priority first. Weakly held handlers drop out
    once their owner is garbage collected. Events published from inside
    a handler are queued and delivered after the current dispatch.
    """

    def __init__(self):
        self._subscriptions: dict[Enum, list[_Subscription]] = {}
        self._pending: list[Event] = []
        self._dispatching = False

    def subscribe(
        self,
        event_type: Enum,
        handler: EventHandler,
        priority: int = 0,
        one_shot: bool = False,
        weak: bool = True,
    ) -> None:
        """
        Subscribe to an event type.

        Args:
            event_type: The event type to listen for
            handler: Callback function(event: Event)
            priority: Higher priority handlers are called first
            one_shot: Remove the handler after its first call
            weak: Hold the handler through a weak reference
        """
        if weak:
            handler_ref = WeakMethod(handler) if hasattr(handler, "__self__") else ref(handler)
        else:
            handler_ref = handler

        subscriptions = self._subscriptions.setdefault(event_type, [])
        entry = _Subscription(priority, handler_ref, one_shot, weak)

        # Stable insert: equal priorities keep subscription order
        index = len(subscriptions)
        for i, existing in enumerate(subscriptions):
            if priority > existing.priority:
                index = i
                break
        subscriptions.insert(index, entry)

    def unsubscribe(self, event_type: Enum, handler: EventHandler) -> None:
        subscriptions = self._subscriptions.get(event_type)
        if not subscriptions:
            return
        self._subscriptions[event_type] = [
            s for s in subscriptions if s.resolve() != handler
        ]

    def has_subscribers(self, event_type: Enum) -> bool:
        return any(s.resolve() is not None for s in self._subscriptions.get(event_type, []))

    def publish(self, event_type: Enum, **data: Any) -> Event:
        """
        Publish an event.

        Returns:
            The Event object (check .consumed to see if it was handled)
        """
        event = Event(type=event_type, data=data)
        if self._dispatching:
            self._pending.append(event)
        else:
            self._dispatch(event)
        return event

    def clear(self, event_type: Enum | None = None) -> None:
        if event_type is None:
            self._subscriptions.clear()
        else:
            self._subscriptions.pop(event_type, None)

    def _dispatch(self, event: Event) -> None:
        subscriptions = self._subscriptions.get(event.type)
        if subscriptions:
            self._dispatching = True
            finished: list[_Subscription] = []
            try:
                for subscription in list(subscriptions):
                    handler = subscription.resolve()
                    if handler is None:
                        finished.append(subscription)
                        continue

                    try:
                        handler(event)
                    except Exception:
                        logger.exception(f"Error in event handler for {event.type}")

                    if subscription.one_shot:
                        finished.append(subscription)
                    if event.consumed:
                        break
            finally:
                for subscription in finished:
                    if subscription in subscriptions:
                        subscriptions.remove(subscription)
                self._dispatching = False

        while self._pending and not self._dispatching:
            self._dispatch(self._pending.pop(0))
