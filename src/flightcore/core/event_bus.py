"""Event bus for synchronous event dispatch.

The simulation publishes engine transitions, failures and ground contact
through this bus so displays and recorders can react without polling.

Typical usage example:
    from flightcore.core.event_bus import EventBus, EventPriority
    from flightcore.simulation.events import FailureTriggeredEvent

    bus = EventBus()
    bus.subscribe(FailureTriggeredEvent, on_failure, EventPriority.HIGH)
"""

import time
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any


class EventPriority(Enum):
    """Priority levels for event handlers.

    Handlers are executed in order from CRITICAL to LOW.
    """

    CRITICAL = auto()
    HIGH = auto()
    NORMAL = auto()
    LOW = auto()


@dataclass
class Event:
    """Base class for all events.

    Attributes:
        timestamp: Wall-clock time when the event was created.
    """

    timestamp: float = field(default_factory=time.time, kw_only=True)


class EventBus:
    """Dispatch events to subscribers synchronously, in priority order.

    Handler exceptions propagate to the publisher.

    Examples:
        >>> bus = EventBus()
        >>> bus.subscribe(Event, lambda event: None)
        >>> bus.get_subscriber_count(Event)
        1
    """

    def __init__(self) -> None:
        self._handlers: dict[type[Event], list[tuple[Callable[[Any], None], EventPriority]]] = {}

    def subscribe(
        self,
        event_type: type[Event],
        handler: Callable[[Any], None],
        priority: EventPriority = EventPriority.NORMAL,
    ) -> None:
        """Subscribe a handler to an event type.

        Args:
            event_type: The class of event to subscribe to.
            handler: Callable that accepts the event as its only parameter.
            priority: Priority level for this handler. Defaults to NORMAL.
        """
        handlers = self._handlers.setdefault(event_type, [])
        handlers.append((handler, priority))
        handlers.sort(key=lambda x: x[1].value)

    def unsubscribe(self, event_type: type[Event], handler: Callable[[Any], None]) -> None:
        """Unsubscribe a handler. Unknown handlers are ignored."""
        if event_type in self._handlers:
            self._handlers[event_type] = [
                (h, p) for h, p in self._handlers[event_type] if h != handler
            ]

            if not self._handlers[event_type]:
                del self._handlers[event_type]

    def publish(self, event: Event) -> None:
        """Publish an event to all subscribers of its exact type."""
        for handler, _ in list(self._handlers.get(type(event), [])):
            handler(event)

    def clear(self) -> None:
        """Remove all event handlers."""
        self._handlers.clear()

    def get_subscriber_count(self, event_type: type[Event]) -> int:
        """Get the number of subscribers for an event type."""
        return len(self._handlers.get(event_type, []))
