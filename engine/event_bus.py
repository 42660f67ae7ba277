"""
In-memory event bus for engine outcomes.

The state engine publishes one event per operation after the state change has
been applied. Anything that wants to react (a view refresh, an audit trail)
subscribes here instead of holding a reference to the engine's collections.

Design decisions:
- Synchronous delivery, type subscribers first, then "*" subscribers
- A handler that raises is logged with its traceback and skipped; the
  operation that produced the event is already committed
- The event log is bounded so a long-running server does not grow it forever
- No module-level instance: the bus is passed to whoever needs it
"""

import logging
from collections import defaultdict, deque
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable, Optional
from uuid import uuid4

logger = logging.getLogger("event_bus")


@dataclass
class Event:
    """
    Outcome of one engine operation, accepted or declined.

    Attributes:
        event_type: One of EventTypes, used for routing
        payload: Ids, names and amounts the notification rules need
        source: "state-engine", or "manual" for operator notifications
        event_id: Unique identifier for this event instance
        timestamp: When the event was built (UTC)
    """
    event_type: str
    payload: dict[str, Any]
    source: str = "state-engine"
    event_id: str = field(default_factory=lambda: str(uuid4()))
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def __str__(self) -> str:
        return f"{self.event_type}<{self.event_id[:8]}> from {self.source}"


EventHandler = Callable[[Event], None]

ALL_EVENTS = "*"
DEFAULT_LOG_SIZE = 1000


def _handler_name(handler: EventHandler) -> str:
    return getattr(handler, "__qualname__", None) or repr(handler)


class EventBus:
    """
    Routes engine outcomes to observers.

        bus = EventBus()
        bus.subscribe(EventTypes.SALE_RECORDED, refresh_dashboard)
        engine = StateEngine(store, event_bus=bus)
        engine.add_sale("p1", 2)   # refresh_dashboard runs after the sale is stored
    """

    def __init__(self, max_log_size: Optional[int] = DEFAULT_LOG_SIZE):
        self._subscribers: dict[str, list[EventHandler]] = defaultdict(list)
        self._event_log: deque[Event] = deque(maxlen=max_log_size)
        self._log_events = True

    def subscribe(self, event_type: str, handler: EventHandler) -> None:
        """
        Call handler for every event of event_type.

        Subscribing the same handler twice means it is called twice.
        """
        self._subscribers[event_type].append(handler)
        logger.debug(f"{_handler_name(handler)} subscribed to {event_type}")

    def subscribe_all(self, handler: EventHandler) -> None:
        self.subscribe(ALL_EVENTS, handler)

    def unsubscribe(self, event_type: str, handler: EventHandler) -> bool:
        """Remove one subscription. Returns False if there was none."""
        handlers = self._subscribers.get(event_type)
        if not handlers or handler not in handlers:
            return False
        handlers.remove(handler)
        logger.debug(f"{_handler_name(handler)} unsubscribed from {event_type}")
        return True

    def publish(self, event: Event) -> int:
        """
        Deliver event to its subscribers.

        Returns:
            How many handlers were called, including ones that raised
        """
        if self._log_events:
            self._event_log.append(event)

        handlers = [*self._subscribers.get(event.event_type, ()), *self._subscribers.get(ALL_EVENTS, ())]
        logger.debug(f"Publishing {event} to {len(handlers)} handler(s)")

        for handler in handlers:
            try:
                handler(event)
            except Exception:
                logger.exception(f"Handler {_handler_name(handler)} failed on {event}")

        return len(handlers)

    def get_subscriber_count(self, event_type: str) -> int:
        return len(self._subscribers.get(event_type, ()))

    def get_event_log(self) -> list[Event]:
        """Published events, oldest first (up to max_log_size of them)."""
        return list(self._event_log)

    def clear_event_log(self) -> None:
        self._event_log.clear()

    def clear_subscribers(self) -> None:
        self._subscribers.clear()

    def set_logging(self, enabled: bool) -> None:
        """Turn recording of published events on or off."""
        self._log_events = enabled
