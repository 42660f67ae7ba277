"""
Transactional state engine for the point of sale.

This package implements the mutation side of the system:
- StateEngine owns the collections and exposes one method per operation
- NotificationCascade derives notifications from each operation's outcome
- EventBus lets observers react to outcomes without touching state
"""

from engine.event_bus import Event, EventBus
from engine.events import EventTypes
from engine.cascade import NotificationCascade, LOW_STOCK_THRESHOLD
from engine.state_engine import (
    StateEngine,
    StateDefaults,
    StateSnapshot,
    OperationResult,
    ErrorKind,
)

__all__ = [
    "Event",
    "EventBus",
    "EventTypes",
    "NotificationCascade",
    "LOW_STOCK_THRESHOLD",
    "StateEngine",
    "StateDefaults",
    "StateSnapshot",
    "OperationResult",
    "ErrorKind",
]
