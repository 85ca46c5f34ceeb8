"""
Publish/subscribe for state commits.

The state container emits an event after every committed mutation; observers
such as persistence subscribe to the collections they care about. Mutations
are synchronous, so handlers are plain callables run in registration order.

Usage:
    from adalloc.events import EventBus, StateEvent

    bus = EventBus()

    def handle_customers(data: dict):
        print(f"customers changed: {data['reason']}")

    bus.subscribe(StateEvent.CUSTOMERS_CHANGED, handle_customers)

    bus.emit(StateEvent.CUSTOMERS_CHANGED, {"reason": "allocation_applied"})
"""
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Callable, Dict, List, Optional

from adalloc.observability import get_correlation_id, get_logger

logger = get_logger(__name__)

# Type for event handlers
EventHandler = Callable[[Dict[str, Any]], None]


class StateEvent(Enum):
    """Events emitted when an in-memory collection changes."""

    CUSTOMERS_CHANGED = "customers.changed"
    GOALS_CHANGED = "goals.changed"
    SETTINGS_CHANGED = "settings.changed"


@dataclass
class EventMetadata:
    """Metadata attached to every event."""

    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    correlation_id: Optional[str] = field(default_factory=get_correlation_id)


@dataclass
class Event:
    """Wrapper for event data with metadata."""

    type: StateEvent
    data: Dict[str, Any]
    metadata: EventMetadata = field(default_factory=EventMetadata)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "event_type": self.type.value,
            "data": self.data,
            "metadata": {
                "timestamp": self.metadata.timestamp.isoformat(),
                "correlation_id": self.metadata.correlation_id,
            },
        }


class EventBus:
    """
    Synchronous event bus.

    - Multiple handlers per event, run in registration order
    - Error isolation: a failing handler is logged and the rest still run
    """

    def __init__(self):
        self._handlers: Dict[StateEvent, List[EventHandler]] = {}

    def subscribe(self, event_type: StateEvent, handler: EventHandler) -> None:
        self._handlers.setdefault(event_type, []).append(handler)
        logger.debug(
            f"Registered handler {getattr(handler, '__name__', handler)!s} for {event_type.value}"
        )

    def emit(self, event_type: StateEvent, data: Optional[Dict[str, Any]] = None) -> Event:
        """
        Emit an event to all subscribed handlers.

        Returns:
            The emitted Event object
        """
        event = Event(type=event_type, data=data or {})

        for handler in list(self._handlers.get(event_type, [])):
            try:
                handler(event.data)
            except Exception as e:
                logger.error(
                    f"Handler {getattr(handler, '__name__', handler)!s} failed for {event_type.value}: {e}",
                    exc_info=True,
                    extra={"event": event.to_dict()},
                )

        return event
