"""
Event bus for invoice domain events.

InvoiceService publishes here once the Invoice API has confirmed a change.
Typical subscribers refresh the invoice list, reload the exposure panel
after an issue, or write an activity entry.

Delivery is synchronous and in-process, in subscription order. A failing
subscriber is logged and skipped so the rest still run; it never turns a
confirmed issue or cancel into an error for the caller.
"""

import logging
from typing import Callable, Dict, List

from core.events import DomainEvent

logger = logging.getLogger(__name__)

EventHandler = Callable[[DomainEvent], None]


def _event_name(event_type: str | type[DomainEvent]) -> str:
    return event_type if isinstance(event_type, str) else event_type.__name__


class EventBus:
    """
    In-process event bus.

    Handlers register against an event class (InvoiceIssued) or its name
    ('InvoiceIssued') and receive only events of exactly that class.
    """

    def __init__(self):
        self._subscribers: Dict[str, List[EventHandler]] = {}

    def subscribe(self, event_type: str | type[DomainEvent], callback: EventHandler):
        """
        Register a handler.

        Args:
            event_type: Event class or class name, e.g. InvoiceCancelled
            callback: Called with the event instance on publish
        """
        self._subscribers.setdefault(_event_name(event_type), []).append(callback)

    def unsubscribe(self, event_type: str | type[DomainEvent], callback: EventHandler) -> bool:
        """Remove a handler. Returns False if it was not registered."""
        callbacks = self._subscribers.get(_event_name(event_type), [])
        if callback not in callbacks:
            return False
        callbacks.remove(callback)
        return True

    def publish(self, event: DomainEvent):
        """
        Deliver a confirmed invoice event to its handlers.

        The handler list is copied first, so a handler may unsubscribe
        itself while the event is being delivered.
        """
        event_type = event.__class__.__name__

        for callback in list(self._subscribers.get(event_type, [])):
            try:
                callback(event)
            except Exception:
                logger.exception(
                    "Invoice event handler %s failed for %s (event_id=%s)",
                    getattr(callback, "__name__", repr(callback)),
                    event_type,
                    event.event_id,
                )
