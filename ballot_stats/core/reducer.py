"""
Reducer: dispatch of domain events to their state handlers.

Handlers are applied strictly in stream order. Later events depend on the
state left behind by earlier ones (pending-set resolution, ADD/REMOVE pairs,
eligibility snapshots), so there is exactly one handler per event type.
"""

from typing import Any, Callable, Dict, Type

from .errors import InvalidTransitionError
from .events import DomainEvent

# Handler signature: (event) -> handler-specific result
Handler = Callable[[Any], Any]


class Reducer:
    """
    Registry of event handlers.

    Usage:
        reducer = Reducer()
        reducer.register(KeyChange, tracker.apply_key_change)
        reducer.apply(event)
    """

    def __init__(self) -> None:
        self._handlers: Dict[Type[DomainEvent], Handler] = {}

    def register(self, event_type: Type[DomainEvent], handler: Handler) -> None:
        """
        Register event handler.

        Args:
            event_type: Domain event class
            handler: Callable receiving the event
        """
        self._handlers[event_type] = handler

    def apply(self, event: DomainEvent) -> Any:
        """
        Apply event using its registered handler.

        Returns:
            Whatever the handler returns

        Raises:
            InvalidTransitionError: If no handler registered for event type
        """
        handler = self._handlers.get(type(event))
        if handler is None:
            raise InvalidTransitionError(f"No handler for event type: {event.type}")
        return handler(event)
