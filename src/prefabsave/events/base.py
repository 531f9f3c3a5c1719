"""Event system for reacting to save and load activity.

Components that need to know when a container was saved or restored (HUD
notifications, audio cues, autosave bookkeeping) subscribe to these events
instead of wrapping the engine.

Example usage:
    event_bus = EventBus()

    def on_loaded(event: ContainerLoadedEvent) -> None:
        print(f"Restored {event.instance_count} instances from {event.key}")

    event_bus.subscribe(ContainerLoadedEvent, on_loaded)
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Callable


@dataclass
class Event:
    """Base event class."""


@dataclass
class ContainerSavedEvent(Event):
    """Fired after a container snapshot has been written.

    Attributes:
        key: Persistence key the snapshot was written under.
        instance_count: Number of instances captured.
    """

    key: str
    instance_count: int


@dataclass
class ContainerLoadedEvent(Event):
    """Fired after a container has been rebuilt from a snapshot.

    Not fired when the load was a no-op (nothing persisted) or aborted by an
    unresolvable template.

    Attributes:
        key: Persistence key the snapshot was read from.
        instance_count: Number of instances restored.
        complete: False if any store reported a non-fatal error.
    """

    key: str
    instance_count: int
    complete: bool


@dataclass
class OrphanSnapshotEvent(Event):
    """Fired when a saved store has no counterpart in the restored instance.

    Attributes:
        identifier: Identifier of the orphaned store snapshot.
        template_reference: Template the instance was restored from.
    """

    identifier: str
    template_reference: str


class EventBus:
    """Central event bus for publish/subscribe event handling.

    Thread safety: This implementation is NOT thread-safe. All subscribe, publish,
    and unsubscribe calls should happen on the thread that owns the scene.
    """

    def __init__(self) -> None:
        """Initialize the event bus with no registered listeners."""
        self.listeners: dict[type[Event], list[Callable[[Event], None]]] = {}

    def subscribe(self, event_type: type[Event], handler: Callable[[Event], None]) -> None:
        """Subscribe a handler to an event type.

        Handlers are called in the order they were registered. The same handler
        can be subscribed more than once and is then called once per subscription.

        Args:
            event_type: The type of event to listen for.
            handler: Callback taking the event as its only argument.
        """
        self.listeners.setdefault(event_type, []).append(handler)

    def unsubscribe(self, event_type: type[Event], handler: Callable[[Event], None]) -> None:
        """Remove every subscription of a handler for an event type.

        Unknown handlers are ignored.
        """
        if event_type in self.listeners:
            self.listeners[event_type] = [h for h in self.listeners[event_type] if h != handler]

    def publish(self, event: Event) -> None:
        """Publish an event to all handlers subscribed to its exact type.

        Handler exceptions propagate and stop the remaining handlers.
        """
        for handler in list(self.listeners.get(type(event), [])):
            handler(event)

    def clear(self) -> None:
        """Remove all listeners for all event types."""
        self.listeners.clear()

    def unregister_all(self, subscriber: object) -> None:
        """Remove every bound-method handler belonging to a subscriber.

        Args:
            subscriber: The instance whose handlers should be removed. Matched
                against the ``__self__`` attribute of bound methods.
        """
        for event_type in self.listeners:
            self.listeners[event_type] = [
                h for h in self.listeners[event_type] if not (hasattr(h, "__self__") and h.__self__ == subscriber)
            ]
