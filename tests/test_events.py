"""Unit tests for EventBus."""

import unittest
from unittest.mock import MagicMock

from prefabsave.events import ContainerLoadedEvent, ContainerSavedEvent, EventBus


class Listener:
    """Subscriber with bound-method handlers."""

    def __init__(self) -> None:
        """Initialize the received list."""
        self.received: list[object] = []

    def on_saved(self, event: ContainerSavedEvent) -> None:
        """Record a saved event."""
        self.received.append(event)


class TestEventBus(unittest.TestCase):
    """Test subscribe/publish/unsubscribe."""

    def setUp(self) -> None:
        """Create a bus."""
        self.bus = EventBus()

    def test_publish_reaches_handlers_of_exact_type(self) -> None:
        """Test that handlers only see their event type."""
        saved = MagicMock()
        loaded = MagicMock()
        self.bus.subscribe(ContainerSavedEvent, saved)
        self.bus.subscribe(ContainerLoadedEvent, loaded)
        event = ContainerSavedEvent(key="k", instance_count=1)

        self.bus.publish(event)

        saved.assert_called_once_with(event)
        loaded.assert_not_called()

    def test_unsubscribe(self) -> None:
        """Test that removed handlers are not called."""
        handler = MagicMock()
        self.bus.subscribe(ContainerSavedEvent, handler)

        self.bus.unsubscribe(ContainerSavedEvent, handler)
        self.bus.unsubscribe(ContainerLoadedEvent, handler)
        self.bus.publish(ContainerSavedEvent(key="k", instance_count=0))

        handler.assert_not_called()

    def test_handler_may_unsubscribe_during_publish(self) -> None:
        """Test that the handler list can change while publishing."""
        later = MagicMock()

        def once(_event: ContainerSavedEvent) -> None:
            self.bus.unsubscribe(ContainerSavedEvent, once)

        self.bus.subscribe(ContainerSavedEvent, once)
        self.bus.subscribe(ContainerSavedEvent, later)

        self.bus.publish(ContainerSavedEvent(key="k", instance_count=0))
        self.bus.publish(ContainerSavedEvent(key="k", instance_count=0))

        assert later.call_count == 2

    def test_unregister_all(self) -> None:
        """Test removing every handler bound to one subscriber."""
        listener = Listener()
        other = MagicMock()
        self.bus.subscribe(ContainerSavedEvent, listener.on_saved)
        self.bus.subscribe(ContainerSavedEvent, other)

        self.bus.unregister_all(listener)
        self.bus.publish(ContainerSavedEvent(key="k", instance_count=0))

        assert listener.received == []
        other.assert_called_once()

    def test_clear(self) -> None:
        """Test removing all handlers."""
        handler = MagicMock()
        self.bus.subscribe(ContainerSavedEvent, handler)

        self.bus.clear()
        self.bus.publish(ContainerSavedEvent(key="k", instance_count=0))

        handler.assert_not_called()
