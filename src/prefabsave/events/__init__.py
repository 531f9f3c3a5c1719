"""Events published by the persistence engine."""

from prefabsave.events.base import (
    ContainerLoadedEvent,
    ContainerSavedEvent,
    Event,
    EventBus,
    OrphanSnapshotEvent,
)

__all__ = [
    "ContainerLoadedEvent",
    "ContainerSavedEvent",
    "Event",
    "EventBus",
    "OrphanSnapshotEvent",
]
