"""Graph persistence engine: saves and rebuilds a container of template instances.

The engine works on a one-level container: each immediate child that was
spawned from a template is one instance. save_all() captures every instance and
writes the whole container as a single blob; load_all() destroys the current
children and rebuilds them from the blob.

Loading is not transactional. If a template reference cannot be resolved the
load stops with TemplateResolutionError: the previous children are already gone
and the instances restored before the failure stay in the container. Callers
that need all-or-nothing behaviour should keep their own copy of the previous
snapshot and reload it.

Saves and loads must not overlap. The engine refuses a call made while another
one is running (for instance from an event handler) with PersistenceBusyError.

Example usage:
    engine = GraphPersistenceEngine(NodeSceneHost(), library, FileSnapshotSink())
    engine.save_all(level_root, "village-Props")
    report = engine.load_all(level_root, "village-Props")
    if not report.complete:
        for error in report.errors:
            print(error)
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

from prefabsave.conf import settings
from prefabsave.events import ContainerLoadedEvent, ContainerSavedEvent
from prefabsave.exceptions import PersistenceBusyError, PrefabSaveError, TemplateResolutionError
from prefabsave.saves.codec import InstanceSnapshotCodec, RestoreReport
from prefabsave.saves.snapshot import SnapshotContainer

if TYPE_CHECKING:
    from collections.abc import Iterator

    from prefabsave.events import EventBus
    from prefabsave.saves.base import SnapshotSink
    from prefabsave.scene.base import SceneHost, TemplateResolver

logger = logging.getLogger(__name__)


@dataclass
class LoadReport:
    """Outcome of a container load.

    Attributes:
        performed: False if nothing was persisted and the container was left alone.
        instances: One report per restored instance, in saved order.
    """

    performed: bool = True
    instances: list[RestoreReport] = field(default_factory=list)

    @property
    def errors(self) -> list[PrefabSaveError]:
        """Non-fatal errors from every instance."""
        return [e for report in self.instances for e in report.errors]

    @property
    def complete(self) -> bool:
        """Whether every instance, store and value was restored."""
        return not self.errors


class GraphPersistenceEngine:
    """Orchestrates save and load of a container of template instances.

    Attributes:
        host: Scene graph access.
        resolver: Maps saved template references to templates.
        sink: Storage for serialized containers.
        event_bus: Receives save, load and orphan events, if given.
        codec: Per-instance capture and restore.
    """

    def __init__(
        self,
        host: SceneHost,
        resolver: TemplateResolver,
        sink: SnapshotSink,
        event_bus: EventBus | None = None,
    ) -> None:
        """Initialize the engine."""
        self.host = host
        self.resolver = resolver
        self.sink = sink
        self.event_bus = event_bus
        self.codec = InstanceSnapshotCodec(host, event_bus)
        self._busy = False

    @property
    def busy(self) -> bool:
        """Whether a save or load is in progress."""
        return self._busy

    @contextmanager
    def _exclusive(self, operation: str) -> Iterator[None]:
        if self._busy:
            msg = f"Cannot {operation}: another save or load is in progress"
            raise PersistenceBusyError(msg)
        self._busy = True
        try:
            yield
        finally:
            self._busy = False

    def capture_all(self, container: Any) -> SnapshotContainer:  # noqa: ANN401
        """Capture every template instance directly under the container.

        Children without a template reference are skipped.
        """
        instances = []
        for child in self.host.children(container):
            if not self.host.template_reference(child):
                logger.debug("Skipping child without template reference: %r", child)
                continue
            instances.append(self.codec.capture(child))
        return SnapshotContainer(
            instances=instances,
            save_timestamp=datetime.now(UTC).timestamp(),
            save_version=settings.SAVE_VERSION,
        )

    def save_all(self, container: Any, key: str) -> SnapshotContainer:  # noqa: ANN401
        """Capture the container and write it under a key in one write.

        Returns:
            The container that was written.

        Raises:
            PersistenceBusyError: If another save or load is running.
            OSError: If the sink cannot write.
        """
        with self._exclusive("save"):
            snapshot = self.capture_all(container)
            self.sink.write(key, snapshot.to_json(indent=settings.JSON_INDENT))
            logger.info("Saved %d instances to %s", len(snapshot.instances), key)

            if self.event_bus is not None:
                self.event_bus.publish(ContainerSavedEvent(key=key, instance_count=len(snapshot.instances)))
            return snapshot

    def load_all(self, container: Any, key: str) -> LoadReport:  # noqa: ANN401
        """Replace the container's children with the instances saved under a key.

        If nothing is saved under the key the container is left untouched.

        Returns:
            Report of the restored instances and their non-fatal errors.

        Raises:
            PersistenceBusyError: If another save or load is running.
            SnapshotFormatError: If the saved data is malformed. The container is
                left untouched.
            TemplateResolutionError: If a saved template reference is unknown.
                Instances restored before it remain in the container.
        """
        with self._exclusive("load"):
            if not self.sink.exists(key):
                logger.info("No saved container at %s", key)
                return LoadReport(performed=False)

            payload = self.sink.read(key)
            if payload is None:
                logger.info("No saved container at %s", key)
                return LoadReport(performed=False)
            snapshot = SnapshotContainer.from_json(payload)

            for child in list(self.host.children(container)):
                self.host.destroy(child)

            report = LoadReport()
            for index, instance in enumerate(snapshot.instances):

                def instantiate(reference: str, index: int = index) -> Any:  # noqa: ANN401
                    template = self.resolver.resolve(reference)
                    if template is None:
                        error = TemplateResolutionError(reference, index)
                        logger.error("%s; aborting load of %s", error, key)
                        raise error
                    node = self.host.instantiate(template)
                    self.host.attach(node, container)
                    self.host.set_template_reference(node, reference)
                    return node

                report.instances.append(self.codec.restore(instance, instantiate))

            logger.info(
                "Loaded %d instances from %s (%d non-fatal errors)",
                len(report.instances),
                key,
                len(report.errors),
            )
            if self.event_bus is not None:
                self.event_bus.publish(
                    ContainerLoadedEvent(key=key, instance_count=len(report.instances), complete=report.complete)
                )
            return report
