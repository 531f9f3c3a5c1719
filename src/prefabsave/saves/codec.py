"""Capture and restore of single template instances.

capture() turns a live instance subtree into an InstanceSnapshot: template
reference and transform from the scene host, plus one StoreSnapshot for every
variable store anywhere in the subtree.

restore() rebuilds an instance through an instantiate callback, re-applies the
transform and hands each saved store snapshot to the store with the same
identifier in the new subtree. Matching is by identifier only, so a template
whose internal layout changed between save and load still restores every store
that kept its identifier. Saved stores without a counterpart are reported as
OrphanSnapshotError and skipped.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from prefabsave.events import OrphanSnapshotEvent
from prefabsave.exceptions import NotFoundError, OrphanSnapshotError, PrefabSaveError
from prefabsave.saves.snapshot import InstanceSnapshot

if TYPE_CHECKING:
    from collections.abc import Callable

    from prefabsave.events import EventBus
    from prefabsave.scene.base import SceneHost
    from prefabsave.variables.store import VariableStore

logger = logging.getLogger(__name__)


@dataclass
class RestoreReport:
    """Outcome of restoring one instance.

    Attributes:
        node: Root of the rebuilt subtree.
        template_reference: Template the instance was rebuilt from.
        restored: Identifiers of stores that loaded without a missing name.
        errors: Non-fatal errors, in the order they occurred.
    """

    node: Any
    template_reference: str
    restored: list[str] = field(default_factory=list)
    errors: list[PrefabSaveError] = field(default_factory=list)

    @property
    def orphans(self) -> list[OrphanSnapshotError]:
        """Saved stores that had no counterpart in the rebuilt subtree."""
        return [e for e in self.errors if isinstance(e, OrphanSnapshotError)]

    @property
    def complete(self) -> bool:
        """Whether every saved store and value was restored."""
        return not self.errors


class InstanceSnapshotCodec:
    """Converts instance subtrees to and from InstanceSnapshot records."""

    def __init__(self, host: SceneHost, event_bus: EventBus | None = None) -> None:
        """Initialize the codec.

        Args:
            host: Scene graph access.
            event_bus: Receives OrphanSnapshotEvent, if given.
        """
        self.host = host
        self.event_bus = event_bus

    def capture(self, instance_root: Any) -> InstanceSnapshot:  # noqa: ANN401
        """Snapshot one instance subtree.

        Every store in the subtree, the root's own included, is given an
        identifier if it lacks one and then saved.

        Raises:
            ValueError: If the instance has no template reference.
        """
        reference = self.host.template_reference(instance_root)
        if not reference:
            msg = f"Instance {instance_root!r} has no template reference"
            raise ValueError(msg)

        position, rotation = self.host.get_transform(instance_root)
        store_snapshots = []
        for store in self.host.find_stores(instance_root):
            store.ensure_identifier()
            store_snapshots.append(store.save())

        logger.debug("Captured instance of %s with %d stores", reference, len(store_snapshots))
        return InstanceSnapshot(
            template_reference=reference,
            position=position,
            rotation=rotation,
            store_snapshots=tuple(store_snapshots),
        )

    def restore(self, snapshot: InstanceSnapshot, instantiate: Callable[[str], Any]) -> RestoreReport:
        """Rebuild an instance and re-bind its saved stores by identifier.

        Args:
            snapshot: Saved instance.
            instantiate: Builds (and attaches) a new subtree for a template
                reference. Exceptions it raises propagate.

        Returns:
            Report listing restored stores and non-fatal errors.
        """
        node = instantiate(snapshot.template_reference)
        self.host.set_transform(node, snapshot.position, snapshot.rotation)
        report = RestoreReport(node=node, template_reference=snapshot.template_reference)

        stores = self._index_stores(node, snapshot.template_reference)
        for saved in snapshot.store_snapshots:
            store = stores.get(saved.identifier)
            if store is None:
                orphan = OrphanSnapshotError(saved.identifier, snapshot.template_reference)
                logger.warning("%s", orphan)
                report.errors.append(orphan)
                if self.event_bus is not None:
                    self.event_bus.publish(OrphanSnapshotEvent(saved.identifier, snapshot.template_reference))
                continue

            store.declare()
            try:
                report.errors.extend(store.load(saved))
            except NotFoundError as e:
                logger.warning("Incomplete load of store %s: %s", saved.identifier, e)
                report.errors.append(e)
                continue
            report.restored.append(saved.identifier)

        logger.debug(
            "Restored %d/%d stores of %s",
            len(report.restored),
            len(snapshot.store_snapshots),
            snapshot.template_reference,
        )
        return report

    def _index_stores(self, node: Any, reference: str) -> dict[str, VariableStore]:  # noqa: ANN401
        stores: dict[str, VariableStore] = {}
        for store in self.host.find_stores(node):
            if not store.identifier:
                continue
            if store.identifier in stores:
                logger.warning("Duplicate store identifier %s in template %s", store.identifier, reference)
                continue
            stores[store.identifier] = store
        return stores
