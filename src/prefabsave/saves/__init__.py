"""Snapshot records, sinks and the engine that saves and loads containers.

SaveManager (hotkey and key-naming layer, needs arcade) lives in
prefabsave.saves.manager.
"""

from prefabsave.saves.base import SnapshotSink
from prefabsave.saves.codec import InstanceSnapshotCodec, RestoreReport
from prefabsave.saves.engine import GraphPersistenceEngine, LoadReport
from prefabsave.saves.sinks import FileSnapshotSink, MemorySnapshotSink
from prefabsave.saves.snapshot import InstanceSnapshot, SnapshotContainer, StoreSnapshot, VariableSnapshot

__all__ = [
    "FileSnapshotSink",
    "GraphPersistenceEngine",
    "InstanceSnapshot",
    "InstanceSnapshotCodec",
    "LoadReport",
    "MemorySnapshotSink",
    "RestoreReport",
    "SnapshotContainer",
    "SnapshotSink",
    "StoreSnapshot",
    "VariableSnapshot",
]
