"""prefabsave - save and restore template instances with typed, identifier-bound state.

This package persists a container of objects spawned from reusable templates,
together with per-instance variable stores, and rebuilds it later:
- Typed variables (Int, Float, String, Bool, Vector3; scalar or list)
- Variable stores with stable identifiers that survive save/load
- Instance capture and restore that re-binds stores by identifier
- Whole-container save/load through pluggable sinks

Quick start:
    from prefabsave import (
        GraphPersistenceEngine,
        MemorySnapshotSink,
        Node,
        NodeSceneHost,
        TemplateLibrary,
    )

    library = TemplateLibrary()
    library.load_directory()  # settings.TEMPLATES_DIR

    engine = GraphPersistenceEngine(NodeSceneHost(), library, MemorySnapshotSink())
    engine.save_all(level_root, "village-Props")
    engine.load_all(level_root, "village-Props")

For hotkeys and file saves see prefabsave.helpers.create_save_manager().
"""

__version__ = "0.1.0"

from prefabsave.conf import settings
from prefabsave.events import EventBus
from prefabsave.exceptions import (
    DecodeError,
    NotFoundError,
    OrphanSnapshotError,
    PersistenceBusyError,
    PrefabSaveError,
    ShapeMismatchError,
    SnapshotFormatError,
    TemplateResolutionError,
    TypeMismatchError,
    VariableError,
)
from prefabsave.saves import (
    FileSnapshotSink,
    GraphPersistenceEngine,
    InstanceSnapshot,
    InstanceSnapshotCodec,
    LoadReport,
    MemorySnapshotSink,
    RestoreReport,
    SnapshotContainer,
    SnapshotSink,
    StoreSnapshot,
)
from prefabsave.scene import Node, NodeSceneHost, SceneHost, Template, TemplateResolver
from prefabsave.templates import DefinitionTemplate, FactoryTemplate, TemplateLibrary, stamp_template_file
from prefabsave.types import Quaternion, VariableType, Vector3
from prefabsave.variables import SchemaVariableStore, StoreRegistry, TypedValue, VariableSpec, VariableStore

__all__ = [
    "DecodeError",
    "DefinitionTemplate",
    "EventBus",
    "FactoryTemplate",
    "FileSnapshotSink",
    "GraphPersistenceEngine",
    "InstanceSnapshot",
    "InstanceSnapshotCodec",
    "LoadReport",
    "MemorySnapshotSink",
    "Node",
    "NodeSceneHost",
    "NotFoundError",
    "OrphanSnapshotError",
    "PersistenceBusyError",
    "PrefabSaveError",
    "Quaternion",
    "RestoreReport",
    "SceneHost",
    "SchemaVariableStore",
    "ShapeMismatchError",
    "SnapshotContainer",
    "SnapshotFormatError",
    "SnapshotSink",
    "StoreRegistry",
    "StoreSnapshot",
    "Template",
    "TemplateLibrary",
    "TemplateResolutionError",
    "TemplateResolver",
    "TypeMismatchError",
    "TypedValue",
    "VariableError",
    "VariableSpec",
    "VariableStore",
    "VariableType",
    "Vector3",
    "__version__",
    "settings",
    "stamp_template_file",
]
