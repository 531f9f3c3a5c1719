"""Helper functions for wiring prefabsave into a game.

create_save_manager() assembles the default stack (NodeSceneHost, a
FileSnapshotSink on settings.SAVES_DIR and an EventBus) around a container so a
game only has to supply its template resolver.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING

from rich.logging import RichHandler

from prefabsave.conf import settings
from prefabsave.events import EventBus
from prefabsave.saves.engine import GraphPersistenceEngine
from prefabsave.saves.manager import SaveManager
from prefabsave.saves.sinks import FileSnapshotSink
from prefabsave.scene.node import NodeSceneHost
from prefabsave.variables.registry import load_installed_stores

if TYPE_CHECKING:
    from prefabsave.scene.base import SceneHost, TemplateResolver
    from prefabsave.scene.node import Node


def setup_logging(log_level: str | None = None) -> None:
    """Configure logging for prefabsave.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
            Defaults to settings.LOG_LEVEL.

    Side effects:
        - Configures the root logger with RichHandler
        - Sets the specified log level
    """
    level = log_level or settings.LOG_LEVEL
    logging.basicConfig(
        level=getattr(logging, level.upper()),
        format="%(message)s",
        handlers=[RichHandler(rich_tracebacks=True, markup=True)],
    )


def create_save_manager(
    container: Node,
    scene_name: str,
    resolver: TemplateResolver,
    *,
    saves_dir: Path | None = None,
    host: SceneHost | None = None,
    event_bus: EventBus | None = None,
) -> SaveManager:
    """Create a SaveManager with the default engine stack.

    Imports the modules in settings.INSTALLED_STORES so their store kinds are
    registered before any template is instantiated.

    Args:
        container: Root whose immediate children are saved.
        scene_name: Scene name used in the save key.
        resolver: Resolves saved template references.
        saves_dir: Directory for save files. Defaults to settings.SAVES_DIR.
        host: Scene graph access. Defaults to NodeSceneHost.
        event_bus: Event bus for save/load events. A new one is created if None.

    Returns:
        Configured SaveManager.
    """
    load_installed_stores()
    sink = FileSnapshotSink(Path(saves_dir) if saves_dir is not None else None)
    engine = GraphPersistenceEngine(
        host or NodeSceneHost(),
        resolver,
        sink,
        event_bus if event_bus is not None else EventBus(),
    )
    return SaveManager(container, engine, scene_name)
