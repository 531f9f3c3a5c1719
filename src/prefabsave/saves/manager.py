"""Save manager: binds one container to a persistence key and hotkeys.

The SaveManager is the thin layer games call into. It derives the key a
container is saved under from the scene and container names, turns engine
errors into logged pass/fail results and maps the save/load hotkeys (F5 and F6
by default) to save() and load().

Example usage:
    manager = SaveManager(level_root, engine, scene_name="village")

    # In an arcade.View
    def on_key_press(self, symbol: int, modifiers: int) -> None:
        if manager.on_key_press(symbol, modifiers):
            return
        ...
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

import arcade

from prefabsave.conf import settings
from prefabsave.exceptions import PrefabSaveError

if TYPE_CHECKING:
    from prefabsave.saves.engine import GraphPersistenceEngine, LoadReport

logger = logging.getLogger(__name__)


class SaveManager:
    """Saves and loads one container through a GraphPersistenceEngine.

    Attributes:
        container: Root whose immediate children are saved.
        engine: Engine doing the work.
        scene_name: Name of the scene the container belongs to.
        container_name: Name of the container within the scene.
        last_report: Report of the most recent load, if any.
    """

    def __init__(
        self,
        container: Any,  # noqa: ANN401
        engine: GraphPersistenceEngine,
        scene_name: str,
        container_name: str | None = None,
    ) -> None:
        """Initialize the save manager.

        Args:
            container: Root whose immediate children are saved.
            engine: Engine doing the work.
            scene_name: Name of the scene the container belongs to.
            container_name: Name of the container. Defaults to the container's
                ``name`` attribute.
        """
        self.container = container
        self.engine = engine
        self.scene_name = scene_name
        self.container_name = container_name or getattr(container, "name", "container")
        self.last_report: LoadReport | None = None

    @property
    def save_key(self) -> str:
        """Persistence key for this container."""
        return settings.SAVE_KEY_FORMAT.format(scene=self.scene_name, container=self.container_name)

    def save(self) -> bool:
        """Save the container.

        Returns:
            True if the snapshot was written, False if saving failed.
        """
        try:
            self.engine.save_all(self.container, self.save_key)
        except (PrefabSaveError, OSError, ValueError):
            logger.exception("Failed to save %s", self.save_key)
            return False
        return True

    def load(self) -> bool:
        """Load the container.

        A load with nothing saved leaves the container alone and counts as
        success. A load that restored everything except some stores or values
        also succeeds; the problems are logged and kept in last_report.

        Returns:
            True unless the load failed outright.
        """
        try:
            report = self.engine.load_all(self.container, self.save_key)
        except (PrefabSaveError, OSError, ValueError):
            logger.exception("Failed to load %s", self.save_key)
            return False

        self.last_report = report
        if not report.performed:
            logger.warning("No save found for %s", self.save_key)
        elif not report.complete:
            logger.warning("Loaded %s with %d errors", self.save_key, len(report.errors))
        return True

    def save_exists(self) -> bool:
        """Check whether a save exists for this container."""
        return self.engine.sink.exists(self.save_key)

    def delete_save(self) -> bool:
        """Delete this container's save.

        Returns:
            True if a save existed and was deleted.
        """
        try:
            return self.engine.sink.delete(self.save_key)
        except OSError:
            logger.exception("Failed to delete save %s", self.save_key)
            return False

    def on_key_press(self, symbol: int, modifiers: int) -> bool:  # noqa: ARG002
        """Handle save/load hotkeys.

        Args:
            symbol: Arcade key constant for the pressed key.
            modifiers: Bitfield of modifier keys held.

        Returns:
            True if the key was a save or load hotkey.
        """
        if symbol == getattr(arcade.key, settings.SAVE_HOTKEY):
            if self.save():
                logger.info("Quick save completed")
            return True
        if symbol == getattr(arcade.key, settings.LOAD_HOTKEY):
            if self.load():
                logger.info("Quick load completed")
            return True
        return False
