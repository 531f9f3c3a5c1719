"""Template library: resolves template references to instantiable templates.

Templates are registered in code (FactoryTemplate) or described by JSON
definition files (DefinitionTemplate). A definition's ``guid`` is its
reference, so a template can be moved or renamed on disk without breaking
existing saves.

Definition format:
    {
      "guid": "3b0e6c1e-...",
      "name": "Chest",
      "stores": [
        {"kind": "schema", "identifier": "9d1f...",
         "variables": [
           {"name": "gold", "type": "Int", "value": 25},
           {"name": "items", "type": "String", "values": ["potion"]}
         ]}
      ],
      "children": [
        {"name": "Lid", "stores": [{"kind": "schema", "identifier": "41aa...", "variables": []}]}
      ]
    }

Store identifiers are part of the definition, so every instance spawned from it
carries the same identifiers. That is what lets a saved store snapshot find its
store again after the instance is rebuilt. stamp_template_file() fills in any
missing ``guid`` and identifiers.
"""

from __future__ import annotations

import json
import logging
import uuid
from pathlib import Path
from typing import TYPE_CHECKING, Any

from prefabsave.conf import settings
from prefabsave.exceptions import PrefabSaveError
from prefabsave.scene.base import Template, TemplateResolver
from prefabsave.scene.node import Node
from prefabsave.types import Quaternion, Vector3
from prefabsave.variables.registry import StoreRegistry

if TYPE_CHECKING:
    from collections.abc import Callable

    from prefabsave.variables.store import VariableStore

logger = logging.getLogger(__name__)


class FactoryTemplate(Template):
    """Template built by a callable returning a fresh Node subtree."""

    def __init__(self, reference: str, factory: Callable[[], Node]) -> None:
        """Initialize the template.

        Args:
            reference: Stable template reference.
            factory: Builds a new subtree on every call. It is responsible for
                giving its stores fixed identifiers.
        """
        self.reference = reference
        self.factory = factory

    def instantiate(self) -> Node:
        """Build a subtree and tag its root with this template's reference."""
        node = self.factory()
        node.template_reference = self.reference
        return node


class DefinitionTemplate(Template):
    """Template described by a JSON-compatible definition."""

    def __init__(self, definition: dict[str, Any]) -> None:
        """Initialize the template.

        Args:
            definition: Parsed definition. Must contain ``guid``.

        Raises:
            ValueError: If the definition has no guid, names an unknown store
                kind, or declares variables or transforms that cannot be built.
        """
        reference = definition.get("guid")
        if not reference:
            msg = f"Template definition '{definition.get('name', '?')}' has no guid"
            raise ValueError(msg)
        self.reference = str(reference)
        self.definition = definition
        self._check_node(definition)

    def _check_node(self, data: dict[str, Any]) -> None:
        try:
            if "position" in data:
                Vector3.from_sequence(data["position"])
            if "rotation" in data:
                Quaternion.from_sequence(data["rotation"])
        except (TypeError, ValueError) as e:
            msg = f"Template '{self.reference}' has a malformed transform on node '{data.get('name', 'Node')}': {e}"
            raise ValueError(msg) from e

        for store_data in data.get("stores", []):
            kind = store_data.get("kind", "")
            if not StoreRegistry.is_registered(kind):
                msg = f"Template '{self.reference}' uses unknown store kind '{kind}'"
                raise ValueError(msg)
            if not store_data.get("identifier"):
                logger.warning(
                    "Store of kind '%s' in template '%s' has no identifier; its state cannot be restored",
                    kind,
                    self.reference,
                )
            self._check_store(store_data)
        for child in data.get("children", []):
            self._check_node(child)

    def _check_store(self, data: dict[str, Any]) -> None:
        # Declaring a throwaway store parses every variable and encodes its default.
        try:
            self._build_store(data).declare()
        except (KeyError, TypeError, ValueError, PrefabSaveError) as e:
            msg = f"Template '{self.reference}' has an invalid '{data['kind']}' store: {e}"
            raise ValueError(msg) from e

    def instantiate(self) -> Node:
        """Build a subtree and start every store in it."""
        node = self._build(self.definition)
        node.template_reference = self.reference
        return node

    def _build(self, data: dict[str, Any]) -> Node:
        node = Node(
            data.get("name", "Node"),
            position=Vector3.from_sequence(data["position"]) if "position" in data else None,
            rotation=Quaternion.from_sequence(data["rotation"]) if "rotation" in data else None,
        )
        for store_data in data.get("stores", []):
            store = self._build_store(store_data)
            store.start()
            node.add_component(store)
        for child_data in data.get("children", []):
            node.add_child(self._build(child_data))
        return node

    @staticmethod
    def _build_store(data: dict[str, Any]) -> VariableStore:
        store_class = StoreRegistry.get(data["kind"])
        identifier = data.get("identifier", "")
        from_definition = getattr(store_class, "from_definition", None)
        if from_definition is not None:
            return from_definition(identifier, data)
        return store_class(identifier)


class TemplateLibrary(TemplateResolver):
    """In-memory registry of templates keyed by reference."""

    def __init__(self) -> None:
        """Initialize an empty library."""
        self._templates: dict[str, Template] = {}

    def __contains__(self, reference: object) -> bool:
        """Check whether a reference is registered."""
        return reference in self._templates

    def __len__(self) -> int:
        """Return the number of registered templates."""
        return len(self._templates)

    def register(self, template: Template) -> Template:
        """Register a template under its reference, replacing any previous one."""
        if template.reference in self._templates:
            logger.warning("Replacing template %s", template.reference)
        self._templates[template.reference] = template
        logger.debug("Registered template %s", template.reference)
        return template

    def register_factory(self, reference: str, factory: Callable[[], Node]) -> Template:
        """Register a FactoryTemplate."""
        return self.register(FactoryTemplate(reference, factory))

    def unregister(self, reference: str) -> None:
        """Remove a template. Unknown references are ignored."""
        self._templates.pop(reference, None)

    def resolve(self, reference: str) -> Template | None:
        """Return the template for a reference, or None if unknown."""
        return self._templates.get(reference)

    def load_file(self, path: Path) -> Template:
        """Load and register one JSON definition file.

        Raises:
            OSError: If the file cannot be read.
            ValueError: If the file is not a valid definition.
        """
        with path.open(encoding="utf-8") as f:
            definition = json.load(f)
        return self.register(DefinitionTemplate(definition))

    def load_directory(self, directory: Path | None = None) -> int:
        """Load every ``*.json`` definition in a directory.

        Args:
            directory: Directory to scan. Defaults to settings.TEMPLATES_DIR.

        Returns:
            Number of templates loaded.
        """
        directory = directory if directory is not None else Path(settings.TEMPLATES_DIR)
        count = 0
        for path in sorted(directory.glob("*.json")):
            try:
                self.load_file(path)
            except (OSError, ValueError):
                logger.exception("Could not load template definition %s", path)
                raise
            count += 1
        logger.info("Loaded %d templates from %s", count, directory)
        return count


def _stamp_node(data: dict[str, Any]) -> int:
    assigned = 0
    for store_data in data.get("stores", []):
        if not store_data.get("identifier"):
            store_data["identifier"] = str(uuid.uuid4())
            assigned += 1
    for child in data.get("children", []):
        assigned += _stamp_node(child)
    return assigned


def stamp_template_file(path: Path) -> int:
    """Assign a guid and store identifiers where a definition file lacks them.

    Existing values are never changed. The file is rewritten only if something
    was assigned.

    Returns:
        Number of identifiers assigned (the guid included).
    """
    with path.open(encoding="utf-8") as f:
        definition = json.load(f)

    assigned = 0
    if not definition.get("guid"):
        definition["guid"] = str(uuid.uuid4())
        assigned += 1
    assigned += _stamp_node(definition)

    if assigned:
        with path.open("w", encoding="utf-8") as f:
            json.dump(definition, f, indent=settings.JSON_INDENT)
        logger.info("Assigned %d identifiers in %s", assigned, path)
    return assigned
