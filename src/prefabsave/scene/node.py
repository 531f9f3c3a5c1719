"""Minimal in-memory scene graph.

Node is a named tree node carrying a transform and a list of components
(variable stores among them). NodeSceneHost exposes it through the SceneHost
interface, so games without a scene graph of their own, and the test suite,
can drive the persistence engine directly.

Example usage:
    root = Node("Level")
    crate = root.add_child(Node("Crate", template_reference="crate-guid"))
    crate.add_component(ChestStore(identifier="chest-1"))
    stores = crate.get_components_in_children(VariableStore)
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, TypeVar

from prefabsave.scene.base import SceneHost
from prefabsave.types import Quaternion, Vector3
from prefabsave.variables.store import VariableStore

if TYPE_CHECKING:
    from collections.abc import Iterator

    from prefabsave.scene.base import Template

logger = logging.getLogger(__name__)

T = TypeVar("T")


class Node:
    """A node in the scene tree.

    Attributes:
        name: Display name (not required to be unique).
        parent: Parent node, or None for a root.
        children: Child nodes in order.
        components: Attached components, in the order they were added.
        position: Position of the node.
        rotation: Rotation of the node.
        template_reference: Reference of the template this node was spawned from.
        destroyed: Set once destroy() has run.
    """

    def __init__(
        self,
        name: str = "Node",
        *,
        position: Vector3 | None = None,
        rotation: Quaternion | None = None,
        template_reference: str | None = None,
    ) -> None:
        """Initialize a detached node."""
        self.name = name
        self.parent: Node | None = None
        self.children: list[Node] = []
        self.components: list[Any] = []
        self.position = position or Vector3()
        self.rotation = rotation or Quaternion()
        self.template_reference = template_reference
        self.destroyed = False

    def __repr__(self) -> str:
        """Return a debug representation."""
        return f"Node({self.name!r}, children={len(self.children)}, components={len(self.components)})"

    def add_child(self, child: Node) -> Node:
        """Attach a child, detaching it from its previous parent.

        Returns:
            The child, for chaining.
        """
        if child.parent is not None:
            child.parent.remove_child(child)
        child.parent = self
        self.children.append(child)
        return child

    def remove_child(self, child: Node) -> None:
        """Detach a child without destroying it."""
        self.children.remove(child)
        child.parent = None

    def add_component(self, component: T) -> T:
        """Attach a component to this node.

        Returns:
            The component, for chaining.
        """
        self.components.append(component)
        return component

    def get_component(self, component_type: type[T]) -> T | None:
        """Return the first component of a type on this node, if any."""
        for component in self.components:
            if isinstance(component, component_type):
                return component
        return None

    def get_components_in_children(self, component_type: type[T]) -> list[T]:
        """Return components of a type on this node and every descendant.

        This node's components come first, then descendants depth-first.
        """
        return [c for node in self.walk() for c in node.components if isinstance(c, component_type)]

    def walk(self) -> Iterator[Node]:
        """Iterate over this node and all descendants, depth-first pre-order."""
        stack = [self]
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(node.children))

    def find(self, name: str) -> Node | None:
        """Return the first node in this subtree with the given name."""
        return next((n for n in self.walk() if n.name == name), None)

    def destroy(self) -> None:
        """Detach this node and mark its whole subtree destroyed."""
        if self.parent is not None:
            self.parent.remove_child(self)
        for node in self.walk():
            node.destroyed = True


class NodeSceneHost(SceneHost):
    """SceneHost implementation over Node trees."""

    def children(self, node: Node) -> list[Node]:
        """Return a copy of the node's children."""
        return list(node.children)

    def template_reference(self, node: Node) -> str | None:
        """Return the node's template reference."""
        return node.template_reference

    def set_template_reference(self, node: Node, reference: str) -> None:
        """Tag the node with a template reference."""
        node.template_reference = reference

    def find_stores(self, node: Node) -> list[VariableStore]:
        """Return every variable store in the node's subtree."""
        return node.get_components_in_children(VariableStore)

    def get_transform(self, node: Node) -> tuple[Vector3, Quaternion]:
        """Return the node's position and rotation."""
        return node.position, node.rotation

    def set_transform(self, node: Node, position: Vector3, rotation: Quaternion) -> None:
        """Apply a position and rotation."""
        node.position = position
        node.rotation = rotation

    def instantiate(self, template: Template) -> Node:
        """Build a new subtree from the template."""
        node = template.instantiate()
        logger.debug("Instantiated template %s as %s", template.reference, node.name)
        return node

    def attach(self, node: Node, parent: Node) -> None:
        """Make node a child of parent."""
        parent.add_child(node)

    def destroy(self, node: Node) -> None:
        """Destroy the node's subtree."""
        node.destroy()
