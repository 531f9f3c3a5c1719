"""Interfaces to the host's scene graph and template assets.

The persistence engine never touches a concrete scene graph. It talks to a
SceneHost for tree walking, transforms, instantiation and destruction, and to a
TemplateResolver for turning a saved template reference back into something
the host can instantiate. NodeSceneHost and TemplateLibrary are the bundled
implementations.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from prefabsave.types import Quaternion, Vector3
    from prefabsave.variables.store import VariableStore


class Template(ABC):
    """An instantiable resource identified by a stable reference.

    Attributes:
        reference: Opaque identifier independent of where the template is stored.
    """

    reference: str

    @abstractmethod
    def instantiate(self) -> Any:  # noqa: ANN401
        """Build a new, detached subtree from this template."""


class TemplateResolver(ABC):
    """Maps template references to templates."""

    @abstractmethod
    def resolve(self, reference: str) -> Template | None:
        """Find the template for a reference.

        Returns:
            The template, or None if the reference is unknown.
        """


class SceneHost(ABC):
    """Access to the host's scene graph.

    Every method takes the host's own node objects; the engine treats them as
    opaque handles.
    """

    @abstractmethod
    def children(self, node: Any) -> list[Any]:  # noqa: ANN401
        """Return the immediate children of a node, in order.

        The result may be the live child list; callers that mutate the tree
        while iterating copy it first.
        """

    @abstractmethod
    def template_reference(self, node: Any) -> str | None:  # noqa: ANN401
        """Return the template reference a node was spawned from, if any."""

    @abstractmethod
    def set_template_reference(self, node: Any, reference: str) -> None:  # noqa: ANN401
        """Tag a node with the template reference it was spawned from."""

    @abstractmethod
    def find_stores(self, node: Any) -> list[VariableStore]:  # noqa: ANN401
        """Return every variable store on the node and all its descendants.

        Order is tree order (the node's own stores first, then depth-first).
        """

    @abstractmethod
    def get_transform(self, node: Any) -> tuple[Vector3, Quaternion]:  # noqa: ANN401
        """Return the node's position and rotation."""

    @abstractmethod
    def set_transform(self, node: Any, position: Vector3, rotation: Quaternion) -> None:  # noqa: ANN401
        """Apply a position and rotation to the node."""

    @abstractmethod
    def instantiate(self, template: Template) -> Any:  # noqa: ANN401
        """Create a new subtree from a resolved template."""

    @abstractmethod
    def attach(self, node: Any, parent: Any) -> None:  # noqa: ANN401
        """Make node a child of parent."""

    @abstractmethod
    def destroy(self, node: Any) -> None:  # noqa: ANN401
        """Destroy a node and its subtree immediately."""
