"""Scene graph collaborators used by the persistence engine."""

from prefabsave.scene.base import SceneHost, Template, TemplateResolver
from prefabsave.scene.node import Node, NodeSceneHost

__all__ = ["Node", "NodeSceneHost", "SceneHost", "Template", "TemplateResolver"]
