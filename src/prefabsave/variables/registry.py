"""Registry for variable store kinds.

Store classes register themselves with the @StoreRegistry.register decorator
under their ``kind`` name, so template definitions can refer to them by name.
load_installed_stores() imports the modules listed in settings.INSTALLED_STORES
to trigger those registrations.
"""

from __future__ import annotations

import importlib
import logging
from typing import TYPE_CHECKING, ClassVar

from prefabsave.conf import settings

if TYPE_CHECKING:
    from prefabsave.variables.store import VariableStore

logger = logging.getLogger(__name__)


class StoreRegistry:
    """Central registry for variable store classes.

    Class Attributes:
        _stores: Dictionary mapping store kinds to their classes.
    """

    _stores: ClassVar[dict[str, type[VariableStore]]] = {}

    @classmethod
    def register(cls, store_class: type[VariableStore]) -> type[VariableStore]:
        """Register a variable store class.

        Use as a decorator:
            @StoreRegistry.register
            class ChestStore(VariableStore):
                kind = "chest"
                ...

        Args:
            store_class: The store class to register.

        Returns:
            The same class (allows use as decorator).

        Raises:
            ValueError: If the class has no ``kind``.
        """
        kind = getattr(store_class, "kind", None)
        if not kind:
            msg = f"Variable store {store_class.__name__} must have a 'kind' class attribute"
            raise ValueError(msg)

        if kind in cls._stores and cls._stores[kind] is not store_class:
            logger.warning("Re-registering variable store kind: %s", kind)

        cls._stores[kind] = store_class
        logger.debug("Registered variable store kind: %s", kind)
        return store_class

    @classmethod
    def get(cls, kind: str) -> type[VariableStore] | None:
        """Get a registered store class by kind."""
        return cls._stores.get(kind)

    @classmethod
    def get_all(cls) -> dict[str, type[VariableStore]]:
        """Get all registered store classes."""
        return cls._stores.copy()

    @classmethod
    def is_registered(cls, kind: str) -> bool:
        """Check if a store kind is registered."""
        return kind in cls._stores

    @classmethod
    def unregister(cls, kind: str) -> None:
        """Remove a store kind (for testing)."""
        cls._stores.pop(kind, None)


def load_installed_stores() -> list[str]:
    """Import every module in settings.INSTALLED_STORES.

    Returns:
        Kinds registered after the imports.

    Raises:
        ImportError: If a configured module cannot be imported.
    """
    for module_path in settings.INSTALLED_STORES or []:
        try:
            importlib.import_module(module_path)
            logger.debug("Loaded variable store module: %s", module_path)
        except ImportError:
            logger.exception("Could not load variable store module '%s'", module_path)
            raise
    kinds = sorted(StoreRegistry.get_all())
    logger.info("Registered %d variable store kinds", len(kinds))
    return kinds
