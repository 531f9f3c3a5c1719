"""Django-like settings system for prefabsave.

Usage:
    # In your project's settings.py
    from prefabsave.conf import global_settings

    # Override defaults
    SAVES_DIR = "data/saves"
    SAVE_HOTKEY = "F9"

    # Register your own variable store kinds
    INSTALLED_STORES = [
        *global_settings.INSTALLED_STORES,
        "mygame.stores",
    ]

    # In your game code
    from prefabsave.conf import settings

    print(settings.SAVES_DIR)  # "data/saves"

The module is looked up through the PREFABSAVE_SETTINGS_MODULE environment
variable and falls back to a top-level ``settings`` module. A missing module is
not an error: the package defaults apply.
"""

from __future__ import annotations

import importlib
import logging
import os
from typing import Any

from prefabsave.conf import global_settings

logger = logging.getLogger(__name__)

ENVIRONMENT_VARIABLE = "PREFABSAVE_SETTINGS_MODULE"
DEFAULT_SETTINGS_MODULE = "settings"


def _upper_names(module: object) -> dict[str, Any]:
    return {name: getattr(module, name) for name in dir(module) if name.isupper()}


class Settings:
    """Resolved settings: package defaults overlaid with a user module.

    Attributes:
        SETTINGS_MODULE: Name of the user module that was applied, or None if
            only the defaults are in effect.
    """

    def __init__(self, settings_module: str | None = None) -> None:
        """Load defaults, then the upper-case names of settings_module if it imports.

        Args:
            settings_module: Dotted module path. None applies the defaults only.
        """
        self.__dict__.update(_upper_names(global_settings))
        self.SETTINGS_MODULE: str | None = None
        self._overridden: set[str] = set()

        if settings_module is None:
            return
        try:
            module = importlib.import_module(settings_module)
        except ModuleNotFoundError as e:
            if e.name != settings_module:
                raise
            logger.debug("No settings module '%s'; using defaults", settings_module)
            return

        self.SETTINGS_MODULE = settings_module
        overrides = _upper_names(module)
        self.__dict__.update(overrides)
        self._overridden.update(overrides)

    def __repr__(self) -> str:
        """Return a debug representation."""
        return f"<Settings {self.SETTINGS_MODULE or 'defaults'}>"

    def override(self, **options: Any) -> None:  # noqa: ANN401
        """Replace individual settings."""
        self.__dict__.update(options)
        self._overridden.update(options)

    def is_overridden(self, name: str) -> bool:
        """Whether a setting differs from the package default by explicit choice."""
        return name in self._overridden


class LazySettings:
    """Proxy that resolves Settings the first time a value is read or written.

    Tests call configure() instead, which starts from the package defaults
    without importing any user module, and reset() afterwards.
    """

    def __init__(self) -> None:
        """Initialize an unresolved proxy."""
        self.__dict__["_wrapped"] = None

    def _resolve(self) -> Settings:
        if self._wrapped is None:
            self.__dict__["_wrapped"] = Settings(os.environ.get(ENVIRONMENT_VARIABLE, DEFAULT_SETTINGS_MODULE))
        return self._wrapped

    def __getattr__(self, name: str) -> Any:  # noqa: ANN401
        """Return a setting, resolving settings on first use."""
        if name.startswith("_"):
            raise AttributeError(name)
        return getattr(self._resolve(), name)

    def __setattr__(self, name: str, value: Any) -> None:  # noqa: ANN401
        """Override a single setting."""
        if name == "_wrapped":
            self.__dict__["_wrapped"] = value
            return
        self._resolve().override(**{name: value})

    def configure(self, **options: Any) -> None:  # noqa: ANN401
        """Override settings without loading a user module (useful for testing).

        Repeated calls layer on top of each other until reset().

        Example:
            settings.configure(
                SAVES_DIR="/tmp/saves",
                JSON_INDENT=None,
            )
        """
        if self._wrapped is None:
            self.__dict__["_wrapped"] = Settings()
        self._wrapped.override(**options)

    def reset(self) -> None:
        """Forget resolved and configured settings."""
        self.__dict__["_wrapped"] = None

    def is_configured(self) -> bool:
        """Check if settings have been resolved or configured."""
        return self._wrapped is not None

    def is_overridden(self, name: str) -> bool:
        """Whether a setting was set by the user module or configure()."""
        return self._resolve().is_overridden(name)


settings = LazySettings()

__all__ = ["ENVIRONMENT_VARIABLE", "LazySettings", "Settings", "global_settings", "settings"]
