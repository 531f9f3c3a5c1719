"""Default settings for prefabsave.

Users can override these in their project's settings.py file.

Example:
    # In your project's settings.py:
    from prefabsave.conf import global_settings

    SAVES_DIR = "userdata/saves"
    LOAD_HOTKEY = "F9"
"""

# Persistence settings
SAVES_DIR = "saves"
"""Directory where FileSnapshotSink writes snapshot files (relative to the working directory)."""

SAVE_FILE_EXTENSION = ".json"
"""File extension appended to a save key to form the snapshot file name."""

SAVE_KEY_FORMAT = "{scene}-{container}"
"""Format string for the persistence key of a container. Receives ``scene`` and ``container``."""

SAVE_VERSION = "1.0"
"""Snapshot format version written into every saved container."""

JSON_INDENT = 2
"""Indentation used when writing snapshot JSON (None for compact output)."""

# Input settings
SAVE_HOTKEY = "F5"
"""Name of the ``arcade.key`` constant that triggers a save."""

LOAD_HOTKEY = "F6"
"""Name of the ``arcade.key`` constant that triggers a load."""

# Template settings
TEMPLATES_DIR = "templates"
"""Directory scanned by TemplateLibrary.load_directory() when no path is given."""

# Installed variable store kinds (like Django's INSTALLED_APPS)
INSTALLED_STORES = [
    "prefabsave.variables.store",
]
"""List of module paths to import so their store kinds register with StoreRegistry.

Example:
    INSTALLED_STORES = [
        *global_settings.INSTALLED_STORES,
        "mygame.stores.health",
        "mygame.stores.chest",
    ]
"""

# Logging settings
LOG_LEVEL = "INFO"
"""Default level used by prefabsave.helpers.setup_logging()."""
