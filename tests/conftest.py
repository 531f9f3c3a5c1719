"""Shared pytest configuration and fixtures."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest
from store_fixtures import build_barrel, build_crate

from prefabsave.conf import settings
from prefabsave.scene import NodeSceneHost
from prefabsave.templates import TemplateLibrary

if TYPE_CHECKING:
    from collections.abc import Generator


@pytest.fixture(autouse=True)
def configure_test_settings() -> Generator[None]:
    """Configure settings for each test and reset them afterwards.

    Yields:
        None
    """
    settings.configure(
        SAVES_DIR="saves",
        SAVE_FILE_EXTENSION=".json",
        SAVE_KEY_FORMAT="{scene}-{container}",
        SAVE_VERSION="1.0",
        JSON_INDENT=2,
        SAVE_HOTKEY="F5",
        LOAD_HOTKEY="F6",
        TEMPLATES_DIR="templates",
        INSTALLED_STORES=["prefabsave.variables.store"],
        LOG_LEVEL="INFO",
    )
    yield
    settings.reset()


@pytest.fixture
def host() -> NodeSceneHost:
    """Scene host over in-memory nodes."""
    return NodeSceneHost()


@pytest.fixture
def library() -> TemplateLibrary:
    """Library with the crate (T1) and barrel (T2) templates."""
    library = TemplateLibrary()
    library.register_factory("T1", build_crate)
    library.register_factory("T2", build_barrel)
    return library
