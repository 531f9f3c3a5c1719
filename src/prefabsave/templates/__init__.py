"""Template definitions and the library that resolves them."""

from prefabsave.templates.library import DefinitionTemplate, FactoryTemplate, TemplateLibrary, stamp_template_file

__all__ = ["DefinitionTemplate", "FactoryTemplate", "TemplateLibrary", "stamp_template_file"]
