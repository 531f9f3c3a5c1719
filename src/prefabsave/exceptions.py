"""Exception hierarchy for prefabsave.

Accessor-level errors (VariableError subclasses) are local to one variable
store: they are raised to the caller that touched the store and, during a
restore, collected into reports instead of aborting the remaining instances.
TemplateResolutionError is the only error that aborts a container load.
"""

from __future__ import annotations


class PrefabSaveError(Exception):
    """Base class for all prefabsave errors."""


class VariableError(PrefabSaveError):
    """Base class for errors raised by variable accessors.

    Attributes:
        name: Name of the variable involved.
    """

    def __init__(self, name: str, message: str) -> None:
        """Initialize the error.

        Args:
            name: Name of the variable involved.
            message: Human readable description.
        """
        super().__init__(message)
        self.name = name


class TypeMismatchError(VariableError):
    """Requested or supplied type is incompatible with the declared variable type."""


class ShapeMismatchError(VariableError):
    """Scalar accessor used on a list variable, or list accessor on a scalar one."""


class NotFoundError(VariableError):
    """No variable with the given name exists in the store."""


class DecodeError(VariableError):
    """Stored text cannot be parsed as the declared type.

    Attributes:
        raw: The text that failed to parse.
    """

    def __init__(self, name: str, raw: str, message: str) -> None:
        """Initialize the error.

        Args:
            name: Name of the variable involved.
            raw: The text that failed to parse.
            message: Human readable description.
        """
        super().__init__(name, message)
        self.raw = raw


class OrphanSnapshotError(PrefabSaveError):
    """A saved store identifier has no matching store in the restored subtree.

    Attributes:
        identifier: Identifier of the orphaned store snapshot.
        template_reference: Template the instance was restored from.
    """

    def __init__(self, identifier: str, template_reference: str) -> None:
        """Initialize the error.

        Args:
            identifier: Identifier of the orphaned store snapshot.
            template_reference: Template the instance was restored from.
        """
        super().__init__(
            f"No variable store with identifier '{identifier}' in instance of template '{template_reference}'"
        )
        self.identifier = identifier
        self.template_reference = template_reference


class TemplateResolutionError(PrefabSaveError):
    """A template reference could not be resolved during load.

    Attributes:
        template_reference: The unresolvable reference.
        index: Position of the instance in the saved sequence.
    """

    def __init__(self, template_reference: str, index: int) -> None:
        """Initialize the error.

        Args:
            template_reference: The unresolvable reference.
            index: Position of the instance in the saved sequence.
        """
        super().__init__(f"Unknown template reference '{template_reference}' (instance {index})")
        self.template_reference = template_reference
        self.index = index


class SnapshotFormatError(PrefabSaveError):
    """A persisted snapshot container is malformed."""


class PersistenceBusyError(PrefabSaveError):
    """A save or load was started while another one is still running."""
