"""Variable stores: per-entity collections of named, typed, persistable values.

A VariableStore is attached to one node of a template instance. Concrete store
kinds decide which variables exist by overriding declare_variables(); the store
owns creation, lookup, mutation and the stable identifier used to re-bind a
saved snapshot to the same logical store after the instance is rebuilt.

Lifecycle:
1. start() when the owning entity comes to life: assigns an identifier if the
   store has none, declares the variables and runs on_start().
2. get/set/add/remove during play. Every change calls variable_update().
3. save() produces an immutable StoreSnapshot (on_saved() runs first).
4. On restore the engine calls declare() then load(snapshot); on_loaded()
   runs once every saved value has been assigned.

Example usage:
    @StoreRegistry.register
    class HealthStore(VariableStore):
        kind = "health"

        def declare_variables(self) -> None:
            self.add("health", VariableType.INT, 100)
            self.add("tags", VariableType.STRING, values=["a", "b"])

    store = HealthStore()
    store.start()
    store.set("health", 42)
    snapshot = store.save()
"""

from __future__ import annotations

import logging
import uuid
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, ClassVar

from prefabsave.exceptions import DecodeError, NotFoundError, ShapeMismatchError, VariableError
from prefabsave.saves.snapshot import StoreSnapshot, VariableSnapshot
from prefabsave.types import VariableType, Vector3
from prefabsave.variables.registry import StoreRegistry
from prefabsave.variables.value import TypedValue, encode_value

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator

logger = logging.getLogger(__name__)

_DEFAULTS: dict[VariableType, Any] = {
    VariableType.INT: 0,
    VariableType.FLOAT: 0.0,
    VariableType.STRING: "",
    VariableType.BOOL: False,
    VariableType.VECTOR3: Vector3(),
}


def _as_variable_type(variable_type: VariableType | type | str) -> VariableType:
    if isinstance(variable_type, VariableType):
        return variable_type
    if isinstance(variable_type, str):
        return VariableType.from_name(variable_type)
    resolved = VariableType.for_python_type(variable_type)
    if resolved is None:
        msg = f"Type '{variable_type.__name__}' is not supported"
        raise TypeError(msg)
    return resolved


class VariableStore(ABC):
    """Base class for all variable stores.

    Subclasses implement declare_variables() and may override the hooks
    variable_update(), on_saved(), on_loaded() and on_start().

    Class Attributes:
        kind: Name under which the store class is registered in StoreRegistry.

    Attributes:
        identifier: Stable, globally unique token. Empty until assigned, and
            never regenerated once set.
        variables: Mapping from variable name to TypedValue.
    """

    kind: ClassVar[str] = ""

    def __init__(self, identifier: str = "") -> None:
        """Initialize the store.

        Args:
            identifier: Previously assigned identifier, if any.
        """
        self.identifier = identifier
        self.variables: dict[str, TypedValue] = {}

    def __repr__(self) -> str:
        """Return a debug representation."""
        return f"{type(self).__name__}(identifier={self.identifier!r}, variables={list(self.variables)!r})"

    def __contains__(self, name: object) -> bool:
        """Check whether a variable with this name exists."""
        return name in self.variables

    def __len__(self) -> int:
        """Return the number of declared variables."""
        return len(self.variables)

    def __iter__(self) -> Iterator[TypedValue]:
        """Iterate over the declared variables."""
        return iter(self.variables.values())

    # Lifecycle

    def start(self) -> None:
        """Bring the store to life: identifier, declaration, then on_start()."""
        self.ensure_identifier()
        self.declare()
        self.on_start()

    def ensure_identifier(self) -> str:
        """Assign a fresh identifier if and only if none is set.

        Returns:
            The store's identifier.
        """
        if not self.identifier:
            self.identifier = str(uuid.uuid4())
            logger.debug("Assigned identifier %s to %s", self.identifier, type(self).__name__)
        return self.identifier

    def declare(self) -> None:
        """Reset the variable collection and let the concrete store repopulate it.

        Re-declaring discards runtime edits.
        """
        self.variables = {}
        self.declare_variables()

    @abstractmethod
    def declare_variables(self) -> None:
        """Add this store kind's variables with add()."""

    # Hooks

    def variable_update(self) -> None:  # noqa: B027
        """Called after any variable is added, removed, set or loaded."""

    def on_saved(self) -> None:  # noqa: B027
        """Called at the start of save(), before the snapshot is taken."""

    def on_loaded(self) -> None:  # noqa: B027
        """Called at the end of a load() in which every saved name was found."""

    def on_start(self) -> None:  # noqa: B027
        """Called at the end of start()."""

    # Declaration

    def add(
        self,
        name: str,
        variable_type: VariableType | type | str,
        value: Any = None,  # noqa: ANN401
        values: Iterable[Any] | None = None,
    ) -> bool:
        """Create a new variable.

        Args:
            name: Variable name, unique within the store.
            variable_type: VariableType, matching Python type, or serialized type name.
            value: Initial value of a scalar. None uses the type's zero value.
            values: Initial elements. Supplying this (even empty) makes the
                variable a list.

        Returns:
            True if created, False if a variable with this name already exists.

        Raises:
            ValueError: If both value and values are given.
            TypeMismatchError: If an initial value does not match the type.
        """
        if value is not None and values is not None:
            msg = f"Variable '{name}' was given both a scalar value and list values"
            raise ValueError(msg)
        if name in self.variables:
            logger.warning("Variable '%s' already exists in %s", name, type(self).__name__)
            return False

        resolved = _as_variable_type(variable_type)
        if values is not None:
            encoded = [encode_value(resolved, v, name) for v in values]
            is_list = True
        else:
            initial = _DEFAULTS[resolved] if value is None else value
            encoded = [encode_value(resolved, initial, name)]
            is_list = False

        self.variables[name] = TypedValue(name, resolved, encoded, is_list=is_list, store=self)
        self.variable_update()
        return True

    def remove(self, name: str) -> None:
        """Delete a variable.

        Raises:
            NotFoundError: If no variable has this name.
        """
        self.get_variable(name)
        del self.variables[name]
        self.variable_update()

    # Access

    def has(self, name: str) -> bool:
        """Check whether a variable with this name exists."""
        return name in self.variables

    def get_variable(self, name: str) -> TypedValue:
        """Look up a variable by name.

        Raises:
            NotFoundError: If no variable has this name.
        """
        variable = self.variables.get(name)
        if variable is None:
            msg = f"Variable '{name}' not found in {type(self).__name__}"
            logger.error(msg)
            raise NotFoundError(name, msg)
        return variable

    def get(self, name: str, expected_type: type | None = None) -> Any:  # noqa: ANN401
        """Decode a scalar variable.

        Raises:
            NotFoundError: If no variable has this name.
            ShapeMismatchError: If the variable is a list.
            TypeMismatchError: If expected_type does not match the declared type.
            DecodeError: If the stored text is malformed.
        """
        return self._reported(self.get_variable(name).get, expected_type)

    def get_list(self, name: str, expected_type: type | None = None) -> list[Any]:
        """Decode every element of a list variable.

        Raises:
            NotFoundError: If no variable has this name.
            ShapeMismatchError: If the variable is a scalar.
            TypeMismatchError: If expected_type does not match the declared type.
            DecodeError: If any stored element is malformed.
        """
        return self._reported(self.get_variable(name).get_list, expected_type)

    def set(self, name: str, value: Any) -> None:  # noqa: ANN401
        """Set a variable. A list value is routed to set_list().

        Setting a single value on a list variable collapses it to one element.

        Raises:
            NotFoundError: If no variable has this name.
            TypeMismatchError: If the value does not match the declared type.
        """
        if isinstance(value, list):
            self.set_list(name, value)
            return
        self._reported(self.get_variable(name).set, value)

    def set_list(self, name: str, values: Iterable[Any]) -> None:
        """Replace every element of a list variable.

        Raises:
            NotFoundError: If no variable has this name.
            ShapeMismatchError: If the variable is a scalar.
            TypeMismatchError: If any element does not match the declared type.
        """
        self._reported(self.get_variable(name).set_list, values)

    # Persistence

    def save(self) -> StoreSnapshot:
        """Take an immutable snapshot of every variable.

        on_saved() runs before the snapshot is taken.
        """
        self.on_saved()
        self.ensure_identifier()
        return StoreSnapshot(
            identifier=self.identifier,
            variables=tuple(VariableSnapshot(v.name, tuple(v.values)) for v in self.variables.values()),
        )

    def load(self, snapshot: StoreSnapshot) -> list[VariableError]:
        """Assign saved values by name into the currently declared variables.

        Values that fail to decode or whose shape contradicts the declared
        variable are skipped and returned; the other variables still load. A
        saved name that is no longer declared stops the remaining assignments.

        Args:
            snapshot: Snapshot previously produced by save().

        Returns:
            Errors for the individual values that were skipped.

        Raises:
            NotFoundError: If a saved name is not declared. on_loaded() is not
                called in that case.
        """
        skipped: list[VariableError] = []
        try:
            for saved in snapshot.variables:
                variable = self.get_variable(saved.name)
                try:
                    variable.validate(list(saved.encoded_values))
                except (DecodeError, ShapeMismatchError) as e:
                    logger.warning("Skipping saved value for '%s' in store %s: %s", saved.name, self.identifier, e)
                    skipped.append(e)
                    continue
                variable.values = list(saved.encoded_values)
        finally:
            self.variable_update()
        self.on_loaded()
        return skipped

    def _reported(self, accessor: Any, argument: Any) -> Any:  # noqa: ANN401
        try:
            return accessor(argument)
        except VariableError as e:
            logger.error("%s (store %s)", e, self.identifier or type(self).__name__)  # noqa: TRY400
            raise


@dataclass
class VariableSpec:
    """Declaration of one variable for a SchemaVariableStore.

    Attributes:
        name: Variable name.
        type: Declared type.
        value: Default scalar value (None for the type's zero value).
        values: Default elements; not None makes the variable a list.
    """

    name: str
    type: VariableType
    value: Any = None
    values: list[Any] | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> VariableSpec:
        """Create from a template definition entry.

        Vector3 defaults may be written as three element lists.

        Raises:
            ValueError: If the entry has no name or type, or an unknown type.
        """
        missing = [key for key in ("name", "type") if key not in data]
        if missing:
            msg = f"Variable entry {data!r} is missing {', '.join(missing)}"
            raise ValueError(msg)
        variable_type = VariableType.from_name(data["type"])

        def convert(raw: Any) -> Any:  # noqa: ANN401
            if variable_type is VariableType.VECTOR3 and isinstance(raw, list):
                return Vector3.from_sequence(raw)
            if variable_type is VariableType.FLOAT and isinstance(raw, int) and not isinstance(raw, bool):
                return float(raw)
            return raw

        values = data.get("values")
        return cls(
            name=data["name"],
            type=variable_type,
            value=convert(data.get("value")),
            values=[convert(v) for v in values] if values is not None else None,
        )


@StoreRegistry.register
class SchemaVariableStore(VariableStore):
    """Store whose variables come from a list of VariableSpec entries.

    Used by JSON template definitions, where the variable set is data rather
    than code.
    """

    kind: ClassVar[str] = "schema"

    def __init__(self, identifier: str = "", specs: list[VariableSpec] | None = None) -> None:
        """Initialize the store.

        Args:
            identifier: Previously assigned identifier, if any.
            specs: Variables declared by declare().
        """
        super().__init__(identifier)
        self.specs: list[VariableSpec] = specs or []

    def declare_variables(self) -> None:
        """Add one variable per spec."""
        for spec in self.specs:
            self.add(spec.name, spec.type, spec.value, spec.values)

    @classmethod
    def from_definition(cls, identifier: str, data: dict[str, Any]) -> SchemaVariableStore:
        """Create from a template definition's store entry."""
        return cls(identifier, [VariableSpec.from_dict(v) for v in data.get("variables", [])])


__all__ = ["SchemaVariableStore", "VariableSpec", "VariableStore"]
