"""Custom types and enumerations."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, TypedDict

if TYPE_CHECKING:
    from collections.abc import Iterator


@dataclass(frozen=True)
class Vector3:
    """Three component vector used for positions and Vector3 variables."""

    x: float = 0.0
    y: float = 0.0
    z: float = 0.0

    def __iter__(self) -> Iterator[float]:
        """Iterate over the components in x, y, z order."""
        return iter((self.x, self.y, self.z))

    @classmethod
    def from_sequence(cls, values: list[float] | tuple[float, ...]) -> Vector3:
        """Create from a three element sequence."""
        x, y, z = values
        return cls(float(x), float(y), float(z))


@dataclass(frozen=True)
class Quaternion:
    """Rotation quaternion stored as x, y, z, w components."""

    x: float = 0.0
    y: float = 0.0
    z: float = 0.0
    w: float = 1.0

    def __iter__(self) -> Iterator[float]:
        """Iterate over the components in x, y, z, w order."""
        return iter((self.x, self.y, self.z, self.w))

    @classmethod
    def from_sequence(cls, values: list[float] | tuple[float, ...]) -> Quaternion:
        """Create from a four element sequence."""
        x, y, z, w = values
        return cls(float(x), float(y), float(z), float(w))


class VariableType(Enum):
    """Closed set of primitive types a variable can hold."""

    INT = "Int"
    FLOAT = "Float"
    STRING = "String"
    BOOL = "Bool"
    VECTOR3 = "Vector3"

    @classmethod
    def for_python_type(cls, python_type: type) -> VariableType | None:
        """Map a Python type to its variable type.

        Lookup is exact, so ``bool`` maps to BOOL and never to INT.

        Returns:
            The matching VariableType, or None if the type is not supported.
        """
        return _PYTHON_TYPES.get(python_type)

    @classmethod
    def from_name(cls, name: str) -> VariableType:
        """Parse the serialized name ("Int", "Float", ...), case-insensitively."""
        for member in cls:
            if member.value.lower() == str(name).lower():
                return member
        msg = f"Unknown variable type '{name}'"
        raise ValueError(msg)

    @property
    def python_type(self) -> type:
        """Python type produced when decoding values of this type."""
        return {v: k for k, v in _PYTHON_TYPES.items()}[self]


_PYTHON_TYPES: dict[type, VariableType] = {
    int: VariableType.INT,
    float: VariableType.FLOAT,
    str: VariableType.STRING,
    bool: VariableType.BOOL,
    Vector3: VariableType.VECTOR3,
}


class VariableSnapshotDict(TypedDict):
    """TypedDict for one serialized variable."""

    name: str
    encodedValues: list[str]


class StoreSnapshotDict(TypedDict):
    """TypedDict for one serialized variable store."""

    identifier: str
    variables: list[VariableSnapshotDict]


class InstanceSnapshotDict(TypedDict):
    """TypedDict for one serialized template instance."""

    templateReference: str
    position: list[float]
    rotation: list[float]
    storeSnapshots: list[StoreSnapshotDict]


class SnapshotContainerDict(TypedDict):
    """TypedDict for a serialized snapshot container."""

    instances: list[InstanceSnapshotDict]
    save_timestamp: float
    save_version: str
