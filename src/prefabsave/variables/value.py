"""Typed values: single named variable slots stored as canonical strings.

A TypedValue keeps its contents as a list of canonical string encodings and
parses them on demand. Encoding and decoding go through encode_value() and
decode_value(), which branch once per VariableType.

Canonical encodings:
- Int: decimal text ("42")
- Float: shortest round-tripping decimal text ("1.5", "100.0"); finite only
- String: verbatim
- Bool: "True" / "False" (decoding is case-insensitive)
- Vector3: "(x,y,z)" with each component as Float text

Decoding accepts only these forms (plus surrounding whitespace and spaces
after Vector3 commas); anything else is a DecodeError.

Example usage:
    health = TypedValue("health", VariableType.INT, ["100"])
    health.set(42)
    health.get(int)  # 42
"""

from __future__ import annotations

import logging
import math
import re
from typing import TYPE_CHECKING, Any

from prefabsave.exceptions import DecodeError, ShapeMismatchError, TypeMismatchError
from prefabsave.types import VariableType, Vector3

if TYPE_CHECKING:
    from collections.abc import Iterable

    from prefabsave.variables.store import VariableStore

logger = logging.getLogger(__name__)

_VECTOR3_COMPONENTS = 3

_INT_RE = re.compile(r"[+-]?[0-9]+")
_FLOAT_TEXT = r"[+-]?(?:[0-9]+(?:\.[0-9]*)?|\.[0-9]+)(?:[eE][+-]?[0-9]+)?"
_FLOAT_RE = re.compile(_FLOAT_TEXT)
_VECTOR3_RE = re.compile(rf"\(\s*({_FLOAT_TEXT})\s*,\s*({_FLOAT_TEXT})\s*,\s*({_FLOAT_TEXT})\s*\)")


def _format_float(value: float) -> str:
    return repr(float(value))


def _type_error(variable_type: VariableType, value: object, name: str) -> TypeMismatchError:
    return TypeMismatchError(
        name,
        f"Variable '{name}' is {variable_type.value}, got {type(value).__name__} value {value!r}",
    )


def _is_number(value: object) -> bool:
    if isinstance(value, bool) or not isinstance(value, int | float):
        return False
    return isinstance(value, int) or math.isfinite(value)


def encode_value(variable_type: VariableType, value: Any, name: str = "") -> str:  # noqa: ANN401
    """Encode a Python value as the canonical text for a variable type.

    Args:
        variable_type: Declared type of the variable.
        value: Value to encode. Ints are accepted for Float; bools are never
            accepted for Int or Float. Vector3 also accepts a three element tuple.
        name: Variable name, used in error messages.

    Returns:
        Canonical string encoding.

    Raises:
        TypeMismatchError: If the value is not of the declared type.
    """
    match variable_type:
        case VariableType.INT:
            if not isinstance(value, int) or isinstance(value, bool):
                raise _type_error(variable_type, value, name)
            return str(value)
        case VariableType.FLOAT:
            if not _is_number(value):
                raise _type_error(variable_type, value, name)
            return _format_float(value)
        case VariableType.STRING:
            if not isinstance(value, str):
                raise _type_error(variable_type, value, name)
            return value
        case VariableType.BOOL:
            if not isinstance(value, bool):
                raise _type_error(variable_type, value, name)
            return "True" if value else "False"
        case VariableType.VECTOR3:
            if isinstance(value, tuple) and len(value) == _VECTOR3_COMPONENTS and all(map(_is_number, value)):
                value = Vector3(*value)
            if not isinstance(value, Vector3) or not all(map(_is_number, value)):
                raise _type_error(variable_type, value, name)
            return "(" + ",".join(_format_float(c) for c in value) + ")"


def decode_value(variable_type: VariableType, text: str, name: str = "") -> Any:  # noqa: ANN401
    """Parse canonical text back into a Python value.

    Args:
        variable_type: Declared type of the variable.
        text: Encoded text.
        name: Variable name, used in error messages.

    Returns:
        The decoded int, float, str, bool or Vector3.

    Raises:
        DecodeError: If the text cannot be parsed as the declared type.
    """
    try:
        match variable_type:
            case VariableType.INT:
                stripped = text.strip()
                if not _INT_RE.fullmatch(stripped):
                    msg = "expected decimal integer text"
                    raise ValueError(msg)
                return int(stripped)
            case VariableType.FLOAT:
                stripped = text.strip()
                if not _FLOAT_RE.fullmatch(stripped):
                    msg = "expected finite decimal number text"
                    raise ValueError(msg)
                return float(stripped)
            case VariableType.STRING:
                return text
            case VariableType.BOOL:
                lowered = text.strip().lower()
                if lowered not in ("true", "false"):
                    msg = "expected True or False"
                    raise ValueError(msg)
                return lowered == "true"
            case VariableType.VECTOR3:
                components = _VECTOR3_RE.fullmatch(text.strip())
                if components is None:
                    msg = "expected (x,y,z) with three decimal components"
                    raise ValueError(msg)
                return Vector3(*(float(c) for c in components.groups()))
    except ValueError as e:
        msg = f"Cannot decode '{text}' as {variable_type.value} for variable '{name}': {e}"
        raise DecodeError(name, text, msg) from e


class TypedValue:
    """A named slot holding one value or a list of values of a declared type.

    Type and shape are fixed at creation. Contents are only mutated through
    set()/set_list() (which notify the owning store) or by a store load.

    Attributes:
        name: Variable name, unique within the owning store.
        values: Canonical string encodings. Exactly one element for scalars.
        store: Owning store notified after every change, if any.
    """

    def __init__(
        self,
        name: str,
        variable_type: VariableType,
        values: list[str],
        *,
        is_list: bool = False,
        store: VariableStore | None = None,
    ) -> None:
        """Initialize a typed value from already encoded text.

        Args:
            name: Variable name.
            variable_type: Declared type.
            values: Canonical encodings.
            is_list: Whether the variable holds a list.
            store: Owning store.

        Raises:
            ShapeMismatchError: If a scalar is not given exactly one value.
        """
        if not is_list and len(values) != 1:
            msg = f"Scalar variable '{name}' needs exactly one value, got {len(values)}"
            raise ShapeMismatchError(name, msg)
        self.name = name
        self._type = variable_type
        self._is_list = is_list
        self.values = list(values)
        self.store = store

    @property
    def type(self) -> VariableType:
        """Declared type."""
        return self._type

    @property
    def is_list(self) -> bool:
        """Whether this variable holds a list."""
        return self._is_list

    def __repr__(self) -> str:
        """Return a debug representation."""
        shape = "list" if self._is_list else "scalar"
        return f"TypedValue({self.name!r}, {self._type.value}, {shape}, {self.values!r})"

    def set(self, value: Any) -> None:  # noqa: ANN401
        """Overwrite the contents with a single value.

        On a list variable this collapses the list to one element.

        Raises:
            TypeMismatchError: If the value is not of the declared type.
        """
        self.values = [encode_value(self._type, value, self.name)]
        self._notify()

    def set_list(self, values: Iterable[Any]) -> None:
        """Replace every element of a list variable.

        Raises:
            ShapeMismatchError: If this variable is a scalar.
            TypeMismatchError: If any element is not of the declared type.
        """
        if not self._is_list:
            msg = f"Variable '{self.name}' is not a list. Use set instead."
            raise ShapeMismatchError(self.name, msg)
        self.values = [encode_value(self._type, v, self.name) for v in values]
        self._notify()

    def get(self, expected_type: type | None = None) -> Any:  # noqa: ANN401
        """Decode the single value.

        Args:
            expected_type: Python type the caller expects (int, float, str, bool,
                Vector3). None skips the check.

        Raises:
            TypeMismatchError: If expected_type does not match the declared type.
            ShapeMismatchError: If this variable is a list.
            DecodeError: If the stored text is malformed.
        """
        self._check_type(expected_type)
        if self._is_list:
            msg = f"Variable '{self.name}' is a list. Use get_list instead."
            raise ShapeMismatchError(self.name, msg)
        return decode_value(self._type, self.values[0], self.name)

    def get_list(self, expected_type: type | None = None) -> list[Any]:
        """Decode every element of a list variable.

        Raises:
            TypeMismatchError: If expected_type does not match the declared type.
            ShapeMismatchError: If this variable is a scalar.
            DecodeError: If any stored element is malformed.
        """
        self._check_type(expected_type)
        if not self._is_list:
            msg = f"Variable '{self.name}' is not a list. Use get instead."
            raise ShapeMismatchError(self.name, msg)
        return [decode_value(self._type, v, self.name) for v in self.values]

    def validate(self, encoded_values: list[str]) -> None:
        """Check that raw encoded values fit this variable's shape and type.

        Raises:
            ShapeMismatchError: If a scalar would receive other than one value.
            DecodeError: If any value does not parse as the declared type.
        """
        if not self._is_list and len(encoded_values) != 1:
            msg = f"Scalar variable '{self.name}' cannot hold {len(encoded_values)} values"
            raise ShapeMismatchError(self.name, msg)
        for text in encoded_values:
            decode_value(self._type, text, self.name)

    def _check_type(self, expected_type: type | None) -> None:
        if expected_type is None:
            return
        if VariableType.for_python_type(expected_type) is not self._type:
            msg = f"Variable '{self.name}' is {self._type.value}, requested {expected_type.__name__}"
            raise TypeMismatchError(self.name, msg)

    def _notify(self) -> None:
        if self.store is not None:
            self.store.variable_update()
