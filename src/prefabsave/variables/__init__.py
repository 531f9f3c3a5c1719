"""Typed variables and the stores that own them."""

from prefabsave.variables.registry import StoreRegistry, load_installed_stores
from prefabsave.variables.store import SchemaVariableStore, VariableSpec, VariableStore
from prefabsave.variables.value import TypedValue, decode_value, encode_value

__all__ = [
    "SchemaVariableStore",
    "StoreRegistry",
    "TypedValue",
    "VariableSpec",
    "VariableStore",
    "decode_value",
    "encode_value",
    "load_installed_stores",
]
