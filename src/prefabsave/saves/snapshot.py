"""Serializable snapshot records.

A SnapshotContainer holds one InstanceSnapshot per saved template instance.
Each instance carries its template reference, transform and one StoreSnapshot
per variable store found in its subtree. Store snapshots are matched back to
stores by identifier on restore; their order carries no meaning.

Persisted JSON shape:
    {
      "instances": [
        {
          "templateReference": "8f0c...",
          "position": [x, y, z],
          "rotation": [x, y, z, w],
          "storeSnapshots": [
            {"identifier": "b51e...",
             "variables": [{"name": "health", "encodedValues": ["42"]}]}
          ]
        }
      ],
      "save_timestamp": 1767225600.0,
      "save_version": "1.0"
    }
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any

from prefabsave.exceptions import SnapshotFormatError
from prefabsave.types import (
    InstanceSnapshotDict,
    Quaternion,
    SnapshotContainerDict,
    StoreSnapshotDict,
    VariableSnapshotDict,
    Vector3,
)


@dataclass(frozen=True)
class VariableSnapshot:
    """Saved encoded values of one variable."""

    name: str
    encoded_values: tuple[str, ...]

    def to_dict(self) -> VariableSnapshotDict:
        """Convert to dictionary for serialization."""
        return {"name": self.name, "encodedValues": list(self.encoded_values)}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> VariableSnapshot:
        """Create from dictionary loaded from a save file."""
        values = data["encodedValues"]
        if not isinstance(values, list) or not all(isinstance(v, str) for v in values):
            msg = f"encodedValues of '{data['name']}' must be a list of strings"
            raise TypeError(msg)
        return cls(name=str(data["name"]), encoded_values=tuple(values))


@dataclass(frozen=True)
class StoreSnapshot:
    """Saved state of one variable store.

    Attributes:
        identifier: Identifier of the store the state was taken from.
        variables: Saved variables in declaration order.
    """

    identifier: str
    variables: tuple[VariableSnapshot, ...] = ()

    def as_mapping(self) -> dict[str, list[str]]:
        """Return the saved values as a name -> encoded values mapping."""
        return {v.name: list(v.encoded_values) for v in self.variables}

    def to_dict(self) -> StoreSnapshotDict:
        """Convert to dictionary for serialization."""
        return {"identifier": self.identifier, "variables": [v.to_dict() for v in self.variables]}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> StoreSnapshot:
        """Create from dictionary loaded from a save file."""
        return cls(
            identifier=str(data["identifier"]),
            variables=tuple(VariableSnapshot.from_dict(v) for v in data.get("variables", [])),
        )


@dataclass(frozen=True)
class InstanceSnapshot:
    """Saved state of one template instance."""

    template_reference: str
    position: Vector3 = field(default_factory=Vector3)
    rotation: Quaternion = field(default_factory=Quaternion)
    store_snapshots: tuple[StoreSnapshot, ...] = ()

    def to_dict(self) -> InstanceSnapshotDict:
        """Convert to dictionary for serialization."""
        return {
            "templateReference": self.template_reference,
            "position": list(self.position),
            "rotation": list(self.rotation),
            "storeSnapshots": [s.to_dict() for s in self.store_snapshots],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> InstanceSnapshot:
        """Create from dictionary loaded from a save file."""
        return cls(
            template_reference=str(data["templateReference"]),
            position=Vector3.from_sequence(data["position"]),
            rotation=Quaternion.from_sequence(data["rotation"]),
            store_snapshots=tuple(StoreSnapshot.from_dict(s) for s in data.get("storeSnapshots", [])),
        )


@dataclass
class SnapshotContainer:
    """Complete saved state of one container.

    Attributes:
        instances: Saved instances in container child order.
        save_timestamp: Unix timestamp when the save was created.
        save_version: Snapshot format version string.
    """

    instances: list[InstanceSnapshot] = field(default_factory=list)
    save_timestamp: float = 0.0
    save_version: str = "1.0"

    def to_dict(self) -> SnapshotContainerDict:
        """Convert to dictionary for JSON serialization."""
        return {
            "instances": [i.to_dict() for i in self.instances],
            "save_timestamp": self.save_timestamp,
            "save_version": self.save_version,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> SnapshotContainer:
        """Create from dictionary loaded from a save file.

        Raises:
            SnapshotFormatError: If required fields are missing or malformed.
        """
        try:
            return cls(
                instances=[InstanceSnapshot.from_dict(i) for i in data["instances"]],
                save_timestamp=float(data.get("save_timestamp", 0.0)),
                save_version=str(data.get("save_version", "1.0")),
            )
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            msg = f"Malformed snapshot container: {e!r}"
            raise SnapshotFormatError(msg) from e

    def to_json(self, indent: int | None = 2) -> bytes:
        """Serialize to UTF-8 encoded JSON."""
        return json.dumps(self.to_dict(), indent=indent).encode("utf-8")

    @classmethod
    def from_json(cls, payload: bytes | str) -> SnapshotContainer:
        """Parse UTF-8 encoded JSON.

        Raises:
            SnapshotFormatError: If the payload is not valid JSON or not a container.
        """
        try:
            data = json.loads(payload)
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            msg = f"Snapshot is not valid JSON: {e}"
            raise SnapshotFormatError(msg) from e
        if not isinstance(data, dict):
            msg = "Snapshot root must be a JSON object"
            raise SnapshotFormatError(msg)
        return cls.from_dict(data)
