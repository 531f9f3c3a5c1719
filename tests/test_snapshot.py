"""Unit tests for snapshot records and their JSON form."""

import json
import unittest

import pytest

from prefabsave.exceptions import SnapshotFormatError
from prefabsave.saves import InstanceSnapshot, SnapshotContainer, StoreSnapshot, VariableSnapshot
from prefabsave.types import Quaternion, Vector3


def _container() -> SnapshotContainer:
    return SnapshotContainer(
        instances=[
            InstanceSnapshot(
                template_reference="T1",
                position=Vector3(1.0, 2.0, 3.0),
                rotation=Quaternion(0.0, 0.0, 0.0, 1.0),
                store_snapshots=(
                    StoreSnapshot(
                        "store-1",
                        (
                            VariableSnapshot("health", ("42",)),
                            VariableSnapshot("tags", ("a", "b")),
                            VariableSnapshot("empty", ()),
                        ),
                    ),
                ),
            ),
        ],
        save_timestamp=1767225600.0,
        save_version="1.0",
    )


class TestSnapshotContainer(unittest.TestCase):
    """Test SnapshotContainer serialization."""

    def test_to_dict_uses_persisted_field_names(self) -> None:
        """Test the persisted layout of an instance."""
        data = _container().to_dict()

        instance = data["instances"][0]
        assert instance["templateReference"] == "T1"
        assert instance["position"] == [1.0, 2.0, 3.0]
        assert instance["rotation"] == [0.0, 0.0, 0.0, 1.0]
        assert instance["storeSnapshots"][0] == {
            "identifier": "store-1",
            "variables": [
                {"name": "health", "encodedValues": ["42"]},
                {"name": "tags", "encodedValues": ["a", "b"]},
                {"name": "empty", "encodedValues": []},
            ],
        }
        assert data["save_version"] == "1.0"

    def test_json_parses_back_to_equal_container(self) -> None:
        """Test that to_json output is accepted by from_json."""
        container = _container()

        assert SnapshotContainer.from_json(container.to_json()) == container

    def test_to_json_is_utf8_bytes(self) -> None:
        """Test that non-ASCII values survive encoding."""
        container = SnapshotContainer(
            instances=[
                InstanceSnapshot(
                    "T1",
                    store_snapshots=(StoreSnapshot("s", (VariableSnapshot("label", ("Café ☕",)),)),),
                )
            ]
        )

        payload = container.to_json()

        assert isinstance(payload, bytes)
        restored = SnapshotContainer.from_json(payload)
        assert restored.instances[0].store_snapshots[0].as_mapping() == {"label": ["Café ☕"]}

    def test_store_snapshots_default_to_empty(self) -> None:
        """Test that an instance without stores parses."""
        data = {"instances": [{"templateReference": "T2", "position": [0, 0, 0], "rotation": [0, 0, 0, 1]}]}

        container = SnapshotContainer.from_dict(data)

        assert container.instances[0].store_snapshots == ()
        assert container.instances[0].position == Vector3()


class TestMalformedSnapshots(unittest.TestCase):
    """Test that malformed input is a SnapshotFormatError."""

    def test_invalid_json(self) -> None:
        """Test text that is not JSON."""
        with pytest.raises(SnapshotFormatError, match="not valid JSON"):
            SnapshotContainer.from_json(b"{")

    def test_invalid_utf8(self) -> None:
        """Test bytes that are not UTF-8."""
        with pytest.raises(SnapshotFormatError):
            SnapshotContainer.from_json(b"\xc3\x28")

    def test_root_not_an_object(self) -> None:
        """Test a JSON array at the root."""
        with pytest.raises(SnapshotFormatError, match="JSON object"):
            SnapshotContainer.from_json(b"[]")

    def test_missing_instances(self) -> None:
        """Test an object without instances."""
        with pytest.raises(SnapshotFormatError):
            SnapshotContainer.from_json(b"{}")

    def test_short_position(self) -> None:
        """Test a position with two components."""
        payload = json.dumps(
            {"instances": [{"templateReference": "T1", "position": [1, 2], "rotation": [0, 0, 0, 1]}]}
        )

        with pytest.raises(SnapshotFormatError):
            SnapshotContainer.from_json(payload)

    def test_non_string_encoded_values(self) -> None:
        """Test encoded values that are numbers rather than strings."""
        payload = json.dumps(
            {
                "instances": [
                    {
                        "templateReference": "T1",
                        "position": [0, 0, 0],
                        "rotation": [0, 0, 0, 1],
                        "storeSnapshots": [
                            {"identifier": "s", "variables": [{"name": "health", "encodedValues": [42]}]}
                        ],
                    }
                ]
            }
        )

        with pytest.raises(SnapshotFormatError):
            SnapshotContainer.from_json(payload)
