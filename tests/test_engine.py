"""Unit tests for GraphPersistenceEngine."""

import json
import unittest
from unittest.mock import MagicMock

import pytest
from store_fixtures import HealthStore, build_barrel, build_crate

from prefabsave.conf import settings
from prefabsave.events import ContainerLoadedEvent, ContainerSavedEvent, EventBus, OrphanSnapshotEvent
from prefabsave.exceptions import PersistenceBusyError, SnapshotFormatError, TemplateResolutionError
from prefabsave.saves import GraphPersistenceEngine, MemorySnapshotSink, SnapshotContainer
from prefabsave.scene import Node, NodeSceneHost
from prefabsave.templates import TemplateLibrary
from prefabsave.types import Vector3

KEY = "village-Props"


def _spawn(library: TemplateLibrary, container: Node, reference: str) -> Node:
    template = library.resolve(reference)
    assert template is not None
    return container.add_child(template.instantiate())


def test_two_instances_then_missing_template_leaves_one_child(host: NodeSceneHost, library: TemplateLibrary) -> None:
    """Test that a load aborted on instance 2 keeps instance 1 in the container."""
    sink = MemorySnapshotSink()
    engine = GraphPersistenceEngine(host, library, sink)
    level = Node("Props")
    crate = _spawn(library, level, "T1")
    _spawn(library, level, "T2")
    crate.get_component(HealthStore).set("health", 3)

    snapshot = engine.save_all(level, KEY)

    assert [i.template_reference for i in snapshot.instances] == ["T1", "T2"]

    library.unregister("T2")
    with pytest.raises(TemplateResolutionError) as excinfo:
        engine.load_all(level, KEY)

    assert excinfo.value.template_reference == "T2"
    assert excinfo.value.index == 1
    assert len(level.children) == 1
    restored = level.children[0]
    assert restored is not crate
    assert restored.template_reference == "T1"
    assert restored.get_component(HealthStore).get("health") == 3
    assert crate.destroyed
    assert not engine.busy


class TestSaveAll(unittest.TestCase):
    """Test capturing and writing a container."""

    def setUp(self) -> None:
        """Create an engine over a memory sink and a populated container."""
        self.library = TemplateLibrary()
        self.library.register_factory("T1", build_crate)
        self.library.register_factory("T2", build_barrel)
        self.sink = MemorySnapshotSink()
        self.event_bus = EventBus()
        self.engine = GraphPersistenceEngine(NodeSceneHost(), self.library, self.sink, self.event_bus)
        self.level = Node("Props")
        _spawn(self.library, self.level, "T1")
        _spawn(self.library, self.level, "T2")

    def test_single_write_of_whole_container(self) -> None:
        """Test that the container is written once, as JSON, under the key."""
        sink = MagicMock(wraps=self.sink)
        engine = GraphPersistenceEngine(NodeSceneHost(), self.library, sink)

        engine.save_all(self.level, KEY)

        sink.write.assert_called_once()
        data = json.loads(self.sink.blobs[KEY])
        assert [i["templateReference"] for i in data["instances"]] == ["T1", "T2"]
        assert data["save_version"] == "1.0"
        assert data["save_timestamp"] > 0

    def test_children_without_reference_are_skipped(self) -> None:
        """Test that only template instances are captured."""
        self.level.add_child(Node("Decoration"))

        snapshot = self.engine.save_all(self.level, KEY)

        assert len(snapshot.instances) == 2

    def test_nested_instances_are_part_of_their_parent(self) -> None:
        """Test that only immediate children count as instances."""
        crate = self.level.children[0]
        _spawn(self.library, crate, "T2")

        snapshot = self.engine.save_all(self.level, KEY)

        assert len(snapshot.instances) == 2
        assert [s.identifier for s in snapshot.instances[0].store_snapshots] == [
            "crate-body",
            "crate-lid",
            "barrel-store",
        ]

    def test_publishes_saved_event(self) -> None:
        """Test that a ContainerSavedEvent is published."""
        events: list[ContainerSavedEvent] = []
        self.event_bus.subscribe(ContainerSavedEvent, events.append)

        self.engine.save_all(self.level, KEY)

        assert events == [ContainerSavedEvent(key=KEY, instance_count=2)]

    def test_sink_failure_propagates_and_releases_guard(self) -> None:
        """Test that a write error reaches the caller and the engine is usable again."""
        sink = MagicMock()
        sink.write.side_effect = OSError("disk full")
        engine = GraphPersistenceEngine(NodeSceneHost(), self.library, sink)

        with pytest.raises(OSError, match="disk full"):
            engine.save_all(self.level, KEY)

        assert not engine.busy

    def test_uses_configured_indent(self) -> None:
        """Test that JSON_INDENT controls formatting."""
        settings.configure(JSON_INDENT=None)

        self.engine.save_all(self.level, KEY)

        assert b"\n" not in self.sink.blobs[KEY]


class TestLoadAll(unittest.TestCase):
    """Test reading and rebuilding a container."""

    def setUp(self) -> None:
        """Create an engine and save a populated container."""
        self.library = TemplateLibrary()
        self.library.register_factory("T1", build_crate)
        self.library.register_factory("T2", build_barrel)
        self.sink = MemorySnapshotSink()
        self.event_bus = EventBus()
        self.engine = GraphPersistenceEngine(NodeSceneHost(), self.library, self.sink, self.event_bus)
        self.level = Node("Props")
        crate = _spawn(self.library, self.level, "T1")
        crate.position = Vector3(2.0, 0.0, -1.0)
        crate.get_component(HealthStore).set("health", 12)
        barrel = _spawn(self.library, self.level, "T2")
        barrel.get_component(HealthStore).set_list("tags", ["explosive"])

    def test_nothing_saved_leaves_container_alone(self) -> None:
        """Test that a missing snapshot is a no-op rather than clearing the container."""
        before = list(self.level.children)

        report = self.engine.load_all(self.level, KEY)

        assert report.performed is False
        assert self.level.children == before

    def test_round_trip_replaces_children(self) -> None:
        """Test that loading rebuilds every saved instance in order."""
        self.engine.save_all(self.level, KEY)
        old = list(self.level.children)
        self.level.children[0].get_component(HealthStore).set("health", 99)
        _spawn(self.library, self.level, "T2")

        report = self.engine.load_all(self.level, KEY)

        assert report.performed
        assert report.complete
        assert all(node.destroyed for node in old)
        assert [c.template_reference for c in self.level.children] == ["T1", "T2"]
        crate, barrel = self.level.children
        assert crate.position == Vector3(2.0, 0.0, -1.0)
        assert crate.get_component(HealthStore).get("health") == 12
        assert barrel.get_component(HealthStore).get_list("tags") == ["explosive"]

    def test_empty_container_round_trip(self) -> None:
        """Test that an empty saved container clears the current children."""
        empty = Node("Empty")
        self.engine.save_all(empty, KEY)

        report = self.engine.load_all(self.level, KEY)

        assert report.performed
        assert report.instances == []
        assert self.level.children == []

    def test_corrupt_payload_leaves_container_alone(self) -> None:
        """Test that a malformed snapshot is rejected before anything is destroyed."""
        self.sink.write(KEY, b"{not json")
        before = list(self.level.children)

        with pytest.raises(SnapshotFormatError):
            self.engine.load_all(self.level, KEY)

        assert self.level.children == before
        assert not any(node.destroyed for node in before)

    def test_missing_fields_are_format_errors(self) -> None:
        """Test that structurally wrong JSON is a SnapshotFormatError."""
        self.sink.write(KEY, b'{"instances": [{"position": [0, 0, 0]}]}')

        with pytest.raises(SnapshotFormatError):
            self.engine.load_all(self.level, KEY)

    def test_orphans_are_reported_not_fatal(self) -> None:
        """Test that a template that lost a store still loads the rest."""
        self.engine.save_all(self.level, KEY)
        self.library.register_factory("T1", lambda: build_crate(lid_identifier="renamed"))
        orphans: list[OrphanSnapshotEvent] = []
        self.event_bus.subscribe(OrphanSnapshotEvent, orphans.append)

        report = self.engine.load_all(self.level, KEY)

        assert not report.complete
        assert [e.identifier for e in report.errors] == ["crate-lid"]
        assert [e.identifier for e in orphans] == ["crate-lid"]
        assert len(self.level.children) == 2

    def test_publishes_loaded_event(self) -> None:
        """Test that a ContainerLoadedEvent is published."""
        self.engine.save_all(self.level, KEY)
        events: list[ContainerLoadedEvent] = []
        self.event_bus.subscribe(ContainerLoadedEvent, events.append)

        self.engine.load_all(self.level, KEY)

        assert events == [ContainerLoadedEvent(key=KEY, instance_count=2, complete=True)]

    def test_save_during_load_is_refused(self) -> None:
        """Test that a save started from inside a load is rejected."""
        self.engine.save_all(self.level, KEY)
        seen: list[type[Exception]] = []

        def save_again(_event: OrphanSnapshotEvent) -> None:
            assert self.engine.busy
            try:
                self.engine.save_all(self.level, "other")
            except PersistenceBusyError as e:
                seen.append(type(e))

        self.library.register_factory("T2", lambda: Node("Hollow barrel"))
        self.event_bus.subscribe(OrphanSnapshotEvent, save_again)

        self.engine.load_all(self.level, KEY)

        assert seen == [PersistenceBusyError]
        assert "other" not in self.sink.blobs
        assert not self.engine.busy

    def test_saved_container_parses(self) -> None:
        """Test that what save_all writes is what load_all reads."""
        written = self.engine.save_all(self.level, KEY)

        parsed = SnapshotContainer.from_json(self.sink.blobs[KEY])

        assert parsed == written

    def test_host_returning_live_children_destroys_all(self) -> None:
        """Test that every old child is destroyed when the host hands out its own child list."""

        class LiveChildrenHost(NodeSceneHost):
            def children(self, node: Node) -> list[Node]:
                return node.children

        engine = GraphPersistenceEngine(LiveChildrenHost(), self.library, self.sink)
        engine.save_all(self.level, KEY)
        extras = [_spawn(self.library, self.level, "T2") for _ in range(3)]
        old = list(self.level.children)

        engine.load_all(self.level, KEY)

        assert len(self.level.children) == 2
        assert all(node.destroyed for node in old)
        assert not any(node in self.level.children for node in extras)
