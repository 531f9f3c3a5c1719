"""Unit tests for snapshot sinks."""

from pathlib import Path
from unittest.mock import patch

import pytest

from prefabsave.conf import settings
from prefabsave.saves import FileSnapshotSink, MemorySnapshotSink


class TestFileSnapshotSink:
    """Test the file-backed sink."""

    def test_write_then_read(self, tmp_path: Path) -> None:
        """Test that bytes written under a key are read back unchanged."""
        sink = FileSnapshotSink(tmp_path / "saves")

        sink.write("village-Props", b'{"instances": []}')

        assert sink.exists("village-Props")
        assert sink.read("village-Props") == b'{"instances": []}'
        assert (tmp_path / "saves" / "village-Props.json").is_file()

    def test_read_missing_is_none(self, tmp_path: Path) -> None:
        """Test that an unknown key reads as None."""
        sink = FileSnapshotSink(tmp_path)

        assert sink.read("nothing") is None
        assert not sink.exists("nothing")

    def test_overwrite_leaves_no_temp_files(self, tmp_path: Path) -> None:
        """Test that repeated writes replace the file in place."""
        sink = FileSnapshotSink(tmp_path)

        sink.write("slot", b"first")
        sink.write("slot", b"second")

        assert sink.read("slot") == b"second"
        assert [p.name for p in tmp_path.iterdir()] == ["slot.json"]

    def test_failed_write_keeps_previous_save(self, tmp_path: Path) -> None:
        """Test that an interrupted write does not clobber the existing file."""
        sink = FileSnapshotSink(tmp_path)
        sink.write("slot", b"good")

        with patch("prefabsave.saves.sinks.os.fsync", side_effect=OSError("device gone")), pytest.raises(OSError):
            sink.write("slot", b"partial")

        assert sink.read("slot") == b"good"
        assert [p.name for p in tmp_path.iterdir()] == ["slot.json"]

    def test_delete(self, tmp_path: Path) -> None:
        """Test deleting existing and missing saves."""
        sink = FileSnapshotSink(tmp_path)
        sink.write("slot", b"data")

        assert sink.delete("slot") is True
        assert sink.delete("slot") is False
        assert not sink.exists("slot")

    @pytest.mark.parametrize("key", ["", ".", "..", "../escape", "a/b", "a\\b"])
    def test_invalid_keys_are_rejected(self, tmp_path: Path, key: str) -> None:
        """Test that keys cannot address files outside the saves directory."""
        sink = FileSnapshotSink(tmp_path)

        with pytest.raises(ValueError, match="Invalid save key"):
            sink.write(key, b"data")

    def test_defaults_come_from_settings(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test that the directory and extension follow settings."""
        monkeypatch.chdir(tmp_path)
        settings.configure(SAVES_DIR="slots", SAVE_FILE_EXTENSION=".sav")

        sink = FileSnapshotSink()

        assert sink.path_for("one") == tmp_path / "slots" / "one.sav"


class TestMemorySnapshotSink:
    """Test the in-memory sink."""

    def test_round_trip_and_delete(self) -> None:
        """Test write, read, exists and delete."""
        sink = MemorySnapshotSink()

        assert sink.read("k") is None
        sink.write("k", bytearray(b"abc"))

        assert sink.exists("k")
        assert sink.read("k") == b"abc"
        assert isinstance(sink.read("k"), bytes)
        assert sink.delete("k") is True
        assert sink.delete("k") is False
