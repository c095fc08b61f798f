"""Tests for atomic report writes."""

import json
import pytest
from unittest.mock import patch

from portrait_batch.storage import StorageError, atomic_write, atomic_write_json


class TestAtomicWrite:
    """Tests for atomic_write."""

    def test_write_creates_parent(self, tmp_path):
        """Test writing into a missing directory."""
        target = tmp_path / "reports" / "run.json"

        atomic_write(target, "data")

        assert target.read_text() == "data"

    def test_overwrite(self, tmp_path):
        """Test replacing an existing file."""
        target = tmp_path / "run.json"
        target.write_text("old")

        atomic_write(target, "new")

        assert target.read_text() == "new"

    def test_no_temp_files_left(self, tmp_path):
        """Test that a failed rename cleans up."""
        target = tmp_path / "run.json"

        with patch("portrait_batch.storage.os.replace", side_effect=OSError("disk full")):
            with pytest.raises(StorageError):
                atomic_write(target, "data")

        assert list(tmp_path.iterdir()) == []


class TestAtomicWriteJson:
    """Tests for atomic_write_json."""

    def test_round_trip(self, tmp_path):
        """Test JSON output, including non-JSON types."""
        target = tmp_path / "run.json"

        atomic_write_json(target, {"path": tmp_path, "count": 2})

        data = json.loads(target.read_text())
        assert data == {"path": str(tmp_path), "count": 2}
