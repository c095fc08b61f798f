"""Tests for FFmpeg binary discovery."""

import logging
import pytest
from unittest.mock import Mock, patch

from portrait_batch.ffmpeg_binary import (
    FFmpegConfig,
    _get_ffmpeg_from_imageio,
    _get_ffmpeg_version,
    get_ffmpeg_info,
    get_ffmpeg_path,
    verify_ffmpeg,
)

MODULE = "portrait_batch.ffmpeg_binary"


class TestGetFFmpegPath:
    """Tests for get_ffmpeg_path."""

    def test_custom_path(self, tmp_path):
        """Test that an existing custom path wins."""
        custom = tmp_path / "ffmpeg"
        custom.touch()

        with patch(f"{MODULE}._get_system_ffmpeg", return_value="/usr/bin/ffmpeg"):
            path = get_ffmpeg_path(FFmpegConfig(custom_ffmpeg_path=str(custom)))

        assert path == str(custom)

    def test_missing_custom_path_ignored(self, tmp_path, caplog):
        """Test that a custom path that does not exist is skipped with a warning."""
        caplog.set_level(logging.WARNING, logger="portrait_batch")

        with patch(f"{MODULE}._get_system_ffmpeg", return_value="/usr/bin/ffmpeg"):
            path = get_ffmpeg_path(FFmpegConfig(custom_ffmpeg_path=str(tmp_path / "nope")))

        assert path == "/usr/bin/ffmpeg"
        warnings = [r for r in caplog.records if r.levelno == logging.WARNING]
        assert len(warnings) == 1
        assert str(tmp_path / "nope") in warnings[0].getMessage()

    def test_system_preferred_by_default(self):
        """Test default lookup order."""
        with patch(f"{MODULE}._get_system_ffmpeg", return_value="/usr/bin/ffmpeg"), \
             patch(f"{MODULE}._get_ffmpeg_from_imageio", return_value="/site/imageio/ffmpeg"):
            assert get_ffmpeg_path() == "/usr/bin/ffmpeg"

    def test_imageio_fallback(self):
        """Test falling back to the imageio-ffmpeg binary."""
        with patch(f"{MODULE}._get_system_ffmpeg", return_value=None), \
             patch(f"{MODULE}._get_ffmpeg_from_imageio", return_value="/site/imageio/ffmpeg"):
            assert get_ffmpeg_path() == "/site/imageio/ffmpeg"

    def test_imageio_preferred(self):
        """Test preferring the bundled binary."""
        with patch(f"{MODULE}._get_system_ffmpeg", return_value="/usr/bin/ffmpeg"), \
             patch(f"{MODULE}._get_ffmpeg_from_imageio", return_value="/site/imageio/ffmpeg"):
            path = get_ffmpeg_path(FFmpegConfig(prefer_system=False))

        assert path == "/site/imageio/ffmpeg"

    def test_not_found(self):
        """Test when nothing is available."""
        with patch(f"{MODULE}._get_system_ffmpeg", return_value=None), \
             patch(f"{MODULE}._get_ffmpeg_from_imageio", return_value=None):
            assert get_ffmpeg_path() is None


class TestImageioLookup:
    """Tests for the imageio-ffmpeg lookup."""

    def test_runtime_error(self):
        """Test a wheel without a bundled binary."""
        with patch(f"{MODULE}.imageio_ffmpeg.get_ffmpeg_exe", side_effect=RuntimeError("no binary")):
            assert _get_ffmpeg_from_imageio() is None

    def test_found(self):
        """Test a bundled binary."""
        with patch(f"{MODULE}.imageio_ffmpeg.get_ffmpeg_exe", return_value="/site/ffmpeg-linux64"):
            assert _get_ffmpeg_from_imageio() == "/site/ffmpeg-linux64"


class TestVersion:
    """Tests for version detection."""

    @patch(f"{MODULE}.subprocess.run")
    def test_parse_version(self, mock_run):
        """Test parsing the first line of 'ffmpeg -version'."""
        mock_run.return_value = Mock(
            returncode=0,
            stdout="ffmpeg version 6.1.1-3ubuntu5 Copyright (c) 2000-2023\nbuilt with gcc\n",
        )

        assert _get_ffmpeg_version("ffmpeg") == "6.1.1-3ubuntu5"

    @patch(f"{MODULE}.subprocess.run")
    def test_non_zero(self, mock_run):
        """Test a failing binary."""
        mock_run.return_value = Mock(returncode=1, stdout="")
        assert _get_ffmpeg_version("ffmpeg") is None

    @patch(f"{MODULE}.subprocess.run")
    def test_os_error(self, mock_run):
        """Test a binary that cannot be executed."""
        mock_run.side_effect = PermissionError(13, "Permission denied")
        assert _get_ffmpeg_version("ffmpeg") is None


class TestInfoAndVerify:
    """Tests for get_ffmpeg_info and verify_ffmpeg."""

    def test_info_available(self):
        """Test info for a located binary."""
        with patch(f"{MODULE}._locate", return_value=("/usr/bin/ffmpeg", "system")), \
             patch(f"{MODULE}._get_ffmpeg_version", return_value="6.1"):
            info = get_ffmpeg_info()

        assert info.available is True
        assert info.path == "/usr/bin/ffmpeg"
        assert info.version == "6.1"
        assert info.source == "system"

    def test_info_missing(self):
        """Test info when nothing is found."""
        with patch(f"{MODULE}._locate", return_value=(None, "not_found")):
            info = get_ffmpeg_info()

        assert info.available is False
        assert info.source == "not_found"

    def test_verify_ok(self):
        """Test a working binary."""
        with patch(f"{MODULE}._locate", return_value=("/usr/bin/ffmpeg", "system")), \
             patch(f"{MODULE}._get_ffmpeg_version", return_value="6.1"):
            ok, message = verify_ffmpeg()

        assert ok is True
        assert "6.1" in message

    def test_verify_broken_binary(self):
        """Test a binary that does not answer -version."""
        with patch(f"{MODULE}._locate", return_value=("/usr/bin/ffmpeg", "system")), \
             patch(f"{MODULE}._get_ffmpeg_version", return_value=None):
            ok, message = verify_ffmpeg()

        assert ok is False
        assert "/usr/bin/ffmpeg" in message

    def test_verify_missing(self):
        """Test when no binary is found."""
        with patch(f"{MODULE}._locate", return_value=(None, "not_found")):
            ok, message = verify_ffmpeg()

        assert ok is False
        assert "not found" in message
