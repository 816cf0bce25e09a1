"""Shared pytest fixtures for framebatch tests."""

import subprocess
import threading
from pathlib import Path
from unittest.mock import patch

import pytest

from framebatch.core.contracts import WorkItem


@pytest.fixture
def output_root(tmp_path: Path) -> Path:
    """Directory that receives one frames folder per video."""
    root = tmp_path / "frames"
    root.mkdir()
    return root


@pytest.fixture
def videos_dir(tmp_path: Path) -> Path:
    root = tmp_path / "videos"
    root.mkdir()
    return root


@pytest.fixture
def make_item(videos_dir: Path):
    """Create a placeholder video file and return its WorkItem."""

    def _make(name: str = "clip", suffix: str = ".mp4") -> WorkItem:
        path = videos_dir / f"{name}{suffix}"
        path.write_bytes(b"\x00" * 16)
        return WorkItem(source_path=path, display_name=name, size_bytes=16)

    return _make


@pytest.fixture
def write_frames():
    """Write ``count`` fake PNG frames into a directory."""

    def _write(directory: Path, count: int, pattern: str = "frame_%06d.png") -> list[Path]:
        directory.mkdir(parents=True, exist_ok=True)
        paths = []
        for i in range(1, count + 1):
            path = directory / (pattern % i)
            path.write_bytes(b"\x89PNG")
            paths.append(path)
        return paths

    return _write


def _completed(cmd, returncode=0, stdout="", stderr=""):
    return subprocess.CompletedProcess(cmd, returncode, stdout=stdout, stderr=stderr)


@pytest.fixture
def fake_ffmpeg():
    """Patch ffmpeg/ffprobe so every extraction writes two frames and probes 3s."""

    def _run(cmd, cwd=None, timeout=None, check=True):
        if cmd[0] == "ffprobe":
            return _completed(cmd, stdout="3.0\n")
        pattern = cmd[-2]
        for i in (1, 2):
            Path(pattern % i).write_bytes(b"\x89PNG")
        return _completed(cmd)

    with patch("framebatch.utils.ffmpeg.run_command", side_effect=_run) as mock_run, \
         patch("framebatch.utils.ffmpeg.tool_available", return_value=True):
        yield mock_run


@pytest.fixture
def failing_ffmpeg():
    """Patch ffmpeg so every extraction exits nonzero."""

    def _run(cmd, cwd=None, timeout=None, check=True):
        if cmd[0] == "ffprobe":
            return _completed(cmd, returncode=1)
        return _completed(cmd, returncode=1, stderr="Input #0\nmoov atom not found")

    with patch("framebatch.utils.ffmpeg.run_command", side_effect=_run) as mock_run, \
         patch("framebatch.utils.ffmpeg.tool_available", return_value=True):
        yield mock_run


class FakeStorage:
    """In-memory RemoteStorage; files named in ``fail_names`` fail to upload."""

    def __init__(self, fail_names=(), folder_error: Exception | None = None):
        self.fail_names = set(fail_names)
        self.folder_error = folder_error
        self.folders: dict[tuple[str, str | None], str] = {}
        self.uploads: list[tuple[str, str, str]] = []
        self._lock = threading.Lock()

    def get_or_create_folder(self, name: str, parent_id: str | None) -> str:
        if self.folder_error is not None:
            raise self.folder_error
        with self._lock:
            return self.folders.setdefault((name, parent_id), f"folder-{name}")

    def upload(self, local_file: Path, folder_id: str, mime_type: str) -> str:
        if local_file.name in self.fail_names:
            raise RuntimeError("quota exceeded")
        with self._lock:
            self.uploads.append((local_file.name, folder_id, mime_type))
        return f"file-{local_file.name}"


@pytest.fixture
def fake_storage():
    """Factory for FakeStorage instances."""
    return FakeStorage
