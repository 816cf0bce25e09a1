"""Frame file listing and size formatting."""

from __future__ import annotations

from pathlib import Path

IMAGE_MIME_TYPES = {
    ".png": "image/png",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".webp": "image/webp",
    ".bmp": "image/bmp",
    ".tif": "image/tiff",
    ".tiff": "image/tiff",
}


def list_frame_files(directory: Path, suffix: str = ".png") -> list[Path]:
    """Sorted image files with ``suffix`` directly inside ``directory``.

    A missing directory yields an empty list.
    """
    suffix = suffix.lower()
    try:
        entries = list(directory.iterdir())
    except (FileNotFoundError, NotADirectoryError):
        return []
    return sorted(p for p in entries if p.is_file() and p.suffix.lower() == suffix)


def list_image_files(directory: Path) -> list[Path]:
    """Sorted files of any known image type directly inside ``directory``."""
    try:
        entries = list(directory.iterdir())
    except (FileNotFoundError, NotADirectoryError):
        return []
    return sorted(p for p in entries if p.is_file() and p.suffix.lower() in IMAGE_MIME_TYPES)


def count_frame_files(directory: Path, suffix: str = ".png") -> int:
    return len(list_frame_files(directory, suffix))


def mime_type_for(path: Path) -> str:
    return IMAGE_MIME_TYPES.get(path.suffix.lower(), "application/octet-stream")


def format_file_size(num_bytes: int) -> str:
    size = float(num_bytes)
    for unit in ("B", "KB", "MB"):
        if size < 1024:
            return f"{size:.2f} {unit}"
        size /= 1024
    return f"{size:.2f} GB"
