"""Work discovery: local video scan and URL list parsing."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Iterable

from framebatch.exceptions import InputNotFoundError, NotADirectoryPreconditionError
from .contracts import WorkItem

logger = logging.getLogger(__name__)

DEFAULT_EXTENSIONS = "mp4,avi,mkv,mov,wmv,flv,webm,m4v,mpeg,mpg"


def parse_extensions(value: str | Iterable[str]) -> set[str]:
    """Normalize 'mp4, .MKV' or ['mp4', 'mkv'] to {'mp4', 'mkv'}."""
    parts = value.split(",") if isinstance(value, str) else value
    return {p.strip().lower().lstrip(".") for p in parts if p.strip()}


def scan_videos(root_dir: Path, allowed_extensions: Iterable[str]) -> list[WorkItem]:
    """Recursively collect videos under ``root_dir``.

    Items come back in traversal order; callers must not treat the order
    as a priority.

    Raises:
        InputNotFoundError: ``root_dir`` does not exist.
        NotADirectoryPreconditionError: ``root_dir`` is not a directory.
    """
    root_dir = Path(root_dir)
    if not root_dir.exists():
        raise InputNotFoundError(f"Input directory does not exist: {root_dir}")
    if not root_dir.is_dir():
        raise NotADirectoryPreconditionError(f"Input path is not a directory: {root_dir}")

    allowed = parse_extensions(allowed_extensions)
    items: list[WorkItem] = []
    for dirpath, _dirnames, filenames in os.walk(root_dir):
        for filename in filenames:
            path = Path(dirpath) / filename
            ext = path.suffix.lower().lstrip(".")
            if ext not in allowed or not path.is_file():
                continue
            items.append(
                WorkItem(
                    source_path=path.resolve(),
                    display_name=path.stem,
                    size_bytes=path.stat().st_size,
                )
            )

    logger.info(f"Found {len(items)} video(s) under {root_dir}")
    return items


def parse_url_list(path: Path) -> list[str]:
    """Read URLs from a text file, one per line.

    Blank lines and lines starting with '#' are ignored, as is anything
    that is not http:// or https://. No further validation happens here.
    """
    path = Path(path)
    if not path.is_file():
        raise InputNotFoundError(f"URL file not found: {path}")

    urls = []
    for line in path.read_text(encoding="utf-8-sig").splitlines():
        line = line.strip()
        if not line or line.startswith("#"):
            continue
        if line.startswith(("http://", "https://")):
            urls.append(line)
        else:
            logger.debug(f"Skipping non-http line: {line}")
    return urls
