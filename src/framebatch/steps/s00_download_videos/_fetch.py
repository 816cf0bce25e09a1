"""URL fetching: direct HTTP downloads and yt-dlp for hosting sites."""

from __future__ import annotations

import hashlib
import logging
import subprocess
from dataclasses import dataclass
from pathlib import Path, PurePosixPath
from urllib.parse import urlparse

import requests

from framebatch.exceptions import FetchError
from framebatch.utils.naming import sanitize_name
from framebatch.utils.subprocess_utils import run_command, tool_available

logger = logging.getLogger(__name__)

YTDLP = "yt-dlp"
VIDEO_URL_EXTENSIONS = (".mp4", ".avi", ".mkv", ".mov", ".wmv", ".flv", ".webm", ".m4v", ".mpeg", ".mpg")


@dataclass(frozen=True)
class FetchResult:
    path: Path
    name: str
    cached: bool = False


def ytdlp_available() -> bool:
    return tool_available(YTDLP, "--version")


def is_direct_video_url(url: str) -> bool:
    """True when the URL path ends in a video file extension."""
    return urlparse(url).path.lower().endswith(VIDEO_URL_EXTENSIONS)


def filename_from_url(url: str) -> str:
    """Stable local base name for ``url``: the sanitized path stem, else a hash."""
    basename = PurePosixPath(urlparse(url).path).name
    if "." in basename:
        name = sanitize_name(PurePosixPath(basename).stem)
        if name:
            return name
    return f"video_{hashlib.sha1(url.encode('utf-8')).hexdigest()[:10]}"


def download_direct(url: str, output_path: Path, timeout: float = 60.0) -> Path:
    """Stream ``url`` to ``output_path`` following redirects.

    The body goes to a ``.part`` file first so an interrupted download is
    never mistaken for a finished one.
    """
    partial = output_path.with_name(output_path.name + ".part")
    try:
        with requests.get(url, stream=True, timeout=timeout) as response:
            response.raise_for_status()
            with open(partial, "wb") as f:
                for chunk in response.iter_content(chunk_size=65536):
                    if chunk:
                        f.write(chunk)
        partial.replace(output_path)
    except (requests.RequestException, OSError) as exc:
        partial.unlink(missing_ok=True)
        raise FetchError(f"Download failed: {exc}") from exc
    return output_path


def download_with_ytdlp(url: str, output_path: Path, fmt: str = "best[ext=mp4]/best",
                        timeout: float = 60.0) -> Path:
    """Download ``url`` with yt-dlp and return the file it actually wrote."""
    cmd = [
        YTDLP,
        "-f", fmt,
        "-o", str(output_path),
        "--no-playlist",
        "--no-warnings",
        "--socket-timeout", str(int(timeout)),
        url,
    ]
    try:
        result = run_command(cmd, check=False)
    except OSError as exc:
        raise FetchError(f"Failed to run yt-dlp: {exc}") from exc
    if result.returncode != 0:
        stderr = (result.stderr or "").strip() or "Unknown error"
        raise FetchError(f"yt-dlp failed: {stderr.splitlines()[-1]}")

    # yt-dlp may change the extension
    if output_path.exists():
        return output_path
    candidates = sorted(
        p for p in output_path.parent.iterdir()
        if p.stem == output_path.stem and p.suffix != ".part"
    )
    return candidates[0] if candidates else output_path


def fetch(
    url: str,
    dest_dir: Path,
    *,
    timeout: float = 60.0,
    has_ytdlp: bool | None = None,
    ytdlp_format: str = "best[ext=mp4]/best",
    name: str | None = None,
) -> FetchResult:
    """Fetch ``url`` into ``dest_dir``; an existing file counts as cached.

    ``name`` overrides the local base name derived from the URL.

    Raises:
        FetchError: the download failed or needs yt-dlp and it is missing.
    """
    name = name or filename_from_url(url)
    output_path = Path(dest_dir) / f"{name}.mp4"
    if output_path.exists():
        return FetchResult(path=output_path, name=name, cached=True)

    if is_direct_video_url(url):
        return FetchResult(path=download_direct(url, output_path, timeout), name=name)

    if has_ytdlp is None:
        has_ytdlp = ytdlp_available()
    if not has_ytdlp:
        raise FetchError("yt-dlp is required for non-direct video URLs")

    try:
        downloaded = download_with_ytdlp(url, output_path, ytdlp_format, timeout)
    except subprocess.SubprocessError as exc:
        raise FetchError(f"yt-dlp failed: {exc}") from exc
    return FetchResult(path=downloaded, name=sanitize_name(downloaded.stem) or name)
