"""ffmpeg / ffprobe invocations used by the frame extraction step."""

from __future__ import annotations

import logging
import subprocess
from pathlib import Path
from typing import TYPE_CHECKING

from framebatch.exceptions import ExtractionError
from framebatch.utils.subprocess_utils import run_command, tool_available
from framebatch.utils.time_utils import format_seconds_arg

if TYPE_CHECKING:
    from framebatch.core.contracts import ExtractionOptions

logger = logging.getLogger(__name__)

FFMPEG = "ffmpeg"
FFPROBE = "ffprobe"


def ffmpeg_available() -> bool:
    return tool_available(FFMPEG, "-version")


def build_extract_command(source: Path, output_dir: Path, options: ExtractionOptions) -> list[str]:
    """Build the ffmpeg argument list for one video.

    Both time bounds are input options so ``end_time`` is an absolute
    position in the source, not a duration from ``start_time``.
    """
    cmd = [FFMPEG, "-hide_banner", "-nostdin"]
    if options.start_time is not None:
        cmd += ["-ss", format_seconds_arg(options.start_time)]
    if options.end_time is not None:
        cmd += ["-to", format_seconds_arg(options.end_time)]
    cmd += ["-i", str(source)]
    if options.fps is not None:
        cmd += ["-vf", f"fps={options.fps:g}"]
    cmd += [
        "-compression_level", str(options.quality),
        "-pix_fmt", "rgb24",
        str(output_dir / options.filename_pattern),
        "-y",
    ]
    return cmd


def extract_frames(source: Path, output_dir: Path, options: ExtractionOptions) -> None:
    """Write frames of ``source`` into ``output_dir``.

    Raises:
        ExtractionError: ffmpeg could not be started or exited nonzero;
            ``detail`` carries its stderr.
    """
    cmd = build_extract_command(source, output_dir, options)
    if options.verbose:
        logger.info(f"Command: {' '.join(cmd)}")
    try:
        result = run_command(cmd, check=False)
    except OSError as exc:
        raise ExtractionError(f"Failed to start ffmpeg: {exc}") from exc

    if result.returncode != 0:
        stderr = (result.stderr or "").strip()
        last_line = stderr.splitlines()[-1] if stderr else "no diagnostic output"
        raise ExtractionError(
            f"ffmpeg exited with code {result.returncode}: {last_line}",
            detail=stderr,
        )


def probe_duration(source: Path) -> float | None:
    """Return the container duration in seconds, or None if unknown."""
    cmd = [
        FFPROBE,
        "-v", "error",
        "-show_entries", "format=duration",
        "-of", "csv=p=0",
        str(source),
    ]
    try:
        result = run_command(cmd, timeout=60, check=False)
    except (OSError, subprocess.TimeoutExpired) as exc:
        logger.debug(f"ffprobe failed for {source}: {exc}")
        return None
    output = (result.stdout or "").strip()
    if result.returncode != 0 or not output:
        return None
    try:
        return float(output)
    except ValueError:
        return None
