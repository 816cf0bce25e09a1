"""Safe subprocess runner for external tools (ffmpeg, ffprobe, yt-dlp)."""

from __future__ import annotations

import logging
import shutil
import subprocess
from pathlib import Path

logger = logging.getLogger(__name__)


def run_command(
    cmd: list[str],
    cwd: Path | None = None,
    timeout: float | None = None,
    check: bool = True,
) -> subprocess.CompletedProcess:
    """Run an external command with logging and error handling.

    ``timeout=None`` waits for the process however long it takes.
    """
    cmd_str = " ".join(cmd)
    logger.debug(f"Running: {cmd_str}")

    result = subprocess.run(
        cmd,
        cwd=cwd,
        capture_output=True,
        text=True,
        errors="replace",
        stdin=subprocess.DEVNULL,
        timeout=timeout,
        check=False,
    )

    if result.stdout:
        logger.debug(f"stdout: {result.stdout[-500:]}")
    if result.stderr:
        logger.debug(f"stderr: {result.stderr[-500:]}")

    if check and result.returncode != 0:
        raise subprocess.CalledProcessError(
            result.returncode, cmd_str, result.stdout, result.stderr
        )
    return result


def tool_available(name: str, version_flag: str = "-version") -> bool:
    """Return True if ``name`` is on PATH and answers its version flag."""
    if shutil.which(name) is None:
        return False
    try:
        result = run_command([name, version_flag], timeout=30, check=False)
    except (OSError, subprocess.TimeoutExpired):
        return False
    return result.returncode == 0
