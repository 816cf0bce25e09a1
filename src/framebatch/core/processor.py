"""Single-item processor: one video in, one outcome out."""

from __future__ import annotations

import logging
import time
from pathlib import Path
from typing import Callable, Sequence

from framebatch.exceptions import ExtractionError
from framebatch.utils.ffmpeg import extract_frames, probe_duration
from framebatch.utils.io import count_frame_files
from framebatch.utils.naming import sanitize_name, unique_names
from framebatch.utils.retry import linear_backoff, retry_with_backoff
from .contracts import ExtractionOptions, ItemFailure, ItemOutcome, ItemSuccess, WorkItem

logger = logging.getLogger(__name__)

Extractor = Callable[[Path, Path, ExtractionOptions], None]
Prober = Callable[[Path], "float | None"]

FALLBACK_DIR_NAME = "untitled"


def item_output_dir(output_root: Path, item: WorkItem) -> Path:
    if item.output_name:
        return Path(output_root) / item.output_name
    return Path(output_root) / (sanitize_name(item.display_name) or FALLBACK_DIR_NAME)


def assign_output_names(items: Sequence[WorkItem]) -> list[WorkItem]:
    """Give every item its own frames directory.

    Items whose display names sanitize to the same directory name get
    ``_2``, ``_3``, ... suffixes in submission order.
    """
    names = [item.output_name or sanitize_name(item.display_name) or FALLBACK_DIR_NAME for item in items]
    assigned = []
    for item, original, unique in zip(items, names, unique_names(names)):
        if unique != original:
            logger.warning(f"{item.display_name}: directory name '{original}' already used, writing to '{unique}'")
        assigned.append(item.model_copy(update={"output_name": unique}))
    return assigned


def _make_dir(path: Path) -> None:
    path.mkdir(parents=True, exist_ok=True)
    # Network mounts can report success before the directory is visible
    if not path.is_dir():
        raise OSError(f"Directory not visible after creation: {path}")


def _probe(prober: Prober, source: Path) -> float | None:
    try:
        return prober(source)
    except Exception as exc:
        logger.debug(f"Duration probe failed for {source}: {exc}")
        return None


def process_item(
    item: WorkItem,
    index: int,
    output_root: Path,
    options: ExtractionOptions,
    *,
    extractor: Extractor = extract_frames,
    prober: Prober = probe_duration,
    sleep: Callable[[float], None] = time.sleep,
    stagger_delay: float = 0.1,
    mkdir_attempts: int = 3,
    mkdir_backoff: float = 0.5,
) -> ItemOutcome:
    """Extract frames for ``item`` into its own subdirectory of ``output_root``.

    ``index`` is the item's position within its batch and only drives the
    staggered start (``index * stagger_delay`` seconds). All errors are
    returned as ``ItemFailure``; nothing is raised.
    """
    output_dir = item_output_dir(output_root, item)
    started = time.monotonic()

    if not options.force:
        existing = count_frame_files(output_dir, options.image_suffix)
        if existing > 0:
            logger.debug(f"{item.display_name}: {existing} frames already in {output_dir}")
            return ItemSuccess(
                display_name=item.display_name,
                output_dir=output_dir,
                cached=True,
                frame_count=existing,
            )

    try:
        retry_with_backoff(
            lambda: _make_dir(output_dir),
            max_attempts=mkdir_attempts,
            backoff=linear_backoff(mkdir_backoff),
            sleep=sleep,
        )
    except OSError as exc:
        return ItemFailure(
            display_name=item.display_name,
            output_dir=output_dir,
            error=f"Failed to create output directory after {mkdir_attempts} attempts: {exc}",
        )

    if index > 0 and stagger_delay > 0:
        sleep(index * stagger_delay)

    duration = _probe(prober, item.source_path)

    try:
        extractor(item.source_path, output_dir, options)
    except ExtractionError as exc:
        return ItemFailure(
            display_name=item.display_name,
            output_dir=output_dir,
            error=str(exc),
            detail=exc.detail,
        )
    except Exception as exc:
        logger.debug(f"Unexpected error processing {item.source_path}", exc_info=True)
        return ItemFailure(
            display_name=item.display_name,
            output_dir=output_dir,
            error=f"{type(exc).__name__}: {exc}",
        )

    return ItemSuccess(
        display_name=item.display_name,
        output_dir=output_dir,
        cached=False,
        frame_count=count_frame_files(output_dir, options.image_suffix),
        elapsed_seconds=time.monotonic() - started,
        duration_seconds=duration,
    )
