"""Batch scheduler: fixed-size concurrent chunks separated by barriers.

Chunk N+1 is dispatched only after every item of chunk N has settled, so
at most ``concurrency`` items are ever in flight. Failures are isolated per
item and folded into ``BatchTotals`` like any other outcome.
"""

from __future__ import annotations

import logging
import os
import time
from concurrent.futures import ThreadPoolExecutor, as_completed
from pathlib import Path
from typing import Callable, Iterator, Sequence, TypeVar

from .contracts import BatchResult, BatchTotals, ExtractionOptions, ItemFailure, ItemOutcome, WorkItem
from .processor import assign_output_names, item_output_dir, process_item

T = TypeVar("T")
R = TypeVar("R")

logger = logging.getLogger(__name__)


def default_concurrency(cpu_count: int | None = None) -> int:
    cpus = cpu_count if cpu_count is not None else (os.cpu_count() or 1)
    return max(1, cpus // 2)


def resolve_concurrency(
    requested: str | int | None,
    item_count: int,
    cpu_count: int | None = None,
) -> int:
    """Turn 'auto' or a number into a worker count in [1, item_count].

    Zero and non-numeric values fall back to the auto default of half the
    available CPUs. Negative numbers clamp to 1.
    """
    auto = default_concurrency(cpu_count)
    if requested is None or str(requested).strip().lower() == "auto":
        wanted = auto
    else:
        try:
            wanted = int(str(requested).strip())
        except ValueError:
            logger.warning(f"Invalid concurrency {requested!r}, using auto ({auto})")
            wanted = auto
        if wanted == 0:
            wanted = auto
    return max(1, min(wanted, item_count))


def iter_chunks(items: Sequence[T], size: int) -> Iterator[Sequence[T]]:
    """Contiguous slices of ``size`` items; the last one may be shorter."""
    if size < 1:
        raise ValueError("chunk size must be >= 1")
    for start in range(0, len(items), size):
        yield items[start:start + size]


def run_chunked(
    items: Sequence[T],
    fn: Callable[[T, int], R],
    size: int,
    *,
    on_error: Callable[[T, BaseException], R] | None = None,
    on_result: Callable[[R], None] | None = None,
    label: str = "Batch",
) -> list[R]:
    """Apply ``fn(item, index_in_chunk)`` to every item, one chunk at a time.

    Results are returned in submission order. ``on_result`` sees them in
    completion order within each chunk. Without ``on_error`` an exception
    raised by ``fn`` propagates after its chunk has settled.
    """
    results: list[R] = []
    if not items:
        return results

    total_chunks = (len(items) + size - 1) // size
    with ThreadPoolExecutor(max_workers=size) as executor:
        for number, chunk in enumerate(iter_chunks(items, size), 1):
            logger.info(f"[{label} {number}/{total_chunks}] Processing {len(chunk)} item(s)...")
            chunk_started = time.monotonic()

            futures = {executor.submit(fn, item, idx): idx for idx, item in enumerate(chunk)}
            chunk_results: list[R | None] = [None] * len(chunk)
            first_error: BaseException | None = None

            for future in as_completed(futures):
                idx = futures[future]
                try:
                    result = future.result()
                except Exception as exc:
                    if on_error is None:
                        first_error = first_error or exc
                        continue
                    result = on_error(chunk[idx], exc)
                chunk_results[idx] = result
                if on_result is not None:
                    on_result(result)

            if first_error is not None:
                raise first_error
            results.extend(chunk_results)
            logger.info(f"[{label} {number}/{total_chunks}] Done in {time.monotonic() - chunk_started:.2f}s")
    return results


def run_batches(
    items: Sequence[WorkItem],
    output_root: Path,
    options: ExtractionOptions,
    concurrency: int,
    *,
    process: Callable[..., ItemOutcome] = process_item,
    on_outcome: Callable[[ItemOutcome], None] | None = None,
    **process_kwargs,
) -> BatchResult:
    """Process ``items`` in chunks of ``concurrency`` and total the outcomes.

    Items are first given distinct output directories, so two videos whose
    names sanitize alike never write into the same folder.
    """
    started = time.monotonic()
    concurrency = max(1, int(concurrency))
    items = assign_output_names(items)

    def _run(item: WorkItem, index: int) -> ItemOutcome:
        return process(item, index, output_root, options, **process_kwargs)

    def _isolate(item: WorkItem, exc: BaseException) -> ItemOutcome:
        logger.debug(f"Processor raised for {item.display_name}", exc_info=exc)
        return ItemFailure(
            display_name=item.display_name,
            output_dir=item_output_dir(output_root, item),
            error=f"{type(exc).__name__}: {exc}",
        )

    outcomes = run_chunked(
        items, _run, concurrency, on_error=_isolate, on_result=on_outcome, label="Batch"
    )

    totals = BatchTotals()
    for outcome in outcomes:
        totals = totals.record(outcome)

    return BatchResult(
        totals=totals,
        outcomes=outcomes,
        elapsed_seconds=time.monotonic() - started,
    )
