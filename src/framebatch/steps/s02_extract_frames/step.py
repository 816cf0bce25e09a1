"""Step 02: Extract frames from every video with bounded parallelism."""

from __future__ import annotations

import logging
from typing import Callable, ClassVar

from framebatch.core.contracts import ItemOutcome
from framebatch.core.scheduler import resolve_concurrency, run_batches
from framebatch.core.step_base import BaseStep
from framebatch.utils.ffmpeg import ffmpeg_available
from .config import ExtractFramesConfig
from .contracts import ExtractFramesInput, ExtractFramesOutput

logger = logging.getLogger(__name__)


class ExtractFramesStep(BaseStep[ExtractFramesInput, ExtractFramesOutput, ExtractFramesConfig]):
    name: ClassVar[str] = "extract_frames"
    input_type: ClassVar = ExtractFramesInput
    output_type: ClassVar = ExtractFramesOutput
    config_type: ClassVar = ExtractFramesConfig

    # Called with each outcome as it settles, e.g. to print progress
    on_outcome: Callable[[ItemOutcome], None] | None = None

    def validate_inputs(self, inputs: ExtractFramesInput) -> bool:
        if inputs.items and not ffmpeg_available():
            logger.error("ffmpeg is not installed or not found in PATH")
            return False
        return True

    def run(self, inputs: ExtractFramesInput) -> ExtractFramesOutput:
        self.output_root.mkdir(parents=True, exist_ok=True)
        concurrency = resolve_concurrency(self.config.concurrency, len(inputs.items))
        if not inputs.items:
            logger.warning("No videos to process")
            return ExtractFramesOutput(frames_root=self.output_root, concurrency=concurrency)

        logger.info(f"Processing {len(inputs.items)} video(s) with concurrency {concurrency}")
        result = run_batches(
            inputs.items,
            self.output_root,
            self.config.to_options(),
            concurrency,
            on_outcome=self.on_outcome,
            stagger_delay=self.config.stagger_delay,
            mkdir_attempts=self.config.mkdir_attempts,
            mkdir_backoff=self.config.mkdir_backoff,
        )
        totals = result.totals
        logger.info(
            f"Extracted {totals.success_count}, cached {totals.cached_count}, "
            f"failed {totals.fail_count}, {totals.total_frames} frames"
        )
        return ExtractFramesOutput(
            frames_root=self.output_root,
            concurrency=concurrency,
            result=result,
        )
