"""Step 01: Find video files under a local directory."""

from __future__ import annotations

import logging
from typing import ClassVar

from framebatch.core.discovery import scan_videos
from framebatch.core.step_base import BaseStep
from .config import DiscoverVideosConfig
from .contracts import DiscoverVideosInput, DiscoverVideosOutput

logger = logging.getLogger(__name__)


class DiscoverVideosStep(BaseStep[DiscoverVideosInput, DiscoverVideosOutput, DiscoverVideosConfig]):
    name: ClassVar[str] = "discover_videos"
    input_type: ClassVar = DiscoverVideosInput
    output_type: ClassVar = DiscoverVideosOutput
    config_type: ClassVar = DiscoverVideosConfig

    def validate_inputs(self, inputs: DiscoverVideosInput) -> bool:
        if not inputs.input_dir.exists():
            logger.error(f"Input directory does not exist: {inputs.input_dir}")
            return False
        if not inputs.input_dir.is_dir():
            logger.error(f"Input path is not a directory: {inputs.input_dir}")
            return False
        return True

    def run(self, inputs: DiscoverVideosInput) -> DiscoverVideosOutput:
        items = scan_videos(inputs.input_dir, self.config.extensions)
        return DiscoverVideosOutput(input_dir=inputs.input_dir.resolve(), items=items)
