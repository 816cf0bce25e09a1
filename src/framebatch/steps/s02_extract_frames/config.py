"""Configuration for Step 02: Extract frames from videos."""

from pydantic import Field

from framebatch.core.contracts import ExtractionOptions


class ExtractFramesConfig(ExtractionOptions):
    concurrency: int | str = Field("auto", description="Videos processed in parallel ('auto' = half the CPUs)")
    stagger_delay: float = Field(
        0.1, ge=0, description="Per-slot start delay (s) to spread load on network mounts"
    )
    mkdir_attempts: int = Field(3, ge=1, description="Attempts to create each output directory")
    mkdir_backoff: float = Field(0.5, ge=0, description="Linear backoff step between attempts (s)")

    def to_options(self) -> ExtractionOptions:
        return ExtractionOptions(**self.model_dump(include=set(ExtractionOptions.model_fields)))
