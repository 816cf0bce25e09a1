"""Common Pydantic models shared across pipeline steps."""

from __future__ import annotations

import re
from pathlib import Path
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from framebatch.utils.time_utils import parse_time_value

_PLACEHOLDER_RE = re.compile(r"%0?\d*d")


class WorkItem(BaseModel):
    """One video to be processed into frames."""

    model_config = ConfigDict(frozen=True)

    source_path: Path
    display_name: str
    size_bytes: int = 0
    source_url: str | None = None
    output_name: str | None = Field(None, description="Frames directory name (default: sanitized display name)")


class ExtractionOptions(BaseModel):
    """Options threaded unchanged through every item of a run."""

    model_config = ConfigDict(frozen=True)

    quality: int = Field(2, ge=0, le=9, description="PNG compression level (0=best, 9=fastest)")
    filename_pattern: str = Field("frame_%06d.png", description="Frame filename pattern")
    start_time: float | None = Field(None, ge=0, description="Start time in seconds")
    end_time: float | None = Field(None, ge=0, description="End time in seconds")
    fps: float | None = Field(None, gt=0, description="Target FPS (None = every frame)")
    force: bool = Field(False, description="Re-extract even when frames already exist")
    verbose: bool = Field(False, description="Show full extractor diagnostics")

    @field_validator("start_time", "end_time", mode="before")
    @classmethod
    def _parse_time(cls, value):
        if isinstance(value, str):
            return parse_time_value(value)
        return value

    @field_validator("filename_pattern")
    @classmethod
    def _check_pattern(cls, value: str) -> str:
        if len(_PLACEHOLDER_RE.findall(value)) != 1:
            raise ValueError(f"pattern must contain exactly one numeric placeholder: {value!r}")
        if "/" in value or "\\" in value:
            raise ValueError(f"pattern must be a bare filename: {value!r}")
        return value

    @model_validator(mode="after")
    def _check_range(self) -> "ExtractionOptions":
        if self.start_time is not None and self.end_time is not None:
            if self.end_time < self.start_time:
                raise ValueError(
                    f"end_time ({self.end_time}) is before start_time ({self.start_time})"
                )
        return self

    @property
    def image_suffix(self) -> str:
        """File suffix of produced frames, e.g. '.png'."""
        return Path(self.filename_pattern).suffix.lower() or ".png"


class ItemSuccess(BaseModel):
    model_config = ConfigDict(frozen=True)

    status: Literal["success"] = "success"
    display_name: str
    output_dir: Path
    cached: bool = False
    frame_count: int = 0
    elapsed_seconds: float = 0.0
    duration_seconds: float | None = None


class ItemFailure(BaseModel):
    model_config = ConfigDict(frozen=True)

    status: Literal["failure"] = "failure"
    display_name: str
    output_dir: Path
    error: str
    detail: str = ""


ItemOutcome = Annotated[Union[ItemSuccess, ItemFailure], Field(discriminator="status")]


class BatchTotals(BaseModel):
    """Running aggregate over settled items. Values only ever grow."""

    model_config = ConfigDict(frozen=True)

    success_count: int = 0
    cached_count: int = 0
    fail_count: int = 0
    total_frames: int = 0

    @property
    def processed(self) -> int:
        return self.success_count + self.cached_count + self.fail_count

    def record(self, outcome: ItemSuccess | ItemFailure) -> "BatchTotals":
        """Return new totals with ``outcome`` folded in."""
        if isinstance(outcome, ItemFailure):
            return self.model_copy(update={"fail_count": self.fail_count + 1})
        update = {"total_frames": self.total_frames + outcome.frame_count}
        if outcome.cached:
            update["cached_count"] = self.cached_count + 1
        else:
            update["success_count"] = self.success_count + 1
        return self.model_copy(update=update)


class BatchResult(BaseModel):
    totals: BatchTotals = Field(default_factory=BatchTotals)
    outcomes: list[ItemOutcome] = Field(default_factory=list)
    elapsed_seconds: float = 0.0


class UploadOutcome(BaseModel):
    """Upload counts for one folder, or rolled up across folders."""

    model_config = ConfigDict(frozen=True)

    uploaded: int = 0
    failed: int = 0
    deleted_local: int = 0

    def merge(self, other: "UploadOutcome") -> "UploadOutcome":
        return UploadOutcome(
            uploaded=self.uploaded + other.uploaded,
            failed=self.failed + other.failed,
            deleted_local=self.deleted_local + other.deleted_local,
        )


class PipelineConfig(BaseModel):
    """Top-level pipeline configuration loaded from pipeline.yaml."""

    project_name: str = "framebatch"
    output_dir: Path = Path("./output")
    steps: list[StepEntry] = Field(default_factory=list)


class StepEntry(BaseModel):
    """One entry in the pipeline step list."""

    name: str
    module: str
    config_file: str | None = None
    depends_on: list[str] = Field(default_factory=list)
    enabled: bool = True
    inputs: dict[str, Any] = Field(default_factory=dict)


# Fix forward reference
PipelineConfig.model_rebuild()
