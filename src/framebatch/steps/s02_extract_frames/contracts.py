"""I/O contracts for Step 02: Extract frames from videos."""

from pathlib import Path

from pydantic import BaseModel, Field

from framebatch.core.contracts import BatchResult, WorkItem


class ExtractFramesInput(BaseModel):
    items: list[WorkItem] = Field(default_factory=list, description="Videos to extract")


class ExtractFramesOutput(BaseModel):
    frames_root: Path = Field(..., description="Directory holding one frames folder per video")
    concurrency: int = Field(..., description="Effective number of parallel extractions")
    result: BatchResult = Field(default_factory=BatchResult)
