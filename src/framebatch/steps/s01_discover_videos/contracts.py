"""I/O contracts for Step 01: Discover local videos."""

from pathlib import Path

from pydantic import BaseModel, Field

from framebatch.core.contracts import WorkItem


class DiscoverVideosInput(BaseModel):
    input_dir: Path = Field(..., description="Directory scanned recursively for videos")


class DiscoverVideosOutput(BaseModel):
    input_dir: Path = Field(..., description="Directory that was scanned")
    items: list[WorkItem] = Field(default_factory=list, description="Discovered videos")
