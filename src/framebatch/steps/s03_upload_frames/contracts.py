"""I/O contracts for Step 03: Upload frames to Google Drive."""

from pathlib import Path

from pydantic import BaseModel, Field

from framebatch.core.contracts import UploadOutcome


class UploadFramesInput(BaseModel):
    frames_root: Path = Field(..., description="Directory holding one frames folder per video")


class UploadFramesOutput(BaseModel):
    enabled: bool = Field(..., description="False when no storage backend was configured")
    outcome: UploadOutcome = Field(default_factory=UploadOutcome)
