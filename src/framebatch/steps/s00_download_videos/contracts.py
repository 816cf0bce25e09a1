"""I/O contracts for Step 00: Download videos from a URL list."""

from pathlib import Path

from pydantic import BaseModel, Field

from framebatch.core.contracts import WorkItem


class DownloadVideosInput(BaseModel):
    url_file: Path = Field(..., description="Text file with one video URL per line")


class FetchFailure(BaseModel):
    url: str
    error: str


class DownloadVideosOutput(BaseModel):
    download_dir: Path = Field(..., description="Directory holding downloaded videos")
    items: list[WorkItem] = Field(default_factory=list, description="Successfully fetched videos")
    downloaded: int = Field(0, description="Videos fetched in this run")
    cached: int = Field(0, description="Videos already present locally")
    failures: list[FetchFailure] = Field(default_factory=list)
