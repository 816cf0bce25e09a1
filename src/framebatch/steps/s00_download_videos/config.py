"""Configuration for Step 00: Download videos from a URL list."""

from pathlib import Path

from pydantic import BaseModel, Field


class DownloadVideosConfig(BaseModel):
    download_dir: Path | None = Field(
        None, description="Where downloaded videos go (default: <output parent>/downloads)"
    )
    concurrency: int = Field(3, ge=1, description="Parallel downloads per batch")
    timeout: float = Field(60.0, gt=0, description="Connect/idle timeout per direct download (s)")
    ytdlp_format: str = Field("best[ext=mp4]/best", description="yt-dlp format selector")
