"""Configuration for Step 03: Upload frames to Google Drive."""

from pathlib import Path

from pydantic import BaseModel, Field


class UploadFramesConfig(BaseModel):
    credentials_file: Path | None = Field(
        None, description="Service account JSON credentials (None = upload disabled)"
    )
    parent_folder_id: str | None = Field(None, description="Drive folder that receives one folder per video")
    delete_after_upload: bool = Field(False, description="Delete local frames once uploaded")
    batch_size: int = Field(10, ge=1, description="Files uploaded concurrently per wave")
    timeout: float = Field(120.0, gt=0, description="HTTP timeout per request (s)")
