"""Configuration for Step 01: Discover local videos."""

from pydantic import BaseModel, Field, field_validator

from framebatch.core.discovery import DEFAULT_EXTENSIONS, parse_extensions


class DiscoverVideosConfig(BaseModel):
    extensions: list[str] = Field(
        default_factory=lambda: DEFAULT_EXTENSIONS.split(","),
        description="Video extensions to process (without dot)",
    )

    @field_validator("extensions", mode="before")
    @classmethod
    def _split(cls, value):
        return sorted(parse_extensions(value))
