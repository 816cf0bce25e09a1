"""Tests for S01: Discover Videos step."""

from pathlib import Path

import pytest

from framebatch.exceptions import StepValidationError
from framebatch.steps.s01_discover_videos.config import DiscoverVideosConfig
from framebatch.steps.s01_discover_videos.contracts import DiscoverVideosInput, DiscoverVideosOutput
from framebatch.steps.s01_discover_videos.step import DiscoverVideosStep


class TestDiscoverVideosContracts:
    def test_output_schema(self):
        schema = DiscoverVideosOutput.model_json_schema()
        assert "items" in schema["properties"]
        assert "input_dir" in schema["properties"]

    def test_config_defaults(self):
        cfg = DiscoverVideosConfig()
        assert len(cfg.extensions) == 10
        assert "mp4" in cfg.extensions

    def test_config_from_string(self):
        assert DiscoverVideosConfig(extensions="mp4, .MOV").extensions == ["mov", "mp4"]


class TestDiscoverVideosStep:
    def test_validate_missing_dir(self, tmp_path: Path):
        step = DiscoverVideosStep(config=DiscoverVideosConfig(), output_root=tmp_path)
        assert step.validate_inputs(DiscoverVideosInput(input_dir=tmp_path / "nope")) is False

    def test_validate_file_instead_of_dir(self, tmp_path: Path):
        video = tmp_path / "a.mp4"
        video.write_bytes(b"")
        step = DiscoverVideosStep(config=DiscoverVideosConfig(), output_root=tmp_path)
        with pytest.raises(StepValidationError):
            step.execute(DiscoverVideosInput(input_dir=video))

    def test_discovers_configured_extensions(self, videos_dir: Path, output_root: Path, make_item):
        make_item("movie", ".mp4")
        make_item("other", ".avi")
        (videos_dir / "readme.txt").write_text("x")
        step = DiscoverVideosStep(config=DiscoverVideosConfig(extensions=["mp4"]), output_root=output_root)

        output = step.execute(DiscoverVideosInput(input_dir=videos_dir))

        assert [item.display_name for item in output.items] == ["movie"]
        assert output.input_dir == videos_dir.resolve()
