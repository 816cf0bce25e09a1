"""Tests for shared contracts."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from framebatch.core.contracts import (
    BatchResult,
    BatchTotals,
    ExtractionOptions,
    ItemFailure,
    ItemSuccess,
    UploadOutcome,
    WorkItem,
)


class TestExtractionOptions:
    def test_defaults(self):
        opts = ExtractionOptions()
        assert opts.quality == 2
        assert opts.filename_pattern == "frame_%06d.png"
        assert opts.start_time is None
        assert opts.end_time is None
        assert opts.fps is None
        assert opts.force is False
        assert opts.image_suffix == ".png"

    def test_time_strings_are_parsed(self):
        opts = ExtractionOptions(start_time="00:01:30", end_time="2:00")
        assert opts.start_time == 90.0
        assert opts.end_time == 120.0

    def test_end_before_start_rejected(self):
        with pytest.raises(ValidationError, match="before start_time"):
            ExtractionOptions(start_time=10, end_time=5)

    def test_equal_bounds_allowed(self):
        assert ExtractionOptions(start_time=5, end_time=5).end_time == 5

    @pytest.mark.parametrize("fps", [0, -1])
    def test_fps_must_be_positive(self, fps):
        with pytest.raises(ValidationError):
            ExtractionOptions(fps=fps)

    @pytest.mark.parametrize("quality", [-1, 10])
    def test_quality_range(self, quality):
        with pytest.raises(ValidationError):
            ExtractionOptions(quality=quality)

    @pytest.mark.parametrize("pattern", ["frame.png", "f_%d_%d.png", "sub/frame_%04d.png"])
    def test_bad_patterns(self, pattern):
        with pytest.raises(ValidationError):
            ExtractionOptions(filename_pattern=pattern)

    def test_jpeg_pattern_suffix(self):
        assert ExtractionOptions(filename_pattern="img%d.JPG").image_suffix == ".jpg"

    def test_bad_time_string(self):
        with pytest.raises(ValidationError):
            ExtractionOptions(start_time="soon")

    def test_frozen(self):
        with pytest.raises(ValidationError):
            ExtractionOptions().quality = 5


class TestBatchTotals:
    def test_record_folds_outcomes(self):
        totals = BatchTotals()
        totals = totals.record(ItemSuccess(display_name="a", output_dir=Path("a"), frame_count=10))
        totals = totals.record(ItemSuccess(display_name="b", output_dir=Path("b"), cached=True, frame_count=4))
        totals = totals.record(ItemFailure(display_name="c", output_dir=Path("c"), error="boom"))

        assert totals.success_count == 1
        assert totals.cached_count == 1
        assert totals.fail_count == 1
        assert totals.total_frames == 14
        assert totals.processed == 3

    def test_record_returns_new_value(self):
        before = BatchTotals()
        after = before.record(ItemFailure(display_name="x", output_dir=Path("x"), error="e"))
        assert before.fail_count == 0
        assert after.fail_count == 1


def test_outcomes_discriminated_by_status():
    result = BatchResult(
        outcomes=[
            {"status": "success", "display_name": "a", "output_dir": "out/a", "frame_count": 3},
            {"status": "failure", "display_name": "b", "output_dir": "out/b", "error": "boom"},
        ]
    )
    assert isinstance(result.outcomes[0], ItemSuccess)
    assert isinstance(result.outcomes[1], ItemFailure)


def test_upload_outcome_merge():
    merged = UploadOutcome(uploaded=3, failed=1).merge(UploadOutcome(uploaded=2, deleted_local=2))
    assert merged == UploadOutcome(uploaded=5, failed=1, deleted_local=2)


def test_work_item_defaults():
    item = WorkItem(source_path=Path("/v/a.mp4"), display_name="a")
    assert item.size_bytes == 0
    assert item.source_url is None
