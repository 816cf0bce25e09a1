"""Tests for the single-item processor."""

from pathlib import Path
from unittest.mock import MagicMock, call, patch

import pytest

from framebatch.core.contracts import ExtractionOptions, ItemFailure, ItemSuccess, WorkItem
from framebatch.core.processor import assign_output_names, item_output_dir, process_item
from framebatch.exceptions import ExtractionError


def _writing_extractor(count: int):
    def _extract(source: Path, output_dir: Path, options: ExtractionOptions) -> None:
        for i in range(1, count + 1):
            (output_dir / (options.filename_pattern % i)).write_bytes(b"\x89PNG")

    return MagicMock(side_effect=_extract)


class TestProcessItem:
    def test_cache_hit_skips_extractor(self, make_item, output_root: Path, write_frames):
        item = make_item("clip")
        write_frames(output_root / "clip", 3)
        extractor = MagicMock()

        outcome = process_item(item, 0, output_root, ExtractionOptions(), extractor=extractor, sleep=MagicMock())

        assert isinstance(outcome, ItemSuccess)
        assert outcome.cached is True
        assert outcome.frame_count == 3
        assert outcome.elapsed_seconds == 0
        extractor.assert_not_called()

    def test_force_ignores_cache(self, make_item, output_root: Path, write_frames):
        item = make_item("clip")
        write_frames(output_root / "clip", 3)
        extractor = _writing_extractor(5)

        outcome = process_item(
            item, 0, output_root, ExtractionOptions(force=True),
            extractor=extractor, prober=lambda _: None, sleep=MagicMock(),
        )

        extractor.assert_called_once()
        assert outcome.cached is False
        assert outcome.frame_count == 5

    def test_success_counts_frames_and_probes(self, make_item, output_root: Path):
        item = make_item("clip")
        extractor = _writing_extractor(4)

        outcome = process_item(
            item, 0, output_root, ExtractionOptions(),
            extractor=extractor, prober=lambda _: 12.0, sleep=MagicMock(),
        )

        assert isinstance(outcome, ItemSuccess)
        assert outcome.cached is False
        assert outcome.frame_count == 4
        assert outcome.duration_seconds == 12.0
        assert outcome.output_dir == output_root / "clip"
        extractor.assert_called_once_with(item.source_path, output_root / "clip", ExtractionOptions())

    def test_probe_failure_is_not_fatal(self, make_item, output_root: Path):
        outcome = process_item(
            make_item("clip"), 0, output_root, ExtractionOptions(),
            extractor=_writing_extractor(1), prober=MagicMock(side_effect=RuntimeError("probe")),
            sleep=MagicMock(),
        )
        assert isinstance(outcome, ItemSuccess)
        assert outcome.duration_seconds is None

    def test_extraction_error_becomes_failure(self, make_item, output_root: Path):
        extractor = MagicMock(side_effect=ExtractionError("ffmpeg exited with code 1: bad", detail="full log"))

        outcome = process_item(
            make_item("clip"), 0, output_root, ExtractionOptions(),
            extractor=extractor, prober=lambda _: None, sleep=MagicMock(),
        )

        assert isinstance(outcome, ItemFailure)
        assert outcome.error == "ffmpeg exited with code 1: bad"
        assert outcome.detail == "full log"

    def test_unexpected_error_becomes_failure(self, make_item, output_root: Path):
        outcome = process_item(
            make_item("clip"), 0, output_root, ExtractionOptions(),
            extractor=MagicMock(side_effect=RuntimeError("kaboom")), prober=lambda _: None, sleep=MagicMock(),
        )
        assert isinstance(outcome, ItemFailure)
        assert "RuntimeError" in outcome.error
        assert "kaboom" in outcome.error

    def test_staggered_start(self, make_item, output_root: Path):
        sleep = MagicMock()
        process_item(
            make_item("clip"), 3, output_root, ExtractionOptions(),
            extractor=_writing_extractor(1), prober=lambda _: None, sleep=sleep, stagger_delay=0.1,
        )
        sleep.assert_called_once_with(pytest.approx(0.3))

    def test_first_slot_starts_immediately(self, make_item, output_root: Path):
        sleep = MagicMock()
        process_item(
            make_item("clip"), 0, output_root, ExtractionOptions(),
            extractor=_writing_extractor(1), prober=lambda _: None, sleep=sleep,
        )
        sleep.assert_not_called()

    def test_mkdir_retries_then_fails(self, make_item, output_root: Path):
        sleep = MagicMock()
        extractor = MagicMock()
        with patch("framebatch.core.processor._make_dir", side_effect=OSError("stale handle")) as make_dir:
            outcome = process_item(
                make_item("clip"), 0, output_root, ExtractionOptions(),
                extractor=extractor, sleep=sleep,
            )

        assert isinstance(outcome, ItemFailure)
        assert "3 attempts" in outcome.error
        assert make_dir.call_count == 3
        assert sleep.call_args_list == [call(0.5), call(1.0)]
        extractor.assert_not_called()

    def test_mkdir_recovers_after_transient_error(self, make_item, output_root: Path):
        real_mkdir = Path.mkdir
        attempts = []

        def flaky_mkdir(path, *args, **kwargs):
            attempts.append(path)
            if len(attempts) == 1:
                raise OSError("busy")
            return real_mkdir(path, *args, **kwargs)

        with patch.object(Path, "mkdir", flaky_mkdir):
            outcome = process_item(
                make_item("clip"), 0, output_root, ExtractionOptions(),
                extractor=_writing_extractor(2), prober=lambda _: None, sleep=MagicMock(),
            )

        assert isinstance(outcome, ItemSuccess)
        assert len(attempts) == 2


class TestItemOutputDir:
    def test_name_is_sanitized(self, output_root: Path):
        item = WorkItem(source_path=Path("x.mp4"), display_name="My Video (2021) [HD]")
        assert item_output_dir(output_root, item) == output_root / "My_Video_2021_HD"

    def test_empty_name_falls_back(self, output_root: Path):
        item = WorkItem(source_path=Path("x.mp4"), display_name="[]()")
        assert item_output_dir(output_root, item) == output_root / "untitled"

    def test_explicit_output_name_wins(self, output_root: Path):
        item = WorkItem(source_path=Path("x.mp4"), display_name="clip", output_name="clip_2")
        assert item_output_dir(output_root, item) == output_root / "clip_2"

    def test_assign_output_names_deduplicates(self, output_root: Path):
        items = [
            WorkItem(source_path=Path(f"{n}.mp4"), display_name=n)
            for n in ("clip one", "clip_one", "other", "[]", "()")
        ]

        assigned = assign_output_names(items)

        assert [i.output_name for i in assigned] == ["clip_one", "clip_one_2", "other", "untitled", "untitled_2"]
        assert [i.display_name for i in assigned] == [i.display_name for i in items]
        assert len({item_output_dir(output_root, i) for i in assigned}) == len(items)
