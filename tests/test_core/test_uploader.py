"""Tests for the remote upload orchestrator."""

from pathlib import Path

from framebatch.core.contracts import UploadOutcome
from framebatch.core.uploader import upload_all, upload_folder


class TestUploadFolder:
    def test_all_uploaded_and_deleted(self, output_root: Path, write_frames, fake_storage):
        folder = output_root / "clip"
        write_frames(folder, 3)
        storage = fake_storage()

        outcome = upload_folder(folder, "parent", storage, delete_after_upload=True)

        assert outcome == UploadOutcome(uploaded=3, failed=0, deleted_local=3)
        assert not folder.exists()
        assert storage.folders == {("clip", "parent"): "folder-clip"}
        assert {name for name, _, _ in storage.uploads} == {
            "frame_000001.png", "frame_000002.png", "frame_000003.png",
        }

    def test_only_successful_files_deleted(self, output_root: Path, write_frames, fake_storage):
        folder = output_root / "clip"
        write_frames(folder, 3)
        storage = fake_storage(fail_names={"frame_000002.png"})

        outcome = upload_folder(folder, "parent", storage, delete_after_upload=True)

        assert outcome == UploadOutcome(uploaded=2, failed=1, deleted_local=2)
        assert folder.is_dir()
        assert [p.name for p in folder.iterdir()] == ["frame_000002.png"]

    def test_files_kept_without_delete(self, output_root: Path, write_frames, fake_storage):
        folder = output_root / "clip"
        write_frames(folder, 2)

        outcome = upload_folder(folder, None, fake_storage())

        assert outcome == UploadOutcome(uploaded=2)
        assert len(list(folder.iterdir())) == 2

    def test_empty_folder_touches_nothing(self, output_root: Path, fake_storage):
        folder = output_root / "empty"
        folder.mkdir()
        storage = fake_storage()

        assert upload_folder(folder, "parent", storage) == UploadOutcome()
        assert storage.folders == {}

    def test_folder_resolution_failure_fails_every_file(self, output_root: Path, write_frames, fake_storage):
        folder = output_root / "clip"
        write_frames(folder, 3)
        storage = fake_storage(folder_error=RuntimeError("403 forbidden"))

        outcome = upload_folder(folder, "parent", storage, delete_after_upload=True)

        assert outcome == UploadOutcome(failed=3)
        assert len(list(folder.iterdir())) == 3

    def test_non_images_are_ignored_and_block_rmdir(self, output_root: Path, write_frames, fake_storage):
        folder = output_root / "clip"
        write_frames(folder, 2)
        (folder / "notes.txt").write_text("keep me")

        outcome = upload_folder(folder, "parent", fake_storage(), delete_after_upload=True)

        assert outcome == UploadOutcome(uploaded=2, deleted_local=2)
        assert [p.name for p in folder.iterdir()] == ["notes.txt"]

    def test_mime_types(self, output_root: Path, write_frames, fake_storage):
        folder = output_root / "clip"
        write_frames(folder, 1, pattern="img_%03d.jpg")
        storage = fake_storage()

        upload_folder(folder, "parent", storage, batch_size=1)

        assert storage.uploads == [("img_001.jpg", "folder-clip", "image/jpeg")]


class TestUploadAll:
    def test_without_storage_is_noop(self, output_root: Path, write_frames):
        write_frames(output_root / "clip", 2)
        assert upload_all(output_root, "parent", None) == UploadOutcome()

    def test_rolls_up_folders(self, output_root: Path, write_frames, fake_storage):
        write_frames(output_root / "b", 2)
        write_frames(output_root / "a", 3)
        (output_root / "stray.png").write_bytes(b"\x89PNG")
        storage = fake_storage(fail_names={"frame_000003.png"})

        outcome = upload_all(output_root, "parent", storage, batch_size=2)

        assert outcome == UploadOutcome(uploaded=4, failed=1)
        assert set(storage.folders) == {("a", "parent"), ("b", "parent")}

    def test_missing_root(self, tmp_path: Path, fake_storage):
        assert upload_all(tmp_path / "missing", "parent", fake_storage()) == UploadOutcome()
