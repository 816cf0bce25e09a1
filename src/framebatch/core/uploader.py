"""Remote upload orchestrator: push each frames folder to remote storage.

Known limitation: remote folders are resolved by lookup-then-create, which
is not atomic. Two processes uploading into the same parent at once can
create duplicate folders.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Protocol

from framebatch.utils.io import list_image_files, mime_type_for
from .contracts import UploadOutcome
from .scheduler import run_chunked

logger = logging.getLogger(__name__)

DEFAULT_UPLOAD_BATCH_SIZE = 10


class RemoteStorage(Protocol):
    """Capability needed from a remote object store."""

    def get_or_create_folder(self, name: str, parent_id: str | None) -> str:
        """Return the id of folder ``name`` under ``parent_id``, creating it if needed."""
        ...

    def upload(self, local_file: Path, folder_id: str, mime_type: str) -> str:
        """Upload ``local_file`` into ``folder_id`` and return its remote id."""
        ...


def upload_folder(
    folder: Path,
    parent_id: str | None,
    storage: RemoteStorage,
    *,
    batch_size: int = DEFAULT_UPLOAD_BATCH_SIZE,
    delete_after_upload: bool = False,
) -> UploadOutcome:
    """Upload the images of one frames folder into a same-named remote folder."""
    files = list_image_files(folder)
    if not files:
        logger.info(f"{folder.name}: no images to upload")
        return UploadOutcome()

    try:
        folder_id = storage.get_or_create_folder(folder.name, parent_id)
    except Exception as exc:
        logger.error(f"{folder.name}: could not resolve remote folder: {exc}")
        return UploadOutcome(failed=len(files))
    logger.debug(f"{folder.name}: remote folder {folder_id}")

    def _upload(path: Path, _index: int) -> bool:
        try:
            storage.upload(path, folder_id, mime_type_for(path))
        except Exception as exc:
            logger.warning(f"Upload failed for {path.name}: {exc}")
            return False
        return True

    succeeded = run_chunked(files, _upload, max(1, batch_size), label=f"Upload {folder.name}")
    uploaded = [path for path, ok in zip(files, succeeded) if ok]

    deleted = 0
    if delete_after_upload and uploaded:
        for path in uploaded:
            try:
                path.unlink()
                deleted += 1
            except OSError as exc:
                logger.warning(f"Could not delete {path.name}: {exc}")
        try:
            folder.rmdir()
        except OSError:
            # Still holds files that failed to upload
            pass

    return UploadOutcome(
        uploaded=len(uploaded),
        failed=len(files) - len(uploaded),
        deleted_local=deleted,
    )


def upload_all(
    output_root: Path,
    parent_id: str | None,
    storage: RemoteStorage | None,
    *,
    batch_size: int = DEFAULT_UPLOAD_BATCH_SIZE,
    delete_after_upload: bool = False,
) -> UploadOutcome:
    """Upload every immediate subdirectory of ``output_root``.

    Without a ``storage`` capability this is a no-op.
    """
    total = UploadOutcome()
    if storage is None:
        return total

    output_root = Path(output_root)
    folders = sorted(p for p in output_root.iterdir() if p.is_dir()) if output_root.is_dir() else []
    if not folders:
        logger.warning(f"No frame folders found to upload in {output_root}")
        return total

    logger.info(f"Uploading {len(folders)} folder(s) from {output_root}")
    for number, folder in enumerate(folders, 1):
        outcome = upload_folder(
            folder,
            parent_id,
            storage,
            batch_size=batch_size,
            delete_after_upload=delete_after_upload,
        )
        logger.info(
            f"[{number}/{len(folders)}] {folder.name}: {outcome.uploaded} uploaded, "
            f"{outcome.failed} failed, {outcome.deleted_local} deleted locally"
        )
        total = total.merge(outcome)
    return total
