"""Step 03: Upload extracted frames to remote storage."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import ClassVar

from framebatch.core.step_base import BaseStep
from framebatch.core.uploader import RemoteStorage, upload_all
from framebatch.exceptions import ConfigError
from ._drive import DriveStorage
from .config import UploadFramesConfig
from .contracts import UploadFramesInput, UploadFramesOutput

logger = logging.getLogger(__name__)


class UploadFramesStep(BaseStep[UploadFramesInput, UploadFramesOutput, UploadFramesConfig]):
    """Upload each frames folder into a same-named remote folder.

    The storage capability is fixed when the step is built: an injected
    ``storage`` wins, otherwise a Drive backend is created from
    ``credentials_file``. With neither, the step does nothing. A configured
    but unusable Drive capability (missing or malformed credentials file, no
    parent folder) raises when the step is built, before any other step runs.
    """

    name: ClassVar[str] = "upload_frames"
    input_type: ClassVar = UploadFramesInput
    output_type: ClassVar = UploadFramesOutput
    config_type: ClassVar = UploadFramesConfig

    def __init__(self, config: UploadFramesConfig, output_root: Path, storage: RemoteStorage | None = None):
        super().__init__(config, output_root)
        if storage is None and config.credentials_file is not None:
            if not config.parent_folder_id:
                raise ConfigError("parent_folder_id is required when credentials_file is set")
            storage = DriveStorage.from_service_account_file(config.credentials_file, timeout=config.timeout)
        self.storage = storage

    def validate_inputs(self, inputs: UploadFramesInput) -> bool:
        if self.storage is not None and not self.config.parent_folder_id:
            logger.error("parent_folder_id is required when uploading")
            return False
        return True

    def run(self, inputs: UploadFramesInput) -> UploadFramesOutput:
        if self.storage is None:
            logger.info("No storage configured, skipping upload")
            return UploadFramesOutput(enabled=False)

        if isinstance(self.storage, DriveStorage):
            self.storage.connect()
        outcome = upload_all(
            inputs.frames_root,
            self.config.parent_folder_id,
            self.storage,
            batch_size=self.config.batch_size,
            delete_after_upload=self.config.delete_after_upload,
        )
        return UploadFramesOutput(enabled=True, outcome=outcome)
