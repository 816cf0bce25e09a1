"""Google Drive v3 storage backend authorized with a service account."""

from __future__ import annotations

import logging
import threading
from pathlib import Path

from google.auth.exceptions import GoogleAuthError
from google.auth.transport.requests import AuthorizedSession, Request
from google.oauth2 import service_account

from framebatch.exceptions import ConfigError, InputNotFoundError

logger = logging.getLogger(__name__)

SCOPES = ["https://www.googleapis.com/auth/drive.file"]
FILES_URL = "https://www.googleapis.com/drive/v3/files"
UPLOAD_URL = "https://www.googleapis.com/upload/drive/v3/files"
FOLDER_MIME_TYPE = "application/vnd.google-apps.folder"


def _quote(value: str) -> str:
    """Escape a literal for a Drive query string."""
    return value.replace("\\", "\\\\").replace("'", "\\'")


class DriveStorage:
    """``RemoteStorage`` backed by the Google Drive REST API.

    Each worker thread gets its own ``AuthorizedSession``; the credentials
    object is shared.
    """

    def __init__(self, credentials, timeout: float = 120.0):
        self.credentials = credentials
        self.timeout = timeout
        self._local = threading.local()

    @classmethod
    def from_service_account_file(cls, path: Path, timeout: float = 120.0) -> "DriveStorage":
        path = Path(path)
        if not path.is_file():
            raise InputNotFoundError(f"Credentials file not found: {path}")
        try:
            credentials = service_account.Credentials.from_service_account_file(str(path), scopes=SCOPES)
        except (ValueError, KeyError) as exc:
            raise ConfigError(f"Failed to parse credentials file: {exc}") from exc
        return cls(credentials, timeout=timeout)

    def connect(self) -> None:
        """Fetch an access token now so bad credentials fail before any upload."""
        try:
            self.credentials.refresh(Request())
        except GoogleAuthError as exc:
            raise ConfigError(f"Google Drive authentication failed: {exc}") from exc
        logger.info("Connected to Google Drive")

    @property
    def session(self) -> AuthorizedSession:
        session = getattr(self._local, "session", None)
        if session is None:
            session = AuthorizedSession(self.credentials)
            self._local.session = session
        return session

    def find_folder(self, name: str, parent_id: str | None) -> str | None:
        query = f"name='{_quote(name)}' and mimeType='{FOLDER_MIME_TYPE}' and trashed=false"
        if parent_id:
            query += f" and '{_quote(parent_id)}' in parents"
        response = self.session.get(
            FILES_URL,
            params={
                "q": query,
                "fields": "files(id, name)",
                "spaces": "drive",
                "supportsAllDrives": "true",
                "includeItemsFromAllDrives": "true",
            },
            timeout=self.timeout,
        )
        response.raise_for_status()
        files = response.json().get("files", [])
        return files[0]["id"] if files else None

    def create_folder(self, name: str, parent_id: str | None) -> str:
        metadata = {"name": name, "mimeType": FOLDER_MIME_TYPE}
        if parent_id:
            metadata["parents"] = [parent_id]
        response = self.session.post(
            FILES_URL,
            params={"fields": "id", "supportsAllDrives": "true"},
            json=metadata,
            timeout=self.timeout,
        )
        response.raise_for_status()
        return response.json()["id"]

    def get_or_create_folder(self, name: str, parent_id: str | None) -> str:
        return self.find_folder(name, parent_id) or self.create_folder(name, parent_id)

    def upload(self, local_file: Path, folder_id: str, mime_type: str = "image/png") -> str:
        """Upload one file with a resumable session and return its Drive id."""
        local_file = Path(local_file)
        metadata = {"name": local_file.name, "parents": [folder_id]}
        start = self.session.post(
            UPLOAD_URL,
            params={"uploadType": "resumable", "fields": "id", "supportsAllDrives": "true"},
            json=metadata,
            headers={
                "X-Upload-Content-Type": mime_type,
                "X-Upload-Content-Length": str(local_file.stat().st_size),
            },
            timeout=self.timeout,
        )
        start.raise_for_status()

        with open(local_file, "rb") as f:
            response = self.session.put(
                start.headers["Location"],
                data=f,
                headers={"Content-Type": mime_type},
                timeout=self.timeout,
            )
        response.raise_for_status()
        return response.json()["id"]
