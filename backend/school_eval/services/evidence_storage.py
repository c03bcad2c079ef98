"""
Evidence Storage

Stores and deletes evidence blobs in one of two backends:
- Google Drive (remote, preferred when credentials are configured)
- Local filesystem under the uploads directory (fallback)

Uploads fall back to local storage whenever Drive is unavailable.
Deletes are credential-strict: a Drive-backed record cannot be deleted
without Drive credentials.
"""

import re
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, List
from urllib.parse import urlparse, unquote

import aiofiles
import aiofiles.os

from school_eval.core.config import Settings
from school_eval.core.exceptions import ConfigError, UploadError, DeleteError
from school_eval.core.logging_config import logger
from school_eval.models.evidence import (
    EvidenceLocation,
    RemoteLocation,
    LocalLocation,
    ExternalLinkLocation,
)
from school_eval.services.drive_client import GoogleDriveClient, DriveAPIError, DriveFileNotFoundError

DEFAULT_MIME_TYPE = "application/octet-stream"
UPLOADS_URL_PREFIX = "/uploads"

_UNSAFE_FILENAME_CHARS = re.compile(r"[^A-Za-z0-9._-]")
_UPLOADS_PATH_RE = re.compile(r"^/uploads/([^/]+)$")


@dataclass
class StoredBlob:
    """Result of persisting a blob in either backend"""
    location: EvidenceLocation
    public_link: str
    backend_id: str  # Drive file id or local stored name
    size_bytes: int


def sanitize_filename(filename: str) -> str:
    """Replace every character outside [A-Za-z0-9._-] with '_'"""
    return _UNSAFE_FILENAME_CHARS.sub("_", filename)


def resolve_upload_name(path_or_url: Optional[str]) -> Optional[str]:
    """
    Resolve the stored file name from a local evidence link.

    Accepts a bare "/uploads/<name>" path or an http(s) URL whose path has
    that shape. Anything else resolves to None (nothing to delete).
    """
    if not path_or_url:
        return None

    candidate = path_or_url.strip()
    if not candidate.startswith("/"):
        parsed = urlparse(candidate)
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            return None
        candidate = parsed.path

    match = _UPLOADS_PATH_RE.match(candidate)
    if not match:
        return None

    name = unquote(match.group(1))
    if name in (".", "..") or "/" in name or "\\" in name:
        return None
    return name


class DriveEvidenceBackend:
    """Evidence blobs in a Google Drive folder"""

    def __init__(
        self,
        client: GoogleDriveClient,
        folder_id: str,
        share_with_email: str = "",
        make_public: bool = False,
    ):
        self.client = client
        self.folder_id = folder_id
        self.share_with_email = share_with_email
        self.make_public = make_public

    async def store(
        self,
        content: bytes,
        filename: str,
        mime_type: Optional[str] = None,
        folder_id: Optional[str] = None,
    ) -> StoredBlob:
        target_folder = folder_id or self.folder_id
        safe_mime_type = mime_type or DEFAULT_MIME_TYPE

        try:
            created = await self.client.create_file(filename, target_folder, safe_mime_type, content)
        except DriveAPIError as e:
            raise UploadError(e.message, backend="drive")

        file_id = (created or {}).get("id")
        if not file_id:
            raise UploadError("Drive upload failed to return a file id.", backend="drive")

        try:
            await self._grant_permissions(file_id)
        except DriveAPIError as e:
            # Do not leave an unreferenced file behind in Drive
            logger.warning(f"[Drive] Sharing {file_id} failed, removing uploaded file: {e.message}")
            try:
                await self.client.delete_file(file_id)
            except DriveAPIError as cleanup_error:
                logger.error(f"[Drive] Cleanup of {file_id} failed, file is orphaned: {cleanup_error.message}")
            raise UploadError(f"sharing failed: {e.message}", backend="drive")

        link = created.get("webViewLink") or f"https://drive.google.com/file/d/{file_id}/view"
        return StoredBlob(
            location=RemoteLocation(object_id=file_id, link=link),
            public_link=link,
            backend_id=file_id,
            size_bytes=len(content),
        )

    async def _grant_permissions(self, file_id: str) -> None:
        if self.share_with_email:
            await self.client.create_permission(
                file_id,
                {"type": "user", "role": "reader", "emailAddress": self.share_with_email},
            )
        if self.make_public:
            await self.client.create_permission(file_id, {"type": "anyone", "role": "reader"})

    async def delete(self, location: RemoteLocation) -> None:
        if not location.object_id:
            raise DeleteError("record has no Drive file id", backend="drive")
        try:
            await self.client.delete_file(location.object_id)
        except DriveFileNotFoundError:
            logger.warning(f"[Drive] File {location.object_id} already absent, treating as deleted")
        except DriveAPIError as e:
            raise DeleteError(e.message, backend="drive")


class LocalEvidenceBackend:
    """Evidence blobs written under the uploads directory"""

    def __init__(self, upload_dir: Path):
        self.upload_dir = Path(upload_dir)

    def path_for(self, stored_name: str) -> Path:
        return self.upload_dir / stored_name

    @staticmethod
    def build_stored_name(filename: str, timestamp_ms: Optional[int] = None) -> str:
        """Millisecond time prefix + sanitized original name"""
        if timestamp_ms is None:
            timestamp_ms = int(time.time() * 1000)
        return f"{timestamp_ms}-{sanitize_filename(filename)}"

    async def store(self, content: bytes, filename: str, base_url: str) -> StoredBlob:
        try:
            self.upload_dir.mkdir(parents=True, exist_ok=True)
            stored_name = await self._write_exclusive(content, filename)
        except OSError as e:
            raise UploadError(f"{type(e).__name__}: {e}", backend="local")

        link = f"{base_url.rstrip('/')}{UPLOADS_URL_PREFIX}/{stored_name}"
        logger.info(f"[LocalStorage] Saved {stored_name} ({len(content)} bytes)")
        return StoredBlob(
            location=LocalLocation(stored_name=stored_name, link=link),
            public_link=link,
            backend_id=stored_name,
            size_bytes=len(content),
        )

    async def _write_exclusive(self, content: bytes, filename: str, max_attempts: int = 5) -> str:
        timestamp_ms = int(time.time() * 1000)
        for offset in range(max_attempts):
            candidate = self.build_stored_name(filename, timestamp_ms + offset)
            try:
                async with aiofiles.open(self.path_for(candidate), "xb") as f:
                    await f.write(content)
                return candidate
            except FileExistsError:
                continue
        raise FileExistsError(f"Could not find a free name for {filename}")

    async def delete(self, location: LocalLocation) -> None:
        stored_name = location.stored_name or resolve_upload_name(location.link)
        if not stored_name:
            logger.info(f"[LocalStorage] Link {location.link!r} is not a local upload, nothing to delete")
            return

        try:
            await aiofiles.os.remove(self.path_for(stored_name))
            logger.info(f"[LocalStorage] Deleted {stored_name}")
        except FileNotFoundError:
            logger.info(f"[LocalStorage] {stored_name} already absent, treating as deleted")
        except OSError as e:
            raise DeleteError(f"{type(e).__name__}: {e}", backend="local")


class EvidenceStorage:
    """
    Uniform store/delete over the Drive and local backends.

    ``drive`` is None when Drive credentials are not configured.
    """

    def __init__(
        self,
        local: LocalEvidenceBackend,
        drive: Optional[DriveEvidenceBackend] = None,
        missing_credentials: Optional[List[str]] = None,
    ):
        self.local = local
        self.drive = drive
        self.missing_credentials = missing_credentials or []

    @classmethod
    def from_settings(cls, settings: Settings) -> "EvidenceStorage":
        drive = None
        if settings.is_drive_configured():
            client = GoogleDriveClient(
                client_email=settings.GOOGLE_CLIENT_EMAIL,
                private_key=settings.drive_private_key,
                timeout=settings.DRIVE_REQUEST_TIMEOUT,
            )
            drive = DriveEvidenceBackend(
                client,
                folder_id=settings.effective_drive_folder_id,
                share_with_email=settings.DRIVE_SHARE_WITH_EMAIL,
                make_public=settings.DRIVE_MAKE_PUBLIC,
            )
        return cls(
            local=LocalEvidenceBackend(settings.UPLOAD_DIR),
            drive=drive,
            missing_credentials=settings.missing_drive_credentials(),
        )

    @property
    def remote_enabled(self) -> bool:
        return self.drive is not None

    async def store(
        self,
        content: bytes,
        filename: str,
        mime_type: Optional[str],
        base_url: str,
        folder_id: Optional[str] = None,
    ) -> StoredBlob:
        """Store in Drive when possible, otherwise under the uploads directory"""
        if self.drive is not None:
            try:
                return await self.drive.store(content, filename, mime_type, folder_id)
            except UploadError as e:
                logger.warning(f"[Evidence] Drive upload failed, falling back to local storage: {e.message}")
        else:
            logger.info(
                f"[Evidence] Drive not configured (missing: {', '.join(self.missing_credentials)}), storing locally"
            )

        return await self.local.store(content, filename, base_url)

    async def delete(self, location: EvidenceLocation) -> None:
        """Delete the blob behind a location; raises ConfigError or DeleteError"""
        if isinstance(location, RemoteLocation):
            if self.drive is None:
                raise ConfigError(
                    f"Missing required env vars: {', '.join(self.missing_credentials)}",
                    missing=self.missing_credentials,
                )
            await self.drive.delete(location)
        elif isinstance(location, LocalLocation):
            await self.local.delete(location)
        elif isinstance(location, ExternalLinkLocation):
            logger.debug(f"[Evidence] External link {location.url} has no blob to delete")
        else:
            raise TypeError(f"Unknown evidence location: {location!r}")
