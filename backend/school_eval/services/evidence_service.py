"""
Evidence Lifecycle Service

Attaches evidence to checklist items and detaches it again while keeping the
relational record and the backing blob consistent:

- attach: blob first, record second (blob removed again if the record fails)
- detach: blob first, record second (record kept if the blob delete fails)
"""

from typing import Optional, List
from urllib.parse import urlparse, unquote

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from school_eval.core.exceptions import (
    BadRequestError,
    ChecklistItemNotFoundError,
    EvidenceNotFoundError,
)
from school_eval.core.logging_config import logger
from school_eval.models.checklist import ChecklistItem
from school_eval.models.evidence import (
    EvidenceFile,
    EvidenceStorage as StorageTag,
    RemoteLocation,
    LocalLocation,
    storage_of,
)
from school_eval.services.evidence_storage import EvidenceStorage, StoredBlob

DEFAULT_UPLOADER = "Teacher"
DEFAULT_LINK_NAME = "Drive link"


def filename_from_url(url: str) -> str:
    """Display name from the last path segment of a URL"""
    try:
        path = urlparse(url).path
    except ValueError:
        return DEFAULT_LINK_NAME
    segment = unquote(path.rstrip("/").rsplit("/", 1)[-1]).strip()
    return segment or DEFAULT_LINK_NAME


class EvidenceService:
    """Evidence attach/detach orchestration over EvidenceStorage and the database."""

    def __init__(self, storage: EvidenceStorage):
        self.storage = storage

    async def _get_checklist_item(self, db: AsyncSession, checklist_item_id: int) -> ChecklistItem:
        item = await db.get(ChecklistItem, checklist_item_id)
        if item is None:
            raise ChecklistItemNotFoundError(checklist_item_id)
        return item

    async def get_evidence(self, db: AsyncSession, evidence_id: int) -> EvidenceFile:
        evidence = await db.get(EvidenceFile, evidence_id)
        if evidence is None:
            raise EvidenceNotFoundError(evidence_id)
        return evidence

    async def list_evidence(self, db: AsyncSession, checklist_item_id: int) -> List[EvidenceFile]:
        await self._get_checklist_item(db, checklist_item_id)
        result = await db.execute(
            select(EvidenceFile)
            .where(EvidenceFile.checklist_item_id == checklist_item_id)
            .order_by(EvidenceFile.id)
        )
        return list(result.scalars().all())

    async def attach_upload(
        self,
        db: AsyncSession,
        checklist_item_id: int,
        content: Optional[bytes],
        filename: Optional[str],
        mime_type: Optional[str],
        base_url: str,
        uploaded_by: Optional[str] = None,
    ) -> EvidenceFile:
        """
        Store an uploaded file and record it against a checklist item.

        Raises:
            BadRequestError: no file content or file name
            ChecklistItemNotFoundError: unknown checklist item
            UploadError: neither Drive nor local storage accepted the file
        """
        if not content:
            raise BadRequestError("file is required", field="file")
        if not filename:
            raise BadRequestError("file name is required", field="file")

        item = await self._get_checklist_item(db, checklist_item_id)

        stored = await self.storage.store(content, filename, mime_type, base_url)

        evidence = EvidenceFile(
            checklist_item_id=item.id,
            indicator_id=item.indicator_id,
            filename=filename,
            path=stored.public_link,
            storage=storage_of(stored.location),
            drive_file_id=stored.location.object_id if isinstance(stored.location, RemoteLocation) else None,
            local_name=stored.location.stored_name if isinstance(stored.location, LocalLocation) else None,
            web_view_link=stored.public_link,
            mime_type=mime_type,
            size_bytes=stored.size_bytes,
            uploaded_by=uploaded_by or DEFAULT_UPLOADER,
        )
        await self._save_or_discard_blob(db, evidence, stored)

        logger.log_evidence_event(
            "attached upload",
            evidence_id=evidence.id,
            checklist_item_id=item.id,
            storage=evidence.storage.value,
            size_bytes=stored.size_bytes,
        )
        return evidence

    async def _save_or_discard_blob(self, db: AsyncSession, evidence: EvidenceFile, stored: StoredBlob) -> None:
        try:
            db.add(evidence)
            await db.commit()
            await db.refresh(evidence)
        except Exception as e:
            await db.rollback()
            logger.error(f"[Evidence] Saving record failed, removing stored blob {stored.backend_id}: {e}")
            try:
                await self.storage.delete(stored.location)
            except Exception as cleanup_error:
                logger.log_error_with_context(cleanup_error, "evidence blob cleanup", backend_id=stored.backend_id)
            raise

    async def attach_link(
        self,
        db: AsyncSession,
        checklist_item_id: int,
        url: Optional[str],
        filename: Optional[str] = None,
        uploaded_by: Optional[str] = None,
    ) -> EvidenceFile:
        """Record an external link (e.g. a Drive share link) as evidence"""
        url = (url or "").strip()
        if not url:
            raise BadRequestError("url is required", field="url")

        item = await self._get_checklist_item(db, checklist_item_id)

        evidence = EvidenceFile(
            checklist_item_id=item.id,
            indicator_id=item.indicator_id,
            filename=(filename or "").strip() or filename_from_url(url),
            path=url,
            storage=StorageTag.LINK,
            drive_file_id=None,
            web_view_link=url,
            uploaded_by=uploaded_by or DEFAULT_UPLOADER,
        )
        db.add(evidence)
        await db.commit()
        await db.refresh(evidence)

        logger.log_evidence_event(
            "attached link",
            evidence_id=evidence.id,
            checklist_item_id=item.id,
            storage=StorageTag.LINK.value,
        )
        return evidence

    async def detach(self, db: AsyncSession, evidence_id: int) -> None:
        """
        Delete the backing blob, then the record.

        Raises:
            EvidenceNotFoundError: unknown evidence id
            ConfigError: record is in Drive but Drive credentials are missing
            DeleteError: the backend failed to delete the blob
        In both error cases the record is left untouched.
        """
        evidence = await self.get_evidence(db, evidence_id)
        location = evidence.location
        checklist_item_id = evidence.checklist_item_id

        await self.storage.delete(location)

        await db.delete(evidence)
        await db.commit()

        logger.log_evidence_event(
            "detached",
            evidence_id=evidence_id,
            checklist_item_id=checklist_item_id,
            storage=storage_of(location).value,
        )
