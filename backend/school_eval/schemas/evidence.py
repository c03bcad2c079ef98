"""
Evidence Schemas
"""

from typing import Optional
from datetime import datetime

from school_eval.models.evidence import EvidenceStorage
from school_eval.schemas.base import APIModel


class EvidenceLinkCreate(APIModel):
    """Attach an external (e.g. Drive share) link as evidence"""
    url: Optional[str] = None
    filename: Optional[str] = None
    uploaded_by: Optional[str] = None


class EvidenceResponse(APIModel):
    id: int
    checklist_item_id: int
    indicator_id: Optional[int] = None
    filename: str
    path: str
    storage: EvidenceStorage
    drive_file_id: Optional[str] = None
    web_view_link: Optional[str] = None
    mime_type: Optional[str] = None
    size_bytes: Optional[int] = None
    uploaded_by: str
    created_at: Optional[datetime] = None


class StoredFileInfo(APIModel):
    """Where the uploaded blob ended up"""
    storage: EvidenceStorage
    id: Optional[str] = None  # Drive file id, None for local files
    web_view_link: str


class EvidenceUploadResponse(APIModel):
    saved_evidence: EvidenceResponse
    stored_file: StoredFileInfo


class DeleteResponse(APIModel):
    ok: bool = True
