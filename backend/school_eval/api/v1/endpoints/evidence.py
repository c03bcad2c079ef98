"""
Evidence API

- GET    /checklist-items/{id}/evidence       list evidence on an item
- POST   /checklist-items/{id}/evidence       upload a file (multipart "file")
- POST   /checklist-items/{id}/evidence-link  attach an external link
- GET    /evidence/{id}                       one evidence record
- DELETE /evidence/{id}                       remove blob, then record
"""
from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, Request, UploadFile
from sqlalchemy.ext.asyncio import AsyncSession

from school_eval.api.deps import get_evidence_service
from school_eval.core.config import settings
from school_eval.core.database import get_db
from school_eval.core.exceptions import BadRequestError
from school_eval.models.evidence import EvidenceStorage
from school_eval.schemas.evidence import (
    DeleteResponse,
    EvidenceLinkCreate,
    EvidenceResponse,
    EvidenceUploadResponse,
    StoredFileInfo,
)
from school_eval.services.evidence_service import EvidenceService

router = APIRouter(tags=["Evidence"])


async def read_upload(file: UploadFile, max_bytes: int) -> bytes:
    """Read an uploaded file, never buffering more than max_bytes + 1 bytes"""
    too_large = BadRequestError(f"File exceeds the upload limit of {max_bytes} bytes", field="file")
    if file.size is not None and file.size > max_bytes:
        raise too_large

    content = await file.read(max_bytes + 1)
    if len(content) > max_bytes:
        raise too_large
    return content


@router.get("/checklist-items/{item_id}/evidence", response_model=List[EvidenceResponse])
async def list_evidence(
    item_id: int,
    db: AsyncSession = Depends(get_db),
    service: EvidenceService = Depends(get_evidence_service),
):
    return await service.list_evidence(db, item_id)


@router.post("/checklist-items/{item_id}/evidence", response_model=EvidenceUploadResponse)
async def upload_evidence(
    item_id: int,
    request: Request,
    file: Optional[UploadFile] = File(None),
    uploaded_by: Optional[str] = Form(None, alias="uploadedBy"),
    db: AsyncSession = Depends(get_db),
    service: EvidenceService = Depends(get_evidence_service),
):
    if file is None:
        raise BadRequestError("file is required", field="file")

    content = await read_upload(file, settings.MAX_UPLOAD_SIZE_BYTES)

    evidence = await service.attach_upload(
        db,
        item_id,
        content=content,
        filename=file.filename,
        mime_type=file.content_type,
        base_url=str(request.base_url),
        uploaded_by=uploaded_by,
    )
    return EvidenceUploadResponse(
        saved_evidence=EvidenceResponse.model_validate(evidence),
        stored_file=StoredFileInfo(
            storage=evidence.storage,
            id=evidence.drive_file_id if evidence.storage == EvidenceStorage.DRIVE else None,
            web_view_link=evidence.web_view_link or evidence.path,
        ),
    )


@router.post("/checklist-items/{item_id}/evidence-link", response_model=EvidenceResponse)
async def attach_evidence_link(
    item_id: int,
    payload: EvidenceLinkCreate,
    db: AsyncSession = Depends(get_db),
    service: EvidenceService = Depends(get_evidence_service),
):
    return await service.attach_link(
        db,
        item_id,
        url=payload.url,
        filename=payload.filename,
        uploaded_by=payload.uploaded_by,
    )


@router.get("/evidence/{evidence_id}", response_model=EvidenceResponse)
async def get_evidence(
    evidence_id: int,
    db: AsyncSession = Depends(get_db),
    service: EvidenceService = Depends(get_evidence_service),
):
    return await service.get_evidence(db, evidence_id)


@router.delete("/evidence/{evidence_id}", response_model=DeleteResponse)
async def delete_evidence(
    evidence_id: int,
    db: AsyncSession = Depends(get_db),
    service: EvidenceService = Depends(get_evidence_service),
):
    await service.detach(db, evidence_id)
    return DeleteResponse(ok=True)
