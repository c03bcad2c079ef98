# Pydantic schemas
from school_eval.schemas.base import APIModel
from school_eval.schemas.user import UserCreate, UserResponse
from school_eval.schemas.evidence import (
    EvidenceLinkCreate,
    EvidenceResponse,
    StoredFileInfo,
    EvidenceUploadResponse,
    DeleteResponse,
)
from school_eval.schemas.evaluation import (
    CommentCreate,
    CommentResponse,
    ChecklistItemUpdate,
    ChecklistItemBrief,
    ChecklistItemResponse,
    ChecklistItemUpdateResponse,
    IndicatorUpdate,
    IndicatorBrief,
    IndicatorSummary,
    IndicatorListItem,
    IndicatorDetail,
    StandardRef,
    StandardUpdate,
    StandardStatsResponse,
    StandardBrief,
    StandardListItem,
    StandardDetail,
    SeedReportResponse,
)

__all__ = [
    "APIModel",
    "UserCreate",
    "UserResponse",
    "EvidenceLinkCreate",
    "EvidenceResponse",
    "StoredFileInfo",
    "EvidenceUploadResponse",
    "DeleteResponse",
    "CommentCreate",
    "CommentResponse",
    "ChecklistItemUpdate",
    "ChecklistItemBrief",
    "ChecklistItemResponse",
    "ChecklistItemUpdateResponse",
    "IndicatorUpdate",
    "IndicatorBrief",
    "IndicatorSummary",
    "IndicatorListItem",
    "IndicatorDetail",
    "StandardRef",
    "StandardUpdate",
    "StandardStatsResponse",
    "StandardBrief",
    "StandardListItem",
    "StandardDetail",
    "SeedReportResponse",
]
