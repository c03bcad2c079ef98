"""
Evaluation Schemas - standards, indicators, checklist items and comments
"""

from pydantic import Field
from typing import Optional, List
from datetime import datetime

from school_eval.models.indicator import ProgressStatus
from school_eval.schemas.base import APIModel
from school_eval.schemas.evidence import EvidenceResponse
from school_eval.schemas.user import UserResponse


# ============================================
# Comments
# ============================================

class CommentCreate(APIModel):
    text: Optional[str] = None
    author_name: Optional[str] = Field(default=None, max_length=255)


class CommentResponse(APIModel):
    id: int
    checklist_item_id: int
    author_name: str
    text: str
    created_at: Optional[datetime] = None


# ============================================
# Checklist Items
# ============================================

class ChecklistItemUpdate(APIModel):
    """Partial update; an explicit null assigneeId unassigns the item"""
    status: Optional[ProgressStatus] = None
    assignee_id: Optional[int] = None
    text: Optional[str] = None


class ChecklistItemBrief(APIModel):
    id: int
    indicator_id: int
    text: str
    status: ProgressStatus
    assignee_id: Optional[int] = None


class ChecklistItemResponse(ChecklistItemBrief):
    assignee: Optional[UserResponse] = None
    evidence: List[EvidenceResponse] = []
    comments: List[CommentResponse] = []


# ============================================
# Indicators
# ============================================

class IndicatorUpdate(APIModel):
    status: Optional[ProgressStatus] = None
    progress: Optional[int] = Field(default=None, ge=0, le=100)
    manager_id: Optional[int] = None
    name: Optional[str] = None


class IndicatorBrief(APIModel):
    id: int
    standard_id: int
    code: str
    name: str
    status: ProgressStatus
    progress: int
    manager_id: Optional[int] = None


class IndicatorSummary(IndicatorBrief):
    manager: Optional[UserResponse] = None


class StandardRef(APIModel):
    id: int
    standard_no: int
    title: str


class IndicatorListItem(IndicatorSummary):
    standard: StandardRef


class IndicatorDetail(IndicatorListItem):
    checklist: List[ChecklistItemResponse] = []


class ChecklistItemUpdateResponse(APIModel):
    """Updated item plus the indicator progress recomputed from it"""
    item: ChecklistItemBrief
    indicator: IndicatorBrief


# ============================================
# Standards
# ============================================

class StandardUpdate(APIModel):
    """Partial update; an explicit null ownerId clears the owner"""
    title: Optional[str] = None
    owner_id: Optional[int] = None


class StandardStatsResponse(APIModel):
    total: int
    completed: int
    avg_progress: int


class StandardBrief(StandardRef):
    owner_id: Optional[int] = None


class StandardListItem(StandardBrief):
    indicators: List[IndicatorBrief] = []
    stats: Optional[StandardStatsResponse] = None


class StandardDetail(StandardBrief):
    owner: Optional[UserResponse] = None
    indicators: List[IndicatorSummary] = []


# ============================================
# Seeding
# ============================================

class SeedReportResponse(APIModel):
    standards: int
    indicators: int
    checklist_added: int
    rows_skipped: int
