"""
Checklist Items API

- PATCH /checklist-items/{id}           update status / assignee / text
- POST  /checklist-items/{id}/comments  add a comment

Status changes refresh the owning indicator's cached progress.
"""
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from school_eval.api.deps import ensure_user
from school_eval.core.database import get_db
from school_eval.core.exceptions import BadRequestError, ChecklistItemNotFoundError
from school_eval.models.checklist import ChecklistItem, Comment
from school_eval.schemas.evaluation import (
    ChecklistItemBrief,
    ChecklistItemUpdate,
    ChecklistItemUpdateResponse,
    CommentCreate,
    CommentResponse,
    IndicatorBrief,
)
from school_eval.services.progress import recompute_indicator
from school_eval.services.requirement_segmenter import normalize_space

router = APIRouter(prefix="/checklist-items", tags=["Checklist"])

DEFAULT_AUTHOR = "Teacher"


@router.patch("/{item_id}", response_model=ChecklistItemUpdateResponse)
async def update_checklist_item(item_id: int, payload: ChecklistItemUpdate, db: AsyncSession = Depends(get_db)):
    item = await db.get(ChecklistItem, item_id)
    if item is None:
        raise ChecklistItemNotFoundError(item_id)

    changes = payload.model_dump(exclude_unset=True)
    if changes.get("status") is not None:
        item.status = changes["status"]
    if "assignee_id" in changes:
        item.assignee_id = await ensure_user(db, changes["assignee_id"])
    text = normalize_space(changes.get("text"))
    if text:
        item.text = text

    await db.flush()
    indicator = await recompute_indicator(db, item.indicator_id)
    await db.commit()

    return ChecklistItemUpdateResponse(
        item=ChecklistItemBrief.model_validate(item),
        indicator=IndicatorBrief.model_validate(indicator),
    )


@router.post("/{item_id}/comments", response_model=CommentResponse)
async def add_comment(item_id: int, payload: CommentCreate, db: AsyncSession = Depends(get_db)):
    item = await db.get(ChecklistItem, item_id)
    if item is None:
        raise ChecklistItemNotFoundError(item_id)

    text = (payload.text or "").strip()
    if not text:
        raise BadRequestError("text is required", field="text")

    comment = Comment(
        checklist_item_id=item.id,
        author_name=normalize_space(payload.author_name) or DEFAULT_AUTHOR,
        text=text,
    )
    db.add(comment)
    await db.commit()
    await db.refresh(comment)
    return comment
