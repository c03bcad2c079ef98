"""
Indicators API

- GET   /indicators?standardId=  indicators ordered by code
- GET   /indicators/{id}         indicator with its full checklist
- PATCH /indicators/{id}         update status / progress / manager / name
"""
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from school_eval.api.deps import ensure_user
from school_eval.core.database import get_db
from school_eval.core.exceptions import IndicatorNotFoundError
from school_eval.models.checklist import ChecklistItem
from school_eval.models.indicator import Indicator
from school_eval.schemas.evaluation import IndicatorBrief, IndicatorDetail, IndicatorListItem, IndicatorUpdate
from school_eval.services.requirement_segmenter import normalize_space

router = APIRouter(prefix="/indicators", tags=["Indicators"])


@router.get("", response_model=List[IndicatorListItem])
async def list_indicators(
    standard_id: Optional[int] = Query(None, alias="standardId", description="Filter by standard"),
    db: AsyncSession = Depends(get_db),
):
    query = (
        select(Indicator)
        .options(selectinload(Indicator.manager), selectinload(Indicator.standard))
        .order_by(Indicator.code, Indicator.id)
    )
    if standard_id:
        query = query.where(Indicator.standard_id == standard_id)

    result = await db.execute(query.execution_options(populate_existing=True))
    return result.scalars().all()


@router.get("/{indicator_id}", response_model=IndicatorDetail)
async def get_indicator(indicator_id: int, db: AsyncSession = Depends(get_db)):
    result = await db.execute(
        select(Indicator)
        .where(Indicator.id == indicator_id)
        .options(
            selectinload(Indicator.manager),
            selectinload(Indicator.standard),
            selectinload(Indicator.checklist).selectinload(ChecklistItem.assignee),
            selectinload(Indicator.checklist).selectinload(ChecklistItem.evidence),
            selectinload(Indicator.checklist).selectinload(ChecklistItem.comments),
        )
        .execution_options(populate_existing=True)
    )
    indicator = result.scalar_one_or_none()
    if indicator is None:
        raise IndicatorNotFoundError(indicator_id)
    return indicator


@router.patch("/{indicator_id}", response_model=IndicatorBrief)
async def update_indicator(indicator_id: int, payload: IndicatorUpdate, db: AsyncSession = Depends(get_db)):
    indicator = await db.get(Indicator, indicator_id)
    if indicator is None:
        raise IndicatorNotFoundError(indicator_id)

    changes = payload.model_dump(exclude_unset=True)
    if changes.get("status") is not None:
        indicator.status = changes["status"]
    if changes.get("progress") is not None:
        indicator.progress = changes["progress"]
    if "manager_id" in changes:
        indicator.manager_id = await ensure_user(db, changes["manager_id"])
    name = normalize_space(changes.get("name"))
    if name:
        indicator.name = name

    await db.commit()
    return indicator
