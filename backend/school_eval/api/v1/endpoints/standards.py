"""
Standards API

- GET   /standards       all standards with indicator summaries and stats
- GET   /standards/{id}  one standard with owner and indicators
- PATCH /standards/{id}  update title / owner
"""
from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from school_eval.api.deps import ensure_user
from school_eval.core.database import get_db
from school_eval.core.exceptions import StandardNotFoundError
from school_eval.models.indicator import Indicator
from school_eval.models.standard import Standard
from school_eval.schemas.evaluation import (
    StandardBrief,
    StandardDetail,
    StandardListItem,
    StandardStatsResponse,
    StandardUpdate,
)
from school_eval.services.progress import compute_standard_stats
from school_eval.services.requirement_segmenter import normalize_space

router = APIRouter(prefix="/standards", tags=["Standards"])


@router.get("", response_model=List[StandardListItem])
async def list_standards(db: AsyncSession = Depends(get_db)):
    result = await db.execute(
        select(Standard)
        .options(selectinload(Standard.indicators))
        .order_by(Standard.standard_no)
        .execution_options(populate_existing=True)
    )

    items = []
    for standard in result.scalars().all():
        item = StandardListItem.model_validate(standard)
        item.stats = StandardStatsResponse(**compute_standard_stats(standard.indicators).to_dict())
        items.append(item)
    return items


@router.get("/{standard_id}", response_model=StandardDetail)
async def get_standard(standard_id: int, db: AsyncSession = Depends(get_db)):
    result = await db.execute(
        select(Standard)
        .where(Standard.id == standard_id)
        .options(
            selectinload(Standard.owner),
            selectinload(Standard.indicators).selectinload(Indicator.manager),
        )
        .execution_options(populate_existing=True)
    )
    standard = result.scalar_one_or_none()
    if standard is None:
        raise StandardNotFoundError(standard_id)
    return standard


@router.patch("/{standard_id}", response_model=StandardBrief)
async def update_standard(standard_id: int, payload: StandardUpdate, db: AsyncSession = Depends(get_db)):
    standard = await db.get(Standard, standard_id)
    if standard is None:
        raise StandardNotFoundError(standard_id)

    changes = payload.model_dump(exclude_unset=True)
    title = normalize_space(changes.get("title"))
    if title:
        standard.title = title
    if "owner_id" in changes:
        standard.owner_id = await ensure_user(db, changes["owner_id"])

    await db.commit()
    return standard
