"""
Users API - staff that own standards, manage indicators and get assigned items
"""
from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from school_eval.core.database import get_db
from school_eval.core.exceptions import BadRequestError
from school_eval.models.user import User, UserRole
from school_eval.schemas.user import UserCreate, UserResponse
from school_eval.services.requirement_segmenter import normalize_space

router = APIRouter(prefix="/users", tags=["Users"])


@router.get("", response_model=List[UserResponse])
async def list_users(db: AsyncSession = Depends(get_db)):
    result = await db.execute(select(User).order_by(User.id))
    return result.scalars().all()


@router.post("", response_model=UserResponse)
async def create_user(payload: UserCreate, db: AsyncSession = Depends(get_db)):
    name = normalize_space(payload.name)
    if not name:
        raise BadRequestError("name is required", field="name")

    user = User(name=name, role=payload.role or UserRole.TEACHER)
    db.add(user)
    await db.commit()
    await db.refresh(user)
    return user
