"""
User Schemas
"""

from pydantic import Field
from typing import Optional
from datetime import datetime

from school_eval.models.user import UserRole
from school_eval.schemas.base import APIModel


class UserCreate(APIModel):
    """Create a user; name is checked by the endpoint so it can answer 400"""
    name: Optional[str] = Field(default=None, max_length=255)
    role: Optional[UserRole] = None


class UserResponse(APIModel):
    id: int
    name: str
    role: UserRole
    created_at: Optional[datetime] = None
