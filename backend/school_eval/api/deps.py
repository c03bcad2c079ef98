"""
Shared API dependencies
"""

from typing import Optional

from fastapi import Request
from sqlalchemy.ext.asyncio import AsyncSession

from school_eval.core.exceptions import ConfigError, UserNotFoundError
from school_eval.models.user import User
from school_eval.services.evidence_service import EvidenceService


def get_evidence_service(request: Request) -> EvidenceService:
    """Evidence service built once in the application lifespan"""
    service = getattr(request.app.state, "evidence_service", None)
    if service is None:
        raise ConfigError("Evidence service is not initialized")
    return service


async def ensure_user(db: AsyncSession, user_id: Optional[int]) -> Optional[int]:
    """Validate an optional user reference; None passes through (clears the reference)"""
    if user_id is None:
        return None
    if await db.get(User, user_id) is None:
        raise UserNotFoundError(user_id)
    return user_id
