"""
Health check - verifies the database answers a trivial query
"""

from fastapi import APIRouter
from fastapi.responses import JSONResponse
from sqlalchemy import text

from school_eval.core.database import AsyncSessionLocal
from school_eval.core.logging_config import logger

router = APIRouter(tags=["Health"])


@router.get("/health")
async def health_check():
    try:
        async with AsyncSessionLocal() as session:
            await session.execute(text("SELECT 1"))
    except Exception as e:
        logger.error(f"[HealthCheck] Database check failed: {e}")
        return JSONResponse(status_code=503, content={"ok": False, "db": "fail"})
    return {"ok": True, "db": "ok"}
