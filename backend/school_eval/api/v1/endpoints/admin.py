"""
Admin API - dataset import
"""
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from school_eval.core.config import settings
from school_eval.core.database import get_db
from school_eval.schemas.evaluation import SeedReportResponse
from school_eval.services.seed_importer import SeedImporter, load_dataset

router = APIRouter(prefix="/admin", tags=["Admin"])


@router.post("/seed", response_model=SeedReportResponse)
async def seed_standards(db: AsyncSession = Depends(get_db)):
    """Import the configured standards dataset; safe to repeat"""
    rows = await load_dataset(settings.SEED_DATA_FILE)
    report = await SeedImporter().run(db, rows)
    return SeedReportResponse(**report.to_dict())
