"""
Progress Aggregator

Derives indicator progress/status from checklist item statuses, and standard
summary stats from indicator progress values. Rounding is half-up so that
e.g. 1 of 8 items completed gives 13%, not 12%.
"""

from dataclasses import dataclass, asdict
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, Tuple, Dict, Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from school_eval.core.exceptions import IndicatorNotFoundError
from school_eval.core.logging_config import logger
from school_eval.models.checklist import ChecklistItem
from school_eval.models.indicator import Indicator, ProgressStatus


def round_half_up(value: float) -> int:
    return int(Decimal(str(value)).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def compute_indicator_progress(statuses: Iterable[ProgressStatus]) -> Tuple[int, ProgressStatus]:
    """
    Progress percent and status for an indicator from its items' statuses.

    - no items: (0, NOT_STARTED)
    - every item completed: (100, COMPLETED)
    - any item started or completed: (percent, IN_PROGRESS)
    - otherwise: (0, NOT_STARTED)
    """
    statuses = [ProgressStatus(s) for s in statuses]
    total = len(statuses)
    if total == 0:
        return 0, ProgressStatus.NOT_STARTED

    completed = sum(1 for s in statuses if s == ProgressStatus.COMPLETED)
    progress = round_half_up(100 * completed / total)

    if progress == 100:
        return progress, ProgressStatus.COMPLETED
    if any(s != ProgressStatus.NOT_STARTED for s in statuses):
        return progress, ProgressStatus.IN_PROGRESS
    return progress, ProgressStatus.NOT_STARTED


@dataclass
class StandardStats:
    total: int
    completed: int
    avg_progress: int

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def compute_standard_stats(indicators: Iterable[Indicator]) -> StandardStats:
    indicators = list(indicators)
    total = len(indicators)
    if total == 0:
        return StandardStats(total=0, completed=0, avg_progress=0)

    completed = sum(1 for ind in indicators if ind.status == ProgressStatus.COMPLETED)
    avg_progress = round_half_up(sum(ind.progress or 0 for ind in indicators) / total)
    return StandardStats(total=total, completed=completed, avg_progress=avg_progress)


async def recompute_indicator(db: AsyncSession, indicator_id: int) -> Indicator:
    """Refresh the cached progress/status of an indicator from its checklist"""
    indicator = await db.get(Indicator, indicator_id)
    if indicator is None:
        raise IndicatorNotFoundError(indicator_id)

    result = await db.execute(
        select(ChecklistItem.status).where(ChecklistItem.indicator_id == indicator_id)
    )
    progress, status = compute_indicator_progress(result.scalars().all())

    if indicator.progress != progress or indicator.status != status:
        logger.debug(
            f"[Progress] Indicator {indicator.code}: {indicator.progress}% -> {progress}% ({status.value})"
        )
    indicator.progress = progress
    indicator.status = status
    await db.flush()
    return indicator
