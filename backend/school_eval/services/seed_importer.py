"""
Seed Importer

Loads the standards/indicators dataset (a JSON array of rows) into the
evaluation tree. Safe to re-run: standards are upserted by number, indicators
by (standard, code), and checklist items are only added when their normalized
text is not already present on the indicator.

Row format:
    {
        "standard_no": 1,
        "standard_title": "...",
        "indicator_code": "1.1",
        "indicator_name": "...",
        "requirements": "first () second () third"
    }
"""

import json
from dataclasses import dataclass, asdict
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import aiofiles
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from school_eval.core.exceptions import BadRequestError, SeedDatasetNotFoundError
from school_eval.core.logging_config import logger
from school_eval.models.checklist import ChecklistItem
from school_eval.models.indicator import Indicator
from school_eval.models.standard import Standard
from school_eval.services.requirement_segmenter import (
    normalize_space,
    normalize_key,
    split_requirements,
)


@dataclass
class SeedReport:
    standards: int = 0
    indicators: int = 0
    checklist_added: int = 0
    rows_skipped: int = 0

    def to_dict(self) -> Dict[str, int]:
        return asdict(self)


def coerce_standard_no(value: Any) -> Optional[int]:
    """
    Standard number from a dataset cell: ints, integral floats and numeric
    strings are accepted, anything else yields None.
    """
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if value.is_integer() else None
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        try:
            number = float(text)
        except ValueError:
            return None
        if number != number or number in (float("inf"), float("-inf")):
            return None
        return int(number) if number.is_integer() else None
    return None


async def load_dataset(path: Union[str, Path]) -> List[Any]:
    """Read the dataset file; it must hold a JSON array"""
    path = Path(path)
    if not path.is_file():
        raise SeedDatasetNotFoundError(str(path))

    async with aiofiles.open(path, "rb") as f:
        raw = await f.read()

    try:
        data = json.loads(raw.decode("utf-8-sig"))
    except UnicodeDecodeError as e:
        raise BadRequestError(f"Seed file is not valid UTF-8: {e}")
    except json.JSONDecodeError as e:
        raise BadRequestError(f"Seed file is not valid JSON: {e}")
    if not isinstance(data, list):
        raise BadRequestError("Seed file must contain a JSON array of rows")

    logger.info(f"[Seed] Loaded {len(data)} rows from {path}")
    return data


class SeedImporter:
    """Idempotent import of dataset rows into standards, indicators and checklist items"""

    async def run(self, db: AsyncSession, rows: List[Any]) -> SeedReport:
        report = SeedReport()

        standard_titles: Dict[int, str] = {}
        for row in rows:
            if not isinstance(row, dict):
                continue
            standard_no = coerce_standard_no(row.get("standard_no"))
            if standard_no is None:
                continue
            standard_titles[standard_no] = normalize_space(row.get("standard_title"))

        await self._upsert_standards(db, standard_titles)
        report.standards = len(standard_titles)

        standard_ids = await self._standard_ids_by_no(db, list(standard_titles))

        # indicator id -> normalized texts already present, shared across rows
        known_texts: Dict[int, set] = {}

        for row in rows:
            if not isinstance(row, dict):
                report.rows_skipped += 1
                continue

            standard_id = standard_ids.get(coerce_standard_no(row.get("standard_no")))
            code = normalize_space(row.get("indicator_code"))
            name = normalize_space(row.get("indicator_name"))
            if standard_id is None or not code or not name:
                report.rows_skipped += 1
                continue

            indicator = await self._upsert_indicator(db, standard_id, code, name)
            report.indicators += 1

            items = split_requirements(row.get("requirements"))
            if not items:
                continue

            if indicator.id not in known_texts:
                known_texts[indicator.id] = await self._existing_item_keys(db, indicator.id)
            existing = known_texts[indicator.id]

            for text in items:
                key = normalize_key(text)
                if key in existing:
                    continue
                existing.add(key)
                db.add(ChecklistItem(indicator_id=indicator.id, text=text))
                report.checklist_added += 1

            await db.flush()

        await db.commit()

        logger.info(
            f"[Seed] Completed. Standards: {report.standards}, "
            f"Indicators processed: {report.indicators}, "
            f"Checklist items added: {report.checklist_added}, "
            f"Rows skipped: {report.rows_skipped}"
        )
        return report

    async def _upsert_standards(self, db: AsyncSession, titles: Dict[int, str]) -> None:
        if not titles:
            return
        result = await db.execute(select(Standard).where(Standard.standard_no.in_(list(titles))))
        existing = {s.standard_no: s for s in result.scalars().all()}

        for standard_no, title in titles.items():
            standard = existing.get(standard_no)
            if standard is None:
                db.add(Standard(standard_no=standard_no, title=title))
            elif standard.title != title:
                standard.title = title
        await db.flush()

    async def _standard_ids_by_no(self, db: AsyncSession, numbers: List[int]) -> Dict[int, int]:
        if not numbers:
            return {}
        result = await db.execute(
            select(Standard.standard_no, Standard.id).where(Standard.standard_no.in_(numbers))
        )
        return {standard_no: standard_id for standard_no, standard_id in result.all()}

    async def _upsert_indicator(self, db: AsyncSession, standard_id: int, code: str, name: str) -> Indicator:
        result = await db.execute(
            select(Indicator)
            .where(Indicator.standard_id == standard_id, Indicator.code == code)
            .order_by(Indicator.id)
            .limit(1)
        )
        indicator = result.scalar_one_or_none()
        if indicator is None:
            indicator = Indicator(standard_id=standard_id, code=code, name=name)
            db.add(indicator)
            await db.flush()
        elif indicator.name != name:
            indicator.name = name
        return indicator

    async def _existing_item_keys(self, db: AsyncSession, indicator_id: int) -> set:
        result = await db.execute(
            select(ChecklistItem.text).where(ChecklistItem.indicator_id == indicator_id)
        )
        return {normalize_key(text) for text in result.scalars().all()}
